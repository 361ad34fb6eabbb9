"""
GreenLog Backend — Shared Query Helpers
=========================================

What:  Small building blocks every service uses: row shaping for JSON,
       optional search criteria, and tolerant seed inserts.
Why:   The services are one-function-per-statement; these are the only
       pieces of logic that repeat across them.

Search criteria:
    Services start from a select() and chain one .where() per criterion the
    caller supplied. Blank text counts as not supplied. Text criteria are
    case-insensitive substring matches in which '%' and '_' match only
    themselves.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql.expression import ColumnElement, Executable

from greenlog.database import is_unique_violation
from greenlog.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    # Aggregates over NUMERIC come back as Decimal from PostgreSQL
    if isinstance(value, Decimal):
        return float(value)
    return value


def rows_to_lists(result: Result) -> List[List[Any]]:
    """Materialize a result as a list of positional rows."""
    return [[_jsonable(value) for value in row] for row in result.all()]


def supplied(value: Any) -> Any:
    """The criterion value, or None when it was omitted or blank."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def contains_text(column: ColumnElement, value: str) -> ColumnElement:
    """
    Case-insensitive substring match of `value` against `column`.

    Example:
        >>> query.where(contains_text(appuser.c.first_name, "jo"))
        ... WHERE lower(appuser.first_name) LIKE '%' || lower(:param) || '%' ESCAPE '/'
    """
    return column.icontains(value, autoescape=True)


def parse_optional_int(value: Optional[str], field: str) -> Optional[int]:
    """
    Query-string integers arrive as text and are often blank from HTML forms.

    Raises:
        ValidationError: non-blank text that is not an integer
    """
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise ValidationError(message=f"'{field}' must be an integer", field=field)


async def insert_seed_rows(
    conn: AsyncConnection,
    statement: Executable,
    rows: Iterable[Dict[str, Any]],
) -> int:
    """
    Insert a fixed batch, committing row by row.

    A duplicate key means the row is already present and is skipped. Any
    other failure (foreign key, missing table, connectivity) propagates and
    stops the batch; rows committed before it stay.

    Returns:
        How many rows were newly inserted.
    """
    inserted = 0
    for row in rows:
        try:
            await conn.execute(statement, row)
            await conn.commit()
            inserted += 1
        except sa_exc.IntegrityError as exc:
            await conn.rollback()
            if not is_unique_violation(exc):
                raise
            logger.debug("Seed row already present, skipping: %s", row)
    return inserted
