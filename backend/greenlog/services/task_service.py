"""
GreenLog Backend — Task Service
=================================

What:  Operations on the `tasks` table: list, reset, seed, insert, delete.
Who:   Called by routes/tasks.py. Assigning tasks to users lives in UserService.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import delete, insert, select

from greenlog.database import Database
from greenlog.models.tables import TABLE_GROUPS, reset_tables, tasks, user_has_task
from greenlog.services.queries import insert_seed_rows, rows_to_lists

logger = logging.getLogger(__name__)

SEED_TASKS = [
    (101, "Daily", "Water seedlings"),
    (102, "Weekly", "Weed raised beds"),
    (103, "Biweekly", "Fertilize tomatoes"),
    (104, "Monthly", "Test soil pH"),
    (105, "Annually", "Rotate crops"),
]


class TaskService:
    """Data operations for the `tasks` table."""

    async def list_tasks(self, db: Database) -> List[List[Any]]:
        async with db.connection() as conn:
            result = await conn.execute(select(tasks))
            return rows_to_lists(result)

    async def initiate(self, db: Database) -> bool:
        """Drop and recreate `tasks` and the user–task link table."""
        async with db.connection() as conn:
            await reset_tables(conn, TABLE_GROUPS["tasks"])
        logger.info("tasks tables reset")
        return True

    async def populate(self, db: Database) -> bool:
        async with db.connection() as conn:
            inserted = await insert_seed_rows(
                conn,
                insert(tasks),
                (
                    {"task_id": task_id, "frequency": frequency, "details": details}
                    for task_id, frequency, details in SEED_TASKS
                ),
            )
        logger.info("Seeded %d new task(s)", inserted)
        return True

    async def insert_task(
        self, db: Database, task_id: int, frequency: str, details: Optional[str] = None
    ) -> bool:
        async with db.connection() as conn:
            result = await conn.execute(
                insert(tasks).values(task_id=task_id, frequency=frequency, details=details)
            )
            await conn.commit()
            return result.rowcount > 0

    async def delete_task(self, db: Database, task_id: int) -> bool:
        """Remove the task's user links, then the task. True if the task existed."""
        async with db.connection() as conn:
            await conn.execute(delete(user_has_task).where(user_has_task.c.task_id == task_id))
            result = await conn.execute(delete(tasks).where(tasks.c.task_id == task_id))
            await conn.commit()
            return result.rowcount > 0


task_service = TaskService()
