"""
GreenLog Backend — User Service
=================================

What:  Every operation on app users and their task assignments.
Who:   Called by routes/users.py; each method receives the Database handle.

Error Handling Strategy:
    Methods return rows, counts or a success flag and let the typed errors
    raised by Database.connection() propagate. A False return always means
    "the statement ran and matched nothing", never "the statement failed".

Transactions:
    Single-statement writes commit right after executing. assign_task and
    delete_user run all their statements on one connection and commit once
    at the end; if anything raises first, nothing is committed and the
    release of the connection rolls it all back.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, distinct, func, insert, select, update

from greenlog.database import Database
from greenlog.exceptions import ConstraintViolationError
from greenlog.models.tables import (
    TABLE_GROUPS,
    appuser,
    garden_log,
    reset_tables,
    tasks,
    user_has_plant,
    user_has_task,
)
from greenlog.services.queries import contains_text, insert_seed_rows, rows_to_lists, supplied

logger = logging.getLogger(__name__)

SEED_USERS = [
    (1, "Ericson", "Ho"),
    (2, "Justin", "Galimpin"),
    (3, "Jacky", "Wang"),
    (4, "John", "Doe"),
    (5, "Michael", "Jordan"),
    (6, "Bob", "Smith"),
    (7, "Lebron", "James"),
    (8, "Kevin", "Levin"),
    (9, "Tom", "Cruise"),
    (10, "Jackie", "Chan"),
]


class UserService:
    """
    Data operations for the `appuser` table and the `user_has_task` link.

    Responsibilities:
        - list / initiate / populate / insert / rename / delete users
        - search users by any combination of id, first and last name
        - assign tasks to users and list a user's tasks
        - user counts and task-load reports
    """

    async def list_users(self, db: Database) -> List[List[Any]]:
        async with db.connection() as conn:
            result = await conn.execute(select(appuser))
            return rows_to_lists(result)

    async def initiate(self, db: Database) -> bool:
        """Drop and recreate the appuser table (existing rows are lost)."""
        async with db.connection() as conn:
            await reset_tables(conn, TABLE_GROUPS["appusers"])
        logger.info("appuser table reset")
        return True

    async def populate(self, db: Database) -> bool:
        """Insert the fixed seed users; users already present are left alone."""
        async with db.connection() as conn:
            inserted = await insert_seed_rows(
                conn,
                insert(appuser),
                (
                    {"user_id": user_id, "first_name": first, "last_name": last}
                    for user_id, first, last in SEED_USERS
                ),
            )
        logger.info("Seeded %d new user(s)", inserted)
        return True

    async def insert_user(
        self, db: Database, user_id: int, first_name: str, last_name: str
    ) -> bool:
        async with db.connection() as conn:
            result = await conn.execute(
                insert(appuser).values(
                    user_id=user_id, first_name=first_name, last_name=last_name
                )
            )
            await conn.commit()
            return result.rowcount > 0

    async def update_first_name(self, db: Database, old_name: str, new_name: str) -> bool:
        """Rename every user whose first name is exactly `old_name`."""
        async with db.connection() as conn:
            result = await conn.execute(
                update(appuser)
                .where(appuser.c.first_name == old_name)
                .values(first_name=new_name)
            )
            await conn.commit()
            return result.rowcount > 0

    async def delete_user(self, db: Database, user_id: int) -> bool:
        """
        Delete a user and everything hanging off it.

        Order: task links → plant links → garden logs → the user row.
        Returns True only if the user row itself existed.
        """
        async with db.connection() as conn:
            for child in (user_has_task, user_has_plant, garden_log):
                await conn.execute(delete(child).where(child.c.user_id == user_id))
            result = await conn.execute(delete(appuser).where(appuser.c.user_id == user_id))
            await conn.commit()
            return result.rowcount > 0

    async def search_users(
        self,
        db: Database,
        user_id: Optional[int] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> List[List[Any]]:
        """Users matching every supplied filter; names match case-insensitive substrings."""
        query = select(appuser.c.user_id, appuser.c.first_name, appuser.c.last_name)

        if user_id is not None:
            query = query.where(appuser.c.user_id == user_id)
        first_name = supplied(first_name)
        if first_name:
            query = query.where(contains_text(appuser.c.first_name, first_name))
        last_name = supplied(last_name)
        if last_name:
            query = query.where(contains_text(appuser.c.last_name, last_name))

        async with db.connection() as conn:
            result = await conn.execute(query.order_by(appuser.c.user_id))
            return rows_to_lists(result)

    async def count_users(self, db: Database) -> int:
        async with db.connection() as conn:
            result = await conn.execute(select(func.count()).select_from(appuser))
            return int(result.scalar_one())

    async def count_users_by_frequency(self, db: Database) -> List[List[Any]]:
        """[frequency, number of distinct users with a task of that frequency] pairs."""
        query = (
            select(tasks.c.frequency, func.count(distinct(user_has_task.c.user_id)))
            .select_from(tasks.join(user_has_task))
            .group_by(tasks.c.frequency)
            .order_by(tasks.c.frequency)
        )
        async with db.connection() as conn:
            result = await conn.execute(query)
            return rows_to_lists(result)

    async def task_load_report(self, db: Database, min_tasks: int = 1) -> Dict[str, Any]:
        """
        Users carrying at least `min_tasks` tasks, and their average task count.

        Returns:
            {"average": float | None, "users": [[user_id, first, last, task_count], ...]}
            average is None when no user qualifies.
        """
        per_user = (
            select(user_has_task.c.user_id, func.count().label("task_count"))
            .group_by(user_has_task.c.user_id)
            .having(func.count() >= min_tasks)
            .subquery("per_user")
        )
        loaded_users = (
            select(
                appuser.c.user_id,
                appuser.c.first_name,
                appuser.c.last_name,
                func.count().label("task_count"),
            )
            .select_from(appuser.join(user_has_task))
            .group_by(appuser.c.user_id, appuser.c.first_name, appuser.c.last_name)
            .having(func.count() >= min_tasks)
            .order_by(appuser.c.user_id)
        )
        async with db.connection() as conn:
            average = (await conn.execute(select(func.avg(per_user.c.task_count)))).scalar_one()
            users = await conn.execute(loaded_users)
            return {
                "average": float(average) if average is not None else None,
                "users": rows_to_lists(users),
            }

    async def get_user_tasks(self, db: Database, user_id: int) -> List[Dict[str, Any]]:
        query = (
            select(tasks.c.task_id, tasks.c.frequency, tasks.c.details)
            .select_from(tasks.join(user_has_task))
            .where(user_has_task.c.user_id == user_id)
            .order_by(tasks.c.task_id)
        )
        async with db.connection() as conn:
            result = await conn.execute(query)
            return [dict(row) for row in result.mappings()]

    async def assign_task(
        self,
        db: Database,
        user_id: int,
        task_id: int,
        frequency: Optional[str] = None,
        details: Optional[str] = None,
    ) -> bool:
        """
        Link a user to a task, creating the task first if it does not exist.

        All three steps share one transaction:
            1. refuse if the link already exists
            2. insert the task when `task_id` is unknown
            3. insert the link

        Raises:
            ConstraintViolationError: the link exists, or the user does not
        """
        params = {"user_id": user_id, "task_id": task_id}
        async with db.connection() as conn:
            existing = await conn.execute(
                select(user_has_task.c.user_id).where(
                    user_has_task.c.user_id == user_id,
                    user_has_task.c.task_id == task_id,
                )
            )
            if existing.first() is not None:
                raise ConstraintViolationError(
                    message="User is already assigned to this task.",
                    unique=True,
                    context=params,
                )

            task = await conn.execute(select(tasks.c.task_id).where(tasks.c.task_id == task_id))
            if task.first() is None:
                await conn.execute(
                    insert(tasks).values(task_id=task_id, frequency=frequency, details=details)
                )
                logger.info("Created task %s while assigning it to user %s", task_id, user_id)

            await conn.execute(insert(user_has_task).values(**params))
            await conn.commit()
        return True


user_service = UserService()
