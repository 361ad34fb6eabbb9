"""Create garden schema

Revision ID: 001
Revises: None
Create Date: 2024-03-01 00:00:00.000000+00:00

What:  Creates every GreenLog table (users, tasks, plants and their lookups,
       soils, garden types and logs).
How:   Tables are created parents first so each foreign key has its target.
       Column definitions match greenlog/models/tables.py.

Rollback: downgrade() drops all of them, children first (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Users & Tasks ─────────────────────────────────────────────────────
    op.create_table(
        "appuser",
        sa.Column("user_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("first_name", sa.String(20), nullable=True),
        sa.Column("last_name", sa.String(20), nullable=True),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_table(
        "tasks",
        sa.Column("task_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("frequency", sa.String(20), nullable=True),
        sa.Column("details", sa.String(200), nullable=True),
        sa.PrimaryKeyConstraint("task_id"),
    )
    op.create_table(
        "user_has_task",
        sa.Column("user_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("task_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.PrimaryKeyConstraint("user_id", "task_id"),
        sa.ForeignKeyConstraint(["user_id"], ["appuser.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.task_id"], ondelete="CASCADE"),
    )

    # ── Plants ────────────────────────────────────────────────────────────
    op.create_table(
        "plant_family",
        sa.Column("family_name", sa.String(50), nullable=False),
        sa.Column("common_traits", sa.String(200), nullable=True),
        sa.PrimaryKeyConstraint("family_name"),
    )
    op.create_table(
        "seed_type",
        sa.Column("seed_type", sa.String(30), nullable=False),
        sa.Column("germination_days", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("seed_type"),
    )
    op.create_table(
        "plant_info",
        sa.Column("species", sa.String(50), nullable=False),
        sa.Column("family_name", sa.String(50), nullable=True),
        sa.Column("seed_type", sa.String(30), nullable=True),
        sa.Column("sunlight", sa.String(20), nullable=True),
        sa.PrimaryKeyConstraint("species"),
        sa.ForeignKeyConstraint(
            ["family_name"], ["plant_family.family_name"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["seed_type"], ["seed_type.seed_type"], ondelete="SET NULL"),
    )
    op.create_table(
        "soil",
        sa.Column("soil_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("soil_type", sa.String(30), nullable=True),
        sa.Column("ph", sa.Numeric(3, 1), nullable=True),
        sa.PrimaryKeyConstraint("soil_id"),
    )
    op.create_table(
        "plant",
        sa.Column("plant_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("species", sa.String(50), nullable=False),
        sa.Column("name", sa.String(50), nullable=True),
        sa.PrimaryKeyConstraint("plant_id", "species"),
    )
    op.create_table(
        "plant_log",
        sa.Column("log_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("plant_id", sa.Integer(), nullable=False),
        sa.Column("species", sa.String(50), nullable=False),
        sa.Column("planting_date", sa.Date(), nullable=True),
        sa.Column("growth_stage", sa.String(20), nullable=True),
        sa.Column("harvest_date", sa.Date(), nullable=True),
        sa.Column("soil_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("log_id"),
        sa.ForeignKeyConstraint(
            ["plant_id", "species"], ["plant.plant_id", "plant.species"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["soil_id"], ["soil.soil_id"], ondelete="SET NULL"),
    )
    op.create_table(
        "user_has_plant",
        sa.Column("user_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("plant_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("species", sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "plant_id", "species"),
        sa.ForeignKeyConstraint(["user_id"], ["appuser.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["plant_id", "species"], ["plant.plant_id", "plant.species"], ondelete="CASCADE"
        ),
    )

    # ── Garden ────────────────────────────────────────────────────────────
    op.create_table(
        "garden_type",
        sa.Column("garden_type", sa.String(30), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        sa.PrimaryKeyConstraint("garden_type"),
    )
    op.create_table(
        "garden_log",
        sa.Column("log_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("garden_type", sa.String(30), nullable=True),
        sa.Column("log_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.String(200), nullable=True),
        sa.PrimaryKeyConstraint("log_id"),
        sa.ForeignKeyConstraint(["user_id"], ["appuser.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["garden_type"], ["garden_type.garden_type"], ondelete="SET NULL"
        ),
    )


def downgrade() -> None:
    for name in (
        "garden_log",
        "garden_type",
        "user_has_plant",
        "plant_log",
        "plant",
        "soil",
        "plant_info",
        "seed_type",
        "plant_family",
        "user_has_task",
        "tasks",
        "appuser",
    ):
        op.drop_table(name)
