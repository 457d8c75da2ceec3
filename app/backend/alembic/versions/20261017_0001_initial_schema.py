"""initial schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


project_status = sa.Enum("planning", "in_progress", "completed", "on_hold", name="project_status")
task_status = sa.Enum("pending", "in_progress", "completed", name="task_status")
photo_type = sa.Enum("before", "progress", "after", "other", name="photo_type")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _project_fk() -> sa.Column:
    return sa.Column(
        "project_id",
        sa.Integer(),
        sa.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", project_status, nullable=False, server_default="planning"),
        *_timestamps(),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        _project_fk(),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("status", task_status, nullable=False, server_default="pending"),
        *_timestamps(),
        sa.CheckConstraint("duration_days > 0", name="ck_tasks_duration_days_positive"),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])

    op.create_table(
        "materials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        _project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 2), nullable=False),
        sa.Column("unit", sa.String(length=64), nullable=False),
        sa.Column("price_per_unit", sa.Numeric(12, 2), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="ck_materials_quantity_positive"),
        sa.CheckConstraint("price_per_unit > 0", name="ck_materials_price_per_unit_positive"),
    )
    op.create_index("ix_materials_project_id", "materials", ["project_id"])

    op.create_table(
        "workers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        _project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("daily_pay_rate", sa.Numeric(12, 2), nullable=False),
        sa.Column("days_worked", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("daily_pay_rate > 0", name="ck_workers_daily_pay_rate_positive"),
        sa.CheckConstraint("days_worked >= 0", name="ck_workers_days_worked_non_negative"),
    )
    op.create_index("ix_workers_project_id", "workers", ["project_id"])

    op.create_table(
        "other_expenses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        _project_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("price > 0", name="ck_other_expenses_price_positive"),
    )
    op.create_index("ix_other_expenses_project_id", "other_expenses", ["project_id"])

    op.create_table(
        "project_photos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        _project_fk(),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=1024), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("photo_type", photo_type, nullable=False, server_default="other"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("file_size > 0", name="ck_project_photos_file_size_positive"),
    )
    op.create_index("ix_project_photos_project_id", "project_photos", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_project_photos_project_id", table_name="project_photos")
    op.drop_table("project_photos")
    op.drop_index("ix_other_expenses_project_id", table_name="other_expenses")
    op.drop_table("other_expenses")
    op.drop_index("ix_workers_project_id", table_name="workers")
    op.drop_table("workers")
    op.drop_index("ix_materials_project_id", table_name="materials")
    op.drop_table("materials")
    op.drop_index("ix_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("projects")

    bind = op.get_bind()
    photo_type.drop(bind, checkfirst=True)
    task_status.drop(bind, checkfirst=True)
    project_status.drop(bind, checkfirst=True)
