"""Repository helpers for projects and their line items."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import InfrastructureError
from app.models.entities import Material, OtherExpense, Project, ProjectPhoto, Task, Worker

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")

CHILD_MODELS = (Task, Material, Worker, OtherExpense, ProjectPhoto)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise driver/ORM failures as ``InfrastructureError``."""

    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage operation failed: %s", operation)
        raise InfrastructureError(f"Storage operation failed: {operation}.") from exc


class ProjectRepository:
    """Persistence operations used by project and costing services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Unit of work ----------
    def commit(self) -> None:
        try:
            with storage_errors("commit"):
                self.db.commit()
        except InfrastructureError:
            self.db.rollback()
            raise

    def refresh(self, row: object) -> None:
        with storage_errors("refresh"):
            self.db.refresh(row)

    def _add(self, row: RowT) -> RowT:
        try:
            with storage_errors(f"insert {type(row).__name__}"):
                self.db.add(row)
                self.db.flush()
        except InfrastructureError:
            self.db.rollback()
            raise
        return row

    def _get(self, model: type[RowT], row_id: int) -> RowT | None:
        with storage_errors(f"get {model.__name__}"):
            return self.db.scalar(select(model).where(model.id == row_id))

    def _list_for_project(self, model: type[RowT], project_id: int) -> list[RowT]:
        with storage_errors(f"list {model.__name__}"):
            return list(
                self.db.scalars(
                    select(model).where(model.project_id == project_id).order_by(model.id.asc())
                ).all()
            )

    # ---------- Projects ----------
    def list_projects(self) -> list[Project]:
        with storage_errors("list Project"):
            return list(
                self.db.scalars(select(Project).order_by(Project.created_at.desc(), Project.id.desc())).all()
            )

    def get_project(self, project_id: int) -> Project | None:
        return self._get(Project, project_id)

    def add_project(self, project: Project) -> Project:
        return self._add(project)

    def delete_project(self, project: Project) -> None:
        with storage_errors("delete Project"):
            for model in CHILD_MODELS:
                self.db.execute(delete(model).where(model.project_id == project.id))
            self.db.delete(project)
            self.db.flush()

    # ---------- Tasks ----------
    def list_tasks(self, project_id: int) -> list[Task]:
        return self._list_for_project(Task, project_id)

    def get_task(self, task_id: int) -> Task | None:
        return self._get(Task, task_id)

    def add_task(self, task: Task) -> Task:
        return self._add(task)

    # ---------- Materials ----------
    def list_materials(self, project_id: int) -> list[Material]:
        return self._list_for_project(Material, project_id)

    def get_material(self, material_id: int) -> Material | None:
        return self._get(Material, material_id)

    def add_material(self, material: Material) -> Material:
        return self._add(material)

    # ---------- Workers ----------
    def list_workers(self, project_id: int) -> list[Worker]:
        return self._list_for_project(Worker, project_id)

    def get_worker(self, worker_id: int) -> Worker | None:
        return self._get(Worker, worker_id)

    def add_worker(self, worker: Worker) -> Worker:
        return self._add(worker)

    # ---------- Other expenses ----------
    def list_other_expenses(self, project_id: int) -> list[OtherExpense]:
        return self._list_for_project(OtherExpense, project_id)

    def get_other_expense(self, expense_id: int) -> OtherExpense | None:
        return self._get(OtherExpense, expense_id)

    def add_other_expense(self, expense: OtherExpense) -> OtherExpense:
        return self._add(expense)

    # ---------- Photos ----------
    def list_photos(self, project_id: int) -> list[ProjectPhoto]:
        return self._list_for_project(ProjectPhoto, project_id)

    def add_photo(self, photo: ProjectPhoto) -> ProjectPhoto:
        return self._add(photo)
