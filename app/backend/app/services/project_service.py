"""Application service for projects and their line items."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TypeVar

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.entities import (
    Material,
    OtherExpense,
    PhotoType,
    Project,
    ProjectPhoto,
    ProjectStatus,
    Task,
    TaskStatus,
    Worker,
    utc_now,
)
from app.repositories.project_repository import ProjectRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
# Numeric(12, 2): ten integer digits.
AMOUNT_LIMIT = Decimal("10000000000")

RowT = TypeVar("RowT")

FieldChanges = Mapping[str, object]


@dataclass(slots=True)
class ProjectCreateData:
    name: str
    description: str | None
    start_date: date
    end_date: date | None = None
    status: ProjectStatus = ProjectStatus.PLANNING


@dataclass(slots=True)
class TaskCreateData:
    description: str
    duration_days: int
    status: TaskStatus = TaskStatus.PENDING


@dataclass(slots=True)
class MaterialCreateData:
    name: str
    quantity: Decimal
    unit: str
    price_per_unit: Decimal
    purchase_date: date | None = None


@dataclass(slots=True)
class WorkerCreateData:
    name: str
    daily_pay_rate: Decimal
    days_worked: int = 0
    start_date: date | None = None
    end_date: date | None = None


@dataclass(slots=True)
class OtherExpenseCreateData:
    name: str
    description: str | None
    price: Decimal
    expense_date: date | None = None


@dataclass(slots=True)
class PhotoCreateData:
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    description: str | None = None
    photo_type: PhotoType = PhotoType.OTHER


@dataclass(slots=True)
class ProjectProgress:
    project_id: int
    total_tasks: int
    completed_tasks: int
    total_duration_days: int
    completed_duration_days: int
    progress_percentage: Decimal


# Updatable fields per entity: name -> nullable.
PROJECT_FIELDS = {"name": False, "description": True, "start_date": False, "end_date": True, "status": False}
TASK_FIELDS = {"description": False, "duration_days": False, "status": False}
MATERIAL_FIELDS = {
    "name": False,
    "quantity": False,
    "unit": False,
    "price_per_unit": False,
    "purchase_date": True,
}
WORKER_FIELDS = {
    "name": False,
    "daily_pay_rate": False,
    "days_worked": False,
    "start_date": True,
    "end_date": True,
}
OTHER_EXPENSE_FIELDS = {"name": False, "description": True, "price": False, "expense_date": True}


def next_timestamp(previous: datetime | None) -> datetime:
    """Current UTC time, bumped past ``previous`` so ``updated_at`` always moves forward."""

    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _clean_required_text(values: dict[str, object], field_name: str) -> None:
    value = values.get(field_name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string.")
    values[field_name] = value.strip()


def _clean_optional_text(values: dict[str, object], field_name: str) -> None:
    value = values.get(field_name)
    if value is None:
        return
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string.")
    values[field_name] = value.strip() or None


def _require_positive_decimal(values: dict[str, object], field_name: str) -> None:
    """Positive amount that fits a ``Numeric(12, 2)`` column without rounding."""

    value = values.get(field_name)
    if isinstance(value, bool) or not isinstance(value, (Decimal, int)):
        raise ValidationError(f"{field_name} must be a decimal number.")
    value = Decimal(value)
    if not value.is_finite() or value <= ZERO:
        raise ValidationError(f"{field_name} must be greater than zero.")
    if value >= AMOUNT_LIMIT:
        raise ValidationError(f"{field_name} must be lower than {AMOUNT_LIMIT}.")
    if value != value.quantize(Q2):
        raise ValidationError(f"{field_name} must have at most 2 decimal places.")
    values[field_name] = value.quantize(Q2)


def _require_int(values: dict[str, object], field_name: str, *, minimum: int) -> None:
    value = values.get(field_name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer.")
    if value < minimum:
        qualifier = "greater than zero" if minimum == 1 else f"greater or equal {minimum}"
        raise ValidationError(f"{field_name} must be {qualifier}.")


def _require_date_range(values: dict[str, object], start_field: str, end_field: str) -> None:
    start = values.get(start_field)
    end = values.get(end_field)
    if start is not None and end is not None and end < start:
        raise ValidationError(f"{end_field} must be greater than or equal to {start_field}.")


def _require_enum(values: dict[str, object], field_name: str, enum_cls: type) -> None:
    try:
        values[field_name] = enum_cls(values.get(field_name))
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}.") from exc


def validate_project_values(values: dict[str, object]) -> None:
    _clean_required_text(values, "name")
    _clean_optional_text(values, "description")
    if values.get("start_date") is None:
        raise ValidationError("start_date is required.")
    _require_date_range(values, "start_date", "end_date")
    _require_enum(values, "status", ProjectStatus)


def validate_task_values(values: dict[str, object]) -> None:
    _clean_required_text(values, "description")
    _require_int(values, "duration_days", minimum=1)
    _require_enum(values, "status", TaskStatus)


def validate_material_values(values: dict[str, object]) -> None:
    _clean_required_text(values, "name")
    _clean_required_text(values, "unit")
    _require_positive_decimal(values, "quantity")
    _require_positive_decimal(values, "price_per_unit")


def validate_worker_values(values: dict[str, object]) -> None:
    _clean_required_text(values, "name")
    _require_positive_decimal(values, "daily_pay_rate")
    _require_int(values, "days_worked", minimum=0)
    _require_date_range(values, "start_date", "end_date")


def validate_other_expense_values(values: dict[str, object]) -> None:
    _clean_required_text(values, "name")
    _clean_optional_text(values, "description")
    _require_positive_decimal(values, "price")


def validate_photo_values(values: dict[str, object]) -> None:
    for field_name in ("filename", "original_name", "file_path", "mime_type"):
        _clean_required_text(values, field_name)
    _clean_optional_text(values, "description")
    _require_int(values, "file_size", minimum=1)
    _require_enum(values, "photo_type", PhotoType)


class ProjectService:
    """Service implementing project and line-item lifecycle rules."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = ProjectRepository(db)

    def _ensure_project(self, project_id: int) -> Project:
        project = self.repo.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project with id {project_id} not found.")
        return project

    def _persist(self, row: RowT, add: Callable[[RowT], RowT]) -> RowT:
        add(row)
        self.repo.commit()
        self.repo.refresh(row)
        return row

    def _apply_changes(
        self,
        row: RowT,
        changes: FieldChanges,
        *,
        fields: Mapping[str, bool],
        validate: Callable[[dict[str, object]], None],
    ) -> RowT:
        """Merge a partial update onto ``row``.

        Keys absent from ``changes`` are left alone; an explicit ``None`` clears
        a nullable field and is rejected for required ones. The merged values
        are validated as a whole before anything is written to the row.
        """

        unknown = sorted(set(changes) - set(fields))
        if unknown:
            raise ValidationError(f"Unsupported update fields: {', '.join(unknown)}.")
        for field_name, value in changes.items():
            if value is None and not fields[field_name]:
                raise ValidationError(f"{field_name} cannot be null.")

        merged = {field_name: getattr(row, field_name) for field_name in fields}
        merged.update(changes)
        validate(merged)

        for field_name in changes:
            setattr(row, field_name, merged[field_name])
        row.updated_at = next_timestamp(row.updated_at)
        self.repo.commit()
        self.repo.refresh(row)
        return row

    # ---------- Serialization ----------
    @staticmethod
    def serialize_project(project: Project) -> dict[str, object]:
        return {
            "id": project.id,
            "name": project.name,
            "description": project.description,
            "start_date": project.start_date.isoformat(),
            "end_date": project.end_date.isoformat() if project.end_date else None,
            "status": project.status.value,
            "created_at": project.created_at.isoformat(),
            "updated_at": project.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_task(task: Task) -> dict[str, object]:
        return {
            "id": task.id,
            "project_id": task.project_id,
            "description": task.description,
            "duration_days": task.duration_days,
            "status": task.status.value,
            "created_at": task.created_at.isoformat(),
            "updated_at": task.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_material(material: Material) -> dict[str, object]:
        return {
            "id": material.id,
            "project_id": material.project_id,
            "name": material.name,
            "quantity": str(material.quantity),
            "unit": material.unit,
            "price_per_unit": str(material.price_per_unit),
            "purchase_date": material.purchase_date.isoformat() if material.purchase_date else None,
            "created_at": material.created_at.isoformat(),
            "updated_at": material.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_worker(worker: Worker) -> dict[str, object]:
        return {
            "id": worker.id,
            "project_id": worker.project_id,
            "name": worker.name,
            "daily_pay_rate": str(worker.daily_pay_rate),
            "days_worked": worker.days_worked,
            "start_date": worker.start_date.isoformat() if worker.start_date else None,
            "end_date": worker.end_date.isoformat() if worker.end_date else None,
            "created_at": worker.created_at.isoformat(),
            "updated_at": worker.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_other_expense(expense: OtherExpense) -> dict[str, object]:
        return {
            "id": expense.id,
            "project_id": expense.project_id,
            "name": expense.name,
            "description": expense.description,
            "price": str(expense.price),
            "expense_date": expense.expense_date.isoformat() if expense.expense_date else None,
            "created_at": expense.created_at.isoformat(),
            "updated_at": expense.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_photo(photo: ProjectPhoto) -> dict[str, object]:
        return {
            "id": photo.id,
            "project_id": photo.project_id,
            "filename": photo.filename,
            "original_name": photo.original_name,
            "file_path": photo.file_path,
            "file_size": photo.file_size,
            "mime_type": photo.mime_type,
            "description": photo.description,
            "photo_type": photo.photo_type.value,
            "created_at": photo.created_at.isoformat(),
        }

    @staticmethod
    def serialize_progress(progress: ProjectProgress) -> dict[str, object]:
        return {
            "project_id": progress.project_id,
            "total_tasks": progress.total_tasks,
            "completed_tasks": progress.completed_tasks,
            "total_duration_days": progress.total_duration_days,
            "completed_duration_days": progress.completed_duration_days,
            "progress_percentage": str(progress.progress_percentage),
        }

    # ---------- Project CRUD ----------
    def list_projects(self) -> list[Project]:
        return self.repo.list_projects()

    def get_project(self, project_id: int) -> Project:
        return self._ensure_project(project_id)

    def create_project(self, data: ProjectCreateData) -> Project:
        values = asdict(data)
        validate_project_values(values)
        now = utc_now()
        project = Project(**values, created_at=now, updated_at=now)
        self._persist(project, self.repo.add_project)
        logger.info("Created project %s (%s)", project.id, project.name)
        return project

    def update_project(self, project_id: int, changes: FieldChanges) -> Project:
        project = self._ensure_project(project_id)
        return self._apply_changes(project, changes, fields=PROJECT_FIELDS, validate=validate_project_values)

    def delete_project(self, project_id: int) -> None:
        project = self._ensure_project(project_id)
        self.repo.delete_project(project)
        self.repo.commit()
        logger.info("Deleted project %s with its line items", project_id)

    def project_progress(self, project_id: int) -> ProjectProgress:
        """Task completion weighted by task duration."""

        project = self._ensure_project(project_id)
        tasks = self.repo.list_tasks(project.id)
        completed = [task for task in tasks if task.status is TaskStatus.COMPLETED]
        total_duration = sum(task.duration_days for task in tasks)
        completed_duration = sum(task.duration_days for task in completed)
        if total_duration == 0:
            percentage = ZERO
        else:
            percentage = (Decimal(completed_duration) * 100 / Decimal(total_duration)).quantize(Q2)
        return ProjectProgress(
            project_id=project.id,
            total_tasks=len(tasks),
            completed_tasks=len(completed),
            total_duration_days=total_duration,
            completed_duration_days=completed_duration,
            progress_percentage=percentage,
        )

    # ---------- Tasks ----------
    def list_tasks(self, project_id: int) -> list[Task]:
        project = self._ensure_project(project_id)
        return self.repo.list_tasks(project.id)

    def create_task(self, project_id: int, data: TaskCreateData) -> Task:
        project = self._ensure_project(project_id)
        values = asdict(data)
        validate_task_values(values)
        now = utc_now()
        task = Task(project_id=project.id, **values, created_at=now, updated_at=now)
        return self._persist(task, self.repo.add_task)

    def update_task(self, task_id: int, changes: FieldChanges) -> Task:
        task = self.repo.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task with id {task_id} not found.")
        return self._apply_changes(task, changes, fields=TASK_FIELDS, validate=validate_task_values)

    # ---------- Materials ----------
    def list_materials(self, project_id: int) -> list[Material]:
        project = self._ensure_project(project_id)
        return self.repo.list_materials(project.id)

    def create_material(self, project_id: int, data: MaterialCreateData) -> Material:
        project = self._ensure_project(project_id)
        values = asdict(data)
        validate_material_values(values)
        now = utc_now()
        material = Material(project_id=project.id, **values, created_at=now, updated_at=now)
        return self._persist(material, self.repo.add_material)

    def update_material(self, material_id: int, changes: FieldChanges) -> Material:
        material = self.repo.get_material(material_id)
        if material is None:
            raise NotFoundError(f"Material with id {material_id} not found.")
        return self._apply_changes(material, changes, fields=MATERIAL_FIELDS, validate=validate_material_values)

    # ---------- Workers ----------
    def list_workers(self, project_id: int) -> list[Worker]:
        project = self._ensure_project(project_id)
        return self.repo.list_workers(project.id)

    def create_worker(self, project_id: int, data: WorkerCreateData) -> Worker:
        project = self._ensure_project(project_id)
        values = asdict(data)
        validate_worker_values(values)
        now = utc_now()
        worker = Worker(project_id=project.id, **values, created_at=now, updated_at=now)
        return self._persist(worker, self.repo.add_worker)

    def update_worker(self, worker_id: int, changes: FieldChanges) -> Worker:
        worker = self.repo.get_worker(worker_id)
        if worker is None:
            raise NotFoundError(f"Worker with id {worker_id} not found.")
        return self._apply_changes(worker, changes, fields=WORKER_FIELDS, validate=validate_worker_values)

    # ---------- Other expenses ----------
    def list_other_expenses(self, project_id: int) -> list[OtherExpense]:
        project = self._ensure_project(project_id)
        return self.repo.list_other_expenses(project.id)

    def create_other_expense(self, project_id: int, data: OtherExpenseCreateData) -> OtherExpense:
        project = self._ensure_project(project_id)
        values = asdict(data)
        validate_other_expense_values(values)
        now = utc_now()
        expense = OtherExpense(project_id=project.id, **values, created_at=now, updated_at=now)
        return self._persist(expense, self.repo.add_other_expense)

    def update_other_expense(self, expense_id: int, changes: FieldChanges) -> OtherExpense:
        expense = self.repo.get_other_expense(expense_id)
        if expense is None:
            raise NotFoundError(f"Other expense with id {expense_id} not found.")
        return self._apply_changes(
            expense,
            changes,
            fields=OTHER_EXPENSE_FIELDS,
            validate=validate_other_expense_values,
        )

    # ---------- Photos ----------
    def list_photos(self, project_id: int) -> list[ProjectPhoto]:
        project = self._ensure_project(project_id)
        return self.repo.list_photos(project.id)

    def create_photo(self, project_id: int, data: PhotoCreateData) -> ProjectPhoto:
        project = self._ensure_project(project_id)
        values = asdict(data)
        validate_photo_values(values)
        photo = ProjectPhoto(project_id=project.id, **values, created_at=utc_now())
        return self._persist(photo, self.repo.add_photo)
