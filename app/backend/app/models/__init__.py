"""ORM model package."""

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
)

__all__ = [
    "Material",
    "OtherExpense",
    "PhotoType",
    "Project",
    "ProjectPhoto",
    "ProjectStatus",
    "Task",
    "TaskStatus",
    "Worker",
]
