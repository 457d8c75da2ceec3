"""Project lifecycle, task and photo endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.fields import CalendarDate
from app.db.dependencies import get_db_session
from app.models.entities import PhotoType, ProjectStatus, TaskStatus
from app.services.project_service import PhotoCreateData, ProjectCreateData, ProjectService, TaskCreateData

router = APIRouter(tags=["projects"])


class ProjectCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    start_date: CalendarDate
    end_date: CalendarDate | None = None
    status: ProjectStatus = ProjectStatus.PLANNING


class ProjectUpdatePayload(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start_date: CalendarDate | None = None
    end_date: CalendarDate | None = None
    status: ProjectStatus | None = None


class TaskCreatePayload(BaseModel):
    description: str = Field(min_length=1)
    duration_days: int = Field(gt=0)
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdatePayload(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    duration_days: int | None = Field(default=None, gt=0)
    status: TaskStatus | None = None


class PhotoCreatePayload(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    original_name: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1, max_length=1024)
    file_size: int = Field(gt=0)
    mime_type: str = Field(min_length=1, max_length=128)
    description: str | None = None
    photo_type: PhotoType = PhotoType.OTHER


def _project_service(db: Session) -> ProjectService:
    return ProjectService(db)


@router.get("/projects")
def list_projects(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_project(project) for project in service.list_projects()]}


@router.post("/projects", status_code=status.HTTP_201_CREATED)
def create_project(payload: ProjectCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    project = service.create_project(
        ProjectCreateData(
            name=payload.name,
            description=payload.description,
            start_date=payload.start_date,
            end_date=payload.end_date,
            status=payload.status,
        )
    )
    return service.serialize_project(project)


@router.get("/projects/{project_id}")
def get_project(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    return service.serialize_project(service.get_project(project_id))


@router.patch("/projects/{project_id}")
def update_project(
    project_id: int,
    payload: ProjectUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    project = service.update_project(project_id, payload.model_dump(exclude_unset=True))
    return service.serialize_project(project)


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: int, db: Session = Depends(get_db_session)) -> Response:
    service = _project_service(db)
    service.delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects/{project_id}/progress")
def get_project_progress(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    return service.serialize_progress(service.project_progress(project_id))


@router.get("/projects/{project_id}/tasks")
def list_project_tasks(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_task(task) for task in service.list_tasks(project_id)]}


@router.post("/projects/{project_id}/tasks", status_code=status.HTTP_201_CREATED)
def create_project_task(
    project_id: int,
    payload: TaskCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    task = service.create_task(
        project_id,
        TaskCreateData(
            description=payload.description,
            duration_days=payload.duration_days,
            status=payload.status,
        ),
    )
    return service.serialize_task(task)


@router.patch("/tasks/{task_id}")
def update_task(task_id: int, payload: TaskUpdatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    task = service.update_task(task_id, payload.model_dump(exclude_unset=True))
    return service.serialize_task(task)


@router.get("/projects/{project_id}/photos")
def list_project_photos(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_photo(photo) for photo in service.list_photos(project_id)]}


@router.post("/projects/{project_id}/photos", status_code=status.HTTP_201_CREATED)
def create_project_photo(
    project_id: int,
    payload: PhotoCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    photo = service.create_photo(
        project_id,
        PhotoCreateData(
            filename=payload.filename,
            original_name=payload.original_name,
            file_path=payload.file_path,
            file_size=payload.file_size,
            mime_type=payload.mime_type,
            description=payload.description,
            photo_type=payload.photo_type,
        ),
    )
    return service.serialize_photo(photo)
