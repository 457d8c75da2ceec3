"""Cost-bearing line item endpoints: materials, workers and other expenses."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.fields import CalendarDate
from app.db.dependencies import get_db_session
from app.services.project_service import (
    MaterialCreateData,
    OtherExpenseCreateData,
    ProjectService,
    WorkerCreateData,
)

router = APIRouter(tags=["line-items"])


class MaterialCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    quantity: Decimal = Field(gt=0)
    unit: str = Field(min_length=1, max_length=64)
    price_per_unit: Decimal = Field(gt=0)
    purchase_date: CalendarDate | None = None


class MaterialUpdatePayload(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    quantity: Decimal | None = Field(default=None, gt=0)
    unit: str | None = Field(default=None, min_length=1, max_length=64)
    price_per_unit: Decimal | None = Field(default=None, gt=0)
    purchase_date: CalendarDate | None = None


class WorkerCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    daily_pay_rate: Decimal = Field(gt=0)
    days_worked: int = Field(default=0, ge=0)
    start_date: CalendarDate | None = None
    end_date: CalendarDate | None = None


class WorkerUpdatePayload(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    daily_pay_rate: Decimal | None = Field(default=None, gt=0)
    days_worked: int | None = Field(default=None, ge=0)
    start_date: CalendarDate | None = None
    end_date: CalendarDate | None = None


class OtherExpenseCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(gt=0)
    expense_date: CalendarDate | None = None


class OtherExpenseUpdatePayload(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(default=None, gt=0)
    expense_date: CalendarDate | None = None


def _project_service(db: Session) -> ProjectService:
    return ProjectService(db)


# ---------- Materials ----------
@router.get("/projects/{project_id}/materials")
def list_project_materials(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_material(row) for row in service.list_materials(project_id)]}


@router.post("/projects/{project_id}/materials", status_code=status.HTTP_201_CREATED)
def create_project_material(
    project_id: int,
    payload: MaterialCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    material = service.create_material(
        project_id,
        MaterialCreateData(
            name=payload.name,
            quantity=payload.quantity,
            unit=payload.unit,
            price_per_unit=payload.price_per_unit,
            purchase_date=payload.purchase_date,
        ),
    )
    return service.serialize_material(material)


@router.patch("/materials/{material_id}")
def update_material(
    material_id: int,
    payload: MaterialUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    material = service.update_material(material_id, payload.model_dump(exclude_unset=True))
    return service.serialize_material(material)


# ---------- Workers ----------
@router.get("/projects/{project_id}/workers")
def list_project_workers(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_worker(row) for row in service.list_workers(project_id)]}


@router.post("/projects/{project_id}/workers", status_code=status.HTTP_201_CREATED)
def create_project_worker(
    project_id: int,
    payload: WorkerCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    worker = service.create_worker(
        project_id,
        WorkerCreateData(
            name=payload.name,
            daily_pay_rate=payload.daily_pay_rate,
            days_worked=payload.days_worked,
            start_date=payload.start_date,
            end_date=payload.end_date,
        ),
    )
    return service.serialize_worker(worker)


@router.patch("/workers/{worker_id}")
def update_worker(
    worker_id: int,
    payload: WorkerUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    worker = service.update_worker(worker_id, payload.model_dump(exclude_unset=True))
    return service.serialize_worker(worker)


# ---------- Other expenses ----------
@router.get("/projects/{project_id}/other-expenses")
def list_project_other_expenses(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_other_expense(row) for row in service.list_other_expenses(project_id)]}


@router.post("/projects/{project_id}/other-expenses", status_code=status.HTTP_201_CREATED)
def create_project_other_expense(
    project_id: int,
    payload: OtherExpenseCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    expense = service.create_other_expense(
        project_id,
        OtherExpenseCreateData(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            expense_date=payload.expense_date,
        ),
    )
    return service.serialize_other_expense(expense)


@router.patch("/other-expenses/{expense_id}")
def update_other_expense(
    expense_id: int,
    payload: OtherExpenseUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    expense = service.update_other_expense(expense_id, payload.model_dump(exclude_unset=True))
    return service.serialize_other_expense(expense)
