"""Cost summary and receipt endpoints."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import BeforeValidator
from sqlalchemy.orm import Session

from app.api.fields import date_from_timestamp
from app.db.dependencies import get_db_session
from app.repositories.project_repository import ProjectRepository
from app.services.cost_summary_service import CostSummaryService
from app.services.receipt_service import ReceiptService

router = APIRouter(tags=["costs"])


@router.get("/projects/{project_id}/cost-summary")
def get_project_cost_summary(
    project_id: int,
    as_of_date: Annotated[date | None, BeforeValidator(date_from_timestamp)] = None,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = CostSummaryService(ProjectRepository(db))
    summary = service.compute_cost_summary(project_id, as_of_date)
    return service.serialize_summary(summary)


@router.get("/projects/{project_id}/receipt")
def generate_project_receipt(project_id: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = ReceiptService(ProjectRepository(db))
    return service.serialize_receipt(service.generate_receipt(project_id))


@router.get("/projects/{project_id}/receipt/export")
def export_project_receipt(
    project_id: int,
    format: str = Query(default="xlsx"),
    db: Session = Depends(get_db_session),
) -> Response:
    service = ReceiptService(ProjectRepository(db))
    exported = service.export_receipt(project_id, format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
