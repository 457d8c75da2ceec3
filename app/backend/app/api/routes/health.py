"""Liveness and readiness probes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db.dependencies import get_db_session
from app.repositories.project_repository import storage_errors

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    """Process is up; does not touch the database."""

    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/db")
def database_health(db: Session = Depends(get_db_session)) -> dict[str, str]:
    with storage_errors("database ping"):
        db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "reachable"}
