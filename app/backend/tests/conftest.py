from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.dependencies import get_db_session
import app.models.entities  # noqa: F401
from app.main import create_app
from app.models.entities import Material, OtherExpense, Project, ProjectPhoto, ProjectStatus, Task, Worker

TEST_TABLES = [
    Project.__table__,
    Task.__table__,
    Material.__table__,
    Worker.__table__,
    OtherExpense.__table__,
    ProjectPhoto.__table__,
]


def _memory_engine():
    return create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = _memory_engine()
    Base.metadata.create_all(bind=engine, tables=TEST_TABLES)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=TEST_TABLES)


@pytest.fixture()
def broken_session() -> Generator[Session, None, None]:
    """Session bound to a database without any schema, so every query fails."""

    engine = _memory_engine()
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)()
    try:
        yield session
    finally:
        session.close()


def _client_for(session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    yield from _client_for(db_session)


@pytest.fixture()
def broken_client(broken_session: Session) -> Generator[TestClient, None, None]:
    yield from _client_for(broken_session)


@dataclass
class InMemoryLedger:
    """Fake entity store exposing only the read side used by costing services."""

    projects: dict[int, Project] = field(default_factory=dict)
    materials: list[Material] = field(default_factory=list)
    workers: list[Worker] = field(default_factory=list)
    other_expenses: list[OtherExpense] = field(default_factory=list)

    def get_project(self, project_id: int) -> Project | None:
        return self.projects.get(project_id)

    def list_materials(self, project_id: int) -> list[Material]:
        return [row for row in self.materials if row.project_id == project_id]

    def list_workers(self, project_id: int) -> list[Worker]:
        return [row for row in self.workers if row.project_id == project_id]

    def list_other_expenses(self, project_id: int) -> list[OtherExpense]:
        return [row for row in self.other_expenses if row.project_id == project_id]


STAMP = datetime(2024, 1, 1, 8, 0, 0)


@pytest.fixture()
def empty_ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture()
def ledger(empty_ledger: InMemoryLedger) -> InMemoryLedger:
    """Ledger holding project 1 without any line items."""

    empty_ledger.projects[1] = Project(
        id=1,
        name="Garage extension",
        description=None,
        start_date=date(2024, 1, 1),
        end_date=None,
        status=ProjectStatus.IN_PROGRESS,
        created_at=STAMP,
        updated_at=STAMP,
    )
    return empty_ledger


@pytest.fixture()
def scenario_ledger(ledger: InMemoryLedger) -> InMemoryLedger:
    """Project 1 with one material, one worker and one other expense."""

    ledger.materials.append(
        Material(
            id=1,
            project_id=1,
            name="Concrete",
            quantity=Decimal("10.5"),
            unit="bag",
            price_per_unit=Decimal("25.50"),
            purchase_date=date(2024, 1, 5),
            created_at=STAMP,
            updated_at=STAMP,
        )
    )
    ledger.workers.append(
        Worker(
            id=1,
            project_id=1,
            name="Mason",
            daily_pay_rate=Decimal("100"),
            days_worked=5,
            start_date=date(2024, 1, 2),
            end_date=None,
            created_at=STAMP,
            updated_at=STAMP,
        )
    )
    ledger.other_expenses.append(
        OtherExpense(
            id=1,
            project_id=1,
            name="Skip hire",
            description=None,
            price=Decimal("50"),
            expense_date=date(2024, 1, 6),
            created_at=STAMP,
            updated_at=STAMP,
        )
    )
    return ledger
