"""Project cost aggregation over materials, labor and other expenses."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol

from app.core.errors import NotFoundError
from app.models.entities import Material, OtherExpense, Project, Worker

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


class CostLedgerReader(Protocol):
    """Read side of the entity store needed to price a project."""

    def get_project(self, project_id: int) -> Project | None: ...

    def list_materials(self, project_id: int) -> list[Material]: ...

    def list_workers(self, project_id: int) -> list[Worker]: ...

    def list_other_expenses(self, project_id: int) -> list[OtherExpense]: ...


@dataclass(slots=True, frozen=True)
class ProjectCostSummary:
    project_id: int
    materials_cost: Decimal
    workers_cost: Decimal
    other_expenses_cost: Decimal
    as_of_date: date | None = None

    @property
    def total_cost(self) -> Decimal:
        return self.materials_cost + self.workers_cost + self.other_expenses_cost


def dated_on_or_before(value: date | None, cutoff: date | None) -> bool:
    """Cutoff filter: undated rows only count when there is no cutoff."""

    if cutoff is None:
        return True
    return value is not None and value <= cutoff


def material_line_cost(material: Material) -> Decimal:
    return material.quantity * material.price_per_unit


def worker_line_cost(worker: Worker) -> Decimal:
    return worker.days_worked * worker.daily_pay_rate


def other_expense_line_cost(expense: OtherExpense) -> Decimal:
    return expense.price


def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def format_amount(value: Decimal) -> str:
    """Display form: at least two decimal places, extra places only when non-zero.

    Sums stay exact; ``267.7500`` renders as ``267.75`` while ``99999999.9999``
    keeps all four places.
    """

    if value == value.quantize(CENT):
        return str(value.quantize(CENT))
    return format(value.normalize(), "f")


class CostSummaryService:
    """Stateless cost aggregator; every call re-reads the store."""

    def __init__(self, reader: CostLedgerReader) -> None:
        self.reader = reader

    def _require_project(self, project_id: int) -> Project:
        project = self.reader.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project with id {project_id} not found.")
        return project

    @staticmethod
    def summarize(
        project_id: int,
        materials: Iterable[Material],
        workers: Iterable[Worker],
        other_expenses: Iterable[OtherExpense],
        as_of_date: date | None = None,
    ) -> ProjectCostSummary:
        """Price already-fetched rows.

        With ``as_of_date`` set, only rows whose category date (purchase, worker
        start, expense) is on or before the cutoff are counted; rows without a
        date are left out. Labor is anchored on ``start_date``, not on whether
        the worker is active at the cutoff.
        """

        return ProjectCostSummary(
            project_id=project_id,
            materials_cost=decimal_sum(
                material_line_cost(row) for row in materials if dated_on_or_before(row.purchase_date, as_of_date)
            ),
            workers_cost=decimal_sum(
                worker_line_cost(row) for row in workers if dated_on_or_before(row.start_date, as_of_date)
            ),
            other_expenses_cost=decimal_sum(
                other_expense_line_cost(row)
                for row in other_expenses
                if dated_on_or_before(row.expense_date, as_of_date)
            ),
            as_of_date=as_of_date,
        )

    def compute_cost_summary(self, project_id: int, as_of_date: date | None = None) -> ProjectCostSummary:
        """Aggregate the three cost categories for a project.

        Raises ``NotFoundError`` for an unknown project.
        """

        project = self._require_project(project_id)
        summary = self.summarize(
            project.id,
            self.reader.list_materials(project.id),
            self.reader.list_workers(project.id),
            self.reader.list_other_expenses(project.id),
            as_of_date,
        )
        logger.debug(
            "Cost summary for project %s as of %s: total=%s",
            project.id,
            as_of_date.isoformat() if as_of_date else "all-time",
            summary.total_cost,
        )
        return summary

    @staticmethod
    def serialize_summary(summary: ProjectCostSummary) -> dict[str, object]:
        return {
            "project_id": summary.project_id,
            "materials_cost": format_amount(summary.materials_cost),
            "workers_cost": format_amount(summary.workers_cost),
            "other_expenses_cost": format_amount(summary.other_expenses_cost),
            "total_cost": format_amount(summary.total_cost),
            "as_of_date": summary.as_of_date.isoformat() if summary.as_of_date else None,
        }
