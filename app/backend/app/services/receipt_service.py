"""Receipt assembly and printable exports."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Font

from app.core.errors import NotFoundError, ValidationError
from app.models.entities import Material, OtherExpense, Project, Worker, utc_now
from app.services.cost_summary_service import (
    CostLedgerReader,
    CostSummaryService,
    ProjectCostSummary,
    format_amount,
    material_line_cost,
    other_expense_line_cost,
    worker_line_cost,
)
from app.services.project_service import ProjectService

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["section", "item_id", "name", "date", "quantity", "unit", "unit_price", "line_total"]


@dataclass(slots=True)
class Receipt:
    project: Project
    cost_summary: ProjectCostSummary
    materials: list[Material]
    workers: list[Worker]
    other_expenses: list[OtherExpense]
    generated_at: datetime


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


class ReceiptService:
    """Compose full-history project receipts from the entity store."""

    def __init__(
        self,
        reader: CostLedgerReader,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.reader = reader
        self.costs = CostSummaryService(reader)
        self.clock = clock

    def generate_receipt(self, project_id: int) -> Receipt:
        project = self.reader.get_project(project_id)
        if project is None:
            raise NotFoundError(f"Project with id {project_id} not found.")

        materials = self.reader.list_materials(project.id)
        workers = self.reader.list_workers(project.id)
        other_expenses = self.reader.list_other_expenses(project.id)
        # Totals are priced from the listed rows, not from a second read.
        cost_summary = self.costs.summarize(project.id, materials, workers, other_expenses)

        receipt = Receipt(
            project=project,
            cost_summary=cost_summary,
            materials=materials,
            workers=workers,
            other_expenses=other_expenses,
            generated_at=self.clock(),
        )
        logger.info(
            "Generated receipt for project %s: %d materials, %d workers, %d other expenses, total=%s",
            project.id,
            len(materials),
            len(workers),
            len(other_expenses),
            cost_summary.total_cost,
        )
        return receipt

    # ---------- Serialization ----------
    @staticmethod
    def serialize_receipt(receipt: Receipt) -> dict[str, object]:
        return {
            "project": ProjectService.serialize_project(receipt.project),
            "cost_summary": CostSummaryService.serialize_summary(receipt.cost_summary),
            "materials": [ProjectService.serialize_material(row) for row in receipt.materials],
            "workers": [ProjectService.serialize_worker(row) for row in receipt.workers],
            "other_expenses": [ProjectService.serialize_other_expense(row) for row in receipt.other_expenses],
            "generated_at": receipt.generated_at.isoformat(),
        }

    # ---------- Exports ----------
    @staticmethod
    def _receipt_rows(receipt: Receipt) -> list[list[str]]:
        rows: list[list[str]] = []
        for material in receipt.materials:
            rows.append(
                [
                    "material",
                    str(material.id),
                    material.name,
                    material.purchase_date.isoformat() if material.purchase_date else "",
                    str(material.quantity),
                    material.unit,
                    str(material.price_per_unit),
                    format_amount(material_line_cost(material)),
                ]
            )
        for worker in receipt.workers:
            rows.append(
                [
                    "worker",
                    str(worker.id),
                    worker.name,
                    worker.start_date.isoformat() if worker.start_date else "",
                    str(worker.days_worked),
                    "day",
                    str(worker.daily_pay_rate),
                    format_amount(worker_line_cost(worker)),
                ]
            )
        for expense in receipt.other_expenses:
            rows.append(
                [
                    "other_expense",
                    str(expense.id),
                    expense.name,
                    expense.expense_date.isoformat() if expense.expense_date else "",
                    "1",
                    "",
                    str(expense.price),
                    format_amount(other_expense_line_cost(expense)),
                ]
            )

        summary = receipt.cost_summary
        for label, amount in (
            ("materials", summary.materials_cost),
            ("workers", summary.workers_cost),
            ("other_expenses", summary.other_expenses_cost),
        ):
            rows.append(["subtotal", "", label, "", "", "", "", format_amount(amount)])
        rows.append(["total", "", "total", "", "", "", "", format_amount(summary.total_cost)])
        return rows

    def export_receipt(self, project_id: int, format_name: str) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in {"csv", "xlsx"}:
            raise ValidationError("format must be one of: csv, xlsx.")

        receipt = self.generate_receipt(project_id)
        rows = self._receipt_rows(receipt)
        base_filename = f"receipt-{receipt.project.id}"

        if normalized_format == "csv":
            sio = io.StringIO()
            writer = csv.writer(sio)
            writer.writerow(EXPORT_COLUMNS)
            writer.writerows(rows)
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=sio.getvalue().encode("utf-8"),
            )

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "receipt"
        sheet.append(["Project", receipt.project.name])
        sheet.append(["Status", receipt.project.status.value])
        sheet.append(["Generated at", receipt.generated_at.isoformat()])
        sheet.append([])
        sheet.append(EXPORT_COLUMNS)
        for cell in sheet[sheet.max_row]:
            cell.font = Font(bold=True)
        for row in rows:
            sheet.append(row)

        output = io.BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )
