from __future__ import annotations

import csv
import io
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook
from sqlalchemy.orm import Session

from app.core.errors import InfrastructureError
from app.repositories.project_repository import ProjectRepository
from app.services.cost_summary_service import CostSummaryService


def _seed_scenario(client: TestClient) -> int:
    project = client.post(
        "/api/v1/projects",
        json={"name": "Garage extension", "start_date": "2024-01-01", "status": "in_progress"},
    )
    assert project.status_code == 201
    project_id = project.json()["id"]

    responses = [
        client.post(
            f"/api/v1/projects/{project_id}/materials",
            json={
                "name": "Concrete",
                "quantity": "10.5",
                "unit": "bag",
                "price_per_unit": "25.50",
                "purchase_date": "2024-01-05",
            },
        ),
        client.post(
            f"/api/v1/projects/{project_id}/workers",
            json={"name": "Mason", "daily_pay_rate": "100", "days_worked": 5, "start_date": "2024-01-02"},
        ),
        client.post(
            f"/api/v1/projects/{project_id}/other-expenses",
            json={"name": "Skip hire", "price": "50", "expense_date": "2024-01-06"},
        ),
    ]
    assert [response.status_code for response in responses] == [201, 201, 201]
    return project_id


def _amounts(payload: dict[str, object]) -> dict[str, Decimal]:
    return {
        key: Decimal(payload[key])
        for key in ("materials_cost", "workers_cost", "other_expenses_cost", "total_cost")
    }


def test_cost_summary_without_cutoff(client: TestClient) -> None:
    project_id = _seed_scenario(client)

    response = client.get(f"/api/v1/projects/{project_id}/cost-summary")

    assert response.status_code == 200
    body = response.json()
    assert body["project_id"] == project_id
    assert body["as_of_date"] is None
    assert _amounts(body) == {
        "materials_cost": Decimal("267.75"),
        "workers_cost": Decimal("500"),
        "other_expenses_cost": Decimal("50"),
        "total_cost": Decimal("817.75"),
    }


def test_cost_summary_with_cutoff(client: TestClient) -> None:
    project_id = _seed_scenario(client)

    response = client.get(f"/api/v1/projects/{project_id}/cost-summary", params={"as_of_date": "2024-01-03"})

    assert response.status_code == 200
    body = response.json()
    assert body["as_of_date"] == "2024-01-03"
    assert _amounts(body) == {
        "materials_cost": Decimal("0"),
        "workers_cost": Decimal("500"),
        "other_expenses_cost": Decimal("0"),
        "total_cost": Decimal("500"),
    }


def test_cost_summary_for_empty_project(client: TestClient) -> None:
    project_id = client.post("/api/v1/projects", json={"name": "Empty", "start_date": "2024-01-01"}).json()["id"]

    body = client.get(f"/api/v1/projects/{project_id}/cost-summary").json()

    assert set(_amounts(body).values()) == {Decimal("0")}


def test_cost_summary_for_missing_project(client: TestClient) -> None:
    response = client.get("/api/v1/projects/999999/cost-summary")

    assert response.status_code == 404
    assert "999999" in response.json()["detail"]


def test_receipt_summary_equals_cost_summary(client: TestClient) -> None:
    project_id = _seed_scenario(client)

    receipt = client.get(f"/api/v1/projects/{project_id}/receipt")
    summary = client.get(f"/api/v1/projects/{project_id}/cost-summary")

    assert receipt.status_code == 200
    body = receipt.json()
    assert body["cost_summary"] == summary.json()
    assert body["project"]["id"] == project_id
    assert [row["name"] for row in body["materials"]] == ["Concrete"]
    assert [row["name"] for row in body["workers"]] == ["Mason"]
    assert [row["name"] for row in body["other_expenses"]] == ["Skip hire"]
    assert "generated_at" in body

    assert client.get("/api/v1/projects/999999/receipt").status_code == 404


def test_receipt_export_endpoint(client: TestClient) -> None:
    project_id = _seed_scenario(client)

    csv_response = client.get(f"/api/v1/projects/{project_id}/receipt/export", params={"format": "csv"})
    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/csv")
    assert f'filename="receipt-{project_id}.csv"' in csv_response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(csv_response.text)))
    assert rows[-1][0] == "total"
    assert Decimal(rows[-1][7]) == Decimal("817.75")

    xlsx_response = client.get(f"/api/v1/projects/{project_id}/receipt/export")
    assert xlsx_response.status_code == 200
    workbook = load_workbook(io.BytesIO(xlsx_response.content))
    assert workbook.sheetnames == ["receipt"]
    assert workbook["receipt"]["B1"].value == "Garage extension"

    invalid = client.get(f"/api/v1/projects/{project_id}/receipt/export", params={"format": "pdf"})
    assert invalid.status_code == 422


def test_storage_failures_surface_as_service_unavailable(broken_client: TestClient) -> None:
    summary = broken_client.get("/api/v1/projects/1/cost-summary")
    assert summary.status_code == 503
    assert summary.json()["detail"].startswith("Storage operation failed")

    assert broken_client.get("/api/v1/projects").status_code == 503
    assert broken_client.get("/api/v1/projects/1/receipt").status_code == 503

    created = broken_client.post("/api/v1/projects", json={"name": "P", "start_date": "2024-01-01"})
    assert created.status_code == 503


def test_repository_wraps_storage_errors(broken_session: Session) -> None:
    repository = ProjectRepository(broken_session)

    with pytest.raises(InfrastructureError):
        repository.get_project(1)

    with pytest.raises(InfrastructureError) as exc_info:
        CostSummaryService(repository).compute_cost_summary(1)
    assert exc_info.value.__cause__ is not None


def test_cost_summary_accepts_timestamp_cutoff(client: TestClient) -> None:
    project_id = _seed_scenario(client)

    morning = client.get(
        f"/api/v1/projects/{project_id}/cost-summary",
        params={"as_of_date": "2024-01-03T10:00:00Z"},
    )
    assert morning.status_code == 200
    assert morning.json()["as_of_date"] == "2024-01-03"
    assert morning.json()["total_cost"] == "500.00"

    late_evening = client.get(
        f"/api/v1/projects/{project_id}/cost-summary",
        params={"as_of_date": "2024-01-05T23:59:59-02:00"},
    )
    assert late_evening.status_code == 200
    assert late_evening.json()["as_of_date"] == "2024-01-05"
    assert late_evening.json()["materials_cost"] == "267.75"
    assert late_evening.json()["other_expenses_cost"] == "0.00"

    malformed = client.get(
        f"/api/v1/projects/{project_id}/cost-summary",
        params={"as_of_date": "2024-13-45T00:00:00"},
    )
    assert malformed.status_code == 422


def test_summary_amounts_are_rendered_with_two_or_more_places(client: TestClient) -> None:
    project_id = _seed_scenario(client)

    body = client.get(f"/api/v1/projects/{project_id}/cost-summary").json()

    assert body["materials_cost"] == "267.75"
    assert body["workers_cost"] == "500.00"
    assert body["other_expenses_cost"] == "50.00"
    assert body["total_cost"] == "817.75"
