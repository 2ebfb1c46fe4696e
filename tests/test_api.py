"""HTTP-level tests: routing, auth guards and the error envelope."""

import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.v1.deps import get_current_user
from app.core.db import get_db
from app.main import app


@pytest.fixture
def client():
    # No ``with`` block: startup (create_all) needs a live database.
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


def _as_user(role="admin"):
    user = SimpleNamespace(id=uuid.uuid4(), role=role, company_state="Karnataka")

    async def _override_db():
        yield MagicMock()

    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_db] = _override_db
    return user


def test_root_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_invoices_require_bearer_token(client):
    response = client.get("/api/v1/invoices")
    assert response.status_code == 401


def test_missing_invoice_uses_error_envelope(client):
    _as_user()
    with patch("app.api.v1.routes.invoices.InvoiceRepository") as MockRepo:
        MockRepo.return_value.get_by_id = AsyncMock(return_value=None)
        response = client.get(f"/api/v1/invoices/{uuid.uuid4()}")

    assert response.status_code == 404
    body = response.json()
    assert body["status"] == "error"
    assert body["message"] == "Invoice not found"
    assert body["errors"][0]["entity"] == "Invoice"


def test_ca_cannot_create_invoices(client):
    _as_user(role="ca")
    response = client.post(
        "/api/v1/invoices",
        json={
            "customer_id": str(uuid.uuid4()),
            "invoice_type": "tax-invoice",
            "items": [{"description": "Work", "rate": 100}],
        },
    )
    assert response.status_code == 403


def test_unknown_invoice_field_rejected(client):
    _as_user()
    response = client.post(
        "/api/v1/invoices",
        json={
            "customer_id": str(uuid.uuid4()),
            "invoice_type": "tax-invoice",
            "items": [{"description": "Work", "rate": 100}],
            "payment_status": "paid",
        },
    )
    assert response.status_code == 422


def test_line_item_errors_are_400(client):
    _as_user()
    customer = SimpleNamespace(id=uuid.uuid4(), state="Karnataka")
    with patch("app.domain.services.invoice_service.CustomerRepository") as MockCustomers:
        MockCustomers.return_value.get_by_id = AsyncMock(return_value=customer)
        response = client.post(
            "/api/v1/invoices",
            json={
                "customer_id": str(customer.id),
                "invoice_type": "tax-invoice",
                "gst_rate": 18,
                "items": [{"description": "", "rate": "abc"}],
            },
        )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert {e["field"] for e in body["errors"]} == {"items[0].description", "items[0].rate"}


def test_report_range_validation(client):
    _as_user()
    response = client.get("/api/v1/reports/dashboard?start_date=2025-05-01&end_date=2025-04-01")
    assert response.status_code == 400
