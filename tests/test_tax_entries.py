"""Tests for GST tax entry API endpoints."""

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from shopdesk.main import app
from shopdesk.models.shared import utc_now


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


def create_entry(client, invoice_no="INV-001", age_days=0, status="Pending", total_tax="540.00"):
    response = client.post(
        "/v1/tax_entries/",
        json={
            "invoice_no": invoice_no,
            "date": (utc_now() - timedelta(days=age_days)).isoformat(),
            "customer": "Sharma Traders",
            "gstin": "29ABCDE1234F1Z5",
            "taxable_value": "3000.00",
            "total_tax": total_tax,
            "total_amount": "3540.00",
            "status": status,
        },
    )
    assert response.status_code == 201
    return response.json()


class TestTaxEntryCrud:
    def test_create_and_get(self, client):
        entry = create_entry(client)
        response = client.get(f"/v1/tax_entries/{entry['id']}")
        assert response.status_code == 200
        assert response.json()["invoice_no"] == "INV-001"
        assert response.json()["is_inter_state"] is False

    def test_defaults(self, client):
        response = client.post("/v1/tax_entries/", json={})
        assert response.status_code == 201
        assert response.json()["status"] == "Draft"

    def test_list_and_filter(self, client):
        create_entry(client, invoice_no="INV-001")
        create_entry(client, invoice_no="INV-002", status="Filed")

        response = client.get("/v1/tax_entries/")
        assert response.headers["X-Total-Count"] == "2"
        filed = client.get("/v1/tax_entries/", params={"status": "filed"}).json()
        assert [e["invoice_no"] for e in filed] == ["INV-002"]

    def test_update(self, client):
        entry = create_entry(client)
        response = client.put(f"/v1/tax_entries/{entry['id']}", json={"customer": "Gupta Stores"})
        assert response.json()["customer"] == "Gupta Stores"

    def test_delete(self, client):
        entry = create_entry(client)
        assert client.delete(f"/v1/tax_entries/{entry['id']}").status_code == 204
        assert client.get(f"/v1/tax_entries/{entry['id']}").status_code == 404

    def test_missing_is_404(self, client):
        missing = uuid4()
        assert client.get(f"/v1/tax_entries/{missing}").status_code == 404
        assert client.put(f"/v1/tax_entries/{missing}", json={}).status_code == 404
        assert (
            client.put(f"/v1/tax_entries/{missing}/status", json={"status": "Paid"}).status_code
            == 404
        )


class TestGstAlerts:
    def test_paid_entry_resolves_alert(self, client):
        entry = create_entry(client, age_days=8)

        alerts = client.get("/v1/notifications/").json()
        assert [a["title"] for a in alerts] == ["GST Payment Overdue!"]
        assert alerts[0]["invoice_number"] == "INV-001"

        response = client.put(f"/v1/tax_entries/{entry['id']}/status", json={"status": "Paid"})
        assert response.json()["status"] == "Paid"

        assert client.get("/v1/notifications/").json() == []
        history = client.get("/v1/notifications/history").json()
        assert history[0]["is_resolved"] is True
        assert history[0]["resolution_note"] == "GST payment marked as Paid"
