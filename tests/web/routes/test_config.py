from datetime import date

from societybills.models.audit_log import AuditEventType
from tests.web.conftest import ADMIN_HEADERS, RESIDENT_HEADERS, create_config_in_db, get_audit_logs

CONFIG = {
    "societyId": "soc-1",
    "effectiveFrom": "2024-04-01",
    "flatTypes": ["1BHK", "2BHK"],
    "categories": [
        {"key": "maintenance", "label": "Maintenance", "perFlatType": {"1BHK": "800", "2BHK": "1000"}},
    ],
    "interestRules": {"enabled": True, "daysAfterDue": 15, "amount": "1.5", "compounding": "monthly"},
}


class TestConfigRoutes:
    def test_save_and_get(self, client, test_engine):
        response = client.post("/api/billing/config", json=CONFIG, headers=ADMIN_HEADERS)

        assert response.status_code == 201
        saved = response.json()["config"]
        assert saved["id"]
        assert saved["auditTrail"][0]["changeType"] == "created"
        assert len(get_audit_logs(test_engine, event_type=AuditEventType.BILLING_CONFIG_CREATE)) == 1

        latest = client.get("/api/billing/config?societyId=soc-1", headers=ADMIN_HEADERS).json()["config"]
        assert latest["effectiveFrom"] == "2024-04-01"

    def test_get_for_period(self, client, test_engine):
        create_config_in_db(test_engine, effective_from=date(2024, 1, 1))
        create_config_in_db(test_engine, effective_from=date(2024, 6, 1))

        response = client.get("/api/billing/config?societyId=soc-1&period=2024-05", headers=ADMIN_HEADERS)
        assert response.json()["config"]["effectiveFrom"] == "2024-01-01"

        response = client.get("/api/billing/config?societyId=soc-1&period=2023-05", headers=ADMIN_HEADERS)
        assert response.json()["config"] is None

    def test_duplicate_date_rejected(self, client):
        assert client.post("/api/billing/config", json=CONFIG, headers=ADMIN_HEADERS).status_code == 201
        response = client.post("/api/billing/config", json=CONFIG, headers=ADMIN_HEADERS)
        assert response.status_code == 400

    def test_missing_rate_rejected(self, client):
        body = {**CONFIG, "categories": [{"key": "water", "label": "Water", "perFlatType": {"1BHK": "100"}}]}
        response = client.post("/api/billing/config", json=body, headers=ADMIN_HEADERS)
        assert response.status_code == 400
        assert "Water (2BHK)" in response.json()["error"]

    def test_requires_actor(self, client):
        assert client.get("/api/billing/config?societyId=soc-1").status_code == 401

    def test_resident_cannot_save(self, client):
        response = client.post("/api/billing/config", json=CONFIG, headers=RESIDENT_HEADERS)
        assert response.status_code == 403
