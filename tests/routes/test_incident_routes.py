"""
Incident Routes Integration Tests
=================================

Integration tests for incident endpoints including:
- POST /api/incidents
- GET /api/incidents
- GET /api/incidents/{incident_id}
- PATCH /api/incidents/{incident_id}
- GET /health, GET /ready
"""

from datetime import datetime, timedelta, UTC

import pytest
from fastapi.testclient import TestClient

from incidentdesk import main
from incidentdesk.core.exceptions import StorageUnavailable
from incidentdesk.core.query.list_query import MAX_PAGE
from incidentdesk.core.timestamps import format_timestamp
from incidentdesk.db.session import get_db
from incidentdesk.main import app as main_app
from incidentdesk.schemas.incident import BODY_ERROR_MESSAGE, FIELD_ERROR_MESSAGES
from incidentdesk.services import incident_service
from incidentdesk.services.incident_store import IncidentStore


pytestmark = pytest.mark.integration

INCIDENTS_URL = "/api/incidents"


class TestCreateIncidentEndpoint:
    """Integration tests for POST /api/incidents."""

    def test_create_success(self, client: TestClient, valid_incident_payload: dict):
        # Act
        response = client.post(INCIDENTS_URL, json=valid_incident_payload)

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["id"]
        assert data["severity"] == "SEV1"
        assert data["title"] == "DB down"
        assert data["owner"] is None
        assert data["createdAt"] == data["updatedAt"]

    def test_create_invalid_severity(self, client: TestClient, valid_incident_payload: dict):
        # Act
        response = client.post(INCIDENTS_URL, json={**valid_incident_payload, "severity": "SEV9"})

        # Assert
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Validation failed"
        assert data["details"] == {"severity": FIELD_ERROR_MESSAGES["severity"]}

    def test_create_missing_fields(self, client: TestClient):
        # Act
        response = client.post(INCIDENTS_URL, json={"title": "Only a title"})

        # Assert
        assert response.status_code == 400
        assert set(response.json()["details"]) == {"service", "severity", "status"}

    def test_create_non_object_body(self, client: TestClient):
        response = client.post(INCIDENTS_URL, json=["SEV1"])

        assert response.status_code == 400
        assert response.json()["details"] == {"body": BODY_ERROR_MESSAGE}

    def test_create_malformed_json(self, client: TestClient):
        # Act
        response = client.post(
            INCIDENTS_URL,
            content='{"title": "DB down",',
            headers={"Content-Type": "application/json"},
        )

        # Assert
        assert response.status_code == 400
        assert "body" in response.json()["details"]

    def test_failed_create_stores_nothing(self, client: TestClient, valid_incident_payload: dict):
        # Act
        client.post(INCIDENTS_URL, json={**valid_incident_payload, "status": "CLOSED"})

        # Assert
        assert client.get(INCIDENTS_URL).json()["pagination"]["total"] == 0


class TestGetIncidentEndpoint:
    """Integration tests for GET /api/incidents/{incident_id}."""

    def test_get_after_create_is_identical(self, client: TestClient, valid_incident_payload: dict):
        # Arrange
        created = client.post(
            INCIDENTS_URL,
            json={**valid_incident_payload, "owner": "engineer-4", "summary": "Primary is down"},
        ).json()

        # Act
        response = client.get(f"{INCIDENTS_URL}/{created['id']}")

        # Assert
        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown_id(self, client: TestClient):
        # Act
        response = client.get(f"{INCIDENTS_URL}/does-not-exist")

        # Assert
        assert response.status_code == 404
        assert response.json() == {"error": "Incident not found"}


class TestListIncidentsEndpoint:
    """Integration tests for GET /api/incidents."""

    @pytest.fixture
    def incidents(self, make_incident):
        records = []
        for index in range(25):
            records.append(
                make_incident(
                    title=f"Incident {index:02d}",
                    service="Database" if index % 2 == 0 else "Cache Layer",
                    status="OPEN" if index % 3 == 0 else "RESOLVED",
                    severity=f"SEV{index % 4 + 1}",
                    created_at=format_timestamp(datetime(2026, 1, 1, tzinfo=UTC) + timedelta(hours=index)),
                )
            )
        return records

    def test_list_defaults(self, client: TestClient, incidents):
        # Act
        response = client.get(INCIDENTS_URL)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert len(data["incidents"]) == 10
        assert data["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 25,
            "totalPages": 3,
            "hasNextPage": True,
            "hasPrevPage": False,
        }
        assert data["incidents"][0]["title"] == "Incident 24"

    def test_filters_and_total(self, client: TestClient, incidents):
        # Arrange
        expected = {
            incident.id for incident in incidents
            if incident.service == "Database" and incident.status == "OPEN"
        }

        # Act
        response = client.get(
            INCIDENTS_URL,
            params={"service": "Database", "status": "OPEN", "page": 1, "limit": 10},
        )

        # Assert
        data = response.json()
        assert {record["id"] for record in data["incidents"]} == expected
        assert data["pagination"]["total"] == len(expected)

    def test_empty_filter_values_ignored(self, client: TestClient, incidents):
        response = client.get(INCIDENTS_URL, params={"service": "", "status": "", "search": ""})

        assert response.json()["pagination"]["total"] == 25

    def _collect_pages(self, client: TestClient, params: dict) -> tuple[list[str], int]:
        first = client.get(INCIDENTS_URL, params={**params, "page": 1}).json()
        ids = [record["id"] for record in first["incidents"]]
        for page in range(2, first["pagination"]["totalPages"] + 1):
            data = client.get(INCIDENTS_URL, params={**params, "page": page}).json()
            ids.extend(record["id"] for record in data["incidents"])
        return ids, first["pagination"]["total"]

    def test_pages_partition_the_result(self, client: TestClient, incidents):
        # Act
        ids, total = self._collect_pages(client, {"limit": 7})

        # Assert
        assert len(ids) == total == len(set(ids)) == 25
        assert set(ids) == {incident.id for incident in incidents}

    @pytest.mark.parametrize("sort_by", ["status", "severity", "service"])
    def test_filtered_pages_partition_with_tied_sort_values(self, client: TestClient, incidents, sort_by):
        # Arrange
        expected = {incident.id for incident in incidents if incident.service == "Database"}

        # Act
        ids, total = self._collect_pages(
            client,
            {"service": "Database", "sortBy": sort_by, "sortOrder": "ASC", "limit": 3},
        )

        # Assert
        assert len(ids) == total == len(set(ids)) == len(expected)
        assert set(ids) == expected

    def test_huge_page_number_returns_empty_page(self, client: TestClient, incidents):
        # Act
        response = client.get(INCIDENTS_URL, params={"page": "99999999999999999999"})

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["incidents"] == []
        assert data["pagination"]["page"] == MAX_PAGE
        assert data["pagination"]["hasNextPage"] is False
        assert data["pagination"]["total"] == 25

    def test_sort_by_title_ascending(self, client: TestClient, incidents):
        # Act
        response = client.get(INCIDENTS_URL, params={"sortBy": "title", "sortOrder": "asc", "limit": 3})

        # Assert
        titles = [record["title"] for record in response.json()["incidents"]]
        assert titles == ["Incident 00", "Incident 01", "Incident 02"]

    def test_unknown_sort_field_falls_back(self, client: TestClient, incidents):
        # Act
        response = client.get(INCIDENTS_URL, params={"sortBy": "1; DROP TABLE incidents", "limit": 1})

        # Assert
        assert response.status_code == 200
        assert response.json()["incidents"][0]["title"] == "Incident 24"
        assert client.get(INCIDENTS_URL).json()["pagination"]["total"] == 25

    @pytest.mark.parametrize(
        "params, page, limit",
        [
            ({"limit": "0"}, 1, 10),
            ({"limit": "1000"}, 1, 100),
            ({"limit": "abc"}, 1, 10),
            ({"page": "0"}, 1, 10),
            ({"page": "-1"}, 1, 10),
            ({"page": "2", "limit": "5"}, 2, 5),
            ({"page": "99999999999999999999"}, MAX_PAGE, 10),
        ],
    )
    def test_paging_parameters_are_clamped(self, client: TestClient, incidents, params, page, limit):
        # Act
        response = client.get(INCIDENTS_URL, params=params)

        # Assert
        assert response.status_code == 200
        pagination = response.json()["pagination"]
        assert pagination["page"] == page
        assert pagination["limit"] == limit

    def test_page_past_end_is_empty(self, client: TestClient, incidents):
        data = client.get(INCIDENTS_URL, params={"page": 50}).json()

        assert data["incidents"] == []
        assert data["pagination"]["hasNextPage"] is False
        assert data["pagination"]["total"] == 25

    def test_search(self, client: TestClient, make_incident):
        # Arrange
        make_incident(title="Payment processing delays")
        make_incident(title="Cache invalidation issue", summary="payment cache stale")
        make_incident(title="SSL certificate expiration warning")

        # Act
        response = client.get(INCIDENTS_URL, params={"search": "ayment"})

        # Assert
        assert response.json()["pagination"]["total"] == 2


class TestUpdateIncidentEndpoint:
    """Integration tests for PATCH /api/incidents/{incident_id}."""

    @pytest.mark.parametrize(
        "body",
        [
            {"status": "RESOLVED"},
            {"severity": "SEV9"},
            {},
            ["not", "an", "object"],
        ],
    )
    def test_update_unknown_id(self, client: TestClient, body):
        # Act
        response = client.patch(f"{INCIDENTS_URL}/does-not-exist", json=body)

        # Assert
        assert response.status_code == 404

    def test_update_status(self, client: TestClient, valid_incident_payload: dict, monkeypatch):
        # Arrange
        created = client.post(INCIDENTS_URL, json=valid_incident_payload).json()
        later = format_timestamp(datetime.now(UTC) + timedelta(seconds=5))
        monkeypatch.setattr(incident_service, "utc_timestamp", lambda: later)

        # Act
        response = client.patch(f"{INCIDENTS_URL}/{created['id']}", json={"status": "RESOLVED"})

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "RESOLVED"
        assert data["updatedAt"] > created["updatedAt"]
        unchanged = {key: value for key, value in data.items() if key not in ("status", "updatedAt")}
        assert unchanged == {key: value for key, value in created.items() if key not in ("status", "updatedAt")}

    def test_update_persists(self, client: TestClient, sample_incident):
        # Act
        client.patch(f"{INCIDENTS_URL}/{sample_incident.id}", json={"owner": "engineer-7"})

        # Assert
        assert client.get(f"{INCIDENTS_URL}/{sample_incident.id}").json()["owner"] == "engineer-7"

    def test_empty_update_is_idempotent(self, client: TestClient, sample_incident):
        # Arrange
        before = client.get(f"{INCIDENTS_URL}/{sample_incident.id}").json()

        # Act
        response = client.patch(f"{INCIDENTS_URL}/{sample_incident.id}", json={})

        # Assert
        assert response.status_code == 200
        assert response.json() == before

    def test_update_invalid_field(self, client: TestClient, sample_incident):
        # Act
        response = client.patch(f"{INCIDENTS_URL}/{sample_incident.id}", json={"title": ""})

        # Assert
        assert response.status_code == 400
        assert response.json()["details"] == {"title": FIELD_ERROR_MESSAGES["title"]}
        assert client.get(f"{INCIDENTS_URL}/{sample_incident.id}").json()["title"] == sample_incident.title

    def test_immutable_fields_ignored(self, client: TestClient, sample_incident):
        # Act
        response = client.patch(
            f"{INCIDENTS_URL}/{sample_incident.id}",
            json={"id": "other", "createdAt": "2000-01-01T00:00:00.000Z", "status": "MITIGATED"},
        )

        # Assert
        data = response.json()
        assert data["id"] == sample_incident.id
        assert data["createdAt"] == sample_incident.created_at
        assert data["status"] == "MITIGATED"


class TestServerErrors:
    """Storage failures surface as an opaque server error."""

    def test_storage_error_is_opaque(self, client: TestClient, monkeypatch):
        # Arrange
        def locked(self, filters):
            raise StorageUnavailable("database is locked", operation="count")

        monkeypatch.setattr(IncidentStore, "count", locked)

        # Act
        response = client.get(INCIDENTS_URL)

        # Assert
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_unexpected_error_is_opaque(self, db_session, monkeypatch):
        # Arrange
        def broken(self, incident_id):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(IncidentStore, "get_by_id", broken)
        main_app.dependency_overrides[get_db] = lambda: db_session

        # Act
        try:
            with TestClient(main_app, raise_server_exceptions=False) as test_client:
                response = test_client.get(f"{INCIDENTS_URL}/anything")
        finally:
            main_app.dependency_overrides.clear()

        # Assert
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "secret" not in response.text


class TestHealthEndpoints:
    """Integration tests for liveness and readiness."""

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ready(self, client: TestClient):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready_when_database_unreachable(self, client: TestClient, monkeypatch):
        # Arrange
        monkeypatch.setattr(main, "check_database_connection", lambda: False)

        # Act
        response = client.get("/ready")

        # Assert
        assert response.status_code == 503

    def test_request_id_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_response_headers(self, client: TestClient):
        # Act
        response = client.get(INCIDENTS_URL)

        # Assert
        assert response.headers["X-Request-ID"]
        assert float(response.headers["X-Process-Time"]) >= 0
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "Strict-Transport-Security" not in response.headers
