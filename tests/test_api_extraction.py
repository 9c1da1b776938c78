"""
Tests for the extraction HTTP endpoints.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from metaextract.core.deps import (
    get_api_factory,
    get_db,
    get_history_repository,
    get_template_repository,
)
from metaextract.main import create_app
from metaextract.models.oauth_token import OAuthToken

ROWS = [
    {"campaign_id": "1", "campaign_name": "Spring Sale", "spend": "10.00", "date_start": "2025-03-14"},
    {"campaign_id": "2", "campaign_name": "Retargeting", "spend": "4.50", "date_start": "2025-03-14"},
]


@pytest.fixture
def graph_requests():
    return []


@pytest.fixture
def graph_handler(graph_requests):
    """Mutable holder so a test can swap the Graph API behaviour"""
    state = {"response": lambda request: httpx.Response(200, json={"data": ROWS})}

    def handler(request):
        graph_requests.append(request)
        return state["response"](request)

    handler.state = state
    return handler


@pytest.fixture
def client(session_factory, history, templates, make_api, graph_handler):
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_history_repository] = lambda: history
    app.dependency_overrides[get_template_repository] = lambda: templates
    app.dependency_overrides[get_api_factory] = lambda: (
        lambda access_token: make_api(graph_handler, access_token=access_token)
    )
    return TestClient(app)


@pytest.fixture
def stored_token(session_factory):
    db = session_factory()
    db.add(OAuthToken(connection_id="conn-1", account_id="act_123", access_token="stored-token"))
    db.commit()
    db.close()


def extraction_body(**overrides):
    body = {
        "connectionId": "conn-1",
        "accountId": "act_123",
        "level": "campaign",
        "selectedFields": ["campaign_name", "spend"],
        "dateRange": {"preset": "last_7_days", "includeToday": True},
    }
    body.update(overrides)
    return body


class TestCatalogEndpoints:
    """Static catalog lookups."""

    def test_fields_filtered_by_level(self, client):
        response = client.get("/api/v1/extraction/fields", params={"level": "campaign"})

        assert response.status_code == 200
        ids = [f["id"] for f in response.json()]
        assert "campaign_name" in ids
        assert "ad_name" not in ids
        assert "displayName" in response.json()[0]

    def test_all_fields(self, client):
        ids = [f["id"] for f in client.get("/api/v1/extraction/fields").json()]
        assert "ad_name" in ids

    def test_breakdowns(self, client):
        breakdowns = client.get("/api/v1/extraction/breakdowns").json()
        age = next(b for b in breakdowns if b["id"] == "age")
        assert age["incompatibleWith"] == ["hourly_stats_aggregated_by_advertiser_time_zone"]

    def test_presets_templates_conversions(self, client):
        assert len(client.get("/api/v1/extraction/date-presets").json()) == 16
        assert len(client.get("/api/v1/extraction/templates").json()) == 6
        assert client.get("/api/v1/extraction/conversions").json()[0]["actionType"] == "purchase"

    def test_field_categories(self, client):
        categories = client.get("/api/v1/extraction/fields/categories").json()

        assert [c["id"] for c in categories][:2] == ["dimension", "delivery"]
        video = next(c for c in categories if c["id"] == "video")
        assert video["label"] == "Video"
        assert video["fieldCount"] > 0

        total = sum(c["fieldCount"] for c in categories)
        assert total == len(client.get("/api/v1/extraction/fields").json())


class TestSavedTemplateEndpoints:
    """User-saved report templates."""

    def test_save_and_list(self, client):
        response = client.post(
            "/api/v1/extraction/templates/saved",
            json={
                "name": "Weekly spend",
                "level": "campaign",
                "selectedFields": ["campaign_name", "spend"],
                "breakdowns": ["age"],
                "datePreset": "last_7_days",
            },
        )

        assert response.status_code == 201
        saved = response.json()["data"]
        assert saved["name"] == "Weekly spend"
        assert saved["selectedFields"] == ["campaign_name", "spend"]

        listed = client.get("/api/v1/extraction/templates/saved").json()
        assert listed["total"] == 1
        assert listed["data"][0]["id"] == saved["id"]
        assert listed["data"][0]["datePreset"] == "last_7_days"

    def test_save_rejects_unavailable_field(self, client):
        response = client.post(
            "/api/v1/extraction/templates/saved",
            json={"name": "Ads", "level": "campaign", "selectedFields": ["ad_name"]},
        )

        assert response.status_code == 400
        assert "Ad Name" in response.json()["detail"]
        assert client.get("/api/v1/extraction/templates/saved").json()["total"] == 0

    def test_extract_with_saved_template(self, client, stored_token):
        saved = client.post(
            "/api/v1/extraction/templates/saved",
            json={"name": "Spend", "selectedFields": ["campaign_name", "spend"]},
        ).json()["data"]

        response = client.post(
            "/api/v1/extraction/extract",
            json=extraction_body(templateId=str(saved["id"])),
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_unknown_template_id(self, client, stored_token, graph_requests):
        for path in ("/extract", "/preview", "/validate"):
            response = client.post(
                f"/api/v1/extraction{path}",
                json=extraction_body(templateId="404"),
            )
            assert response.status_code == 404
            assert "Report template not found" in response.json()["detail"]
        assert graph_requests == []


class TestValidationEndpoints:
    """Validation without network calls."""

    def test_validate_ok(self, client, graph_requests):
        response = client.post("/api/v1/extraction/validate", json=extraction_body())

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "startDate" in response.json()["data"]
        assert graph_requests == []

    def test_validate_rejects_ad_field_at_campaign_level(self, client):
        response = client.post(
            "/api/v1/extraction/validate",
            json=extraction_body(selectedFields=["ad_name"]),
        )

        assert response.status_code == 400
        assert "Ad Name" in response.json()["detail"]

    def test_resolve_custom_date_range(self, client):
        response = client.post(
            "/api/v1/extraction/date-range",
            json={"preset": "custom", "startDate": "2025-01-01", "endDate": "2025-01-31"},
        )

        assert response.status_code == 200
        assert response.json() == {"startDate": "2025-01-01", "endDate": "2025-01-31"}

    def test_resolve_invalid_custom_range(self, client):
        response = client.post("/api/v1/extraction/date-range", json={"preset": "custom"})
        assert response.status_code == 400


class TestExtractionEndpoints:
    """Extraction, preview and history."""

    def test_extract_uses_stored_token(self, client, stored_token, graph_requests):
        response = client.post("/api/v1/extraction/extract", json=extraction_body())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["totalRecords"] == 2
        assert body["data"][0]["campaign_name"] == "Spring Sale"
        assert graph_requests[0].url.params["access_token"] == "stored-token"

    def test_extract_records_history(self, client, stored_token):
        client.post("/api/v1/extraction/extract", json=extraction_body())

        history = client.get("/api/v1/extraction/history", params={"connection_id": "conn-1"}).json()
        assert history["total"] == 1
        assert history["data"][0]["status"] == "completed"
        assert history["data"][0]["recordsCount"] == 2

    def test_extract_failure_is_reported_in_body(self, client, stored_token, graph_handler):
        graph_handler.state["response"] = lambda request: httpx.Response(
            400, json={"error": {"message": "Invalid parameter", "code": 100}}
        )

        response = client.post("/api/v1/extraction/extract", json=extraction_body())

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["error"] == "Meta API Error: Invalid parameter"

    def test_extract_without_token(self, client):
        response = client.post(
            "/api/v1/extraction/extract",
            json=extraction_body(connectionId="unknown"),
        )
        assert response.status_code == 404

    def test_preview_not_in_history(self, client, stored_token, graph_requests):
        response = client.post("/api/v1/extraction/preview", json=extraction_body())

        assert response.status_code == 200
        assert response.json()["totalRecords"] == 2
        assert graph_requests[0].url.params["limit"] == "20"
        assert client.get("/api/v1/extraction/history").json()["total"] == 0


class TestAccountEndpoints:
    """Account and conversion discovery."""

    def test_list_accounts(self, client, stored_token, graph_handler):
        graph_handler.state["response"] = lambda request: httpx.Response(
            200, json={"data": [{"id": "act_123", "name": "Main", "currency": "USD"}]}
        )

        response = client.get("/api/v1/extraction/accounts", params={"connection_id": "conn-1"})

        assert response.status_code == 200
        assert response.json()["data"][0]["name"] == "Main"

    def test_list_accounts_upstream_error(self, client, stored_token, graph_handler):
        graph_handler.state["response"] = lambda request: httpx.Response(
            400, json={"error": {"message": "Invalid OAuth access token", "code": 190}}
        )

        response = client.get("/api/v1/extraction/accounts", params={"connection_id": "conn-1"})

        assert response.status_code == 502
        assert "Invalid OAuth access token" in response.json()["detail"]

    def test_account_conversions(self, client, stored_token, graph_handler):
        def respond(request):
            if request.url.path.endswith("/customconversions"):
                return httpx.Response(200, json={"data": [{"id": "9", "name": "Signup"}]})
            return httpx.Response(
                200, json={"data": [{"actions": [{"action_type": "lead", "value": "3"}]}]}
            )

        graph_handler.state["response"] = respond

        response = client.get(
            "/api/v1/extraction/accounts/act_123/conversions",
            params={"connection_id": "conn-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["actionTypes"] == ["lead"]
        assert body["customConversions"][0]["name"] == "Signup"


class TestHealth:
    def test_health(self, client):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "healthy"
        assert body["graph_api_version"] == "v19.0"
        assert body["fallback_token_configured"] is False

    def test_database_health(self, client, stored_token):
        client.post("/api/v1/extraction/extract", json=extraction_body())

        body = client.get("/api/v1/health/db").json()
        assert body["database"] == "connected"
        assert body["extraction_history_entries"] == 1
