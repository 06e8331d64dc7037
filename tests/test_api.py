"""
HTTP surface tests.

Guards against:
1. Protected routes answering without an upstream identity
2. Domain errors leaking as 500s instead of their mapped status codes
3. The onboarding flow (profile -> dashboard) breaking end to end
"""
import pytest
from fastapi.testclient import TestClient

from sensai import scheduler as scheduler_module
from sensai.api.deps import get_ai_model
from sensai.config import get_settings
from sensai.main import app
from sensai.models.base import get_db
from sensai.models.industry_insight import IndustryInsight
from sensai.models.user import User
from sensai.services.insight_generator import parse_insights
from sensai.services.insight_store import InsightStore

from fakes import FakeModel, insight_json

HEADERS = {
    "X-Auth-User-Id": "user_api",
    "X-Auth-User-Email": "api@example.com",
    "X-Auth-User-Name": "Api User",
}


@pytest.fixture
def model():
    return FakeModel(insight_json())


@pytest.fixture
def client(session_factory, model, monkeypatch):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr("sensai.middleware.auth_middleware.SessionLocal", session_factory)
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_ai_model] = lambda: model
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Public / auth
# ---------------------------------------------------------------------------

def test_health_is_public(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_status_reports_features(client):
    features = client.get("/status").json()["features"]

    assert features["ai_generation"] is False
    assert features["scheduler_running"] is False


@pytest.mark.parametrize("path", ["/dashboard/insights", "/user/me", "/resume", "/interview/assessments"])
def test_protected_routes_require_identity(client, path):
    response = client.get(path)

    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}


def test_first_visit_provisions_user(client, session_factory):
    response = client.get("/user/me", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["email"] == "api@example.com"

    db = session_factory()
    try:
        assert db.query(User).filter_by(external_user_id="user_api").count() == 1
    finally:
        db.close()


# ---------------------------------------------------------------------------
# Onboarding flow
# ---------------------------------------------------------------------------

def test_dashboard_before_onboarding_is_bad_request(client):
    response = client.get("/dashboard/insights", headers=HEADERS)

    assert response.status_code == 400
    assert "industry is not set" in response.json()["detail"]


def test_profile_then_dashboard(client, model):
    assert client.get("/user/onboarding-status", headers=HEADERS).json() == {"is_onboarded": False}

    response = client.put("/user/profile", headers=HEADERS, json={
        "industry": "Cybersecurity",
        "experience": 3,
        "skills": ["Networking"],
    })
    assert response.status_code == 200
    assert response.json()["industry_insight"]["demand_level"] == "HIGH"

    assert client.get("/user/onboarding-status", headers=HEADERS).json() == {"is_onboarded": True}

    insight = client.get("/dashboard/insights", headers=HEADERS).json()["data"]
    assert insight["industry"] == "Cybersecurity"
    assert len(insight["salary_ranges"]) == 5
    assert model.calls == 1


def test_blank_industry_is_rejected(client):
    response = client.put("/user/profile", headers=HEADERS, json={"industry": "  "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Industry is required before updating the user."


def test_malformed_ai_answer_maps_to_bad_gateway(client, model):
    model.responses = ["not json at all"]

    response = client.put("/user/profile", headers=HEADERS, json={"industry": "Cybersecurity"})

    assert response.status_code == 502
    assert "Failed to parse insights" in response.json()["detail"]


def test_resume_improve_never_fails(client, model):
    model.responses = [Exception("Invalid API key")]

    response = client.post("/resume/improve", headers=HEADERS, json={
        "current": "led a team of 5 engineers",
        "type": "experience",
    })

    assert response.status_code == 200
    assert response.json()["improved"].endswith("led a team of 5 engineers.")


def test_missing_email_is_bad_request(client):
    response = client.get("/user/me", headers={"X-Auth-User-Id": "user_no_email"})

    assert response.status_code == 400
    assert "X-Auth-User-Email" in response.json()["detail"]


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

ADMIN_HEADERS = {"X-Auth-User-Id": "user_admin", "X-Auth-User-Email": "admin@example.com"}


@pytest.fixture
def admin(monkeypatch):
    monkeypatch.setattr(get_settings(), "admin_user_ids", ["user_admin"])


def test_job_trigger_requires_admin(client, model):
    response = client.post("/jobs/insights/run", headers=HEADERS)

    assert response.status_code == 403
    assert client.get("/jobs", headers=HEADERS).status_code == 403
    assert model.calls == 0


def test_admin_runs_insight_refresh(client, admin, session_factory, monkeypatch):
    db = session_factory()
    InsightStore(db).create("Tech", parse_insights("Tech", insight_json(demand="low", fenced=False)))
    db.commit()
    db.close()

    monkeypatch.setattr(scheduler_module, "SessionLocal", session_factory)
    monkeypatch.setattr(scheduler_module, "get_text_model", lambda: FakeModel(insight_json(demand="high")))

    response = client.post("/jobs/insights/run", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["result"]["succeeded"] == ["Tech"]

    db = session_factory()
    try:
        assert db.query(IndustryInsight).filter_by(industry="Tech").one().demand_level == "HIGH"
    finally:
        db.close()


def test_refresh_already_running_is_conflict(client, admin, monkeypatch):
    monkeypatch.setattr(scheduler_module, "_running_jobs", {"insights"})

    response = client.post("/jobs/insights/run", headers=ADMIN_HEADERS)

    assert response.status_code == 409


def test_unknown_job_is_not_found(client, admin):
    assert client.post("/jobs/payroll/run", headers=ADMIN_HEADERS).status_code == 404
