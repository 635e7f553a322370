"""
End-to-end tests for the HTTP API with an in-memory database
"""

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from main import app
from mirai.core.auth import get_external_identity
from mirai.db.session import get_db
from mirai.services.resume_builder import BuilderRegistry, get_builder_registry

PDF_BYTES = b"%PDF-1.7 fake"

VALID_FORM = {
    "contactInfo": {"email": "jane@example.com", "mobile": "+1 555 0100"},
    "summary": "Seasoned engineer.",
    "skills": "Python, SQL",
    "experience": [
        {
            "title": "Engineer",
            "organization": "Acme",
            "startDate": "2020",
            "endDate": "2022",
            "description": "Built things",
        }
    ],
    "education": [],
    "projects": [],
}


@pytest.fixture
def converter():
    return MagicMock(return_value=PDF_BYTES)


@pytest.fixture
def client(session_factory, identity, converter):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    registry = BuilderRegistry(session_factory=session_factory, converter=converter)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_external_identity] = lambda: identity
    app.dependency_overrides[get_builder_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_anonymous_request_is_unauthorized(client):
    app.dependency_overrides[get_external_identity] = lambda: None
    response = client.get("/api/v1/users/me")
    assert response.status_code == 401


def test_users_me_provisions_user(client):
    response = client.get("/api/v1/users/me")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "jane@example.com"
    assert data["name"] == "Jane Doe"
    assert client.get("/api/v1/users/me").json()["data"]["id"] == data["id"]


def test_fresh_user_has_no_resume(client):
    response = client.get("/api/v1/resume/")

    body = response.json()
    assert response.status_code == 200
    assert body["data"]["resume"] is None
    assert body["data"]["builder"]["activeView"] == "edit"
    assert body["data"]["builder"]["mode"] == "derived"


def test_form_update_returns_projection(client):
    response = client.put("/api/v1/resume/form", json=VALID_FORM)

    builder = response.json()["data"]
    assert response.status_code == 200
    assert builder["errors"] == {}
    assert "## Professional Summary\n\nSeasoned engineer." in builder["markdown"]
    assert "📧 jane@example.com | 📱 +1 555 0100" in builder["markdown"]
    assert "## Education" not in builder["markdown"]


def test_save_then_reload(client):
    client.put("/api/v1/resume/form", json=VALID_FORM)
    saved = client.post("/api/v1/resume/save")

    assert saved.status_code == 200
    data = saved.json()["data"]
    assert data["resume"]["content"].startswith('## <div align="center">Jane Doe</div>')
    assert data["builder"]["saveState"] == "success"
    assert data["builder"]["notifications"] == [{"level": "success", "message": "Resume saved successfully!"}]

    resume = client.get("/api/v1/resume/").json()["data"]["resume"]
    assert resume["content"] == data["resume"]["content"]


def test_invalid_form_cannot_be_saved(client):
    client.put("/api/v1/resume/form", json={"summary": "Only this"})
    response = client.post("/api/v1/resume/save")

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["errors"]["contactInfo.email"] == "Invalid email address"


def test_override_and_revert(client):
    client.put("/api/v1/resume/form", json=VALID_FORM)
    overridden = client.put("/api/v1/resume/markdown", json={"markdown": "# Mine"}).json()["data"]
    assert overridden["mode"] == "overridden"

    still = client.put("/api/v1/resume/form", json={**VALID_FORM, "summary": "Changed"}).json()["data"]
    assert still["markdown"] == "# Mine"
    assert still["overrideWarning"] is True

    reverted = client.post("/api/v1/resume/markdown/revert").json()["data"]
    assert reverted["mode"] == "derived"
    assert "Changed" in reverted["markdown"]


def test_preview_page_html(client):
    client.put("/api/v1/resume/form", json=VALID_FORM)
    client.put("/api/v1/resume/view", json={"view": "preview"})
    response = client.get("/api/v1/resume/preview")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'data-color-mode="light"' in response.text
    assert 'id="resume-pdf"' in response.text


def test_pdf_download(client, converter):
    client.put("/api/v1/resume/form", json=VALID_FORM)
    response = client.get("/api/v1/resume/pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="resume.pdf"'
    assert response.content == PDF_BYTES
    converter.assert_called_once()
    # view goes back to the form after exporting
    builder = client.get("/api/v1/resume/").json()["data"]["builder"]
    assert builder["activeView"] == "edit"


def test_pdf_conversion_failure(client, converter):
    converter.side_effect = RuntimeError("rasterizer crashed")
    client.put("/api/v1/resume/form", json=VALID_FORM)
    response = client.get("/api/v1/resume/pdf")

    assert response.status_code == 500
    assert "rasterizer crashed" in response.json()["detail"]


def test_close_session_reloads_saved_resume(client):
    client.put("/api/v1/resume/form", json=VALID_FORM)
    client.post("/api/v1/resume/save")
    assert client.delete("/api/v1/resume/session").status_code == 204

    builder = client.get("/api/v1/resume/").json()["data"]["builder"]
    assert builder["mode"] == "overridden"
    assert builder["activeView"] == "preview"
