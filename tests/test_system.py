from fastapi.testclient import TestClient

from tests.conftest import add_student, auth_headers


def test_health_endpoint(app_client: TestClient):
    response = app_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload.get("status") == "ok"
    assert isinstance(payload.get("version"), str)


def test_system_info_reports_counts(app_client: TestClient):
    headers = auth_headers(app_client)
    student_id = add_student("Counted")
    add_student("Hidden", is_active=False)
    app_client.post("/gamification/admin/seed-badges", headers=headers)
    app_client.post(f"/gamification/admin/students/{student_id}/xp", headers=headers, json={"amount": 5})

    response = app_client.get("/system/info")
    assert response.status_code == 200
    payload = response.json()
    assert isinstance(payload.get("app_name"), str)
    assert isinstance(payload.get("app_env"), str)
    assert isinstance(payload.get("app_version"), str)
    assert payload["active_students"] == 1
    assert payload["active_badges"] == 12
    assert payload["xp_transactions"] == 1


def test_login_rejects_wrong_password(app_client: TestClient):
    response = app_client.post("/auth/login", json={"login": "admin", "password": "wrong"})
    assert response.status_code == 401


def test_login_returns_bearer_token(app_client: TestClient):
    response = app_client.post("/auth/login", json={"login": "admin", "password": "admin123"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["token_type"] == "bearer"
    assert payload["access_token"]
