# tests/test_auth_api.py

import pytest

from conftest import PASSWORD, login


def _signup(client, **overrides):
    payload = {
        "full_name": "Grace Hopper",
        "email": "Grace@Campus.edu",
        "password": "navy1906",
        "role": "student",
    }
    payload.update(overrides)
    return client.post("/api/auth/signup", json=payload)


def test_signup_then_login(client):
    response = _signup(client, role="organizer")

    assert response.status_code == 201
    user = response.json()
    assert user["email"] == "grace@campus.edu"
    assert user["role"] == "organizer"

    response = client.post("/api/auth/login", json={"email": "grace@campus.edu", "password": "navy1906"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["dashboard_url"] == "/dashboard/organizer"
    assert body["access_token"]


def test_signup_duplicate_email(client):
    assert _signup(client).status_code == 201

    response = _signup(client, email="grace@campus.edu ")

    assert response.status_code == 409
    assert response.json()["code"] == "email_taken"


@pytest.mark.parametrize("overrides", [
    {"role": "admin"},
    {"email": "not-an-email"},
    {"password": "123"},
    {"full_name": "  "},
])
def test_signup_validation(client, overrides):
    response = _signup(client, **overrides)

    assert response.status_code == 400
    assert response.json()["code"] == "validation_failed"


def test_login_wrong_password(client, student):
    response = client.post("/api/auth/login", json={"email": student.email, "password": "nope"})

    assert response.status_code == 401
    assert response.json()["code"] == "invalid_credentials"
    assert response.headers["www-authenticate"] == "Bearer"


def test_login_unknown_email(client):
    response = client.post("/api/auth/login", json={"email": "ghost@campus.edu", "password": PASSWORD})

    assert response.status_code == 401


@pytest.mark.parametrize("fixture, dashboard", [
    ("student", "/dashboard/student"),
    ("organizer", "/dashboard/organizer"),
    ("faculty", "/dashboard/faculty"),
])
def test_session_routes_to_role_dashboard(client, request, fixture, dashboard):
    profile = request.getfixturevalue(fixture)
    headers = login(client, profile)

    response = client.get("/api/auth/session", headers=headers)

    assert response.status_code == 200
    assert response.json()["dashboard_url"] == dashboard
    assert response.json()["user"]["id"] == profile.id


def test_session_requires_token(client):
    response = client.get("/api/auth/session")

    assert response.status_code == 401
    assert response.json()["code"] == "authentication_required"


def test_garbage_token_is_rejected(client):
    response = client.get("/api/auth/session", headers={"Authorization": "Bearer not.a.token"})

    assert response.status_code == 401


def test_logout_revokes_session(client, student):
    headers = login(client, student)

    response = client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200

    response = client.get("/api/auth/session", headers=headers)
    assert response.status_code == 401
    assert response.json()["code"] == "session_expired"


def test_other_sessions_survive_logout(client, student):
    first = login(client, student)
    second = login(client, student)

    client.post("/api/auth/logout", headers=first)

    assert client.get("/api/auth/session", headers=second).status_code == 200
