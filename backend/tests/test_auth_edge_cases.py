from __future__ import annotations

from datetime import timedelta

import pytest

from app.core.security import create_access_token


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_missing_authorization_header(anon_client):
    res = anon_client.get("/passports/")
    assert res.status_code == 401
    assert res.json() == {"error": "UNAUTHORIZED", "message": "Unauthorized"}
    assert res.headers.get("www-authenticate") == "Bearer"


def test_non_bearer_scheme_is_unauthorized(anon_client):
    res = anon_client.get("/auth/profile", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert res.status_code == 401


def test_expired_token(anon_client, users):
    token = create_access_token(users.dentist.id, expires_delta=timedelta(seconds=-1))
    res = anon_client.get("/auth/profile", headers=_bearer(token))
    assert res.status_code == 401
    assert res.json()["message"] == "Token expired"


@pytest.mark.parametrize("token", ["garbage", "a.b.c"])
def test_malformed_token(anon_client, users, token):
    res = anon_client.get("/auth/profile", headers=_bearer(token))
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid token"


def test_token_for_deleted_user(anon_client, db_session, users):
    token = create_access_token(users.patient.id)
    db_session.delete(users.patient)
    db_session.commit()

    res = anon_client.get("/auth/profile", headers=_bearer(token))
    assert res.status_code == 401
    assert res.json()["message"] == "Unauthorized"


def test_wrong_password_and_unknown_email_look_the_same(anon_client, users):
    wrong = anon_client.post("/auth/login", json={"email": "d@x.com", "password": "Wr0ngpass"})
    unknown = anon_client.post("/auth/login", json={"email": "nobody@x.com", "password": "Passw0rd"})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"error": "UNAUTHORIZED", "message": "Unauthorized"}


def test_signup_duplicate_email(anon_client, users):
    res = anon_client.post("/auth/signup", json={"email": "D@x.com", "password": "Passw0rd"})
    assert res.status_code == 409
    assert res.json()["error"] == "CONFLICT"


def test_signup_weak_password(anon_client):
    res = anon_client.post("/auth/signup", json={"email": "w@x.com", "password": "short1"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"] == {"code": "WEAK_PASSWORD", "violations": ["min_length"]}
    assert body["errors"] == [{"field": "password", "reason": "min_length"}]


def test_signup_unknown_role(anon_client):
    res = anon_client.post("/auth/signup", json={"email": "r@x.com", "password": "Passw0rd", "role": "Superuser"})
    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == ["role"]


def test_signup_invalid_email(anon_client):
    res = anon_client.post("/auth/signup", json={"email": "not-an-email", "password": "Passw0rd"})
    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == ["email"]


def test_signup_reports_role_and_password_together(anon_client):
    res = anon_client.post("/auth/signup", json={"email": "r@x.com", "password": "short1", "role": "Superuser"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert [e["field"] for e in body["errors"]] == ["role", "password"]
    assert body["details"]["code"] == "WEAK_PASSWORD"
