import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from rentals import auth
from rentals.main import app


def test_health():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_missing_bearer_token_is_rejected():
    response = TestClient(app).get("/properties")
    assert response.status_code in (401, 403)


async def test_malformed_token_is_rejected(monkeypatch):
    monkeypatch.setattr(auth, "FIREBASE_PROJECT_ID", "rentals-test")

    with pytest.raises(HTTPException) as exc:
        await auth.verify_firebase_token("not-a-jwt")

    assert exc.value.status_code == 401


async def test_unconfigured_firebase_is_a_server_error(monkeypatch):
    monkeypatch.setattr(auth, "FIREBASE_PROJECT_ID", None)

    with pytest.raises(HTTPException) as exc:
        await auth.verify_firebase_token("a.b.c")

    assert exc.value.status_code == 500
