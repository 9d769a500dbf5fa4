"""Registration, login and session cookie handling."""
import uuid

from fastapi.testclient import TestClient

from conftest import register, unique_email
from resume_studio.core.auth import create_access_token, decode_token, hash_password, verify_password
from resume_studio.main import app


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_token_contains_subject():
    token = create_access_token({"sub": "user-1", "email": "a@example.com"})
    payload = decode_token(token)
    assert payload["sub"] == "user-1"
    assert "exp" in payload
    assert decode_token("not.a.token") is None


def test_register_sets_cookie_and_returns_user(client):
    email = f"Jane.Doe.{uuid.uuid4().hex[:8]}@example.com"
    response = register(client, email=email, name="  Jane Doe  ")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["error"] is None
    assert body["data"]["user"]["email"] == email.lower()
    assert body["data"]["user"]["name"] == "Jane Doe"
    assert body["data"]["access_token"]
    assert body["meta"]["timestamp"]
    assert client.cookies.get("token")


def test_register_rejects_duplicate_email_case_insensitive(client):
    email = unique_email("dup")
    assert register(client, email=email).status_code == 201

    response = register(TestClient(app), email=email.upper())
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "EMAIL_EXISTS"


def test_register_validates_password_length(client):
    response = register(client, password="short")
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "password" in error["details"]


def test_login_with_wrong_password_is_401(client):
    email = unique_email()
    register(client, email=email, password="correct-horse")

    response = TestClient(app).post("/api/auth/login", json={"email": email, "password": "wrong-horse"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_login_unknown_email_is_401(client):
    response = client.post("/api/auth/login", json={"email": unique_email(), "password": "whatever1"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid email or password"


def test_login_sets_cookie(client):
    email = unique_email()
    register(TestClient(app), email=email, password="correct-horse")

    response = client.post("/api/auth/login", json={"email": email.upper(), "password": "correct-horse"})
    assert response.status_code == 200
    assert client.cookies.get("token")
    assert client.get("/api/auth/me").json()["data"]["email"] == email


def test_me_requires_authentication(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"


def test_me_accepts_bearer_token(client):
    token = register(TestClient(app)).json()["data"]["access_token"]
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_invalid_token_clears_cookie(client):
    response = client.get("/api/auth/me", headers={"Cookie": "token=not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"
    assert "token=" in response.headers.get("set-cookie", "")


def test_logout_clears_session(auth_client):
    assert auth_client.get("/api/auth/me").status_code == 200

    response = auth_client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json()["data"]["message"] == "Logged out successfully"
    assert auth_client.get("/api/auth/me").status_code == 401
