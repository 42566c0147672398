from unittest.mock import patch

from services.security import verify_token


def test_register_returns_token_and_user(client):
    resp = client.post("/auth/register", json={"email": "new@example.com", "password": "secret123"})
    assert resp.status_code == 201
    data = resp.json()
    assert data["user"]["email"] == "new@example.com"
    assert verify_token(data["access_token"])["id"] == data["user"]["id"]


def test_register_duplicate_email(client, user):
    resp = client.post("/auth/register", json={"email": user.email, "password": "secret123"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Email is already registered"}


def test_register_validates_input(client):
    resp = client.post("/auth/register", json={"email": "a@example.com"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email and password are required"

    resp = client.post("/auth/register", json={"email": "not-an-email", "password": "secret123"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid email format"

    resp = client.post("/auth/register", json={"email": "b@example.com", "password": "123"})
    assert resp.status_code == 400


def test_login(client, user):
    resp = client.post("/auth/login", json={"email": user.email, "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["user"] == {"id": user.id, "email": user.email}

    resp = client.post("/auth/login", json={"email": user.email, "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid email or password"}


def test_login_rejects_google_only_account(client, make_user):
    google_user = make_user(email="g@gmail.com", password=None)
    resp = client.post("/auth/login", json={"email": google_user.email, "password": "whatever"})
    assert resp.status_code == 401


@patch("services.auth.security.verify_google_id_token")
def test_google_sign_in_creates_then_finds(mock_verify, client):
    mock_verify.return_value = {"email": "explorer@gmail.com"}

    first = client.post("/auth/google-sign-in", json={"id_token": "tok"})
    assert first.status_code == 200
    assert first.json()["isNewUser"] is True

    second = client.post("/auth/google-sign-in", json={"id_token": "tok"})
    assert second.status_code == 200
    assert second.json()["isNewUser"] is False
    assert second.json()["user"]["id"] == first.json()["user"]["id"]


@patch("services.auth.security.verify_google_id_token")
def test_google_register_and_login(mock_verify, client):
    mock_verify.return_value = {"email": "explorer@gmail.com"}

    resp = client.post("/auth/google-login", json={"id_token": "tok"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Account not found. Please register first."

    resp = client.post("/auth/google-register", json={"id_token": "tok"})
    assert resp.status_code == 201
    assert resp.json()["message"] == "Registration successful!"

    resp = client.post("/auth/google-register", json={"id_token": "tok"})
    assert resp.status_code == 400

    resp = client.post("/auth/google-login", json={"id_token": "tok"})
    assert resp.status_code == 200
    assert "access_token" in resp.json()


def test_google_sign_in_requires_token(client):
    resp = client.post("/auth/google-sign-in", json={})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Google ID token is required"}
