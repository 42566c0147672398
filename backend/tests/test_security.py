from unittest.mock import patch

import jwt
import pytest

from domain.errors import BadRequest, ExternalAPIError, Unauthorized
from services import security


def test_password_hash_roundtrip():
    hashed = security.hash_password("secret123")
    assert hashed != "secret123"
    assert security.verify_password("secret123", hashed)
    assert not security.verify_password("wrong", hashed)


def test_verify_password_rejects_accounts_without_password():
    assert not security.verify_password("anything", None)


def test_validate_password_length():
    with pytest.raises(BadRequest):
        security.validate_password("12345")
    with pytest.raises(BadRequest) as exc_info:
        security.validate_password("x" * 101)
    assert exc_info.value.message == "Password must be between 6 and 100 characters"
    security.validate_password("123456")


def test_token_roundtrip_and_tampering():
    token = security.sign_token({"id": 7})
    assert security.verify_token(token)["id"] == 7
    with pytest.raises(jwt.PyJWTError):
        security.verify_token(token, secret="another-secret-for-signing-tokens")


def test_missing_jwt_secret_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr(security.settings, "JWT_SECRET", None)
    with pytest.raises(RuntimeError):
        security.sign_token({"id": 1})


def test_google_token_required():
    with pytest.raises(BadRequest):
        security.verify_google_id_token("")


@patch("services.security.id_token.verify_oauth2_token")
def test_google_token_invalid(mock_verify):
    mock_verify.side_effect = ValueError("Wrong audience")
    with pytest.raises(Unauthorized):
        security.verify_google_id_token("bad-token", client_id="client")


@patch("services.security.id_token.verify_oauth2_token")
def test_google_token_transport_failure(mock_verify):
    from google.auth.exceptions import TransportError

    mock_verify.side_effect = TransportError("certs unavailable")
    with pytest.raises(ExternalAPIError):
        security.verify_google_id_token("token", client_id="client")


@patch("services.security.id_token.verify_oauth2_token")
def test_google_token_returns_claims(mock_verify):
    mock_verify.return_value = {"email": "traveler@gmail.com", "sub": "123"}
    claims = security.verify_google_id_token("token", client_id="client")
    assert claims["email"] == "traveler@gmail.com"
    assert mock_verify.call_args[0][2] == "client"
