"""
Password hashing, access tokens and Google ID token verification.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import jwt
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from werkzeug.security import check_password_hash, generate_password_hash

from domain.errors import BadRequest, ExternalAPIError, Unauthorized
from settings import settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100


def validate_password(password: str) -> None:
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise BadRequest(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters"
        )


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """False for accounts without a password (Google-only) and for malformed hashes."""
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        return False


def _secret(secret: Optional[str]) -> str:
    value = secret or settings.JWT_SECRET
    if not value:
        raise RuntimeError("JWT_SECRET is not configured")
    return value


def sign_token(payload: Dict[str, Any], secret: Optional[str] = None) -> str:
    """Sign an access token. No expiry claim is added."""
    return jwt.encode(payload, _secret(secret), algorithm=JWT_ALGORITHM)


def verify_token(token: str, secret: Optional[str] = None) -> Dict[str, Any]:
    """Decode a token; raises jwt.PyJWTError subclasses when invalid or expired."""
    return jwt.decode(token, _secret(secret), algorithms=[JWT_ALGORITHM])


def verify_google_id_token(token: Optional[str], client_id: Optional[str] = None) -> Dict[str, Any]:
    """Verify a Google Sign-In ID token and return its claims."""
    if not token:
        raise BadRequest("Google ID token is required")
    audience = client_id or settings.GOOGLE_CLIENT_ID
    try:
        claims = id_token.verify_oauth2_token(token, google_requests.Request(), audience)
    except ValueError as exc:
        logger.info("Google ID token rejected: %s", exc)
        raise Unauthorized("Invalid Google token") from exc
    except google_exceptions.GoogleAuthError as exc:
        logger.warning("Google token verification unavailable: %s", exc)
        raise ExternalAPIError("Could not verify Google token") from exc
    if not claims.get("email"):
        raise Unauthorized("Google account has no email address")
    return claims
