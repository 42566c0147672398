"""
Shared FastAPI dependencies.
"""
from typing import Optional

from fastapi import Header

from db import SessionLocal
from domain.errors import Unauthorized
from domain.models import User
from repositories import UsersRepository
from services.security import verify_token

users_repo = UsersRepository()


def get_current_user(authorization: Optional[str] = Header(None)) -> User:
    """Resolve the bearer token to a user; invalid signatures surface as jwt errors (401)."""
    if not authorization:
        raise Unauthorized("Token not provided")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise Unauthorized("Invalid token format")

    payload = verify_token(parts[1])
    user_id = payload.get("id")
    if user_id is None:
        raise Unauthorized("User not found")
    with SessionLocal() as session:
        user = users_repo.get_user(session, user_id)
    if not user:
        raise Unauthorized("User not found")
    return user
