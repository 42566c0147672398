"""
Account registration and sign-in (email/password and Google).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from domain.errors import BadRequest, Unauthorized
from domain.models import User
from repositories import UsersRepository
from services import security

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _token_response(user: User, **extra: Any) -> Dict[str, Any]:
    data = {
        "access_token": security.sign_token({"id": user.id}),
        "user": user.to_public_dict(),
    }
    data.update(extra)
    return data


class AuthService:
    def __init__(self, users_repo: Optional[UsersRepository] = None):
        self.users_repo = users_repo or UsersRepository()

    def register(self, session: Session, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not email or not password:
            raise BadRequest("Email and password are required")
        security.validate_password(password)
        try:
            user = self.users_repo.create_user(session, email, security.hash_password(password))
        except IntegrityError:
            raise BadRequest("Email is already registered")
        logger.info("Registered user id=%s", user.id)
        return _token_response(user)

    def login(self, session: Session, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not email or not password:
            raise BadRequest("Email and password are required")
        user = self.users_repo.get_by_email(session, email)
        if not user or not security.verify_password(password, user.password_hash):
            raise Unauthorized(INVALID_CREDENTIALS)
        return _token_response(user)

    def google_register(self, session: Session, token: Optional[str]) -> Dict[str, Any]:
        email = security.verify_google_id_token(token)["email"]
        if self.users_repo.get_by_email(session, email):
            raise BadRequest("Email is already registered. Please login instead.")
        try:
            user = self.users_repo.create_user(session, email, None)
        except IntegrityError:
            raise BadRequest("Email is already registered. Please login instead.")
        return _token_response(user, message="Registration successful!")

    def google_login(self, session: Session, token: Optional[str]) -> Dict[str, Any]:
        email = security.verify_google_id_token(token)["email"]
        user = self.users_repo.get_by_email(session, email)
        if not user:
            raise Unauthorized("Account not found. Please register first.")
        return _token_response(user)

    def google_sign_in(self, session: Session, token: Optional[str]) -> Dict[str, Any]:
        """Find the account for the Google email, creating it when absent."""
        email = security.verify_google_id_token(token)["email"]
        user = self.users_repo.get_by_email(session, email)
        created = False
        if not user:
            try:
                user = self.users_repo.create_user(session, email, None)
                created = True
            except IntegrityError:
                # Another request created it between the lookup and the insert.
                user = self.users_repo.get_by_email(session, email)
                if not user:
                    raise
        return _token_response(user, isNewUser=created)
