"""
Authentication API routes.
"""
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from db import SessionLocal
from services.auth import AuthService

router = APIRouter()
auth_service = AuthService()


class Credentials(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleToken(BaseModel):
    id_token: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    email: str


class TokenResponse(BaseModel):
    access_token: str
    user: UserResponse
    message: Optional[str] = None
    isNewUser: Optional[bool] = None


@router.post("/register", response_model=TokenResponse, response_model_exclude_none=True, status_code=201)
def register(payload: Credentials):
    with SessionLocal() as session:
        return auth_service.register(session, payload.email, payload.password)


@router.post("/login", response_model=TokenResponse, response_model_exclude_none=True)
def login(payload: Credentials):
    with SessionLocal() as session:
        return auth_service.login(session, payload.email, payload.password)


@router.post("/google-register", response_model=TokenResponse, response_model_exclude_none=True, status_code=201)
def google_register(payload: GoogleToken):
    with SessionLocal() as session:
        return auth_service.google_register(session, payload.id_token)


@router.post("/google-login", response_model=TokenResponse, response_model_exclude_none=True)
def google_login(payload: GoogleToken):
    with SessionLocal() as session:
        return auth_service.google_login(session, payload.id_token)


@router.post("/google-sign-in", response_model=TokenResponse, response_model_exclude_none=True)
def google_sign_in(payload: GoogleToken):
    """Sign in with Google, creating the account on first use."""
    with SessionLocal() as session:
        return auth_service.google_sign_in(session, payload.id_token)
