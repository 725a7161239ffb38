"""
Authentication Endpoints Module

This module provides authentication endpoints for company sign-up, login, and logout.
The system supports both JWT bearer token authentication and HTTP-only cookie-based
authentication for browser clients.
"""
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session

from agrocoop.api.deps import as_response
from agrocoop.core.config import settings
from agrocoop.core.security import create_access_token
from agrocoop.db.session import get_db
from agrocoop.schemas.auth import Token
from agrocoop.services import accounts

router = APIRouter()


@router.post("/register")
def register(payload: dict, db: Session = Depends(get_db)):
    """
    Sign up a new company.

    Creates the company and its first user with the Admin role. Further
    members are added by that admin through ``POST /users``.

    Returns:
        ActionResult with ``company_id`` on success, 400 with the error otherwise
    """
    return as_response(accounts.sign_up(db, payload))


@router.post("/login", response_model=Token)
def login(response: Response, db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()):
    """
    Authenticate a user and issue an access token.

    The token is returned in the body and also set as an HTTP-only cookie.
    OAuth2PasswordRequestForm uses the 'username' field, which we treat as email.

    Raises:
        HTTPException 401: If credentials are invalid
    """
    user = accounts.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        subject=user.email,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax"
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout")
def logout(response: Response):
    """Clear the authentication cookie. API clients simply discard their token."""
    response.delete_cookie("access_token")
    return {"success": True}
