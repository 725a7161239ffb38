"""
API Dependencies Module

This module provides FastAPI dependency functions for authentication and authorization.
It implements a dual authentication strategy supporting both bearer tokens (for API clients)
and HTTP-only cookies (for browser clients).

The authenticated ``User`` returned here is the only source of actor identity:
ids and company ids are never taken from request bodies.
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from agrocoop.core.config import settings
from agrocoop.core.security import decode_access_token
from agrocoop.db.session import get_db
from agrocoop.models.user import User
from agrocoop.schemas.result import ActionResult
from agrocoop.services.storage import BlobStore, get_blob_store

reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False  # Don't raise error immediately if Authorization header is missing
)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(reusable_oauth2)
) -> User:
    """
    Dependency that retrieves and validates the current authenticated user.

    The bearer token in the Authorization header is checked first, then the
    ``access_token`` cookie set at login.

    Raises:
        HTTPException 401: If no token is provided or it names an unknown user
        HTTPException 403: If the token is invalid or expired
    """
    if not token:
        token = request.cookies.get("access_token")
        # Cookie format is "Bearer <token>"
        if token and token.startswith("Bearer "):
            token = token[len("Bearer "):]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    email = decode_access_token(token)
    if not email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    user = db.exec(select(User).where(User.email == email)).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Dependency that requires any authenticated user.

    Every user must belong to a company; an account without one cannot act.
    """
    if not current_user.company_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="The user is not attached to a company",
        )
    return current_user


def get_storage() -> BlobStore:
    return get_blob_store()


def as_response(result: ActionResult) -> JSONResponse:
    """Send an action result with 200 on success and 400 on any handled failure."""
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST,
        content=result.model_dump(mode="json", exclude_none=True),
    )
