from typing import Any

from fastapi import APIRouter

from agrocoop.core.config import settings

router = APIRouter()


@router.get("", response_model=dict[str, Any])
def health_check() -> Any:
    """
    Health check endpoint.
    """
    return {"status": "ok", "version": settings.VERSION}
