"""
Report Endpoints Module

Downloadable company reports. ``kind`` is one of ``projects``, ``resources``,
``members`` or ``outputs``; ``format`` selects CSV (default) or PDF.
"""
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from agrocoop.api import deps
from agrocoop.db.session import get_db
from agrocoop.models.user import User
from agrocoop.schemas.result import ActionResult
from agrocoop.services import reports
from agrocoop.services.policy import PolicyAction, is_allowed

router = APIRouter()

MEDIA_TYPES = {"csv": "text/csv", "pdf": "application/pdf"}


@router.get("/{kind}")
def download_report(
    kind: str,
    format: Literal["csv", "pdf"] = "csv",
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    if not is_allowed(current_user, PolicyAction.EXPORT_REPORTS):
        return deps.as_response(ActionResult.fail("You do not have permission to export reports."))

    report = reports.build_report(db, current_user, kind)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Unknown report: {kind}")

    return Response(
        content=reports.render_report(report, format),
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{reports.report_filename(report, format)}"'},
    )
