"""Reports router -- public report intake and admin review.

Paths: ``/api/report`` (public), ``/api/admin/reports`` (admin key required).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from mediator.utils.client_ip import client_ip
from web.backend.app.middleware.auth import require_admin
from web.backend.app.models.api import ReportCreatedResponse, ReportListResponse
from web.backend.app.services import get_services

router = APIRouter(prefix="/api", tags=["reports"])


@router.post("/report", response_model=ReportCreatedResponse)
async def create_report(request: Request, payload: Optional[dict[str, Any]] = Body(None)):
    """Store an abuse report stamped with id, time and the caller's IP."""
    ip = client_ip(request.headers, request.client.host if request.client else None)
    report = get_services().reports.create_report(ip, payload or {})
    return ReportCreatedResponse(id=report.id)


@router.get(
    "/admin/reports",
    response_model=ReportListResponse,
    dependencies=[Depends(require_admin)],
)
async def list_reports():
    return ReportListResponse(reports=get_services().reports.to_records())


@router.get("/admin/reports/{report_id}", dependencies=[Depends(require_admin)])
async def get_report(report_id: str):
    report = get_services().reports.get_report(report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return report.to_dict()
