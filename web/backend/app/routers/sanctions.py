"""Sanctions router -- admin mute/ban management and public self-status.

Paths: ``/api/admin/{sanction,unban,banned}`` (admin key required) and
``/api/sanction/me`` (public).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from mediator.sanctions.models import Sanction, SanctionClass
from mediator.sanctions.store import SanctionStore
from mediator.utils.client_ip import client_ip
from web.backend.app.middleware.auth import require_admin
from web.backend.app.models.api import (
    BannedListResponse,
    OkResponse,
    SanctionAppliedResponse,
    SanctionResponse,
    SanctionStatusResponse,
)
from web.backend.app.services import get_services

router = APIRouter(prefix="/api", tags=["sanctions"])

_VALID_TYPES = ", ".join(c.value for c in SanctionClass)


def _sanction_response(s: Sanction) -> SanctionResponse:
    return SanctionResponse(**SanctionStore.to_dict(s))


def _text_field(payload: Any, key: str) -> str:
    """Stripped string value of *key*, or "" when the body or value is unusable."""
    value = payload.get(key) if isinstance(payload, dict) else None
    return value.strip() if isinstance(value, str) else ""


@router.post(
    "/admin/sanction",
    response_model=SanctionAppliedResponse,
    dependencies=[Depends(require_admin)],
)
async def apply_sanction(payload: Any = Body(None)):
    """Mute or ban an IP. The newest sanction replaces any current one."""
    ip = _text_field(payload, "ip")
    sanction_type = _text_field(payload, "type")
    if not ip or not sanction_type:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="ip and type required")
    try:
        sanction = get_services().sanctions.apply_sanction(ip, sanction_type)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"type must be one of: {_VALID_TYPES}",
        )
    return SanctionAppliedResponse(sanction=_sanction_response(sanction))


@router.post("/admin/unban", response_model=OkResponse, dependencies=[Depends(require_admin)])
async def unban(payload: Any = Body(None)):
    ip = _text_field(payload, "ip")
    if not ip:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="ip required")
    get_services().sanctions.clear_sanction(ip)
    return OkResponse()


@router.get("/admin/banned", response_model=BannedListResponse, dependencies=[Depends(require_admin)])
async def list_banned():
    """Every stored record, including expired ones not yet unbanned."""
    records = get_services().sanctions.list_sanctions()
    return BannedListResponse(banned=[_sanction_response(s) for s in records])


@router.get("/sanction/me", response_model=SanctionStatusResponse, response_model_exclude_unset=True)
async def my_sanction(request: Request):
    ip = client_ip(request.headers, request.client.host if request.client else None)
    s = get_services().sanctions.status_for(ip)
    if s is None:
        return SanctionStatusResponse(active=False)
    return SanctionStatusResponse(
        active=True,
        status=s.status.value,
        ban_type=s.ban_type.value if s.ban_type else None,
        expires_at=s.expires_at,
    )
