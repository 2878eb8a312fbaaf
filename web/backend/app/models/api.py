"""Pydantic models for API request/response serialization.

Field names are snake_case; aliases carry the camelCase wire names the chat
client and admin panel use.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OkResponse(BaseModel):
    ok: bool = True


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class ReportCreatedResponse(BaseModel):
    ok: bool = True
    id: str


class ReportListResponse(BaseModel):
    reports: list[dict[str, Any]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Sanctions
# ---------------------------------------------------------------------------


class SanctionEventResponse(BaseModel):
    """Mirrors mediator.sanctions.models.SanctionEvent."""

    at: int
    type: str
    until: Optional[int] = None


class SanctionResponse(_WireModel):
    """Mirrors mediator.sanctions.models.Sanction."""

    ip: str
    status: str
    ban_type: Optional[str] = Field(None, alias="banType")
    expires_at: Optional[int] = Field(None, alias="expiresAt")
    history: list[SanctionEventResponse] = Field(default_factory=list)


class SanctionAppliedResponse(BaseModel):
    ok: bool = True
    sanction: SanctionResponse


class BannedListResponse(BaseModel):
    banned: list[SanctionResponse] = Field(default_factory=list)


class SanctionStatusResponse(_WireModel):
    """Public self-status; only ``active`` is present when no sanction applies."""

    active: bool
    status: Optional[str] = None
    ban_type: Optional[str] = Field(None, alias="banType")
    expires_at: Optional[int] = Field(None, alias="expiresAt")
