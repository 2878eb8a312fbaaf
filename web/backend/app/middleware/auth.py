"""Admin auth -- FastAPI dependency checking the ``x-admin-key`` header."""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from web.backend.app.services import get_services


async def require_admin(
    x_admin_key: Optional[str] = Header(None, alias="x-admin-key"),
) -> None:
    """Raise ``401 Unauthorized`` unless the header matches the configured key."""
    expected = get_services().settings.admin_key
    if not x_admin_key or not hmac.compare_digest(x_admin_key.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
