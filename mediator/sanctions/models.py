"""Data models for the sanction (mute/ban) system."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

MINUTE_MS = 60 * 1000
DAY_MS = 24 * 60 * MINUTE_MS


class SanctionStatus(str, Enum):
    """Effect of a sanction: ``mute`` blocks sending, ``ban`` also blocks connecting."""

    none = "none"
    mute = "mute"
    ban = "ban"


class SanctionClass(str, Enum):
    """Sanction classes an admin can apply, each with a fixed status and duration."""

    MUTE_15M = "15m"
    BAN_3D = "3d"
    FOREVER = "forever"

    @property
    def status(self) -> SanctionStatus:
        if self is SanctionClass.MUTE_15M:
            return SanctionStatus.mute
        return SanctionStatus.ban

    @property
    def duration_ms(self) -> Optional[int]:
        """Length of the sanction in milliseconds, ``None`` for permanent."""
        return {
            SanctionClass.MUTE_15M: 15 * MINUTE_MS,
            SanctionClass.BAN_3D: 3 * DAY_MS,
            SanctionClass.FOREVER: None,
        }[self]


@dataclass
class SanctionEvent:
    """One entry of an IP's sanction history."""

    at: int  # epoch ms when applied
    type: SanctionClass
    until: Optional[int] = None  # expiry computed at application time


@dataclass
class Sanction:
    """Current moderation state for one IP address."""

    ip: str
    status: SanctionStatus = SanctionStatus.none
    ban_type: Optional[SanctionClass] = None
    expires_at: Optional[int] = None  # absolute epoch ms, None = never
    history: list[SanctionEvent] = field(default_factory=list)

    def is_active(self, now: int) -> bool:
        """``forever`` is always active; everything else until its expiry."""
        if self.ban_type is SanctionClass.FOREVER:
            return True
        return self.expires_at is not None and now < self.expires_at
