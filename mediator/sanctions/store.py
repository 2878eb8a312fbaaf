"""In-memory sanction store keyed by IP address.

Holds the authoritative mute/ban state for every sanctioned IP. Sanctions do
not stack: each application replaces the current status, class and expiry
outright and appends to the IP's history. Every mutation calls the
``on_change`` hook so the persistence layer can schedule a snapshot write.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Callable, Optional

from mediator.sanctions.models import Sanction, SanctionClass, SanctionEvent, SanctionStatus

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SanctionStore:
    """Thread-safe mute/ban records with absolute wall-clock expiry."""

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._clock = clock or _now_ms
        self._on_change = on_change
        self._lock = threading.RLock()
        self._records: dict[str, Sanction] = {}

    def set_on_change(self, hook: Optional[Callable[[], None]]) -> None:
        self._on_change = hook

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    @staticmethod
    def _sanction_to_dict(s: Sanction) -> dict:
        return {
            "ip": s.ip,
            "status": s.status.value,
            "banType": s.ban_type.value if s.ban_type else None,
            "expiresAt": s.expires_at,
            "history": [
                {"at": e.at, "type": e.type.value, "until": e.until}
                for e in s.history
            ],
        }

    @staticmethod
    def _timestamp(value, optional: bool = True) -> Optional[int]:
        """Validate an epoch-ms value read from disk."""
        if value is None and optional:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"invalid timestamp: {value!r}")
        return int(value)

    @staticmethod
    def _sanction_from_dict(d: dict) -> Sanction:
        status_val = d.get("status", "none")
        try:
            status = SanctionStatus(status_val)
        except ValueError:
            status = SanctionStatus.none
        ban_type = d.get("banType")
        history = []
        for e in d.get("history") or []:
            try:
                history.append(
                    SanctionEvent(
                        at=SanctionStore._timestamp(e["at"], optional=False),
                        type=SanctionClass(e["type"]),
                        until=SanctionStore._timestamp(e.get("until")),
                    )
                )
            except (KeyError, TypeError, ValueError):
                continue
        return Sanction(
            ip=d["ip"],
            status=status,
            ban_type=SanctionClass(ban_type) if ban_type else None,
            expires_at=SanctionStore._timestamp(d.get("expiresAt")),
            history=history,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply_sanction(self, ip: str, sanction_class: SanctionClass | str) -> Sanction:
        """Apply *sanction_class* to *ip*, replacing any current sanction.

        Raises ``ValueError`` for an unknown class.
        """
        sanction_class = SanctionClass(sanction_class)
        now = self._clock()
        duration = sanction_class.duration_ms
        expires_at = None if duration is None else now + duration

        with self._lock:
            record = self._records.get(ip) or Sanction(ip=ip)
            record.status = sanction_class.status
            record.ban_type = sanction_class
            record.expires_at = expires_at
            record.history.append(SanctionEvent(at=now, type=sanction_class, until=expires_at))
            self._records[ip] = record
            result = copy.deepcopy(record)

        logger.info("Applied %s sanction (%s) to %s", sanction_class.value, result.status.value, ip)
        self._changed()
        return result

    def clear_sanction(self, ip: str) -> bool:
        """Delete the record for *ip*, history included. Returns True if one existed."""
        with self._lock:
            removed = self._records.pop(ip, None)
        logger.info("Cleared sanction for %s", ip)
        self._changed()
        return removed is not None

    def purge_expired(self) -> int:
        """Drop records whose sanction is no longer active. Returns the count."""
        now = self._clock()
        with self._lock:
            expired = [ip for ip, s in self._records.items() if not s.is_active(now)]
            for ip in expired:
                del self._records[ip]
        if expired:
            logger.info("Purged %d expired sanction record(s)", len(expired))
            self._changed()
        return len(expired)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_sanction(self, ip: str) -> Optional[Sanction]:
        with self._lock:
            record = self._records.get(ip)
            return copy.deepcopy(record) if record else None

    def is_active(self, ip: str) -> bool:
        """True if *ip* has a sanction in force right now."""
        with self._lock:
            record = self._records.get(ip)
            return record is not None and record.is_active(self._clock())

    def can_send(self, ip: str) -> bool:
        """Any active mute or ban blocks sending."""
        with self._lock:
            record = self._records.get(ip)
            if record is None or not record.is_active(self._clock()):
                return True
            return record.status not in (SanctionStatus.mute, SanctionStatus.ban)

    def is_banned(self, ip: str) -> bool:
        """True if *ip* holds an active ban (mutes do not count)."""
        with self._lock:
            record = self._records.get(ip)
            return (
                record is not None
                and record.status is SanctionStatus.ban
                and record.is_active(self._clock())
            )

    def status_for(self, ip: str) -> Optional[Sanction]:
        """Return the record for *ip* only while it is active."""
        with self._lock:
            record = self._records.get(ip)
            if record is None or not record.is_active(self._clock()):
                return None
            return copy.deepcopy(record)

    def list_sanctions(self) -> list[Sanction]:
        """Every stored record, expired or not, in insertion order."""
        with self._lock:
            return [copy.deepcopy(s) for s in self._records.values()]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_records(self) -> list[dict]:
        with self._lock:
            return [self._sanction_to_dict(s) for s in self._records.values()]

    def load_records(self, records: list) -> None:
        """Replace all state from serialized records, skipping malformed ones."""
        loaded: dict[str, Sanction] = {}
        for d in records:
            if not isinstance(d, dict) or not d.get("ip"):
                continue
            try:
                loaded[d["ip"]] = self._sanction_from_dict(d)
            except (TypeError, ValueError):
                logger.warning("Skipping malformed sanction record for %s", d.get("ip"))
        with self._lock:
            self._records = loaded

    @staticmethod
    def to_dict(sanction: Sanction) -> dict:
        """Wire form of a single record (camelCase keys, epoch-ms times)."""
        return SanctionStore._sanction_to_dict(sanction)
