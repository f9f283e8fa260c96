"""In-process store for password-reset one-time codes."""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from threading import Lock
from typing import Callable, Optional

from cachetools import TTLCache

from goalplanner.core.config import settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Entries outlive their code by this long so a late redemption reads "expired", not "missing".
EXPIRED_GRACE = timedelta(minutes=5)


class OtpCheck(str, Enum):
    OK = "ok"
    MISSING = "missing"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class OtpEntry:
    code: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


class OtpStore:
    """Email-keyed one-time codes with a fixed time-to-live.

    Issuing a code for an email replaces any outstanding one. The backing
    ``TTLCache`` is bounded and drops entries on its own once the code's TTL
    plus a short grace period has passed.
    """

    def __init__(
        self,
        ttl: timedelta,
        clock: Clock = _utcnow,
        code_factory: Callable[[], str] = generate_code,
        maxsize: int = 10_000,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._code_factory = code_factory
        self._entries: TTLCache[str, OtpEntry] = TTLCache(
            maxsize=maxsize,
            ttl=(ttl + EXPIRED_GRACE).total_seconds(),
            timer=lambda: clock().timestamp(),
        )
        self._lock = Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, email: str) -> str:
        code = self._code_factory()
        with self._lock:
            self._entries[email] = OtpEntry(code=code, expires_at=self._clock() + self._ttl)
        return code

    def peek(self, email: str) -> Optional[OtpEntry]:
        with self._lock:
            return self._entries.get(email)

    def discard(self, email: str) -> None:
        with self._lock:
            self._entries.pop(email, None)

    def verify(self, email: str, code: str) -> OtpCheck:
        """Check a code without consuming it; an expired entry is dropped."""
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                return OtpCheck.MISSING
            if entry.expires_at < self._clock():
                del self._entries[email]
                return OtpCheck.EXPIRED
            if not secrets.compare_digest(entry.code, code):
                return OtpCheck.MISMATCH
            return OtpCheck.OK

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)


@lru_cache
def get_otp_store() -> OtpStore:
    return OtpStore(ttl=timedelta(minutes=settings.otp_ttl_minutes), maxsize=settings.otp_cache_size)
