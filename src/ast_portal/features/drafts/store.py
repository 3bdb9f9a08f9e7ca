"""In-process holding area for run drafts awaiting confirmation.

A draft lives under an opaque key that the browser carries in a cookie.
Drafts expire after a fixed TTL and are removed on read once expired.
``take`` hands a draft out exactly once, so two confirmation clicks cannot
both submit the same run.
"""

from __future__ import annotations

import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from ast_portal.common.logging import log_context
from ast_portal.common.time import utc_now

from .schemas import RunDraft

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredDraft:
    draft: RunDraft
    expires_at: datetime


class DraftStore:
    """Thread-safe map of draft key to :class:`RunDraft` with expiry."""

    def __init__(
        self,
        *,
        ttl: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Draft TTL must be positive")
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, StoredDraft] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def put(self, draft: RunDraft, *, key: str | None = None) -> tuple[str, StoredDraft]:
        """Store ``draft`` and return its key; an existing key is replaced."""

        key = key or secrets.token_urlsafe(32)
        entry = StoredDraft(draft=draft, expires_at=self._clock() + self._ttl)
        with self._lock:
            self._purge_expired()
            self._entries[key] = entry
        logger.debug(
            "draft.store.put",
            extra=log_context(run_id=draft.id, expires_at=entry.expires_at.isoformat()),
        )
        return key, entry

    def peek(self, key: str | None) -> StoredDraft | None:
        if not key:
            return None
        with self._lock:
            return self._live_entry(key)

    def take(self, key: str | None) -> StoredDraft | None:
        """Remove and return the draft; later calls for the same key get ``None``."""

        if not key:
            return None
        with self._lock:
            entry = self._live_entry(key)
            if entry is not None:
                del self._entries[key]
        return entry

    def discard(self, key: str | None) -> bool:
        if not key:
            return False
        with self._lock:
            return self._entries.pop(key, None) is not None

    def _live_entry(self, key: str) -> StoredDraft | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            logger.info("draft.store.expired", extra=log_context(run_id=entry.draft.id))
            return None
        return entry

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]


__all__ = ["DraftStore", "StoredDraft"]
