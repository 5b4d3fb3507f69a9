from __future__ import annotations

import threading
import time
from typing import Any

from washbook.application.ports.draft_store import DraftStorePort
from washbook.domain.entities.booking_draft import BookingDraft
from washbook.domain.entities.wizard_step import WizardStep


class MemoryDraftStore(DraftStorePort):
    """
    Per-session drafts held in process memory.

    A reset session is dropped rather than stored as an empty draft, since
    reads of an unknown session already return the defaults. Sessions left
    untouched for `session_ttl_seconds` are evicted on the next write.
    """

    def __init__(self, session_ttl_seconds: float = 24 * 60 * 60) -> None:
        self._session_ttl_seconds = session_ttl_seconds
        self._drafts: dict[str, BookingDraft] = {}
        self._steps: dict[str, int] = {}
        self._touched: dict[str, float] = {}
        self._lock = threading.Lock()

    def read(self, session_id: str) -> BookingDraft:
        with self._lock:
            return self._drafts.get(session_id, BookingDraft())

    def update(self, session_id: str, **partial: Any) -> BookingDraft:
        with self._lock:
            self._evict_idle()
            updated = self._drafts.get(session_id, BookingDraft()).merged(**partial)
            self._drafts[session_id] = updated
            self._touched[session_id] = time.monotonic()
            return updated

    def reset(self, session_id: str) -> None:
        with self._lock:
            self._forget(session_id)

    def get_step(self, session_id: str) -> int:
        with self._lock:
            return self._steps.get(session_id, int(WizardStep.DATETIME))

    def set_step(self, session_id: str, step: int) -> None:
        with self._lock:
            self._evict_idle()
            self._steps[session_id] = int(step)
            self._touched[session_id] = time.monotonic()

    def session_count(self) -> int:
        with self._lock:
            return len(self._touched)

    def _evict_idle(self) -> None:
        now = time.monotonic()
        expired = [sid for sid, at in self._touched.items() if now - at >= self._session_ttl_seconds]
        for session_id in expired:
            self._forget(session_id)

    def _forget(self, session_id: str) -> None:
        self._drafts.pop(session_id, None)
        self._steps.pop(session_id, None)
        self._touched.pop(session_id, None)
