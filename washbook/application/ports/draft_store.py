from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from washbook.domain.entities.booking_draft import BookingDraft


class DraftStorePort(ABC):
    @abstractmethod
    def read(self, session_id: str) -> BookingDraft:
        """Current draft snapshot. Unknown sessions read as the default draft."""
        raise NotImplementedError

    @abstractmethod
    def update(self, session_id: str, **partial: Any) -> BookingDraft:
        """
        Shallow-merge `partial` into the session's draft and return the result.
        Last writer wins; no validation happens here.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, session_id: str) -> None:
        """Replace the draft with the defaults and move the step back to 1."""
        raise NotImplementedError

    @abstractmethod
    def get_step(self, session_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def set_step(self, session_id: str, step: int) -> None:
        raise NotImplementedError
