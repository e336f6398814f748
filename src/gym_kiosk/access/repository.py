from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ActiveSession, ScanLogEntry


class ScanLogRepository(Protocol):
    """Append-only scan audit log. Listings are newest first."""

    def append(self, entry: ScanLogEntry) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[ScanLogEntry]:
        raise NotImplementedError

    def list_today(self, today: date) -> Sequence[ScanLogEntry]:
        raise NotImplementedError

    def list_by_member(self, member_id: str) -> Sequence[ScanLogEntry]:
        raise NotImplementedError


class ActiveSessionRepository(Protocol):
    def get(self, member_id: str) -> Optional[ActiveSession]:
        raise NotImplementedError

    def list_all(self) -> Sequence[ActiveSession]:
        """Most recent check-in first."""

        raise NotImplementedError

    def create(self, session: ActiveSession) -> bool:
        """Insert if absent. Returns False when the member already has a session."""

        raise NotImplementedError

    def delete(self, member_id: str) -> Optional[ActiveSession]:
        """Remove and return the member's session, or None if there was none."""

        raise NotImplementedError
