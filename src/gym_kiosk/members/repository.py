from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Member


class MemberRepository(Protocol):
    """Repository interface for Member.

    Note (DIP): services depend on this interface, not on a concrete database.
    Deleting a member cascades to its subscription, history, scan logs and
    active session.
    """

    def get_by_id(self, member_id: str) -> Optional[Member]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Member]:
        """Case-insensitive lookup; emails are unique across members."""
        raise NotImplementedError

    def list_all(self) -> Sequence[Member]:
        """Newest members first."""

        raise NotImplementedError

    def insert(self, member: Member) -> None:
        raise NotImplementedError

    def update(self, member_id: str, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, member_id: str) -> bool:
        raise NotImplementedError

    def next_sequence_number(self) -> int:
        """Atomically allocate the next member number."""

        raise NotImplementedError
