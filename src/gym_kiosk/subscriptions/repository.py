from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Subscription, SubscriptionHistoryRecord


class SubscriptionRepository(Protocol):
    def get_current(self, member_id: str) -> Optional[Subscription]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Subscription]:
        raise NotImplementedError

    def upsert_current(self, subscription: Subscription, *, archived_at: datetime) -> Optional[SubscriptionHistoryRecord]:
        """Replace the member's current subscription.

        The prior current row (if any) is archived into subscription history
        first; the archived record is returned.
        """

        raise NotImplementedError


class SubscriptionHistoryRepository(Protocol):
    def list_by_member(self, member_id: str) -> Sequence[SubscriptionHistoryRecord]:
        """Most recently archived first."""

        raise NotImplementedError

    def append(self, record: SubscriptionHistoryRecord) -> None:
        raise NotImplementedError
