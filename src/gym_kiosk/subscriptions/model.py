from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import SubscriptionStatus


@dataclass(frozen=True)
class Subscription:
    """Domain entity: the current time-bounded access grant of one member."""

    member_id: str
    start_at: datetime
    end_at: datetime
    status: SubscriptionStatus
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat(),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class SubscriptionHistoryRecord:
    """Immutable archival copy of a superseded subscription."""

    history_id: str
    member_id: str
    start_at: datetime
    end_at: datetime
    status: SubscriptionStatus
    created_at: datetime
    archived_at: datetime

    @classmethod
    def archive(cls, subscription: Subscription, *, history_id: str, archived_at: datetime) -> "SubscriptionHistoryRecord":
        return cls(
            history_id=history_id,
            member_id=subscription.member_id,
            start_at=subscription.start_at,
            end_at=subscription.end_at,
            status=subscription.status,
            created_at=subscription.created_at,
            archived_at=archived_at,
        )

    def to_dict(self) -> dict:
        return {
            "history_id": self.history_id,
            "member_id": self.member_id,
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat(),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "archived_at": self.archived_at.isoformat(),
        }
