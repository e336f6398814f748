from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_EXPIRING_THRESHOLD_DAYS, DEFAULT_PLAN_MONTHS
from ..core.exceptions import NotFoundError, StorageError
from ..members.repository import MemberRepository
from . import evaluator
from .model import Subscription, SubscriptionHistoryRecord
from .repository import SubscriptionHistoryRepository, SubscriptionRepository

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Use case: sell, renew and inspect member subscriptions."""

    def __init__(
        self,
        subscriptions: SubscriptionRepository,
        history: SubscriptionHistoryRepository,
        members: MemberRepository,
        *,
        expiring_threshold_days: int = DEFAULT_EXPIRING_THRESHOLD_DAYS,
    ):
        self._subscriptions = subscriptions
        self._history = history
        self._members = members
        self._expiring_threshold_days = int(expiring_threshold_days)

    def _require_member(self, member_id: str) -> None:
        if not self._members.get_by_id(member_id):
            raise NotFoundError(f"Member {member_id} not found")

    def get_current(self, member_id: str) -> Optional[Subscription]:
        return self._subscriptions.get_current(member_id)

    def current_by_member(self) -> dict[str, Subscription]:
        return {s.member_id: s for s in self._subscriptions.list_all()}

    def history(self, member_id: str) -> Sequence[SubscriptionHistoryRecord]:
        self._require_member(member_id)
        return self._history.list_by_member(member_id)

    def assign(self, subscription: Subscription, *, now: Optional[datetime] = None) -> Subscription:
        """Make ``subscription`` the member's current one, archiving the previous."""
        now = now or now_local()
        archived = self._subscriptions.upsert_current(subscription, archived_at=now)
        if archived:
            logger.info(
                "Archived subscription %s for %s (ended %s)",
                archived.history_id,
                archived.member_id,
                archived.end_at.isoformat(),
            )
        logger.info(
            "Subscription for %s now runs %s -> %s",
            subscription.member_id,
            subscription.start_at.isoformat(),
            subscription.end_at.isoformat(),
        )
        return subscription

    def renew(
        self,
        member_id: str,
        duration_months: int = DEFAULT_PLAN_MONTHS,
        *,
        start: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Subscription:
        now = now or now_local()
        self._require_member(member_id)
        months = evaluator.require_plan_months(duration_months)
        subscription = evaluator.create_subscription(member_id, months, start=start, now=now)
        return self.assign(subscription, now=now)

    def renew_daily(self, member_id: str, *, now: Optional[datetime] = None) -> Subscription:
        now = now or now_local()
        self._require_member(member_id)
        return self.assign(evaluator.create_daily_pass(member_id, now=now), now=now)

    def renew_walk_in(
        self,
        member_id: str,
        *,
        start_date: date,
        end_date: date,
        now: Optional[datetime] = None,
    ) -> Subscription:
        now = now or now_local()
        self._require_member(member_id)
        subscription = evaluator.create_walk_in(member_id, start_date=start_date, end_date=end_date, now=now)
        return self.assign(subscription, now=now)

    def expiring_member_ids(self, threshold_days: Optional[int] = None, *, now: Optional[datetime] = None) -> list[str]:
        now = now or now_local()
        threshold = self._expiring_threshold_days if threshold_days is None else int(threshold_days)
        try:
            subscriptions = self._subscriptions.list_all()
        except StorageError:
            logger.exception("Could not load subscriptions for the expiring list")
            return []
        return [s.member_id for s in subscriptions if evaluator.is_expiring_soon(s, threshold, now=now)]
