from __future__ import annotations

import logging
import uuid
from contextlib import nullcontext
from datetime import datetime
from typing import Callable, ContextManager, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import AccessOutcome, ScanAction, ScanIntent, ScanStatus
from ..core.exceptions import StorageError
from ..members.model import Member
from ..members.repository import MemberRepository
from ..subscriptions.repository import SubscriptionRepository
from .model import AccessDecision, ActiveSession, ScanLogEntry
from .policy import GRANTED_OUTCOMES, decide, message_for
from .repository import ActiveSessionRepository, ScanLogRepository

logger = logging.getLogger(__name__)


class AccessService:
    """Use case: decide entry for a scanned member id and record the outcome.

    Stateless: every call re-reads member, subscription and session from the
    store. Expected denials (unknown id, expired plan, conflicts) come back as
    ``AccessDecision`` values. A ``StorageError`` is logged and turned into an
    ``error`` decision so the kiosk always has something to show.

    Unknown ids never write a scan log row, whichever entry point is used.
    """

    def __init__(
        self,
        members: MemberRepository,
        subscriptions: SubscriptionRepository,
        sessions: ActiveSessionRepository,
        scan_logs: ScanLogRepository,
        *,
        transaction: Optional[Callable[[], ContextManager]] = None,
    ):
        self._members = members
        self._subscriptions = subscriptions
        self._sessions = sessions
        self._scan_logs = scan_logs
        self._transaction = transaction or nullcontext

    def process_scan(self, member_id: str, *, now: Optional[datetime] = None) -> AccessDecision:
        """Kiosk entry point: check in or out depending on the current session."""
        return self._process(member_id, ScanIntent.AUTO, now)

    def process_check_in(self, member_id: str, *, now: Optional[datetime] = None) -> AccessDecision:
        return self._process(member_id, ScanIntent.CHECK_IN, now)

    def process_check_out(self, member_id: str, *, now: Optional[datetime] = None) -> AccessDecision:
        return self._process(member_id, ScanIntent.CHECK_OUT, now)

    def get_active_session(self, member_id: str) -> Optional[ActiveSession]:
        """``None`` always means not checked in; storage failures propagate."""
        return self._sessions.get(member_id)

    def list_active_sessions(self) -> Sequence[ActiveSession]:
        try:
            return self._sessions.list_all()
        except StorageError:
            logger.exception("Could not load active sessions")
            return []

    def _process(self, member_id: str, intent: ScanIntent, now: Optional[datetime]) -> AccessDecision:
        now = now or now_local()
        member_id = (member_id or "").strip()
        try:
            decision = self._attempt(member_id, intent, now)
        except StorageError:
            logger.exception("Storage failure during %s for %r", intent.value, member_id)
            return AccessDecision(
                granted=False,
                outcome=AccessOutcome.ERROR,
                message=message_for(AccessOutcome.ERROR),
                member_id=member_id or None,
            )

        logger.info("%s %r -> %s", intent.value, member_id, decision.outcome.value)
        return decision

    def _attempt(self, member_id: str, intent: ScanIntent, now: datetime) -> AccessDecision:
        member = self._members.get_by_id(member_id) if member_id else None
        if member is None:
            return AccessDecision(
                granted=False,
                outcome=AccessOutcome.INVALID,
                message=message_for(AccessOutcome.INVALID),
                member_id=member_id or None,
            )

        subscription = None if intent == ScanIntent.CHECK_OUT else self._subscriptions.get_current(member_id)
        session = self._sessions.get(member_id)
        outcome = decide(member=member, subscription=subscription, session=session, intent=intent, now=now)

        entry = None
        with self._transaction():
            if outcome == AccessOutcome.CHECKED_IN:
                created = self._sessions.create(
                    ActiveSession(member_id=member.member_id, member_name=member.name, check_in_time=now)
                )
                if created:
                    entry = self._log(member, now, ScanAction.CHECK_IN, ScanStatus.SUCCESS)
                else:
                    # Another scan for the same member got there first.
                    outcome = AccessOutcome.ALREADY_CHECKED_IN
            elif outcome == AccessOutcome.CHECKED_OUT:
                if self._sessions.delete(member_id) is not None:
                    entry = self._log(member, now, ScanAction.CHECK_OUT, ScanStatus.SUCCESS)
                else:
                    outcome = AccessOutcome.NOT_CHECKED_IN
            elif outcome == AccessOutcome.EXPIRED:
                entry = self._log(member, now, ScanAction.NOT_APPLICABLE, ScanStatus.EXPIRED)

        return AccessDecision(
            granted=outcome in GRANTED_OUTCOMES,
            outcome=outcome,
            message=message_for(outcome, member.name),
            member_id=member.member_id,
            log_entry=entry,
        )

    def _log(self, member: Member, now: datetime, action: ScanAction, status: ScanStatus) -> Optional[ScanLogEntry]:
        """Append the audit row. A failed append never undoes the session change already made."""
        entry = ScanLogEntry(
            entry_id=uuid.uuid4().hex,
            member_id=member.member_id,
            member_name=member.name,
            timestamp=now,
            action=action,
            status=status,
        )
        try:
            self._scan_logs.append(entry)
        except StorageError:
            logger.exception("Could not log %s/%s for %s", action.value, status.value, member.member_id)
            return None
        return entry
