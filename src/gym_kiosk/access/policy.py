"""Access decision rules.

``decide`` is a pure function of freshly read snapshots; it never touches
storage. ``AccessService`` reads the snapshots, calls it, then applies the
side effects for the returned outcome.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import AccessOutcome, ScanIntent
from ..members.model import Member
from ..subscriptions import evaluator
from ..subscriptions.model import Subscription
from .model import ActiveSession

GRANTED_OUTCOMES = frozenset({AccessOutcome.CHECKED_IN, AccessOutcome.CHECKED_OUT})

USER_NOT_FOUND = "User not found"
SYSTEM_ERROR = "System error - please try again"


def decide(
    *,
    member: Optional[Member],
    subscription: Optional[Subscription],
    session: Optional[ActiveSession],
    intent: ScanIntent,
    now: datetime,
) -> AccessOutcome:
    if member is None:
        return AccessOutcome.INVALID

    # Leaving never depends on the plan: a member whose plan lapsed inside can still go.
    if intent == ScanIntent.CHECK_OUT:
        return AccessOutcome.CHECKED_OUT if session else AccessOutcome.NOT_CHECKED_IN

    if not evaluator.is_active(subscription, now=now):
        return AccessOutcome.EXPIRED

    if session is not None:
        return AccessOutcome.CHECKED_OUT if intent == ScanIntent.AUTO else AccessOutcome.ALREADY_CHECKED_IN
    return AccessOutcome.CHECKED_IN


def message_for(outcome: AccessOutcome, member_name: Optional[str] = None) -> str:
    return {
        AccessOutcome.CHECKED_IN: f"Welcome, {member_name}!",
        AccessOutcome.CHECKED_OUT: f"See you soon, {member_name}!",
        AccessOutcome.EXPIRED: f"Subscription expired for {member_name}",
        AccessOutcome.INVALID: USER_NOT_FOUND,
        AccessOutcome.ALREADY_CHECKED_IN: "User is already checked in",
        AccessOutcome.NOT_CHECKED_IN: "User is not checked in",
        AccessOutcome.ERROR: SYSTEM_ERROR,
    }[outcome]
