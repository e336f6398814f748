from __future__ import annotations

from enum import Enum


class SubscriptionStatus(str, Enum):
    """Stored subscription status. Activity is still computed against the end date."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ScanAction(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    NOT_APPLICABLE = "not-applicable"


class ScanStatus(str, Enum):
    SUCCESS = "success"
    EXPIRED = "expired"
    INVALID = "invalid"


class ScanIntent(str, Enum):
    """What the caller asked for: a kiosk scan (auto-toggle) or an explicit action."""

    AUTO = "auto"
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"


class AccessOutcome(str, Enum):
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"
    EXPIRED = "expired"
    INVALID = "invalid"
    ALREADY_CHECKED_IN = "already-checked-in"
    NOT_CHECKED_IN = "not-checked-in"
    ERROR = "error"
