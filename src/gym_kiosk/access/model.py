from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import RESULT_DISPLAY_SECONDS
from ..core.enums import AccessOutcome, ScanAction, ScanStatus

_OUTCOME_RESULTS = {
    AccessOutcome.CHECKED_IN: (ScanAction.CHECK_IN, ScanStatus.SUCCESS),
    AccessOutcome.CHECKED_OUT: (ScanAction.CHECK_OUT, ScanStatus.SUCCESS),
    AccessOutcome.EXPIRED: (ScanAction.NOT_APPLICABLE, ScanStatus.EXPIRED),
}


@dataclass(frozen=True)
class ScanLogEntry:
    """Immutable audit record of one scan outcome.

    ``member_name`` is copied at write time and intentionally never updated:
    the log shows the name the member had when the scan happened.
    """

    entry_id: str
    member_id: str
    member_name: str
    timestamp: datetime
    action: ScanAction
    status: ScanStatus

    def __post_init__(self):
        if (self.action == ScanAction.NOT_APPLICABLE) == (self.status == ScanStatus.SUCCESS):
            raise ValueError(f"Scan action {self.action.value} cannot carry status {self.status.value}")

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "member_id": self.member_id,
            "member_name": self.member_name,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class ActiveSession:
    """A member currently inside the gym (one per member)."""

    member_id: str
    member_name: str
    check_in_time: datetime

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "member_name": self.member_name,
            "check_in_time": self.check_in_time.isoformat(),
        }


@dataclass(frozen=True)
class AccessDecision:
    """Result of one access attempt, shown full-screen on the kiosk."""

    granted: bool
    outcome: AccessOutcome
    message: str
    member_id: Optional[str] = None
    log_entry: Optional[ScanLogEntry] = None

    @property
    def action(self) -> Optional[ScanAction]:
        result = _OUTCOME_RESULTS.get(self.outcome)
        return result[0] if result else None

    @property
    def status(self) -> Optional[ScanStatus]:
        result = _OUTCOME_RESULTS.get(self.outcome)
        return result[1] if result else None

    def to_dict(self) -> dict:
        return {
            "granted": self.granted,
            "outcome": self.outcome.value,
            "message": self.message,
            "member_id": self.member_id,
            "action": self.action.value if self.action else None,
            "status": self.status.value if self.status else None,
            "log": self.log_entry.to_dict() if self.log_entry else None,
            "display_seconds": RESULT_DISPLAY_SECONDS,
        }
