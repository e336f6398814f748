from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ...access.model import ScanLogEntry
from ...core.enums import ScanAction, ScanStatus
from .base import PresenceCalculator


class PairedPresenceCalculator(PresenceCalculator):
    """Pair each check-out with the latest preceding check-in.

    A second check-in before any check-out replaces the pending one, a
    check-out without a pending check-in counts nothing, and a trailing
    check-in (still inside, or a missed check-out) counts nothing.
    """

    def elapsed(self, entries: Sequence[ScanLogEntry]) -> timedelta:
        total = timedelta(0)
        pending: Optional[datetime] = None

        for e in sorted(entries, key=lambda e: e.timestamp):
            if e.status != ScanStatus.SUCCESS:
                continue
            if e.action == ScanAction.CHECK_IN:
                pending = e.timestamp
            elif e.action == ScanAction.CHECK_OUT:
                if pending is not None:
                    total += e.timestamp - pending
                pending = None

        return total
