from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..access.model import ScanLogEntry
from ..access.repository import ActiveSessionRepository, ScanLogRepository
from ..common.datetime_utils import add_months, now_local
from ..core.constants import TREND_MONTHS
from ..core.enums import ScanAction, ScanStatus
from ..core.exceptions import StorageError
from ..members.repository import MemberRepository
from .calculator.base import PresenceCalculator
from .calculator.paired_calculator import PairedPresenceCalculator

logger = logging.getLogger(__name__)


def _is_check_in(entry: ScanLogEntry) -> bool:
    return entry.action == ScanAction.CHECK_IN and entry.status == ScanStatus.SUCCESS


class ReportService:
    """Read-only statistics over the scan log.

    Reports degrade to empty data when the store is unavailable; the failure
    is logged.
    """

    def __init__(
        self,
        scan_logs: ScanLogRepository,
        members: MemberRepository,
        sessions: ActiveSessionRepository,
        *,
        calculator: Optional[PresenceCalculator] = None,
    ):
        self._scan_logs = scan_logs
        self._members = members
        self._sessions = sessions
        self._calculator = calculator or PairedPresenceCalculator()

    def _safe(self, load, what: str):
        try:
            return load()
        except StorageError:
            logger.exception("Could not load %s", what)
            return []

    def list_logs(self, *, today_only: bool = False, now: Optional[datetime] = None) -> Sequence[ScanLogEntry]:
        if today_only:
            today = (now or now_local()).date()
            return self._safe(lambda: self._scan_logs.list_today(today), "today's scan logs")
        return self._safe(self._scan_logs.list_all, "scan logs")

    def member_scans(self, member_id: str) -> Sequence[ScanLogEntry]:
        return self._safe(lambda: self._scan_logs.list_by_member(member_id), f"scans of {member_id}")

    def gym_hours(self, *, start: Optional[date] = None, end: Optional[date] = None) -> list[dict]:
        """Total time inside per member, ranked longest first."""
        by_member: dict[str, list[ScanLogEntry]] = defaultdict(list)
        for e in self._safe(self._scan_logs.list_all, "scan logs"):
            day = e.timestamp.date()
            if (start and day < start) or (end and day > end):
                continue
            by_member[e.member_id].append(e)

        members = {m.member_id: m for m in self._safe(self._members.list_all, "members")}

        rows = []
        for member_id, entries in by_member.items():
            seconds = int(self._calculator.elapsed(entries).total_seconds())
            member = members.get(member_id)
            rows.append(
                {
                    "member_id": member_id,
                    "member_name": member.name if member else entries[0].member_name,
                    "email": member.email if member else None,
                    "phone": member.phone if member else None,
                    "height_cm": member.height_cm if member else None,
                    "weight_kg": member.weight_kg if member else None,
                    "total_seconds": seconds,
                    "hours": round(seconds / 3600, 2),
                }
            )

        rows.sort(key=lambda r: (-r["total_seconds"], r["member_id"]))
        for rank, row in enumerate(rows, start=1):
            row["rank"] = rank
        return rows

    def attendance_summary(self, *, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        check_ins = [e for e in self._safe(self._scan_logs.list_all, "scan logs") if _is_check_in(e)]

        # weekday: Monday = 0
        heatmap = Counter((e.timestamp.weekday(), e.timestamp.hour) for e in check_ins)
        by_hour = Counter(e.timestamp.hour for e in check_ins)
        peak_hour = min(by_hour, key=lambda h: (-by_hour[h], h)) if by_hour else None

        by_month = Counter((e.timestamp.year, e.timestamp.month) for e in check_ins)
        first_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        trend = []
        for back in range(TREND_MONTHS - 1, -1, -1):
            month = add_months(first_of_month, -back)
            trend.append(
                {
                    "month": month.strftime("%Y-%m"),
                    "label": month.strftime("%b"),
                    "check_ins": by_month.get((month.year, month.month), 0),
                }
            )

        return {
            "total_check_ins": len(check_ins),
            "peak_hour": peak_hour,
            "heatmap": [
                {"day": day, "hour": hour, "count": heatmap.get((day, hour), 0)}
                for day in range(7)
                for hour in range(24)
            ],
            "monthly_trend": trend,
        }

    def dashboard_stats(self, *, now: Optional[datetime] = None) -> dict:
        today = (now or now_local()).date()
        return {
            "active_sessions": len(self._safe(self._sessions.list_all, "active sessions")),
            "today_check_ins": sum(
                1 for e in self._safe(lambda: self._scan_logs.list_today(today), "today's scan logs") if _is_check_in(e)
            ),
            "total_members": len(self._safe(self._members.list_all, "members")),
        }
