from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from ..common.datetime_utils import start_of_day
from ..core.enums import ScanAction, ScanStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ScanLogEntry
from .repository import ScanLogRepository

_SELECT = "SELECT entry_id, member_id, member_name, logged_at, action, status FROM scan_logs"


def _to_entry(row: dict) -> ScanLogEntry:
    return ScanLogEntry(
        entry_id=row["entry_id"],
        member_id=row["member_id"],
        member_name=row["member_name"],
        timestamp=row["logged_at"],
        action=ScanAction(row["action"]),
        status=ScanStatus(row["status"]),
    )


class MySQLScanLogRepository(ScanLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: ScanLogEntry) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO scan_logs (entry_id, member_id, member_name, logged_at, action, status)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    entry.entry_id,
                    entry.member_id,
                    entry.member_name,
                    entry.timestamp,
                    entry.action.value,
                    entry.status.value,
                ),
            )

    def list_all(self) -> Sequence[ScanLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} ORDER BY logged_at DESC")
            return [_to_entry(r) for r in fetchall(cur)]

    def list_today(self, today: date) -> Sequence[ScanLogEntry]:
        start = start_of_day(today)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE logged_at >= %s AND logged_at < %s ORDER BY logged_at DESC",
                (start, start + timedelta(days=1)),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_by_member(self, member_id: str) -> Sequence[ScanLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE member_id=%s ORDER BY logged_at DESC", (member_id,))
            return [_to_entry(r) for r in fetchall(cur)]
