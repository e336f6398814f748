from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ActiveSession
from .repository import ActiveSessionRepository


def _to_session(row: dict) -> ActiveSession:
    return ActiveSession(
        member_id=row["member_id"],
        member_name=row["member_name"],
        check_in_time=row["check_in_time"],
    )


class MySQLActiveSessionRepository(ActiveSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, member_id: str) -> Optional[ActiveSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT member_id, member_name, check_in_time FROM active_sessions WHERE member_id=%s",
                (member_id,),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def list_all(self) -> Sequence[ActiveSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT member_id, member_name, check_in_time FROM active_sessions ORDER BY check_in_time DESC")
            return [_to_session(r) for r in fetchall(cur)]

    def create(self, session: ActiveSession) -> bool:
        # member_id is the primary key: a concurrent duplicate is ignored, not doubled.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO active_sessions (member_id, member_name, check_in_time)
                VALUES (%s, %s, %s)
                """,
                (session.member_id, session.member_name, session.check_in_time),
            )
            return cur.rowcount == 1

    def delete(self, member_id: str) -> Optional[ActiveSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, member_name, check_in_time
                FROM active_sessions
                WHERE member_id=%s
                FOR UPDATE
                """,
                (member_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            cur.execute("DELETE FROM active_sessions WHERE member_id=%s", (member_id,))
            if cur.rowcount != 1:
                return None
            return _to_session(row)
