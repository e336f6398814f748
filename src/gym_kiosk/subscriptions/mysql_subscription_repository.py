from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import SubscriptionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Subscription, SubscriptionHistoryRecord
from .repository import SubscriptionHistoryRepository, SubscriptionRepository


def _to_subscription(row: dict) -> Subscription:
    return Subscription(
        member_id=row["member_id"],
        start_at=row["start_at"],
        end_at=row["end_at"],
        status=SubscriptionStatus(row["status"]),
        created_at=row["created_at"],
    )


def _to_history(row: dict) -> SubscriptionHistoryRecord:
    return SubscriptionHistoryRecord(
        history_id=row["history_id"],
        member_id=row["member_id"],
        start_at=row["start_at"],
        end_at=row["end_at"],
        status=SubscriptionStatus(row["status"]),
        created_at=row["created_at"],
        archived_at=row["archived_at"],
    )


def _insert_history(cur, record: SubscriptionHistoryRecord) -> None:
    cur.execute(
        """
        INSERT INTO subscription_history
            (history_id, member_id, start_at, end_at, status, created_at, archived_at)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        """,
        (
            record.history_id,
            record.member_id,
            record.start_at,
            record.end_at,
            record.status.value,
            record.created_at,
            record.archived_at,
        ),
    )


class MySQLSubscriptionRepository(SubscriptionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_current(self, member_id: str) -> Optional[Subscription]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, start_at, end_at, status, created_at
                FROM subscriptions
                WHERE member_id=%s
                """,
                (member_id,),
            )
            row = fetchone(cur)
            return _to_subscription(row) if row else None

    def list_all(self) -> Sequence[Subscription]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT member_id, start_at, end_at, status, created_at FROM subscriptions")
            return [_to_subscription(r) for r in fetchall(cur)]

    def upsert_current(self, subscription: Subscription, *, archived_at: datetime) -> Optional[SubscriptionHistoryRecord]:
        # Archive and replace share one connection, so both land or neither does.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT member_id, start_at, end_at, status, created_at
                FROM subscriptions
                WHERE member_id=%s
                FOR UPDATE
                """,
                (subscription.member_id,),
            )
            row = fetchone(cur)
            archived = None
            if row:
                archived = SubscriptionHistoryRecord.archive(
                    _to_subscription(row),
                    history_id=uuid.uuid4().hex,
                    archived_at=archived_at,
                )
                _insert_history(cur, archived)

            cur.execute(
                """
                INSERT INTO subscriptions (member_id, start_at, end_at, status, created_at)
                VALUES (%s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    start_at=VALUES(start_at),
                    end_at=VALUES(end_at),
                    status=VALUES(status),
                    created_at=VALUES(created_at)
                """,
                (
                    subscription.member_id,
                    subscription.start_at,
                    subscription.end_at,
                    subscription.status.value,
                    subscription.created_at,
                ),
            )
            return archived


class MySQLSubscriptionHistoryRepository(SubscriptionHistoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_member(self, member_id: str) -> Sequence[SubscriptionHistoryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT history_id, member_id, start_at, end_at, status, created_at, archived_at
                FROM subscription_history
                WHERE member_id=%s
                ORDER BY archived_at DESC
                """,
                (member_id,),
            )
            return [_to_history(r) for r in fetchall(cur)]

    def append(self, record: SubscriptionHistoryRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            _insert_history(cur, record)
