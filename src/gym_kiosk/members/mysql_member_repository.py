from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float
from .model import Member
from .repository import MemberRepository

_COLUMNS = "member_id, name, email, phone, height_cm, weight_kg, created_at, updated_at"
_UPDATABLE = {"name", "email", "phone", "height_cm", "weight_kg", "updated_at"}


def _to_member(row: dict) -> Member:
    return Member(
        member_id=row["member_id"],
        name=row["name"],
        email=row["email"],
        phone=row["phone"],
        height_cm=optional_float(row.get("height_cm")),
        weight_kg=optional_float(row.get("weight_kg")),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, member_id: str) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM members WHERE member_id=%s", (member_id,))
            row = fetchone(cur)
            return _to_member(row) if row else None

    def get_by_email(self, email: str) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM members WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _to_member(row) if row else None

    def list_all(self) -> Sequence[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM members ORDER BY created_at DESC")
            return [_to_member(r) for r in fetchall(cur)]

    def insert(self, member: Member) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO members ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    member.member_id,
                    member.name,
                    member.email,
                    member.phone,
                    member.height_cm,
                    member.weight_kg,
                    member.created_at,
                    member.updated_at,
                ),
            )

    def update(self, member_id: str, fields: Mapping[str, Any]) -> bool:
        columns = [c for c in fields if c in _UPDATABLE]
        if not columns:
            return False
        assignments = ", ".join(f"{c}=%s" for c in columns)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE members SET {assignments} WHERE member_id=%s",
                (*[fields[c] for c in columns], member_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, member_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM members WHERE member_id=%s", (member_id,))
            return cur.rowcount > 0

    def next_sequence_number(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes the increment and the read one atomic step.
            cur.execute("UPDATE member_id_counter SET last_number = LAST_INSERT_ID(last_number + 1) WHERE id = 1")
            if cur.rowcount != 1:
                raise StorageError("member_id_counter is not initialised")
            cur.execute("SELECT LAST_INSERT_ID() AS n")
            row = fetchone(cur)
            return int(row["n"])
