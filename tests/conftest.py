from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from gym_kiosk.access.model import ActiveSession, ScanLogEntry
from gym_kiosk.container import Container, wire
from gym_kiosk.core.enums import SubscriptionStatus
from gym_kiosk.core.exceptions import StorageError
from gym_kiosk.members.model import Member
from gym_kiosk.subscriptions.model import Subscription, SubscriptionHistoryRecord

NOW = datetime(2025, 3, 10, 9, 0, 0)


class InMemoryHistory:
    def __init__(self):
        self.records: list[SubscriptionHistoryRecord] = []

    def list_by_member(self, member_id: str):
        items = [r for r in self.records if r.member_id == member_id]
        return sorted(items, key=lambda r: r.archived_at, reverse=True)

    def append(self, record: SubscriptionHistoryRecord) -> None:
        self.records.append(record)


class InMemorySubscriptions:
    def __init__(self, history: InMemoryHistory):
        self.current: dict[str, Subscription] = {}
        self._history = history
        self._ids = itertools.count(1)

    def get_current(self, member_id: str) -> Optional[Subscription]:
        return self.current.get(member_id)

    def list_all(self):
        return list(self.current.values())

    def upsert_current(self, subscription: Subscription, *, archived_at: datetime):
        previous = self.current.get(subscription.member_id)
        archived = None
        if previous is not None:
            archived = SubscriptionHistoryRecord.archive(
                previous, history_id=f"h{next(self._ids)}", archived_at=archived_at
            )
            self._history.append(archived)
        self.current[subscription.member_id] = subscription
        return archived


class InMemoryScanLogs:
    def __init__(self):
        self.entries: list[ScanLogEntry] = []

    def append(self, entry: ScanLogEntry) -> None:
        self.entries.append(entry)

    def list_all(self):
        return sorted(self.entries, key=lambda e: e.timestamp, reverse=True)

    def list_today(self, today: date):
        return [e for e in self.list_all() if e.timestamp.date() == today]

    def list_by_member(self, member_id: str):
        return [e for e in self.list_all() if e.member_id == member_id]


class InMemorySessions:
    def __init__(self):
        self.sessions: dict[str, ActiveSession] = {}

    def get(self, member_id: str) -> Optional[ActiveSession]:
        return self.sessions.get(member_id)

    def list_all(self):
        return sorted(self.sessions.values(), key=lambda s: s.check_in_time, reverse=True)

    def create(self, session: ActiveSession) -> bool:
        if session.member_id in self.sessions:
            return False
        self.sessions[session.member_id] = session
        return True

    def delete(self, member_id: str) -> Optional[ActiveSession]:
        return self.sessions.pop(member_id, None)


class InMemoryMembers:
    """Member store; deleting a member cascades like the MySQL foreign keys."""

    def __init__(self, subscriptions, history, scan_logs, sessions, *, seed: int = 1000):
        self.members: dict[str, Member] = {}
        self._subscriptions = subscriptions
        self._history = history
        self._scan_logs = scan_logs
        self._sessions = sessions
        self._sequence = seed

    def get_by_id(self, member_id: str) -> Optional[Member]:
        return self.members.get(member_id)

    def get_by_email(self, email: str) -> Optional[Member]:
        return next((m for m in self.members.values() if m.email.lower() == email.lower()), None)

    def list_all(self):
        return sorted(self.members.values(), key=lambda m: m.created_at, reverse=True)

    def insert(self, member: Member) -> None:
        self.members[member.member_id] = member

    def update(self, member_id: str, fields) -> bool:
        if member_id not in self.members:
            return False
        self.members[member_id] = replace(self.members[member_id], **fields)
        return True

    def delete_by_id(self, member_id: str) -> bool:
        if self.members.pop(member_id, None) is None:
            return False
        self._subscriptions.current.pop(member_id, None)
        self._history.records = [r for r in self._history.records if r.member_id != member_id]
        self._scan_logs.entries = [e for e in self._scan_logs.entries if e.member_id != member_id]
        self._sessions.sessions.pop(member_id, None)
        return True

    def next_sequence_number(self) -> int:
        self._sequence += 1
        return self._sequence


class FailingStore:
    """Stands in for any repository while the database is down."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise StorageError(f"database unavailable ({name})")

        return fail


@pytest.fixture
def history_repo():
    return InMemoryHistory()


@pytest.fixture
def subscriptions_repo(history_repo):
    return InMemorySubscriptions(history_repo)


@pytest.fixture
def scan_logs_repo():
    return InMemoryScanLogs()


@pytest.fixture
def sessions_repo():
    return InMemorySessions()


@pytest.fixture
def members_repo(subscriptions_repo, history_repo, scan_logs_repo, sessions_repo):
    return InMemoryMembers(subscriptions_repo, history_repo, scan_logs_repo, sessions_repo)


@pytest.fixture
def container(members_repo, subscriptions_repo, history_repo, scan_logs_repo, sessions_repo) -> Container:
    return wire(
        members_repo=members_repo,
        subscriptions_repo=subscriptions_repo,
        history_repo=history_repo,
        scan_logs_repo=scan_logs_repo,
        sessions_repo=sessions_repo,
    )


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def add_member(members_repo, subscriptions_repo):
    """Insert a member directly, with a subscription ending ``days_left`` after NOW."""

    def _add(member_id: str = "BCF-1001", name: str = "Ana Cruz", *, days_left: Optional[float] = 30, status=SubscriptionStatus.ACTIVE):
        member = Member(
            member_id=member_id,
            name=name,
            email=f"{member_id.lower()}@example.com",
            phone="09171234567",
            created_at=NOW - timedelta(days=60),
            updated_at=NOW - timedelta(days=60),
        )
        members_repo.insert(member)
        if days_left is not None:
            subscriptions_repo.current[member_id] = Subscription(
                member_id=member_id,
                start_at=NOW - timedelta(days=30),
                end_at=NOW + timedelta(days=days_left),
                status=status,
                created_at=NOW - timedelta(days=30),
            )
        return member

    return _add


@pytest.fixture
def now() -> datetime:
    return NOW
