from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, ContextManager, Optional

from .access.model import AccessDecision
from .access.mysql_scan_log_repository import MySQLScanLogRepository
from .access.mysql_session_repository import MySQLActiveSessionRepository
from .access.repository import ActiveSessionRepository, ScanLogRepository
from .access.service import AccessService
from .core.constants import DEFAULT_EXPIRING_THRESHOLD_DAYS, MEMBER_ID_PREFIX
from .database.connection import DBConfig, DatabaseConnection
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .members.service import MemberService
from .reports.service import ReportService
from .scanner.adapter import KeyboardWedgeScanner
from .subscriptions.mysql_subscription_repository import (
    MySQLSubscriptionHistoryRepository,
    MySQLSubscriptionRepository,
)
from .subscriptions.repository import SubscriptionHistoryRepository, SubscriptionRepository
from .subscriptions.service import SubscriptionService


@dataclass(frozen=True)
class Container:
    members_repo: MemberRepository
    subscriptions_repo: SubscriptionRepository
    history_repo: SubscriptionHistoryRepository
    scan_logs_repo: ScanLogRepository
    sessions_repo: ActiveSessionRepository

    access_service: AccessService
    member_service: MemberService
    subscription_service: SubscriptionService
    report_service: ReportService

    def make_scanner(self, on_decision: Optional[Callable[[AccessDecision], object]] = None) -> KeyboardWedgeScanner:
        """Scanner whose completed codes go straight to the access engine."""

        def handle(code: str) -> AccessDecision:
            decision = self.access_service.process_scan(code)
            if on_decision is not None:
                on_decision(decision)
            return decision

        return KeyboardWedgeScanner(handle)


def wire(
    *,
    members_repo: MemberRepository,
    subscriptions_repo: SubscriptionRepository,
    history_repo: SubscriptionHistoryRepository,
    scan_logs_repo: ScanLogRepository,
    sessions_repo: ActiveSessionRepository,
    transaction: Optional[Callable[[], ContextManager]] = None,
    id_prefix: str = MEMBER_ID_PREFIX,
    expiring_threshold_days: int = DEFAULT_EXPIRING_THRESHOLD_DAYS,
) -> Container:
    """Build services over any repositories honouring the repository protocols."""
    subscription_service = SubscriptionService(
        subscriptions_repo,
        history_repo,
        members_repo,
        expiring_threshold_days=expiring_threshold_days,
    )
    access_service = AccessService(
        members_repo,
        subscriptions_repo,
        sessions_repo,
        scan_logs_repo,
        transaction=transaction or nullcontext,
    )
    member_service = MemberService(members_repo, subscription_service, sessions_repo, id_prefix=id_prefix)
    report_service = ReportService(scan_logs_repo, members_repo, sessions_repo)

    return Container(
        members_repo=members_repo,
        subscriptions_repo=subscriptions_repo,
        history_repo=history_repo,
        scan_logs_repo=scan_logs_repo,
        sessions_repo=sessions_repo,
        access_service=access_service,
        member_service=member_service,
        subscription_service=subscription_service,
        report_service=report_service,
    )


def build_container(
    *,
    db_config: dict,
    id_prefix: str = MEMBER_ID_PREFIX,
    expiring_threshold_days: int = DEFAULT_EXPIRING_THRESHOLD_DAYS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire(
        members_repo=MySQLMemberRepository(conn),
        subscriptions_repo=MySQLSubscriptionRepository(conn),
        history_repo=MySQLSubscriptionHistoryRepository(conn),
        scan_logs_repo=MySQLScanLogRepository(conn),
        sessions_repo=MySQLActiveSessionRepository(conn),
        transaction=conn.transaction,
        id_prefix=id_prefix,
        expiring_threshold_days=expiring_threshold_days,
    )
