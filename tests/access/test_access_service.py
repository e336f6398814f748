from datetime import timedelta

from gym_kiosk.access.model import ActiveSession
from gym_kiosk.access.service import AccessService
from gym_kiosk.core.enums import AccessOutcome, ScanAction, ScanStatus, SubscriptionStatus
from gym_kiosk.core.exceptions import StorageError


def test_scan_toggles_check_in_then_check_out(container, add_member, sessions_repo, scan_logs_repo, now):
    # BCF-1001, subscription ends tomorrow, not inside yet
    add_member("BCF-1001", "Ana Cruz", days_left=1)
    svc = container.access_service

    first = svc.process_scan("BCF-1001", now=now)
    assert first.granted is True
    assert first.outcome == AccessOutcome.CHECKED_IN
    assert first.action == ScanAction.CHECK_IN
    assert first.message == "Welcome, Ana Cruz!"
    assert sessions_repo.get("BCF-1001").check_in_time == now

    second = svc.process_scan("BCF-1001", now=now + timedelta(hours=1))
    assert second.granted is True
    assert second.action == ScanAction.CHECK_OUT
    assert second.message == "See you soon, Ana Cruz!"
    assert sessions_repo.get("BCF-1001") is None

    logs = sorted(scan_logs_repo.entries, key=lambda e: e.timestamp)
    assert [(e.action, e.status) for e in logs] == [
        (ScanAction.CHECK_IN, ScanStatus.SUCCESS),
        (ScanAction.CHECK_OUT, ScanStatus.SUCCESS),
    ]

    third = svc.process_scan("BCF-1001", now=now + timedelta(hours=2))
    assert third.action == ScanAction.CHECK_IN


def test_expired_subscription_is_denied_and_logged_once(container, add_member, sessions_repo, scan_logs_repo, now):
    add_member("BCF-1002", "Ben Reyes", days_left=-1)

    decision = container.access_service.process_scan("BCF-1002", now=now)

    assert decision.granted is False
    assert decision.outcome == AccessOutcome.EXPIRED
    assert decision.message == "Subscription expired for Ben Reyes"
    assert decision.to_dict()["action"] == "not-applicable"
    assert decision.to_dict()["status"] == "expired"
    assert sessions_repo.get("BCF-1002") is None
    assert len(scan_logs_repo.entries) == 1
    assert scan_logs_repo.entries[0].status == ScanStatus.EXPIRED


def test_expired_blocks_toggle_even_when_inside(container, add_member, sessions_repo, now):
    member = add_member("BCF-1002", "Ben Reyes", days_left=-1)
    sessions_repo.create(ActiveSession(member.member_id, member.name, now - timedelta(hours=1)))

    for i in range(3):
        decision = container.access_service.process_scan("BCF-1002", now=now + timedelta(minutes=i))
        assert decision.outcome == AccessOutcome.EXPIRED
        assert decision.action == ScanAction.NOT_APPLICABLE

    assert sessions_repo.get("BCF-1002") is not None


def test_cancelled_subscription_counts_as_expired(container, add_member, now):
    add_member("BCF-1003", days_left=10, status=SubscriptionStatus.CANCELLED)

    decision = container.access_service.process_scan("BCF-1003", now=now)

    assert decision.outcome == AccessOutcome.EXPIRED


def test_member_without_subscription_is_expired(container, add_member, now):
    add_member("BCF-1004", days_left=None)

    assert container.access_service.process_scan("BCF-1004", now=now).outcome == AccessOutcome.EXPIRED


def test_unknown_id_is_invalid_without_log_or_subscription_lookup(
    members_repo, sessions_repo, scan_logs_repo, failing_store, now
):
    # Any subscription lookup would raise and turn the result into an error decision.
    svc = AccessService(members_repo, failing_store, sessions_repo, scan_logs_repo)

    for call in (svc.process_scan, svc.process_check_in, svc.process_check_out):
        decision = call("ZZZ-9999", now=now)
        assert decision.granted is False
        assert decision.outcome == AccessOutcome.INVALID
        assert decision.message == "User not found"

    assert scan_logs_repo.entries == []
    assert sessions_repo.sessions == {}


def test_blank_code_is_unknown(container, scan_logs_repo, now):
    decision = container.access_service.process_scan("   ", now=now)

    assert decision.outcome == AccessOutcome.INVALID
    assert decision.member_id is None
    assert scan_logs_repo.entries == []


def test_scanned_code_is_stripped(container, add_member, now):
    add_member("BCF-1001")

    assert container.access_service.process_scan("  BCF-1001\n", now=now).outcome == AccessOutcome.CHECKED_IN


def test_explicit_check_in_when_inside_is_a_conflict_without_log(container, add_member, scan_logs_repo, now):
    add_member("BCF-1001")
    svc = container.access_service
    svc.process_check_in("BCF-1001", now=now)

    again = svc.process_check_in("BCF-1001", now=now + timedelta(minutes=5))

    assert again.granted is False
    assert again.outcome == AccessOutcome.ALREADY_CHECKED_IN
    assert again.message == "User is already checked in"
    assert again.log_entry is None
    assert len(scan_logs_repo.entries) == 1


def test_explicit_check_out_when_outside_is_a_conflict_without_log(container, add_member, scan_logs_repo, now):
    add_member("BCF-1001")

    decision = container.access_service.process_check_out("BCF-1001", now=now)

    assert decision.granted is False
    assert decision.outcome == AccessOutcome.NOT_CHECKED_IN
    assert decision.message == "User is not checked in"
    assert scan_logs_repo.entries == []


def test_check_out_ignores_a_plan_that_lapsed_inside(container, add_member, sessions_repo, now):
    member = add_member("BCF-1001", days_left=-0.5)
    sessions_repo.create(ActiveSession(member.member_id, member.name, now - timedelta(hours=2)))

    decision = container.access_service.process_check_out("BCF-1001", now=now)

    assert decision.granted is True
    assert decision.outcome == AccessOutcome.CHECKED_OUT
    assert sessions_repo.get("BCF-1001") is None


def test_explicit_check_in_with_expired_plan_is_denied(container, add_member, now):
    add_member("BCF-1002", days_left=-3)

    assert container.access_service.process_check_in("BCF-1002", now=now).outcome == AccessOutcome.EXPIRED


def test_repeated_scans_never_open_two_sessions(container, add_member, sessions_repo, scan_logs_repo, now):
    add_member("BCF-1001")
    add_member("BCF-1005", "Cara Lim")

    outcomes = []
    for i in range(7):
        for member_id in ("BCF-1001", "BCF-1005"):
            outcomes.append(container.access_service.process_scan(member_id, now=now + timedelta(minutes=i)).outcome)
            assert len([s for s in sessions_repo.list_all() if s.member_id == member_id]) <= 1

    # every granted outcome wrote exactly one row
    assert len(scan_logs_repo.entries) == len(outcomes)
    assert set(sessions_repo.sessions) == {"BCF-1001", "BCF-1005"}


class _LosingRaceSessions:
    """Session store where another kiosk always creates the session first."""

    def __init__(self, inner):
        self._inner = inner

    def get(self, member_id):
        return None

    def list_all(self):
        return self._inner.list_all()

    def create(self, session):
        return False

    def delete(self, member_id):
        return None


def test_losing_the_check_in_race_is_already_checked_in(members_repo, subscriptions_repo, sessions_repo, scan_logs_repo, add_member, now):
    add_member("BCF-1001")
    svc = AccessService(members_repo, subscriptions_repo, _LosingRaceSessions(sessions_repo), scan_logs_repo)

    decision = svc.process_scan("BCF-1001", now=now)

    assert decision.outcome == AccessOutcome.ALREADY_CHECKED_IN
    assert decision.granted is False
    assert scan_logs_repo.entries == []


def test_storage_failure_becomes_error_decision(subscriptions_repo, sessions_repo, scan_logs_repo, failing_store, now):
    svc = AccessService(failing_store, subscriptions_repo, sessions_repo, scan_logs_repo)

    decision = svc.process_scan("BCF-1001", now=now)

    assert decision.granted is False
    assert decision.outcome == AccessOutcome.ERROR
    assert decision.message == "System error - please try again"
    assert decision.member_id == "BCF-1001"


def test_session_and_log_writes_share_one_transaction(members_repo, subscriptions_repo, sessions_repo, scan_logs_repo, add_member, now):
    add_member("BCF-1001")
    opened = []

    class _Tx:
        def __enter__(self):
            opened.append(len(scan_logs_repo.entries))

        def __exit__(self, *exc):
            opened.append(len(scan_logs_repo.entries))
            return False

    svc = AccessService(members_repo, subscriptions_repo, sessions_repo, scan_logs_repo, transaction=_Tx)
    svc.process_scan("BCF-1001", now=now)

    assert opened == [0, 1]


def test_list_active_sessions_degrades_on_storage_error(members_repo, subscriptions_repo, scan_logs_repo, failing_store):
    svc = AccessService(members_repo, subscriptions_repo, failing_store, scan_logs_repo)

    assert svc.list_active_sessions() == []


def test_decision_dict_carries_display_timeout(container, add_member, now):
    add_member("BCF-1001")

    payload = container.access_service.process_scan("BCF-1001", now=now).to_dict()

    assert payload["granted"] is True
    assert payload["action"] == "check-in"
    assert payload["status"] == "success"
    assert payload["display_seconds"] == 5
    assert payload["log"]["member_name"] == "Ana Cruz"


class _BrokenScanLog:
    def append(self, entry):
        raise StorageError("scan_logs is read-only")


def test_failed_log_write_keeps_the_check_in(members_repo, subscriptions_repo, sessions_repo, add_member, now):
    add_member("BCF-1001", "Ana Cruz")
    svc = AccessService(members_repo, subscriptions_repo, sessions_repo, _BrokenScanLog())

    decision = svc.process_scan("BCF-1001", now=now)

    assert decision.granted is True
    assert decision.outcome == AccessOutcome.CHECKED_IN
    assert decision.message == "Welcome, Ana Cruz!"
    assert decision.log_entry is None
    assert decision.to_dict()["action"] == "check-in"
    assert sessions_repo.get("BCF-1001") is not None

    leaving = svc.process_scan("BCF-1001", now=now + timedelta(hours=1))
    assert leaving.outcome == AccessOutcome.CHECKED_OUT
    assert sessions_repo.get("BCF-1001") is None


def test_failed_log_write_still_reports_expired(members_repo, subscriptions_repo, sessions_repo, add_member, now):
    add_member("BCF-1002", days_left=-1)
    svc = AccessService(members_repo, subscriptions_repo, sessions_repo, _BrokenScanLog())

    decision = svc.process_scan("BCF-1002", now=now)

    assert decision.outcome == AccessOutcome.EXPIRED
    assert decision.to_dict()["status"] == "expired"
