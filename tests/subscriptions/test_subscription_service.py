from datetime import date, datetime, timedelta

import pytest

from gym_kiosk.core.exceptions import NotFoundError, ValidationError
from gym_kiosk.subscriptions.service import SubscriptionService


def test_renewal_archives_previous_subscription(container, add_member, history_repo, now):
    # BCF-1001 is active, ending tomorrow
    add_member("BCF-1001", days_left=1)
    svc = container.subscription_service
    previous = svc.get_current("BCF-1001")

    today = datetime.combine(now.date(), datetime.min.time())
    renewed = svc.renew("BCF-1001", 1, start=today, now=now)

    assert renewed.end_at == datetime(2025, 4, 10)
    assert svc.get_current("BCF-1001") == renewed

    history = svc.history("BCF-1001")
    assert len(history) == 1
    assert history[0].end_at == previous.end_at
    assert history[0].start_at == previous.start_at
    assert history[0].status == previous.status
    assert history[0].archived_at == now


def test_each_renewal_adds_one_history_row(container, add_member, history_repo, now):
    add_member("BCF-1001")
    svc = container.subscription_service

    svc.renew_daily("BCF-1001", now=now)
    svc.renew_walk_in("BCF-1001", start_date=date(2025, 3, 12), end_date=date(2025, 3, 14), now=now + timedelta(hours=1))

    assert len(history_repo.records) == 2
    assert svc.get_current("BCF-1001").end_at.date() == date(2025, 3, 14)
    # newest archive first
    assert [r.archived_at for r in svc.history("BCF-1001")] == [now + timedelta(hours=1), now]


def test_first_assignment_archives_nothing(container, add_member, history_repo, now):
    add_member("BCF-1001", days_left=None)

    container.subscription_service.renew("BCF-1001", 6, now=now)

    assert history_repo.records == []


def test_renew_unknown_member(container, now):
    with pytest.raises(NotFoundError):
        container.subscription_service.renew("ZZZ-9999", now=now)
    with pytest.raises(NotFoundError):
        container.subscription_service.history("ZZZ-9999")


def test_invalid_renewal_leaves_current_untouched(container, add_member, history_repo, now):
    add_member("BCF-1001")
    before = container.subscription_service.get_current("BCF-1001")

    with pytest.raises(ValidationError):
        container.subscription_service.renew_walk_in(
            "BCF-1001", start_date=date(2025, 3, 5), end_date=date(2025, 3, 1), now=now
        )

    assert container.subscription_service.get_current("BCF-1001") == before
    assert history_repo.records == []


def test_expiring_member_ids(container, add_member, now):
    add_member("BCF-1001", days_left=2)
    add_member("BCF-1002", days_left=20)
    add_member("BCF-1003", days_left=-1)
    svc = container.subscription_service

    assert svc.expiring_member_ids(now=now) == ["BCF-1001"]
    assert sorted(svc.expiring_member_ids(30, now=now)) == ["BCF-1001", "BCF-1002"]


def test_expiring_degrades_on_storage_error(failing_store, history_repo, members_repo, now):
    svc = SubscriptionService(failing_store, history_repo, members_repo)

    assert svc.expiring_member_ids(now=now) == []


@pytest.mark.parametrize("months", [0, 2, 24])
def test_renew_only_sells_listed_plans(container, add_member, history_repo, now, months):
    add_member("BCF-1001")

    with pytest.raises(ValidationError):
        container.subscription_service.renew("BCF-1001", months, now=now)

    assert history_repo.records == []
