from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..access.repository import ActiveSessionRepository
from ..common.datetime_utils import now_local, parse_iso_date, start_of_day
from ..common.validators import optional_positive, require_email, require_non_empty, require_phone
from ..core.constants import DEFAULT_PLAN_MONTHS, MEMBER_ID_PREFIX, MEMBER_LIST_EXPIRING_THRESHOLD_DAYS
from ..core.exceptions import NotFoundError, ValidationError
from ..subscriptions import evaluator
from ..subscriptions.model import Subscription
from ..subscriptions.service import SubscriptionService
from .model import Member
from .repository import MemberRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberProfile:
    """Read-model for the member detail view."""

    member: Member
    subscription: Optional[Subscription]
    is_active: bool
    remaining_days: int
    is_expiring_soon: bool
    checked_in: bool

    def to_dict(self) -> dict:
        return {
            **self.member.to_dict(),
            "subscription": self.subscription.to_dict() if self.subscription else None,
            "is_active": self.is_active,
            "remaining_days": self.remaining_days,
            "is_expiring_soon": self.is_expiring_soon,
            "checked_in": self.checked_in,
        }


@dataclass
class ImportResult:
    imported: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    member_ids: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.imported > 0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "imported": self.imported,
            "failed": self.failed,
            "errors": list(self.errors),
            "member_ids": list(self.member_ids),
        }


class MemberService:
    """Use case: register and manage gym members (admin)."""

    def __init__(
        self,
        members: MemberRepository,
        subscriptions: SubscriptionService,
        sessions: ActiveSessionRepository,
        *,
        id_prefix: str = MEMBER_ID_PREFIX,
    ):
        self._members = members
        self._subscriptions = subscriptions
        self._sessions = sessions
        self._id_prefix = id_prefix

    def _allocate_member_id(self) -> str:
        return f"{self._id_prefix}-{self._members.next_sequence_number()}"

    def _ensure_email_free(self, email: str, *, exclude_member_id: Optional[str] = None) -> None:
        owner = self._members.get_by_email(email)
        if owner is not None and owner.member_id != exclude_member_id:
            raise ValidationError(f"Email already registered ({email})")

    def get_member(self, member_id: str) -> Member:
        member = self._members.get_by_id(member_id)
        if not member:
            raise NotFoundError(f"Member {member_id} not found")
        return member

    def list_members(self, search: Optional[str] = None) -> Sequence[Member]:
        members = self._members.list_all()
        term = (search or "").strip().lower()
        if not term:
            return members
        return [
            m
            for m in members
            if term in m.member_id.lower() or term in m.name.lower() or term in m.email.lower()
        ]

    def get_profile(self, member_id: str, *, now: Optional[datetime] = None) -> MemberProfile:
        now = now or now_local()
        member = self.get_member(member_id)
        subscription = self._subscriptions.get_current(member_id)
        return self._profile(member, subscription, self._sessions.get(member_id) is not None, now)

    def list_profiles(self, search: Optional[str] = None, *, now: Optional[datetime] = None) -> list[MemberProfile]:
        """Member list rows, reading subscriptions and sessions once for the whole list."""
        now = now or now_local()
        members = self.list_members(search)
        subscriptions = self._subscriptions.current_by_member()
        inside = {s.member_id for s in self._sessions.list_all()}
        return [self._profile(m, subscriptions.get(m.member_id), m.member_id in inside, now) for m in members]

    @staticmethod
    def _profile(member: Member, subscription: Optional[Subscription], checked_in: bool, now: datetime) -> MemberProfile:
        return MemberProfile(
            member=member,
            subscription=subscription,
            is_active=evaluator.is_active(subscription, now=now),
            remaining_days=evaluator.remaining_days(subscription, now=now),
            is_expiring_soon=evaluator.is_expiring_soon(
                subscription, MEMBER_LIST_EXPIRING_THRESHOLD_DAYS, now=now
            ),
            checked_in=checked_in,
        )

    def register_member(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        height_cm=None,
        weight_kg=None,
        plan_months: int = DEFAULT_PLAN_MONTHS,
        start: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Member:
        now = now or now_local()
        start_at = start_of_day(start) if start else now
        months = evaluator.require_plan_months(plan_months)

        def plan(member_id: str) -> Subscription:
            return evaluator.create_subscription(member_id, months, start=start_at, now=now)

        return self._register(
            name=name,
            email=email,
            phone=phone,
            height_cm=height_cm,
            weight_kg=weight_kg,
            build_subscription=plan,
            now=now,
        )

    def _register(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        height_cm,
        weight_kg,
        build_subscription: Callable[[str], Subscription],
        now: datetime,
    ) -> Member:
        # Plan inputs are checked by the caller, so a bad row never burns an id.
        name = require_non_empty(name, "Name")
        email = require_email(email)
        phone = require_phone(phone)
        height = optional_positive(height_cm, "Height")
        weight = optional_positive(weight_kg, "Weight")
        self._ensure_email_free(email)

        member = Member(
            member_id=self._allocate_member_id(),
            name=name,
            email=email,
            phone=phone,
            height_cm=height,
            weight_kg=weight,
            created_at=now,
            updated_at=now,
        )
        self._members.insert(member)
        self._subscriptions.assign(build_subscription(member.member_id), now=now)
        logger.info("Registered member %s (%s)", member.member_id, member.name)
        return member

    def update_member(
        self,
        member_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        height_cm=None,
        weight_kg=None,
        now: Optional[datetime] = None,
    ) -> Member:
        now = now or now_local()
        self.get_member(member_id)

        fields: dict = {}
        if name is not None:
            fields["name"] = require_non_empty(name, "Name")
        if email is not None:
            fields["email"] = require_email(email)
            self._ensure_email_free(fields["email"], exclude_member_id=member_id)
        if phone is not None:
            fields["phone"] = require_phone(phone)
        if height_cm is not None:
            fields["height_cm"] = optional_positive(height_cm, "Height")
        if weight_kg is not None:
            fields["weight_kg"] = optional_positive(weight_kg, "Weight")
        if not fields:
            raise ValidationError("Nothing to update")

        fields["updated_at"] = now
        self._members.update(member_id, fields)
        return self.get_member(member_id)

    def delete_member(self, member_id: str) -> None:
        self.get_member(member_id)
        if not self._members.delete_by_id(member_id):
            raise NotFoundError(f"Member {member_id} not found")
        logger.info("Deleted member %s", member_id)

    def import_members(self, csv_text: str, *, now: Optional[datetime] = None) -> ImportResult:
        """Bulk registration from CSV text.

        Needs name, phone and email columns (matched by substring, any case).
        Optional start/end columns (YYYY-MM-DD) give the member a walk-in range;
        otherwise the member gets the default monthly plan. Bad rows are skipped
        and reported as ``Row N: ...`` with N counted from the header as row 1.
        """
        now = now or now_local()
        result = ImportResult()
        rows = [r for r in csv.reader(io.StringIO(csv_text or "")) if any(c.strip() for c in r)]
        if len(rows) < 2:
            result.errors.append("CSV is empty")
            return result

        headers = [h.strip().lower() for h in rows[0]]

        def column(key: str) -> int:
            return next((i for i, h in enumerate(headers) if key in h), -1)

        name_i, phone_i, email_i = column("name"), column("phone"), column("email")
        start_i, end_i = column("start"), column("end")
        if -1 in (name_i, phone_i, email_i):
            result.errors.append("Name, Phone, Email columns are required")
            return result

        def cell(row: list[str], index: int) -> str:
            return row[index].strip() if 0 <= index < len(row) else ""

        for number, row in enumerate(rows[1:], start=2):
            try:
                member = self._register(
                    name=cell(row, name_i),
                    email=cell(row, email_i),
                    phone=cell(row, phone_i),
                    height_cm=None,
                    weight_kg=None,
                    build_subscription=self._import_plan(cell(row, start_i), cell(row, end_i), now=now),
                    now=now,
                )
            except ValidationError as e:
                result.failed += 1
                result.errors.append(f"Row {number}: {e}")
                continue

            result.imported += 1
            result.member_ids.append(member.member_id)

        logger.info("Imported %d members (%d failed)", result.imported, result.failed)
        return result

    @staticmethod
    def _import_plan(start_s: str, end_s: str, *, now: datetime) -> Callable[[str], Subscription]:
        if not (start_s and end_s):
            return lambda member_id: evaluator.create_subscription(member_id, DEFAULT_PLAN_MONTHS, now=now)

        try:
            start_date, end_date = parse_iso_date(start_s), parse_iso_date(end_s)
        except ValueError:
            raise ValidationError(f"Invalid dates ({start_s} - {end_s})")
        evaluator.require_date_range(start_date, end_date)
        return lambda member_id: evaluator.create_walk_in(member_id, start_date=start_date, end_date=end_date, now=now)
