from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Member:
    """Domain entity: a gym customer.

    Note: plain data object (no DB access code). ``member_id`` is the value
    encoded in the member's QR code.
    """

    member_id: str
    name: str
    email: str
    phone: str
    created_at: datetime
    updated_at: datetime
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "member_id": self.member_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "height_cm": self.height_cm,
            "weight_kg": self.weight_kg,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
