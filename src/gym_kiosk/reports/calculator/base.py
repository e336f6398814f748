from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Sequence

from ...access.model import ScanLogEntry


class PresenceCalculator(ABC):
    @abstractmethod
    def elapsed(self, entries: Sequence[ScanLogEntry]) -> timedelta:
        """Time spent inside the gym by one member over ``entries``."""

        raise NotImplementedError
