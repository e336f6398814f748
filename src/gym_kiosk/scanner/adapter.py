"""Keyboard-wedge scanner input.

USB QR scanners type the decoded payload as keystrokes followed by Enter.
``KeyboardWedgeScanner`` collects those keystrokes into a code and hands each
completed code to a callback, dropping repeats that arrive inside the
debounce window.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..core.constants import SCAN_BUFFER_RESET_MS, SCAN_DEBOUNCE_MS

logger = logging.getLogger(__name__)

ENTER = "Enter"


class KeyboardWedgeScanner:
    def __init__(
        self,
        on_scan: Callable[[str], object],
        *,
        debounce_ms: int = SCAN_DEBOUNCE_MS,
        buffer_reset_ms: int = SCAN_BUFFER_RESET_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._on_scan = on_scan
        self._debounce = debounce_ms / 1000.0
        self._buffer_reset = buffer_reset_ms / 1000.0
        self._clock = clock
        self._buffer = ""
        self._last_key_at: Optional[float] = None
        self._last_scan_at: Optional[float] = None

    @property
    def buffer(self) -> str:
        return self._buffer

    def feed_key(self, key: str) -> Optional[str]:
        """Feed one key event. Returns the emitted code, if this key completed one."""
        now = self._clock()

        # A human typing (or a dropped Enter) leaves gaps; scanners do not.
        if self._last_key_at is not None and now - self._last_key_at > self._buffer_reset:
            self._buffer = ""
        self._last_key_at = now

        if key == ENTER:
            code = self._buffer.strip()
            self._buffer = ""
            if not code:
                return None
            if self._last_scan_at is not None and now - self._last_scan_at <= self._debounce:
                logger.debug("Dropped duplicate scan %r", code)
                return None
            self._last_scan_at = now
            self._on_scan(code)
            return code

        if len(key) == 1:
            self._buffer += key
        return None

    def feed_text(self, text: str) -> Optional[str]:
        for ch in text:
            self.feed_key(ch)
        return self.feed_key(ENTER)

    def reset(self) -> None:
        self._buffer = ""
        self._last_key_at = None
