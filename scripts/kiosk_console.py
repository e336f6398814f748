"""Run the kiosk from a terminal.

A keyboard-wedge scanner types into stdin like a keyboard, so each line read
here is one scan. Lines go through ``KeyboardWedgeScanner`` so repeated scans
inside the debounce window are dropped exactly as on the kiosk screen.
"""

from __future__ import annotations

import importlib
import logging
import sys

from dotenv import load_dotenv

from gym_kiosk.config import get_settings_module
from gym_kiosk.container import build_container


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        id_prefix=getattr(settings, "MEMBER_ID_PREFIX", "BCF"),
        expiring_threshold_days=int(getattr(settings, "EXPIRING_THRESHOLD_DAYS", 7)),
    )

    def show(decision) -> None:
        mark = "OK " if decision.granted else "NO "
        print(f"{mark}{decision.message}")

    scanner = container.make_scanner(show)
    print("Ready. Scan a member QR code (Ctrl+D to quit).")
    for line in sys.stdin:
        scanner.feed_text(line.rstrip("\r\n"))


if __name__ == "__main__":
    main()
