#!/usr/bin/env python3
"""CLI script that loads the account caches and prints notification changes."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from echoremote.core.config import Settings  # noqa: E402
from echoremote.remote import EchoRemote  # noqa: E402

logger = logging.getLogger("watch_notifications")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load reminders, alarms and timers and print the cache whenever it changes."
    )
    parser.add_argument(
        "--cookie",
        type=str,
        default=None,
        help="Session cookie (defaults to ECHOREMOTE_ACCOUNT_COOKIE).",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Account API base URL (defaults to ECHOREMOTE_ACCOUNT_BASE_URL).",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Print the notification list once and exit.",
    )
    return parser.parse_args()


def print_notifications(remote: EchoRemote) -> None:
    records = remote.notifications.store.list_all()
    print(f"{len(records)} notification(s):")
    for record in sorted(records, key=lambda r: r.key):
        print(f"  {record.kind:<8} {record.key:<40} v{record.version}  {record.label or ''}")


async def main() -> None:
    args = parse_args()

    settings = Settings()
    if args.cookie:
        settings.account.cookie = args.cookie
    if args.base_url:
        settings.account.base_url = args.base_url

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    remote = EchoRemote(
        settings=settings,
        warn=lambda error: logger.warning("%s", error),
    )
    try:
        await remote.initialize()
        print_notifications(remote)
        if args.once:
            return

        def on_change(event: str) -> None:
            if event == "change-notification":
                print_notifications(remote)

        remote.on_change(on_change)
        print("Waiting for push events (Ctrl+C to stop) ...")
        await asyncio.Event().wait()
    finally:
        await remote.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
