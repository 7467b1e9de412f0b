"""CLI JSON adapter: reads one event from argv/stdin, tracks it, prints the outcome."""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

import httpx

from snowtrack import create_tracker
from snowtrack.core.models import SelfDescribingJson
from snowtrack.tracker import Tracker

USAGE = (
    "Usage: snowtrack-cli '<event json>'  OR  echo '<event json>' | snowtrack-cli\n"
    'Event json: {"type": "struct", "category": "...", "action": "..."}\n'
    "Types: struct, page_view, screen_view, self_describing"
)


def track_event(tracker: Tracker, event: dict[str, Any]) -> None:
    """Dispatch an event description to the matching ``track_*`` call."""
    kind = event.get("type")
    tstamp = event.get("tstamp")

    if kind == "struct":
        tracker.track_struct_event(
            event["category"],
            event["action"],
            event.get("label"),
            event.get("property"),
            event.get("value"),
            tstamp=tstamp,
        )
    elif kind == "page_view":
        tracker.track_page_view(
            event["page_url"], event.get("page_title"), event.get("referrer"), tstamp=tstamp
        )
    elif kind == "screen_view":
        tracker.track_screen_view(event.get("name"), event.get("id"), tstamp=tstamp)
    elif kind == "self_describing":
        tracker.track_self_describing_event(
            SelfDescribingJson(event["schema"], event.get("data", {})), tstamp=tstamp
        )
    else:
        raise ValueError(f"Unknown event type '{kind}'")


def run_cli(raw: str, collector: str | None = None, client: httpx.Client | None = None) -> int:
    try:
        event = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(json.dumps({"status": "error", "error": f"invalid json: {exc}"}), flush=True)
        return 1
    if not isinstance(event, dict):
        print(json.dumps({"status": "error", "error": "event must be a JSON object"}), flush=True)
        return 1

    outcome: dict[str, Any] = {"sent": 0, "failed": 0}

    def on_success(count: int) -> None:
        outcome["sent"] += count

    def on_failure(count: int, failed: list[dict[str, str]]) -> None:
        outcome["sent"] += count
        outcome["failed"] += len(failed)

    try:
        tracker = create_tracker(
            collector=collector, client=client, on_success=on_success, on_failure=on_failure
        )
        track_event(tracker, event)
    except (KeyError, ValueError) as exc:
        print(json.dumps({"status": "error", "error": str(exc)}), flush=True)
        return 1

    tracker.flush()
    outcome["status"] = "ok" if outcome["failed"] == 0 else "failed"
    print(json.dumps(outcome), flush=True)
    return 0 if outcome["failed"] == 0 else 1


def main() -> None:
    logging.basicConfig(level=os.environ.get("SNOWTRACK_LOG_LEVEL", "WARNING").upper())

    if len(sys.argv) > 1:
        raw = " ".join(sys.argv[1:])
    else:
        raw = sys.stdin.read().strip()
        if not raw:
            print(USAGE, file=sys.stderr)
            sys.exit(1)

    sys.exit(run_cli(raw))


if __name__ == "__main__":
    main()
