"""snowtrack: event tracking SDK with buffered, batched HTTP delivery.

Usage::

    from snowtrack import create_tracker

    tracker = create_tracker(collector="collector.example.com")
    tracker.track_page_view("https://example.com/", "Home")
    tracker.flush()
"""

from __future__ import annotations

import os
from typing import Any

import httpx
from dotenv import load_dotenv

load_dotenv()  # reads .env into os.environ (no-op if file missing)

from snowtrack.core.models import EmitterOptions, SelfDescribingJson
from snowtrack.core.payload import Payload
from snowtrack.core.subject import Page, Subject
from snowtrack.core.timestamp import DeviceTimestamp, Timestamp, TrueTimestamp
from snowtrack.emitters.emitter import AsyncEmitter, Emitter
from snowtrack.tracker import Tracker
from snowtrack.version import VERSION

__version__ = VERSION

__all__ = [
    "AsyncEmitter",
    "DeviceTimestamp",
    "Emitter",
    "EmitterOptions",
    "Page",
    "Payload",
    "SelfDescribingJson",
    "Subject",
    "Timestamp",
    "Tracker",
    "TrueTimestamp",
    "create_tracker",
]


def create_tracker(
    *,
    collector: str | None = None,
    method: str | None = None,
    protocol: str | None = None,
    port: int | None = None,
    buffer_size: int | None = None,
    use_async: bool | None = None,
    thread_count: int | None = None,
    namespace: str | None = None,
    app_id: str | None = None,
    encode_base64: bool | None = None,
    client: httpx.Client | None = None,
    **emitter_options: Any,
) -> Tracker:
    """Wire an emitter and return a ready-to-use Tracker.

    Keyword arguments win over environment variables (all optional):
      SNOWTRACK_COLLECTOR      collector host, required if not passed
      SNOWTRACK_METHOD         ``get`` (default) or ``post``
      SNOWTRACK_PROTOCOL       ``http`` (default) or ``https``
      SNOWTRACK_PORT           collector port
      SNOWTRACK_BUFFER_SIZE    events per flush
      SNOWTRACK_ASYNC          set to ``1`` for an AsyncEmitter
      SNOWTRACK_THREAD_COUNT   AsyncEmitter worker threads
      SNOWTRACK_NAMESPACE      tracker namespace (``tna``)
      SNOWTRACK_APP_ID         application id (``aid``)
      SNOWTRACK_ENCODE_BASE64  set to ``0`` to send JSON fields unencoded

    Extra keyword arguments (``on_success``, ``on_failure``, ``path``,
    ``logger``) are passed through to the emitter options; ``client`` is
    handed to the emitter as its ``httpx.Client``.
    """
    endpoint = collector or os.environ.get("SNOWTRACK_COLLECTOR")
    if not endpoint:
        raise ValueError("No collector configured: pass collector= or set SNOWTRACK_COLLECTOR")

    env = os.environ.get
    options: dict[str, Any] = {
        "method": method or env("SNOWTRACK_METHOD", "get"),
        "protocol": protocol or env("SNOWTRACK_PROTOCOL", "http"),
        **emitter_options,
    }
    if port is not None or env("SNOWTRACK_PORT"):
        options["port"] = port if port is not None else env("SNOWTRACK_PORT")
    if buffer_size is not None or env("SNOWTRACK_BUFFER_SIZE"):
        options["buffer_size"] = buffer_size if buffer_size is not None else env("SNOWTRACK_BUFFER_SIZE")

    is_async = use_async if use_async is not None else env("SNOWTRACK_ASYNC") == "1"
    if is_async:
        options["thread_count"] = thread_count or env("SNOWTRACK_THREAD_COUNT", "1")
        emitter: Emitter = AsyncEmitter(endpoint, options, client=client)
    else:
        emitter = Emitter(endpoint, options, client=client)

    encode = encode_base64 if encode_base64 is not None else env("SNOWTRACK_ENCODE_BASE64", "1") != "0"

    return Tracker(
        emitter,
        namespace=namespace or env("SNOWTRACK_NAMESPACE"),
        app_id=app_id or env("SNOWTRACK_APP_ID"),
        encode_base64=encode,
    )
