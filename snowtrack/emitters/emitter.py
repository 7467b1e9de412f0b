"""Emitter: buffers events and delivers them to the collector.

Default settings:

    ==========  ==========================================
    protocol    http
    method      get
    buffer      1 (GET), 10 (POST)
    path        /i (GET), /com.snowplowanalytics.snowplow/tp2 (POST)
    ==========  ==========================================

A GET request carries exactly one event, hence the buffer of one. POST
emitters send the whole buffer as one JSON array.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

import httpx

from snowtrack.core.models import EmitterOptions
from snowtrack.core.payload import Payload
from snowtrack.core.timestamp import Timestamp
from snowtrack.emitters.http import CollectorClient, good_status_code
from snowtrack.emitters.interface import Batch, BatchSender
from snowtrack.emitters.senders import AsyncSender, SyncSender

logger = logging.getLogger(__name__)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Emitter:
    """Buffered, synchronous emitter.

    ``options`` is a dict or an :class:`EmitterOptions`; unknown keys raise
    ``pydantic.ValidationError`` here, not on first send. ``client`` lets the
    caller supply the ``httpx.Client`` (proxies, TLS, test transports).

    Example::

        Emitter("collector.example.com", {
            "method": "post",
            "buffer_size": 5,
            "on_failure": lambda ok, failed: retry(failed),
        })
    """

    def __init__(
        self,
        endpoint: str,
        options: Mapping[str, Any] | EmitterOptions | None = None,
        *,
        client: httpx.Client | None = None,
        sender: BatchSender | None = None,
    ) -> None:
        self.options = _validate_options(options)
        self.logger = self.options.logger or logger

        self.method = self.options.method
        self.buffer_size = self.options.resolved_buffer_size()
        self.collector_uri = _collector_uri(
            endpoint, self.options.protocol, self.options.port, self.options.resolved_path()
        )
        self._on_success = self.options.on_success
        self._on_failure = self.options.on_failure

        # Re-entrant: input() flushes while already holding the lock
        self._lock = threading.RLock()
        self._buffer: Batch = []
        self._collector = CollectorClient(self.collector_uri, client=client, logger=self.logger)

        self._sender = sender if sender is not None else self._default_sender()
        self._sender.bind(self.send, self.logger)

        self.logger.info("%s initialized with endpoint %s", type(self).__name__, self.collector_uri)

    def _default_sender(self) -> BatchSender:
        return SyncSender()

    # ------------------------------------------------------------------
    # Buffering
    # ------------------------------------------------------------------

    @property
    def buffer(self) -> Batch:
        with self._lock:
            return list(self._buffer)

    @property
    def unprocessed(self) -> int:
        return self._sender.unprocessed

    def input(self, payload: Payload | Mapping[str, Any]) -> None:
        """Add one event to the buffer, flushing when the buffer is full.

        Empty and ``None`` values are dropped, as in :class:`Payload`.

        Also the way to re-submit events handed to ``on_failure``.
        """
        data = payload.data if isinstance(payload, Payload) else payload
        event = {
            name: _stringify(value) for name, value in data.items() if value is not None and value != ""
        }
        with self._lock:
            self._buffer.append(event)
            if len(self._buffer) >= self.buffer_size:
                self.flush()

    def flush(self, is_async: bool = True) -> None:
        """Hand the whole buffer to the sender.

        With the synchronous sender the batch is sent before this returns and
        ``is_async`` changes nothing. With an async sender, ``is_async=False``
        blocks until every queued batch has been sent.
        """
        while True:
            with self._lock:
                batch, self._buffer = self._buffer, []
                self._sender.submit(batch)
            if not is_async:
                self._sender.drain()
            if not self._sender.runs_in_background:
                break
            # Events may have arrived from other threads since the swap
            with self._lock:
                if not self._buffer:
                    break

    def close(self) -> None:
        self.flush(is_async=False)
        self._collector.close()

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def send(self, batch: Batch) -> None:
        if not batch:
            self.logger.info("Skipping sending events since buffer is empty")
            return

        self.logger.info(
            "Attempting to send %d request%s", len(batch), "" if len(batch) == 1 else "s"
        )
        sent_at = str(Timestamp.create())
        for event in batch:
            event["stm"] = sent_at

        if self.method == "post":
            self._send_with_post(batch)
        else:
            self._send_with_get(batch)

    def _send_with_post(self, batch: Batch) -> None:
        post_succeeded = False
        try:
            response = self._collector.post(batch)
            post_succeeded = good_status_code(response.status_code)
        except Exception as exc:
            self.logger.warning("POST request to %s failed: %r", self.collector_uri, exc)

        if post_succeeded:
            if self._on_success is not None:
                self._on_success(len(batch))
        elif self._on_failure is not None:
            self._on_failure(0, batch)

    def _send_with_get(self, batch: Batch) -> None:
        success_count = 0
        unsent: Batch = []

        for event in batch:
            if self._process_get_event(event):
                success_count += 1
            else:
                unsent.append(event)

        if not unsent:
            if self._on_success is not None:
                self._on_success(success_count)
        elif self._on_failure is not None:
            self._on_failure(success_count, unsent)

    def _process_get_event(self, event: dict[str, str]) -> bool:
        try:
            response = self._collector.get(event)
        except Exception as exc:
            self.logger.warning("GET request to %s failed: %r", self.collector_uri, exc)
            return False
        return good_status_code(response.status_code)


class AsyncEmitter(Emitter):
    """Emitter whose flushes go to a work queue drained by background threads.

    The pool size is the ``thread_count`` option (default 1). Buffered events
    can be lost if the process exits before the workers finish; call
    ``flush(is_async=False)`` (or ``Tracker.flush()``) before exiting.
    """

    def _default_sender(self) -> BatchSender:
        return AsyncSender(self.options.thread_count)


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

def _validate_options(options: Mapping[str, Any] | EmitterOptions | None) -> EmitterOptions:
    if options is None:
        return EmitterOptions()
    if isinstance(options, EmitterOptions):
        return options
    return EmitterOptions.model_validate(dict(options))


def _collector_uri(endpoint: str, protocol: str, port: int | None, path: str) -> str:
    port_string = "" if port is None else f":{port}"
    return f"{protocol}://{endpoint}{port_string}{path}"
