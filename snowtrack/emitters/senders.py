"""Sync and async BatchSender implementations."""

from __future__ import annotations

import itertools
import logging
import queue
import threading

from snowtrack.emitters.interface import Batch, BatchSender, Deliver


# ---------------------------------------------------------------------------
# Inline delivery
# ---------------------------------------------------------------------------

class SyncSender(BatchSender):
    """Sends on the caller's thread; ``submit`` returns after the network call."""

    def submit(self, batch: Batch) -> None:
        self.deliver(batch)

    def drain(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Queue + fixed worker pool
# ---------------------------------------------------------------------------

class AsyncSender(BatchSender):
    """FIFO work queue consumed by ``thread_count`` daemon workers.

    ``_unprocessed`` counts batches enqueued but not yet sent. It is raised
    in :meth:`submit` together with the enqueue and lowered once per batch
    after the send attempt, whatever its outcome, so :meth:`drain` can wait
    on the condition until it reaches zero.
    """

    runs_in_background = True

    def __init__(self, thread_count: int = 1) -> None:
        super().__init__()
        if thread_count < 1:
            raise ValueError(f"thread_count must be a positive integer, got {thread_count}")
        self.thread_count = thread_count
        self._queue: queue.Queue[Batch] = queue.Queue()
        self._all_processed = threading.Condition()
        self._unprocessed = 0
        self._worker_ids = itertools.count(1)
        self._workers: list[threading.Thread] = []

    def bind(self, deliver: Deliver, logger: logging.Logger | None = None) -> None:
        super().bind(deliver, logger)
        for _ in range(self.thread_count):
            self._spawn_worker()

    @property
    def unprocessed(self) -> int:
        with self._all_processed:
            return self._unprocessed

    @property
    def workers(self) -> list[threading.Thread]:
        return [w for w in self._workers if w.is_alive()]

    def submit(self, batch: Batch) -> None:
        with self._all_processed:
            self._unprocessed += 1
            self._queue.put(batch)

    def drain(self) -> None:
        self._logger.info("Starting synchronous flush")
        with self._all_processed:
            self._all_processed.wait_for(lambda: self._unprocessed == 0)
        self._logger.info("Finished synchronous flush")

    # -- workers ------------------------------------------------------------

    def _spawn_worker(self) -> None:
        worker = threading.Thread(
            target=self._consume,
            name=f"snowtrack-sender-{next(self._worker_ids)}",
            daemon=True,
        )
        with self._all_processed:
            self._workers.append(worker)
        worker.start()

    def _consume(self) -> None:
        while True:
            batch = self._queue.get()
            try:
                self.deliver(batch)
            except Exception:
                # The worker is done for; keep the pool at thread_count
                self._logger.exception(
                    "Sender thread %s crashed while sending %d event(s); starting a replacement",
                    threading.current_thread().name, len(batch),
                )
                with self._all_processed:
                    self._workers.remove(threading.current_thread())
                self._spawn_worker()
                return
            finally:
                with self._all_processed:
                    self._unprocessed -= 1
                    self._all_processed.notify_all()
