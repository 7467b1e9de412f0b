"""BatchSender ABC: where a flushed batch goes once it leaves the buffer."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

Batch = list[dict[str, str]]
Deliver = Callable[[Batch], None]


class BatchSender(ABC):
    """Delivery strategy injected into an Emitter.

    The emitter calls :meth:`bind` once with its own ``send`` method, then
    :meth:`submit` for every flushed batch (while holding its buffer lock)
    and :meth:`drain` when a caller asks for a synchronous flush.
    """

    #: True when submit() returns before the batch is sent
    runs_in_background: bool = False

    def __init__(self) -> None:
        self._deliver: Deliver | None = None
        self._logger = logging.getLogger(__name__)

    def bind(self, deliver: Deliver, logger: logging.Logger | None = None) -> None:
        if self._deliver is not None:
            raise RuntimeError(f"{type(self).__name__} is already bound to an emitter")
        self._deliver = deliver
        if logger is not None:
            self._logger = logger

    @property
    def deliver(self) -> Deliver:
        if self._deliver is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to an emitter")
        return self._deliver

    @property
    def unprocessed(self) -> int:
        """Batches submitted but not yet fully sent."""
        return 0

    @abstractmethod
    def submit(self, batch: Batch) -> None: ...

    @abstractmethod
    def drain(self) -> None: ...
