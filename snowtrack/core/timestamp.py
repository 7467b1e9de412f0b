"""Event timestamps, in milliseconds since the Unix epoch.

An event carries either a device timestamp (``dtm``) or a true timestamp
(``ttm``), never both. The emitter adds the sent timestamp (``stm``) itself.
"""

from __future__ import annotations

import time


class Timestamp:
    def __init__(self, type_: str, value: int) -> None:
        self.type = type_
        self.value = value

    @staticmethod
    def create() -> int:
        """Current time in epoch milliseconds."""
        return int(time.time() * 1000)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return (self.type, self.value) == (other.type, other.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class TrueTimestamp(Timestamp):
    """User-supplied timestamp the pipeline should trust as-is (``ttm``)."""

    def __init__(self, value: int) -> None:
        super().__init__("ttm", value)


class DeviceTimestamp(Timestamp):
    """Timestamp taken on the tracking device (``dtm``)."""

    def __init__(self, value: int) -> None:
        super().__init__("dtm", value)
