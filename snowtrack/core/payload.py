"""Payload: ordered field accumulator for a single tracked event."""

from __future__ import annotations

import base64
import json
from typing import Any, Mapping


class Payload:
    """Insertion-ordered map of field name to scalar value.

    Empty strings and ``None`` are never stored; every ``add*`` helper goes
    through :meth:`add`, so the rule holds for nested JSON too.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def add(self, name: str, value: Any) -> None:
        if value is None or value == "":
            return
        self._data[name] = value

    def add_dict(self, pairs: Mapping[str, Any]) -> None:
        for name, value in pairs.items():
            self.add(name, value)

    def add_json(
        self,
        json_value: Any,
        encode_base64: bool,
        key_if_encoded: str,
        key_if_plain: str,
    ) -> None:
        """Serialise *json_value* and store it under one of the two keys."""
        if json_value is None:
            return

        json_string = json.dumps(json_value, separators=(",", ":"), ensure_ascii=False)

        if encode_base64:
            encoded = base64.urlsafe_b64encode(json_string.encode("utf-8")).decode("ascii")
            self.add(key_if_encoded, encoded)
        else:
            self.add(key_if_plain, json_string)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Payload({self._data!r})"
