"""Core data models and protocol constants: Pydantic + stdlib only."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


# ---------------------------------------------------------------------------
# Protocol constants
# ---------------------------------------------------------------------------

BASE_SCHEMA_PATH = "iglu:com.snowplowanalytics.snowplow"
SCHEMA_TAG = "jsonschema"

PAYLOAD_DATA_SCHEMA = f"{BASE_SCHEMA_PATH}/payload_data/{SCHEMA_TAG}/1-0-4"
CONTEXT_SCHEMA = f"{BASE_SCHEMA_PATH}/contexts/{SCHEMA_TAG}/1-0-1"
UNSTRUCT_EVENT_SCHEMA = f"{BASE_SCHEMA_PATH}/unstruct_event/{SCHEMA_TAG}/1-0-0"
SCREEN_VIEW_SCHEMA = f"{BASE_SCHEMA_PATH}/screen_view/{SCHEMA_TAG}/1-0-0"

GET_PATH = "/i"
POST_PATH = "/com.snowplowanalytics.snowplow/tp2"

GET_BUFFER_SIZE = 1
POST_BUFFER_SIZE = 10

SUPPORTED_PLATFORMS = frozenset({"pc", "tv", "mob", "cnsl", "iot", "web", "srv", "app"})

Method = Literal["get", "post"]
Protocol = Literal["http", "https"]

SuccessCallback = Callable[[int], Any]
FailureCallback = Callable[[int, list[dict[str, str]]], Any]


# ---------------------------------------------------------------------------
# Emitter configuration
# ---------------------------------------------------------------------------

class EmitterOptions(BaseModel):
    """Validated emitter configuration. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    path: str | None = None
    protocol: Protocol = "http"
    port: int | None = Field(default=None, gt=0, le=65535)
    method: Method = "get"
    buffer_size: PositiveInt | None = None
    on_success: SuccessCallback | None = None
    on_failure: FailureCallback | None = None
    thread_count: PositiveInt = 1  # AsyncEmitter only
    logger: logging.Logger | None = None

    def resolved_path(self) -> str:
        if self.path is not None:
            return self.path
        return GET_PATH if self.method == "get" else POST_PATH

    def resolved_buffer_size(self) -> int:
        # GET carries one event per request, so it cannot batch
        if self.buffer_size is not None:
            return self.buffer_size
        return GET_BUFFER_SIZE if self.method == "get" else POST_BUFFER_SIZE


# ---------------------------------------------------------------------------
# Self-describing JSON
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SelfDescribingJson:
    """A ``{schema, data}`` envelope; *schema* is an opaque schema URI."""

    schema: str
    data: Any

    def to_json(self) -> dict[str, Any]:
        return {"schema": self.schema, "data": self.data}
