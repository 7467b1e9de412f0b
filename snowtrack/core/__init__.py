from snowtrack.core.models import (
    CONTEXT_SCHEMA,
    PAYLOAD_DATA_SCHEMA,
    SCREEN_VIEW_SCHEMA,
    UNSTRUCT_EVENT_SCHEMA,
    EmitterOptions,
    SelfDescribingJson,
)
from snowtrack.core.payload import Payload
from snowtrack.core.subject import Page, Subject
from snowtrack.core.timestamp import DeviceTimestamp, Timestamp, TrueTimestamp

__all__ = [
    "CONTEXT_SCHEMA",
    "DeviceTimestamp",
    "EmitterOptions",
    "PAYLOAD_DATA_SCHEMA",
    "Page",
    "Payload",
    "SCREEN_VIEW_SCHEMA",
    "SelfDescribingJson",
    "Subject",
    "Timestamp",
    "TrueTimestamp",
    "UNSTRUCT_EVENT_SCHEMA",
]
