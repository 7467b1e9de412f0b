from snowtrack.emitters.emitter import AsyncEmitter, Emitter
from snowtrack.emitters.http import CollectorClient, good_status_code
from snowtrack.emitters.interface import BatchSender
from snowtrack.emitters.senders import AsyncSender, SyncSender

__all__ = [
    "AsyncEmitter",
    "AsyncSender",
    "BatchSender",
    "CollectorClient",
    "Emitter",
    "SyncSender",
    "good_status_code",
]
