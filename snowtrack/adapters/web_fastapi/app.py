"""FastAPI stub collector: records what trackers send, for local dev and tests."""

from __future__ import annotations

import logging
import threading
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from snowtrack.core.models import GET_PATH, PAYLOAD_DATA_SCHEMA, POST_PATH

logger = logging.getLogger(__name__)


class EventStore:
    """Thread-safe in-memory list of received events."""

    def __init__(self) -> None:
        self._events: list[dict[str, str]] = []
        self._lock = threading.Lock()

    def extend(self, events: list[dict[str, str]]) -> None:
        with self._lock:
            self._events.extend(events)

    def all(self) -> list[dict[str, str]]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


def create_app(store: EventStore | None = None) -> FastAPI:
    store = store if store is not None else EventStore()
    app = FastAPI(title="snowtrack stub collector", version="0.1.0")
    app.state.store = store

    @app.get(GET_PATH)
    async def collect_get(request: Request) -> Response:
        event = dict(request.query_params)
        store.extend([event])
        logger.info("GET event e=%s", event.get("e"))
        return Response(status_code=200)

    @app.post(POST_PATH)
    async def collect_post(request: Request) -> JSONResponse:
        try:
            body: dict[str, Any] = await request.json()
        except ValueError:
            return JSONResponse({"error": "invalid-json"}, status_code=400)

        if body.get("schema") != PAYLOAD_DATA_SCHEMA or not isinstance(body.get("data"), list):
            return JSONResponse({"error": "unexpected-envelope"}, status_code=400)

        store.extend(body["data"])
        logger.info("POST batch of %d event(s)", len(body["data"]))
        return JSONResponse({"status": "ok", "received": len(body["data"])})

    @app.get("/events")
    async def events() -> JSONResponse:
        return JSONResponse({"events": store.all()})

    @app.delete("/events")
    async def clear_events() -> JSONResponse:
        store.clear()
        return JSONResponse({"status": "ok"})

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app


# Module-level instance for ``uvicorn snowtrack.adapters.web_fastapi.app:app``
app = create_app()


def serve() -> None:
    """Entry-point for ``snowtrack-collector`` console script."""
    import uvicorn

    uvicorn.run(
        "snowtrack.adapters.web_fastapi.app:app",
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
