"""Collector wire calls over httpx: one GET per event, one POST per batch."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from snowtrack.core.models import PAYLOAD_DATA_SCHEMA, SelfDescribingJson

POST_CONTENT_TYPE = "application/json; charset=utf-8"


def good_status_code(status_code: int) -> bool:
    """Only 2xx and 3xx responses count as delivered."""
    return 200 <= status_code < 400


class CollectorClient:
    """Thin wrapper around an ``httpx.Client`` bound to one collector URI.

    Methods return the response. Any exception raised while sending,
    ``httpx.HTTPError`` or otherwise, propagates to the caller.
    """

    def __init__(
        self,
        collector_uri: str,
        client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.collector_uri = collector_uri
        self._owns_client = client is None
        # Redirects are left unfollowed so a 3xx is reported as-is
        self._client = client if client is not None else httpx.Client(follow_redirects=False)
        self._logger = logger or logging.getLogger(__name__)

    def get(self, event: dict[str, str]) -> httpx.Response:
        self._logger.info("Sending GET request to %s...", self.collector_uri)
        self._logger.debug("Payload: %s", event)
        response = self._client.get(self.collector_uri, params=event)
        self._log_status("GET", response.status_code)
        return response

    def post(self, events: list[dict[str, str]]) -> httpx.Response:
        body = SelfDescribingJson(PAYLOAD_DATA_SCHEMA, events).to_json()
        self._logger.info("Sending POST request to %s...", self.collector_uri)
        self._logger.debug("Payload: %s", body)
        response = self._client.post(
            self.collector_uri,
            content=_dumps(body).encode("utf-8"),
            headers={"Content-Type": POST_CONTENT_TYPE},
        )
        self._log_status("POST", response.status_code)
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _log_status(self, verb: str, status_code: int) -> None:
        level = logging.INFO if good_status_code(status_code) else logging.WARNING
        self._logger.log(
            level,
            "%s request to %s finished with status code %d",
            verb, self.collector_uri, status_code,
        )


def _dumps(body: Any) -> str:
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)
