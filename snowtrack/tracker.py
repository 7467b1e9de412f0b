"""Tracker: builds one payload per event and fans it out to every emitter."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Mapping, Sequence

from snowtrack.core.models import (
    CONTEXT_SCHEMA,
    SCREEN_VIEW_SCHEMA,
    UNSTRUCT_EVENT_SCHEMA,
    SelfDescribingJson,
)
from snowtrack.core.payload import Payload
from snowtrack.core.subject import Page, Subject
from snowtrack.core.timestamp import DeviceTimestamp, Timestamp
from snowtrack.emitters.emitter import Emitter
from snowtrack.version import TRACKER_VERSION

logger = logging.getLogger(__name__)

DEFAULT_ENCODE_BASE64 = True

Context = Sequence[SelfDescribingJson]
TimestampArg = Timestamp | int | float | None


class Tracker:
    """Public API: ``tracker.track_struct_event(category=..., action=...)``.

    Every ``track_*`` method accepts the keyword arguments

    * ``context``: list of :class:`SelfDescribingJson` entities
    * ``tstamp``: epoch milliseconds or a :class:`Timestamp`; defaults to now
    * ``subject``: event-specific :class:`Subject`, merged over the tracker's
    * ``page``: :class:`Page` whose fields are added to the event

    and returns the tracker. Delivery failures never raise here; they reach
    the emitters' ``on_failure`` callbacks.
    """

    def __init__(
        self,
        emitters: Emitter | Iterable[Emitter],
        subject: Subject | None = None,
        namespace: str | None = None,
        app_id: str | None = None,
        encode_base64: bool = DEFAULT_ENCODE_BASE64,
    ) -> None:
        self.emitters: list[Emitter] = (
            [emitters] if isinstance(emitters, Emitter) else list(emitters)
        )
        self.subject = subject if subject is not None else Subject()
        self.standard_nv_pairs: dict[str, str | None] = {
            "tna": namespace,
            "tv": TRACKER_VERSION,
            "aid": app_id,
        }
        self.encode_base64 = encode_base64

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_subject(self, subject: Subject) -> Tracker:
        self.subject = subject
        return self

    def add_emitter(self, emitter: Emitter) -> Tracker:
        self.emitters.append(emitter)
        return self

    def flush(self, is_async: bool = False) -> Tracker:
        """Flush every emitter; blocks until delivery unless ``is_async``."""
        for emitter in self.emitters:
            emitter.flush(is_async=is_async)
        return self

    # -- Subject delegation ---------------------------------------------

    def set_platform(self, value: str) -> Tracker:
        self.subject.set_platform(value)
        return self

    def set_user_id(self, user_id: str) -> Tracker:
        self.subject.set_user_id(user_id)
        return self

    def set_fingerprint(self, fingerprint: int) -> Tracker:
        self.subject.set_fingerprint(fingerprint)
        return self

    def set_screen_resolution(self, width: int, height: int) -> Tracker:
        self.subject.set_screen_resolution(width, height)
        return self

    def set_viewport(self, width: int, height: int) -> Tracker:
        self.subject.set_viewport(width, height)
        return self

    def set_color_depth(self, depth: int) -> Tracker:
        self.subject.set_color_depth(depth)
        return self

    def set_timezone(self, timezone: str) -> Tracker:
        self.subject.set_timezone(timezone)
        return self

    def set_lang(self, lang: str) -> Tracker:
        self.subject.set_lang(lang)
        return self

    def set_domain_user_id(self, duid: str) -> Tracker:
        self.subject.set_domain_user_id(duid)
        return self

    def set_domain_session_id(self, sid: str) -> Tracker:
        self.subject.set_domain_session_id(sid)
        return self

    def set_domain_session_idx(self, vid: int) -> Tracker:
        self.subject.set_domain_session_idx(vid)
        return self

    def set_ip_address(self, ip: str) -> Tracker:
        self.subject.set_ip_address(ip)
        return self

    def set_useragent(self, useragent: str) -> Tracker:
        self.subject.set_useragent(useragent)
        return self

    def set_network_user_id(self, nuid: str) -> Tracker:
        self.subject.set_network_user_id(nuid)
        return self

    # ------------------------------------------------------------------
    # Event tracking
    # ------------------------------------------------------------------

    def track_page_view(
        self,
        page_url: str,
        page_title: str | None = None,
        referrer: str | None = None,
        *,
        context: Context | None = None,
        tstamp: TimestampArg = None,
        subject: Subject | None = None,
        page: Page | None = None,
    ) -> Tracker:
        """Track a page view. Fields set on *page* win over the arguments."""
        payload = Payload()
        payload.add("e", "pv")
        payload.add("url", page_url)
        payload.add("page", page_title)
        payload.add("refr", referrer)

        self._track(payload, context, tstamp, subject, page)
        return self

    def track_struct_event(
        self,
        category: str,
        action: str,
        label: str | None = None,
        property_: str | None = None,
        value: int | float | None = None,
        *,
        context: Context | None = None,
        tstamp: TimestampArg = None,
        subject: Subject | None = None,
        page: Page | None = None,
    ) -> Tracker:
        payload = Payload()
        payload.add("e", "se")
        payload.add("se_ca", category)
        payload.add("se_ac", action)
        payload.add("se_la", label)
        payload.add("se_pr", property_)
        payload.add("se_va", value)

        self._track(payload, context, tstamp, subject, page)
        return self

    def track_self_describing_event(
        self,
        event_json: SelfDescribingJson,
        *,
        context: Context | None = None,
        tstamp: TimestampArg = None,
        subject: Subject | None = None,
        page: Page | None = None,
    ) -> Tracker:
        """Track a custom event described by its own schema."""
        envelope = SelfDescribingJson(UNSTRUCT_EVENT_SCHEMA, event_json.to_json())

        payload = Payload()
        payload.add("e", "ue")
        payload.add_json(envelope.to_json(), self.encode_base64, "ue_px", "ue_pr")

        self._track(payload, context, tstamp, subject, page)
        return self

    def track_screen_view(
        self,
        name: str | None = None,
        id_: str | None = None,
        *,
        context: Context | None = None,
        tstamp: TimestampArg = None,
        subject: Subject | None = None,
        page: Page | None = None,
    ) -> Tracker:
        screen_view = {k: v for k, v in {"name": name, "id": id_}.items() if v is not None}
        return self.track_self_describing_event(
            SelfDescribingJson(SCREEN_VIEW_SCHEMA, screen_view),
            context=context,
            tstamp=tstamp,
            subject=subject,
            page=page,
        )

    def track_ecommerce_transaction(
        self,
        transaction: Mapping[str, Any],
        items: Sequence[Mapping[str, Any]],
        *,
        context: Context | None = None,
        tstamp: TimestampArg = None,
        subject: Subject | None = None,
        page: Page | None = None,
    ) -> Tracker:
        """Track an order as one ``tr`` event plus one ``ti`` event per item.

        *transaction* keys: ``order_id`` and ``total_value`` (required),
        ``affiliation``, ``tax_value``, ``shipping``, ``city``, ``state``,
        ``country``, ``currency``.

        Each item: ``sku``, ``price``, ``quantity`` (required), ``name``,
        ``category`` and an optional item-level ``context``.

        All events share one timestamp. They are submitted independently, so
        a failed delivery of one does not affect the others.
        """
        for key in ("order_id", "total_value"):
            if transaction.get(key) is None:
                raise ValueError(f"transaction is missing required key '{key}'")
        for item in items:
            _check_item(item)

        resolved = self._resolve_timestamp(tstamp)

        payload = Payload()
        payload.add("e", "tr")
        payload.add("tr_id", transaction["order_id"])
        payload.add("tr_tt", transaction["total_value"])
        payload.add("tr_af", transaction.get("affiliation"))
        payload.add("tr_tx", transaction.get("tax_value"))
        payload.add("tr_sh", transaction.get("shipping"))
        payload.add("tr_ci", transaction.get("city"))
        payload.add("tr_st", transaction.get("state"))
        payload.add("tr_co", transaction.get("country"))
        payload.add("tr_cu", transaction.get("currency"))

        self._track(payload, context, resolved, subject, page)

        for item in items:
            self._track_ecommerce_transaction_item(
                item,
                order_id=transaction["order_id"],
                currency=transaction.get("currency"),
                tstamp=resolved,
                subject=subject,
                page=page,
            )
        return self

    def _track_ecommerce_transaction_item(
        self,
        item: Mapping[str, Any],
        order_id: str,
        currency: str | None,
        tstamp: Timestamp,
        subject: Subject | None,
        page: Page | None,
    ) -> None:
        payload = Payload()
        payload.add("e", "ti")
        payload.add("ti_id", order_id)
        payload.add("ti_sk", item["sku"])
        payload.add("ti_nm", item.get("name"))
        payload.add("ti_ca", item.get("category"))
        payload.add("ti_pr", item["price"])
        payload.add("ti_qu", item["quantity"])
        payload.add("ti_cu", currency)

        self._track(payload, item.get("context"), tstamp, subject, page)

    # ------------------------------------------------------------------
    # Payload finalisation
    # ------------------------------------------------------------------

    def _track(
        self,
        payload: Payload,
        context: Context | None,
        tstamp: TimestampArg,
        subject: Subject | None,
        page: Page | None,
    ) -> None:
        if context:
            payload.add_json(self._build_context(context), self.encode_base64, "cx", "co")
        if page is not None:
            payload.add_dict(page.details)

        payload.add_dict(self._subject_details(subject))

        resolved = self._resolve_timestamp(tstamp)
        payload.add(resolved.type, resolved.value)

        payload.add("eid", str(uuid.uuid4()))
        payload.add_dict(self.standard_nv_pairs)

        logger.debug("Tracking event e=%s eid=%s", payload.data.get("e"), payload.data["eid"])
        for emitter in self.emitters:
            emitter.input(payload)

    def _subject_details(self, subject: Subject | None) -> dict[str, Any]:
        if subject is None:
            return dict(self.subject.details)
        return {**self.subject.details, **subject.details}

    @staticmethod
    def _build_context(context: Context) -> dict[str, Any]:
        return SelfDescribingJson(CONTEXT_SCHEMA, [c.to_json() for c in context]).to_json()

    @staticmethod
    def _resolve_timestamp(tstamp: TimestampArg) -> Timestamp:
        if tstamp is None:
            return DeviceTimestamp(Timestamp.create())
        if isinstance(tstamp, Timestamp):
            return tstamp
        return DeviceTimestamp(int(tstamp))


def _check_item(item: Mapping[str, Any]) -> None:
    for key in ("sku", "price", "quantity"):
        if item.get(key) is None:
            raise ValueError(f"transaction item is missing required key '{key}'")
