"""Subject and Page value objects merged into every tracked event."""

from __future__ import annotations

from snowtrack.core.models import SUPPORTED_PLATFORMS

DEFAULT_PLATFORM = "srv"


class Subject:
    """Who the event is about: user ids, device and session properties.

    Setters return the Subject so calls can be chained::

        Subject().set_user_id("u-42").set_lang("en")
    """

    def __init__(self) -> None:
        self.details: dict[str, str | int] = {"p": DEFAULT_PLATFORM}

    def set_platform(self, value: str) -> Subject:
        if value not in SUPPORTED_PLATFORMS:
            raise ValueError(
                f"'{value}' is not a supported platform. Allowed: {sorted(SUPPORTED_PLATFORMS)}"
            )
        self.details["p"] = value
        return self

    def set_user_id(self, user_id: str) -> Subject:
        self.details["uid"] = user_id
        return self

    def set_fingerprint(self, fingerprint: int) -> Subject:
        self.details["fp"] = fingerprint
        return self

    def set_screen_resolution(self, width: int, height: int) -> Subject:
        self.details["res"] = f"{width}x{height}"
        return self

    def set_viewport(self, width: int, height: int) -> Subject:
        self.details["vp"] = f"{width}x{height}"
        return self

    def set_color_depth(self, depth: int) -> Subject:
        self.details["cd"] = depth
        return self

    def set_timezone(self, timezone: str) -> Subject:
        self.details["tz"] = timezone
        return self

    def set_lang(self, lang: str) -> Subject:
        self.details["lang"] = lang
        return self

    def set_domain_user_id(self, duid: str) -> Subject:
        self.details["duid"] = duid
        return self

    def set_domain_session_id(self, sid: str) -> Subject:
        self.details["sid"] = sid
        return self

    def set_domain_session_idx(self, vid: int) -> Subject:
        self.details["vid"] = vid
        return self

    def set_ip_address(self, ip: str) -> Subject:
        self.details["ip"] = ip
        return self

    def set_useragent(self, useragent: str) -> Subject:
        self.details["ua"] = useragent
        return self

    def set_network_user_id(self, nuid: str) -> Subject:
        self.details["tnuid"] = nuid
        return self


class Page:
    """Page URL, title and referrer for web-server tracking."""

    def __init__(
        self,
        page_url: str | None = None,
        page_title: str | None = None,
        referrer: str | None = None,
    ) -> None:
        self.details: dict[str, str | None] = {
            "url": page_url,
            "page": page_title,
            "refr": referrer,
        }
