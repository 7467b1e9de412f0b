"""Tests for Subject, Page, timestamps and SelfDescribingJson."""

from __future__ import annotations

import time

import pytest

from snowtrack.core.models import SUPPORTED_PLATFORMS, SelfDescribingJson
from snowtrack.core.subject import Page, Subject
from snowtrack.core.timestamp import DeviceTimestamp, Timestamp, TrueTimestamp


class TestSubject:
    def test_default_platform(self):
        assert Subject().details == {"p": "srv"}

    @pytest.mark.parametrize("platform", sorted(SUPPORTED_PLATFORMS))
    def test_supported_platforms(self, platform):
        assert Subject().set_platform(platform).details["p"] == platform

    def test_unsupported_platform_rejected(self):
        subject = Subject()
        with pytest.raises(ValueError, match="not a supported platform"):
            subject.set_platform("toaster")
        assert subject.details["p"] == "srv"

    def test_setters_map_to_field_codes(self):
        subject = (
            Subject()
            .set_user_id("u-1")
            .set_fingerprint(1234)
            .set_screen_resolution(1920, 1080)
            .set_viewport(800, 600)
            .set_color_depth(24)
            .set_timezone("Europe/London")
            .set_lang("en")
            .set_domain_user_id("duid-1")
            .set_domain_session_id("sid-1")
            .set_domain_session_idx(3)
            .set_ip_address("10.0.0.1")
            .set_useragent("Mozilla/5.0")
            .set_network_user_id("nuid-1")
        )
        assert subject.details == {
            "p": "srv",
            "uid": "u-1",
            "fp": 1234,
            "res": "1920x1080",
            "vp": "800x600",
            "cd": 24,
            "tz": "Europe/London",
            "lang": "en",
            "duid": "duid-1",
            "sid": "sid-1",
            "vid": 3,
            "ip": "10.0.0.1",
            "ua": "Mozilla/5.0",
            "tnuid": "nuid-1",
        }


class TestPage:
    def test_details(self):
        page = Page("http://example.com", "Example", "http://ref.example.com")
        assert page.details == {
            "url": "http://example.com",
            "page": "Example",
            "refr": "http://ref.example.com",
        }

    def test_unset_fields_are_none(self):
        assert Page(page_title="Only title").details == {"url": None, "page": "Only title", "refr": None}


class TestTimestamp:
    def test_create_is_epoch_millis(self):
        before = int(time.time() * 1000)
        created = Timestamp.create()
        after = int(time.time() * 1000)
        assert before <= created <= after

    def test_types(self):
        assert TrueTimestamp(1).type == "ttm"
        assert DeviceTimestamp(1).type == "dtm"

    def test_equality(self):
        assert DeviceTimestamp(5) == DeviceTimestamp(5)
        assert DeviceTimestamp(5) != TrueTimestamp(5)
        assert DeviceTimestamp(5) != DeviceTimestamp(6)


class TestSelfDescribingJson:
    def test_to_json(self):
        sdj = SelfDescribingJson("iglu:com.example/x/jsonschema/1-0-0", {"k": "v"})
        assert sdj.to_json() == {"schema": "iglu:com.example/x/jsonschema/1-0-0", "data": {"k": "v"}}

    def test_nested(self):
        inner = SelfDescribingJson("iglu:com.example/inner/jsonschema/1-0-0", {"a": 1})
        outer = SelfDescribingJson("iglu:com.example/outer/jsonschema/1-0-0", inner.to_json())
        assert outer.to_json()["data"]["data"] == {"a": 1}
