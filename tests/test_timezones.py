"""
Offsets are read from the wall clock at call time, so expectations here are
either 0 or computed against zones without daylight saving.
"""

from __future__ import annotations

import time

import pytest

from profile_metrics.timezones import TimezoneConfig, host_offset, resolve_timezone

HOUR = 60 * 60 * 1000


def _host_zone(monkeypatch, name):
    monkeypatch.setenv("TZ", name)
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def host_utc(monkeypatch):
    yield from _host_zone(monkeypatch, "UTC")


@pytest.fixture
def host_tokyo(monkeypatch):
    # POSIX rule, so libc needs no zoneinfo database
    yield from _host_zone(monkeypatch, "JST-9")


def test_host_zone_resolves_to_zero(host_utc):
    timezone = resolve_timezone("UTC")
    assert timezone.offset == 0
    assert timezone.error is None


def test_fixed_zone_offset_relative_to_host(host_utc):
    # Asia/Tokyo has no daylight saving: UTC+9
    timezone = resolve_timezone("Asia/Tokyo")
    assert timezone.offset == -9 * HOUR


def test_offset_tracks_host_offset(host_utc):
    assert host_offset() == 0


def test_unknown_zone_degrades():
    timezone = resolve_timezone("Mars/Olympus_Mons")
    assert timezone.name == "Mars/Olympus_Mons"
    assert timezone.offset == 0
    assert timezone.error == 'Failed to use timezone "Mars/Olympus_Mons"'


def test_malformed_zone_degrades():
    timezone = resolve_timezone("../etc/passwd")
    assert timezone.offset == 0
    assert timezone.error


@pytest.mark.parametrize("name", ["America", "Europe/", 42])
def test_any_lookup_failure_degrades(name):
    timezone = resolve_timezone(name)
    assert timezone.offset == 0
    assert timezone.error == f'Failed to use timezone "{name}"'


def test_falls_back_to_tz_environment(host_utc):
    timezone = resolve_timezone()
    assert timezone.name == "UTC"
    assert timezone.offset == 0


def test_environment_fallback_records_host_offset(host_tokyo):
    timezone = resolve_timezone()
    assert timezone.name == "JST-9"
    assert timezone.offset == 9 * HOUR
    assert timezone.error is None


def test_explicit_host_zone_is_relative(host_tokyo):
    assert resolve_timezone("Asia/Tokyo").offset == 0


def test_no_name_anywhere(monkeypatch):
    monkeypatch.delenv("TZ", raising=False)
    assert resolve_timezone(None) is None


def test_to_dict_omits_missing_error():
    assert TimezoneConfig("UTC").to_dict() == {"name": "UTC", "offset": 0}
    assert TimezoneConfig("X", error="bad").to_dict() == {"name": "X", "offset": 0, "error": "bad"}
