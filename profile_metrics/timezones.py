"""Timezone resolution relative to the host clock."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from profile_metrics.config import default_timezone

log = logging.getLogger(__name__)


@dataclass
class TimezoneConfig:
    name: str
    offset: int = 0               # milliseconds
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"name": self.name, "offset": self.offset}
        if self.error:
            out["error"] = self.error
        return out


def _millis(delta: Optional[timedelta]) -> int:
    return int((delta or timedelta(0)).total_seconds() * 1000)


def host_offset() -> int:
    """Current UTC offset of the host, in milliseconds."""
    return _millis(datetime.now().astimezone().utcoffset())


def resolve_timezone(name: Optional[str] = None) -> Optional[TimezoneConfig]:
    """
    Resolve ``name`` against the host clock.

    Without a name, the ``TZ`` environment default is recorded with the
    host's own UTC offset instead. With a name, the offset is host offset
    minus zone offset, both read at call time, so the value follows
    daylight-saving transitions on either side and is not stable across
    calls made around a transition. Unresolvable names never
    raise: the offset stays 0 and ``error`` is filled in.
    """
    if not name:
        fallback = default_timezone()
        return TimezoneConfig(name=fallback, offset=host_offset()) if fallback else None

    timezone = TimezoneConfig(name=name)
    try:
        zone_offset = _millis(datetime.now(ZoneInfo(name)).utcoffset())
    except Exception:  # noqa: BLE001
        timezone.error = f'Failed to use timezone "{name}"'
        log.debug(f"failed to use timezone \"{name}\"")
        return timezone

    timezone.offset = host_offset() - zone_offset
    hours = round(timezone.offset / (60 * 60 * 1000))
    log.debug(f"timezone set to {name} ({'+' if timezone.offset > 0 else ''}{hours} hours)")
    return timezone
