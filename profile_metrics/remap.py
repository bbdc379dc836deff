"""
Seasonal calendar colour remap (``--halloween`` / ``--winter``).

The 14-day calendar is rewritten immediately. Calendar-like plugin outputs
are rewritten by a deferred task that waits for the plugin tasks pending
at the moment it was scheduled, and only those: a plugin spawned after the
snapshot can finish after the remap and keep its original colours.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from profile_metrics.config import REMAP_FLAGS
from profile_metrics.tasks import TaskGroup

log = logging.getLogger(__name__)


def remap_flag(dflags: list[str]) -> Optional[str]:
    """Colour name of the first remap flag present, in flag order."""
    for flag in dflags:
        if flag in REMAP_FLAGS:
            return flag.replace("--", "", 1)
    return None


def color_table(color: str) -> list[tuple[re.Pattern, str]]:
    # order matters: the variable rename runs before hex colours become variables
    return [
        (re.compile(r"--color-calendar-graph"), f"--color-calendar-{color}-graph"),
        (re.compile(r"#9be9a8", re.IGNORECASE), f"var(--color-calendar-{color}-graph-day-L1-bg)"),
        (re.compile(r"#40c463", re.IGNORECASE), f"var(--color-calendar-{color}-graph-day-L2-bg)"),
        (re.compile(r"#30a14e", re.IGNORECASE), f"var(--color-calendar-{color}-graph-day-L3-bg)"),
        (re.compile(r"#216e39", re.IGNORECASE), f"var(--color-calendar-{color}-graph-day-L4-bg)"),
    ]


def color_replacer(color: str) -> Callable[[str], str]:
    table = color_table(color)

    def replace(content: str) -> str:
        for pattern, replacement in table:
            content = pattern.sub(replacement, content)
        return content

    return replace


def remap_plugins(plugins: dict, replace: Callable[[str], str]) -> None:
    isocalendar = plugins.get("isocalendar")
    if isinstance(isocalendar, dict) and isocalendar.get("svg"):
        isocalendar["svg"] = replace(isocalendar["svg"])

    calendar = plugins.get("calendar")
    if isinstance(calendar, dict) and calendar.get("years"):
        for year in calendar["years"]:
            for week in year.get("weeks", []):
                for day in week.get("contributionDays", []):
                    if day.get("color"):
                        day["color"] = replace(day["color"])


def schedule_color_remap(data: dict, pending: TaskGroup, color: str, login: str = ""):
    """Remap the computed calendar now and plugin outputs once pending work settles."""
    log.debug(f"metrics/compute/{login} > applying dflag --{color}")
    replace = color_replacer(color)

    for day in data["computed"].get("calendar", []):
        if day.get("color"):
            day["color"] = replace(day["color"])

    waiting = pending.snapshot()

    async def barrier() -> dict:
        await pending.join_snapshot(waiting)
        remap_plugins(data.get("plugins", {}), replace)
        return {"name": f"dflag.{color}", "result": True}

    return pending.spawn(barrier(), name=f"dflag.{color}")
