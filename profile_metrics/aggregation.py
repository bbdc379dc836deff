"""
Aggregation pass.

Sequential reduction of the fetched dataset into the shared ``computed``
structure read by plugins and templates.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd

from profile_metrics.config import CALENDAR_DAYS, REPOSITORY_COUNTERS
from profile_metrics.formatting import Formatter, utcnow

log = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def new_computed() -> dict:
    return {
        "commits":      0,
        "sponsorships": 0,
        "licenses":     {"favorite": "", "used": {}, "about": {}},
        "token":        {},
        "repositories": {
            **{counter: 0 for counter in REPOSITORY_COUNTERS},
            "forks":  0,
            "forked": 0,
        },
    }


def parse_dt(s: Optional[str]) -> Optional[datetime]:
    if not s:
        return None
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Repositories & licenses
# ─────────────────────────────────────────────────────────────────────────────

def sum_repositories(computed: dict, nodes: list[dict]) -> None:
    """Add per-repository counters, forks and license usage into ``computed``."""
    totals = computed["repositories"]
    nodes = [n for n in (nodes or []) if n]
    if not nodes:
        return

    df = pd.json_normalize(nodes)
    for counter in REPOSITORY_COUNTERS:
        column = f"{counter}.totalCount"
        if column in df:
            totals[counter] += int(df[column].fillna(0).sum())
    if "forkCount" in df:
        totals["forks"] += int(df["forkCount"].fillna(0).sum())
    if "isFork" in df:
        totals["forked"] += int((df["isFork"] == True).sum())  # noqa: E712

    licenses = computed["licenses"]
    for node in nodes:
        info = node.get("licenseInfo")
        if not info:
            continue
        spdx = info.get("spdxId")
        licenses["used"][spdx] = licenses["used"].get(spdx, 0) + 1
        licenses["about"][spdx] = info


def favorite_license(used: dict[str, int]) -> str:
    """Most used license; ties go to the one seen first."""
    ranked = sorted(used.items(), key=lambda x: -x[1])
    return ranked[0][0] if ranked else ""


def disk_usage(repositories: dict, formatter: Formatter) -> str:
    # totalDiskUsage is reported in kilobytes
    return formatter.bytes((repositories.get("totalDiskUsage") or 0) * 1000)


# ─────────────────────────────────────────────────────────────────────────────
# Contributions
# ─────────────────────────────────────────────────────────────────────────────

def total_commits(contributions: dict) -> int:
    """Commit contributions, restricted (private) ones included."""
    return (
        (contributions.get("totalCommitContributions") or 0)
        + (contributions.get("restrictedContributionsCount") or 0)
    )


def recent_calendar(calendar: dict, days: int = CALENDAR_DAYS) -> list[dict]:
    weeks = (calendar.get("contributionCalendar") or {}).get("weeks") or []
    flat = [dict(day) for week in weeks for day in (week.get("contributionDays") or [])]
    return flat[-days:]


# ─────────────────────────────────────────────────────────────────────────────
# Registration
# ─────────────────────────────────────────────────────────────────────────────

def registration_age(
    created_at: datetime | str,
    formatter: Optional[Formatter] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Account age, read as a calendar offset from the Unix epoch.

    Returns ``registered`` ({years, months}, years fractional), a human
    ``registration`` string and ``cakeday`` (at least one year old and no
    leftover months or days).
    """
    formatter = formatter or Formatter()
    created = parse_dt(created_at) if isinstance(created_at, str) else created_at
    diff = _EPOCH + ((now or utcnow()) - created)

    years = diff.year - _EPOCH.year
    months = diff.month - _EPOCH.month
    days = diff.day - _EPOCH.day

    if years:
        registration = f"{years} year{formatter.s(years)} ago"
    elif months:
        registration = f"{months} month{formatter.s(months)} ago"
    else:
        registration = f"{days} day{formatter.s(days)} ago"

    return {
        "registered":   {"years": years + days / 365.25, "months": months},
        "registration": registration,
        "cakeday":      years >= 1 and months == 0 and days == 0,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Token & debug flags
# ─────────────────────────────────────────────────────────────────────────────

async def token_scopes(rest: Any, notoken: bool = False, login: str = "") -> list[str]:
    """OAuth scopes granted to the token, or ``[]`` if they cannot be read."""
    if notoken or rest is None:
        return []
    try:
        resp = await rest.request("HEAD /")
        header = resp.headers.get("x-oauth-scopes")
        return header.split(", ") if header else []
    except Exception as exc:  # noqa: BLE001
        log.debug(f"metrics/compute/{login} > failed to read token scopes: {exc}")
        return []


def parse_dflags(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(flag) for flag in value]
