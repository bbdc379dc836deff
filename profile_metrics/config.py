"""Shared constants and environment helpers."""

from __future__ import annotations

import os
from typing import Optional

# ── Ranking ──────────────────────────────────────────────────────────────────
COMMITS_MEDIAN_ALL = 1000
COMMITS_MEDIAN     = 250

MEDIANS = {
    "prs":       50,
    "issues":    25,
    "reviews":   2,
    "stars":     50,
    "followers": 10,
}
WEIGHTS = {
    "commits":   2,
    "prs":       3,
    "issues":    1,
    "reviews":   1,
    "stars":     4,
    "followers": 1,
}

THRESHOLDS = [1, 12.5, 25, 37.5, 50, 62.5, 75, 87.5, 100]
LEVELS     = ["S", "A+", "A", "A-", "B+", "B", "B-", "C+", "C"]

# ── Aggregation ──────────────────────────────────────────────────────────────
CALENDAR_DAYS = 14

REPOSITORY_COUNTERS = [
    "watchers",
    "stargazers",
    "issues_open",
    "issues_closed",
    "pr_open",
    "pr_closed",
    "pr_merged",
    "releases",
    "deployments",
    "environments",
]

# 1x1 transparent PNG
PLACEHOLDER_AVATAR = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)

# ── Debug flags ──────────────────────────────────────────────────────────────
REMAP_FLAGS = ["--halloween", "--winter"]

# ── HTTP ─────────────────────────────────────────────────────────────────────
GITHUB_API      = "https://api.github.com"
REQUEST_TIMEOUT = 30
USER_AGENT      = "profile-metrics"


def get_token() -> str:
    """Token for the REST collaborator, empty when running without one."""
    return os.environ.get("GITHUB_TOKEN", "").strip()


def default_timezone() -> Optional[str]:
    return os.environ.get("TZ") or None
