"""
User rank: a weighted blend of cumulative distribution shapes over six
activity counters, mapped to a percentile and a letter grade.

Count-like activity (commits, PRs, issues, reviews) uses an exponential
CDF, popularity (stars, followers) a heavier-tailed log-normal
approximation. Lower percentile means a better grade.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

import numpy as np

from profile_metrics.config import (
    COMMITS_MEDIAN,
    COMMITS_MEDIAN_ALL,
    LEVELS,
    MEDIANS,
    THRESHOLDS,
    WEIGHTS,
)


@dataclass(frozen=True)
class RankResult:
    level: str
    percentile: float

    def to_dict(self) -> dict:
        return asdict(self)


def exponential_cdf(x: float) -> float:
    return 1.0 - 2.0 ** -max(x, 0.0)


def log_normal_cdf(x: float) -> float:
    # approximation
    x = max(x, 0.0)
    return x / (1.0 + x)


def calculate_rank(
    *,
    commits: float,
    prs: float,
    issues: float,
    reviews: float,
    stars: float,
    followers: float,
    all_commits: bool = False,
) -> RankResult:
    """Rank a user from raw activity counters."""
    commits_median = COMMITS_MEDIAN_ALL if all_commits else COMMITS_MEDIAN

    cdfs = np.array([
        exponential_cdf(commits   / commits_median),
        exponential_cdf(prs       / MEDIANS["prs"]),
        exponential_cdf(issues    / MEDIANS["issues"]),
        exponential_cdf(reviews   / MEDIANS["reviews"]),
        log_normal_cdf(stars      / MEDIANS["stars"]),
        log_normal_cdf(followers  / MEDIANS["followers"]),
    ])
    weights = np.array([
        WEIGHTS["commits"],
        WEIGHTS["prs"],
        WEIGHTS["issues"],
        WEIGHTS["reviews"],
        WEIGHTS["stars"],
        WEIGHTS["followers"],
    ])

    rank = 1.0 - float(np.average(cdfs, weights=weights))
    percentile = float(np.clip(rank * 100, 0.0, 100.0))

    # first threshold the percentile does not exceed
    index = int(np.searchsorted(THRESHOLDS, percentile, side="left"))
    return RankResult(level=LEVELS[index], percentile=percentile)
