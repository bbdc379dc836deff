from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from profile_metrics.formatting import Collaborators, Formatter


def make_day(date: str, color: str = "#9be9a8", count: int = 1) -> dict:
    return {"date": date, "color": color, "contributionCount": count}


def make_user(
    *,
    repositories: list[dict] | None = None,
    created_at: str = "2015-03-01T00:00:00Z",
    days: int = 21,
) -> dict:
    start = datetime(2024, 1, 1)
    calendar_days = [
        make_day((start + timedelta(days=i)).strftime("%Y-%m-%d"))
        for i in range(days)
    ]
    weeks = [
        {"contributionDays": calendar_days[i:i + 7]}
        for i in range(0, len(calendar_days), 7)
    ]
    return {
        "login": "octocat",
        "avatarUrl": "https://avatars.example/octocat.png",
        "createdAt": created_at,
        "followers": {"totalCount": 10},
        "contributionsCollection": {
            "totalCommitContributions": 900,
            "restrictedContributionsCount": 100,
            "totalPullRequestContributions": 50,
            "totalIssueContributions": 25,
        },
        "calendar": {"contributionCalendar": {"weeks": weeks}},
        "repositories": {
            "totalDiskUsage": 1500,
            "nodes": repositories if repositories is not None else [
                {
                    "stargazers": {"totalCount": 30},
                    "watchers": {"totalCount": 4},
                    "pr_merged": {"totalCount": 2},
                    "forkCount": 3,
                    "isFork": False,
                    "licenseInfo": {"spdxId": "MIT", "name": "MIT License"},
                },
                {
                    "stargazers": {"totalCount": 20},
                    "watchers": {"totalCount": 1},
                    "pr_merged": {"totalCount": 0},
                    "forkCount": 0,
                    "isFork": True,
                    "licenseInfo": None,
                },
            ],
        },
    }


class FakeRest:
    def __init__(self, scopes: str | None = "repo, read:user", fail: bool = False):
        self.scopes = scopes
        self.fail = fail
        self.calls: list[str] = []

    async def request(self, route: str):
        self.calls.append(route)
        if self.fail:
            raise ConnectionError("network unreachable")
        headers = {"x-oauth-scopes": self.scopes} if self.scopes is not None else {}
        return SimpleNamespace(headers=headers)


@pytest.fixture
def user() -> dict:
    return make_user()


@pytest.fixture
def data(user) -> dict:
    return {"user": user}


@pytest.fixture
def imports() -> Collaborators:
    return Collaborators(format=Formatter())


@pytest.fixture
def rest() -> FakeRest:
    return FakeRest()


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
