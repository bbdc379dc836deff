"""
Metrics computation entry point.

Runs the aggregation pass, launches requested plugins onto the caller's
pending task set and applies debug flags. Returns ``None``: the output is
``data``, mutated in place. The caller drains ``pending`` to collect the
plugin outcomes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from profile_metrics.aggregation import (
    disk_usage,
    favorite_license,
    new_computed,
    recent_calendar,
    registration_age,
    sum_repositories,
    token_scopes,
    total_commits,
)
from profile_metrics.config import PLACEHOLDER_AVATAR
from profile_metrics.context import ComputationContext, CoreInputs
from profile_metrics.formatting import Collaborators, passthrough_image, utcnow
from profile_metrics.plugins import PluginRegistry, dispatch_plugins
from profile_metrics.rank import calculate_rank
from profile_metrics.remap import remap_flag, schedule_color_remap
from profile_metrics.tasks import TaskGroup
from profile_metrics.timezones import resolve_timezone

log = logging.getLogger(__name__)


def resolve_extras(conf: Mapping[str, Any]) -> Any:
    extras = (conf.get("settings") or {}).get("extras") or {}
    if extras.get("features") is not None:
        return extras["features"]
    if extras.get("default") is not None:
        return extras["default"]
    return False


async def compute(
    login: str,
    q: Mapping[str, Any],
    *,
    data: dict,
    conf: Optional[Mapping[str, Any]] = None,
    rest: Any = None,
    graphql: Any = None,
    plugins: Optional[Mapping[str, dict]] = None,
    queries: Any = None,
    account: str = "user",
    convert: Optional[str] = None,
    template: str = "classic",
    callbacks: Any = None,
    pending: TaskGroup,
    imports: Collaborators,
    registry: Optional[PluginRegistry] = None,
) -> None:
    """Compute common metrics for ``login`` into ``data``; see module docstring."""
    try:
        await _compute(
            login, q,
            data=data, conf=conf or {}, rest=rest, graphql=graphql,
            plugins=plugins or {}, queries=queries, account=account,
            callbacks=callbacks, pending=pending, imports=imports,
            registry=registry or PluginRegistry(),
        )
    except Exception as error:
        wrapped = imports.format.error(error)
        if wrapped is error:
            raise
        raise wrapped from error
    return None


async def _compute(
    login, q, *, data, conf, rest, graphql, plugins, queries, account,
    callbacks, pending, imports, registry,
) -> None:
    inputs = CoreInputs.from_query(q)
    settings = conf.get("settings") or {}
    user = data["user"]

    if not inputs.base64:
        log.debug(f"metrics/compute/{login} > base64 for images has been disabled")
        imports.imgb64 = passthrough_image

    computed = new_computed()
    avatar = asyncio.ensure_future(imports.imgb64(user.get("avatarUrl")))
    data["computed"] = computed
    if data.get("plugins") is None:
        data["plugins"] = {}
    log.debug(f"metrics/compute/{login} > formatting common metrics")

    # Timezone
    data.setdefault("config", {})
    timezone = resolve_timezone(inputs.timezone)
    if timezone is not None:
        data["config"]["timezone"] = timezone.to_dict()

    # Display & animations
    data["large"] = inputs.display == "large"
    data["columns"] = inputs.display == "columns"
    data["animated"] = inputs.animations
    log.debug(f"metrics/compute/{login} > animations {'enabled' if inputs.animations else 'disabled'}")

    extras = resolve_extras(conf)
    log.debug(f"metrics/compute/{login} > extras > {extras!r}")

    # Plugins
    context = ComputationContext(
        login=login, q=q, data=data, computed=computed, config=inputs,
        rest=rest, graphql=graphql, queries=queries, account=account,
        imports=imports,
    )
    dispatch_plugins(
        context, registry, pending,
        options=plugins, extras=extras,
        sandbox=settings.get("sandbox", False), callbacks=callbacks,
    )

    # Repositories, licenses, commits
    repositories = user.get("repositories") or {}
    sum_repositories(computed, repositories.get("nodes") or [])
    computed["diskUsage"] = disk_usage(repositories, imports.format)
    computed["licenses"]["favorite"] = favorite_license(computed["licenses"]["used"])

    contributions = user.get("contributionsCollection") or {}
    computed["commits"] += total_commits(contributions)

    computed.update(registration_age(user["createdAt"], imports.format))
    computed["calendar"] = recent_calendar(user.get("calendar") or {})

    computed["ranking"] = calculate_rank(
        all_commits=True,
        commits=computed["commits"],
        prs=contributions.get("totalPullRequestContributions") or 0,
        issues=contributions.get("totalIssueContributions") or 0,
        reviews=computed["repositories"]["pr_merged"],
        stars=computed["repositories"]["stargazers"],
        followers=(user.get("followers") or {}).get("totalCount") or 0,
    ).to_dict()

    computed["avatar"] = (await avatar) or PLACEHOLDER_AVATAR
    computed["token"]["scopes"] = await token_scopes(rest, settings.get("notoken", False), login)

    package = conf.get("package") or {}
    data["meta"] = {
        "version":   package.get("version"),
        "author":    package.get("author"),
        "generated": imports.format.date(utcnow(), date=True, time=True),
    }

    # Debug flags
    dflags = list(inputs.dflags)
    if "--cakeday" in dflags:
        log.debug(f"metrics/compute/{login} > applying dflag --cakeday")
        computed["cakeday"] = True
    color = remap_flag(dflags)
    if color:
        schedule_color_remap(data, pending, color, login)
    if "--error" in dflags:
        log.debug(f"metrics/compute/{login} > applying dflag --error")
        raise RuntimeError("Failed as requested by --error flag")
