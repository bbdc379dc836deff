"""Core inputs and the context shared by every plugin task."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from profile_metrics.aggregation import parse_dflags
from profile_metrics.formatting import Collaborators

DISPLAYS = ("regular", "large", "columns")


def _as_bool(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "no", "off", "0")
    return bool(value)


@dataclass(frozen=True)
class CoreInputs:
    animations: bool = True
    display: str = "regular"
    timezone: Optional[str] = None
    base64: bool = True
    dflags: tuple[str, ...] = ()

    @classmethod
    def from_query(cls, q: Mapping[str, Any]) -> "CoreInputs":
        display = q.get("config.display") or "regular"
        return cls(
            animations=_as_bool(q.get("config.animations"), True),
            display=display if display in DISPLAYS else "regular",
            timezone=q.get("config.timezone") or None,
            base64=_as_bool(q.get("config.base64"), True),
            dflags=tuple(parse_dflags(q.get("debug.flags"))),
        )


@dataclass
class ComputationContext:
    """
    State shared by reference between the core and every plugin task.

    Plugins may read everything here but write only their own result slot
    (``data["plugins"][name]``, overwritten by the dispatcher with the final
    outcome) and shared counters in ``computed``. ``dispatched`` records the
    plugin names already launched against this context.
    """

    login: str
    q: Mapping[str, Any]
    data: dict
    computed: dict
    config: CoreInputs = field(default_factory=CoreInputs)
    rest: Any = None
    graphql: Any = None
    queries: Any = None
    account: str = "user"
    imports: Collaborators = field(default_factory=Collaborators)
    dispatched: set[str] = field(default_factory=set)
