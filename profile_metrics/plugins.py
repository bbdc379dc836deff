"""
Plugin registry and dispatcher.

Every requested plugin runs as its own task against the shared
computation context. Each plugin name is dispatched at most once per
context, and its slot in ``data["plugins"]`` ends up holding the value it
returned or the exception it raised, whatever the plugin wrote there
while running. One plugin failing never stops the dispatcher or its siblings.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Iterator, Optional

from profile_metrics.errors import SlotConflictError, UnknownPluginError
from profile_metrics.tasks import TaskGroup

log = logging.getLogger(__name__)

Plugin = Callable[[Any, dict], Awaitable[Any]]


@dataclass(frozen=True)
class PluginOutcome:
    name: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def result(self) -> Any:
        return self.value if self.succeeded else self.error


class PluginRegistry(Mapping):
    """Name to plugin mapping, in registration order."""

    def __init__(self, plugins: Optional[Mapping[str, Plugin]] = None):
        self._plugins: dict[str, Plugin] = dict(plugins or {})

    def register(self, name: str, plugin: Plugin) -> Plugin:
        self._plugins[name] = plugin
        return plugin

    def requested(self, q: Mapping[str, Any]) -> list[str]:
        """Registered names enabled in ``q``; unknown requests are ignored."""
        return [name for name in self._plugins if q.get(name)]

    def build(self, names: Iterable[str]) -> "PluginRegistry":
        """Sub-registry for ``names``, rejecting names nobody registered."""
        names = list(names)
        unknown = [n for n in names if n not in self._plugins]
        if unknown:
            raise UnknownPluginError(unknown)
        return PluginRegistry({n: self._plugins[n] for n in names})

    def __getitem__(self, name: str) -> Plugin:
        return self._plugins[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)


async def run_plugin(
    context: Any,
    name: str,
    plugin: Plugin,
    options: dict,
) -> PluginOutcome:
    login = context.login
    try:
        log.debug(f"metrics/compute/{login}/plugins > {name} > started")
        value = await plugin(context, options)
        log.debug(f"metrics/compute/{login}/plugins > {name} > completed")
        return PluginOutcome(name=name, value=value)
    except Exception as error:  # noqa: BLE001
        log.debug(f"metrics/compute/{login}/plugins > {name} > completed (error)")
        return PluginOutcome(name=name, error=error)


async def notify(callbacks: Any, login: str, outcome: PluginOutcome) -> None:
    """Fire the optional plugin completion callback; failures are only logged."""
    callback = getattr(callbacks, "plugin", None)
    if callback is None and isinstance(callbacks, Mapping):
        callback = callbacks.get("plugin")
    if callback is None:
        return
    try:
        ret = callback(login, outcome.name, outcome.succeeded, outcome.result)
        if inspect.isawaitable(ret):
            await ret
    except Exception as error:  # noqa: BLE001
        log.debug(f"metrics/compute/{login}/plugins/callbacks > {outcome.name} > {error}")


def dispatch_plugins(
    context: Any,
    registry: PluginRegistry,
    pending: TaskGroup,
    *,
    options: Optional[Mapping[str, dict]] = None,
    extras: Any = False,
    sandbox: bool = False,
    callbacks: Any = None,
) -> list[str]:
    """
    Spawn one task per requested, registered plugin onto ``pending``.

    Each task resolves to ``{"name": name, "result": result}`` once the
    plugin's slot is written and the callback has run. Completion order is
    unspecified; the outcome set is complete only when ``pending`` drains.
    """
    options = options or {}
    slots = context.data["plugins"]
    names = registry.requested(context.q)
    repeated = [name for name in names if name in context.dispatched]
    if repeated:
        raise SlotConflictError(f"plugin(s) already dispatched: {', '.join(repeated)}")
    context.dispatched.update(names)

    async def task(name: str) -> dict:
        plugin_options = {"extras": extras, "sandbox": sandbox, **(options.get(name) or {})}
        outcome = await run_plugin(context, name, registry[name], plugin_options)
        slots[name] = outcome.result
        result = {"name": name, "result": slots[name]}
        log.debug(f"metrics/compute/{context.login}/plugins > {result!r:.256}")
        await notify(callbacks, context.login, outcome)
        return result

    for name in names:
        pending.spawn(task(name), name=f"plugin.{name}")
    return names
