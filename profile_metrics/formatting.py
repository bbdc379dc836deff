"""Formatter and image encoder collaborators."""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import requests

from profile_metrics.config import REQUEST_TIMEOUT, USER_AGENT
from profile_metrics.errors import MetricsError

log = logging.getLogger(__name__)

_BYTE_UNITS = ["B", "kB", "MB", "GB", "TB", "PB"]


class Formatter:
    """Display helpers shared by the core and plugins."""

    def bytes(self, n: float) -> str:
        value = float(n or 0)
        for unit in _BYTE_UNITS:
            if abs(value) < 1000 or unit == _BYTE_UNITS[-1]:
                break
            value /= 1000
        text = f"{value:.1f}".rstrip("0").rstrip(".")
        return f"{text} {unit}"

    def date(
        self,
        value: datetime | str,
        *,
        date: bool = True,
        time: bool = False,
    ) -> str:
        if isinstance(value, str):
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        parts = []
        if date:
            parts.append(f"{value.day} {value:%b %Y}")
        if time:
            parts.append(value.strftime("%H:%M:%S"))
        return ", ".join(parts)

    def s(self, n: float) -> str:
        return "" if n == 1 else "s"

    def error(self, error: BaseException) -> MetricsError:
        """Wrap an arbitrary exception into the caller-facing error type."""
        if isinstance(error, MetricsError):
            return error
        wrapped = MetricsError(f"{type(error).__name__}: {error}")
        wrapped.__cause__ = error
        return wrapped


async def passthrough_image(url: Optional[str]) -> Optional[str]:
    return url


class ImageEncoder:
    """Fetch an image and inline it as a base64 data URI."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    def _fetch(self, url: str) -> str:
        resp = self.session.get(url, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        mime = resp.headers.get("Content-Type", "image/png").split(";")[0]
        return f"data:{mime};base64,{base64.b64encode(resp.content).decode('ascii')}"

    async def __call__(self, url: Optional[str]) -> Optional[str]:
        if not url:
            return None
        try:
            return await asyncio.to_thread(self._fetch, url)
        except requests.RequestException as exc:
            log.debug(f"failed to encode image {url}: {exc}")
            return None


@dataclass
class Collaborators:
    """External helpers handed to the core and to every plugin."""

    format: Formatter = field(default_factory=Formatter)
    imgb64: Callable[[Optional[str]], Awaitable[Optional[str]]] = passthrough_image


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
