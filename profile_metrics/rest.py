"""Minimal REST collaborator, used to read OAuth scope headers."""

from __future__ import annotations

import asyncio
from typing import Optional

import requests

from profile_metrics.config import GITHUB_API, REQUEST_TIMEOUT, USER_AGENT


class RestClient:
    def __init__(
        self,
        token: str = "",
        session: Optional[requests.Session] = None,
        base_url: str = GITHUB_API,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        })
        if token:
            self.session.headers["Authorization"] = f"token {token}"

    def _send(self, route: str, **kwargs) -> requests.Response:
        method, _, path = route.partition(" ")
        resp = self.session.request(
            method.upper(),
            f"{self.base_url}{path or '/'}",
            timeout=REQUEST_TIMEOUT,
            **kwargs,
        )
        resp.raise_for_status()
        return resp

    async def request(self, route: str, **kwargs) -> requests.Response:
        """Send ``"VERB /path"`` without blocking the event loop."""
        return await asyncio.to_thread(self._send, route, **kwargs)
