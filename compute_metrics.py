#!/usr/bin/env python3
"""
compute_metrics.py

Runs the metrics computation over a pre-fetched user dataset (the GraphQL
``user`` payload saved as JSON), drains every launched task and writes the
enriched data to disk.

Output: metrics_snapshot.json

Usage:
    export GITHUB_TOKEN=ghp_...            # optional, enables token scopes
    export METRICS_QUERY='{"config.timezone": "Europe/Paris"}'
    python compute_metrics.py
"""

import asyncio
import json
import logging
import os
from pathlib import Path

import pandas as pd
import requests

from profile_metrics.compute import compute
from profile_metrics.config import get_token
from profile_metrics.errors import MetricsError
from profile_metrics.formatting import Collaborators, Formatter, ImageEncoder
from profile_metrics.plugins import PluginRegistry
from profile_metrics.rest import RestClient
from profile_metrics.tasks import TaskGroup

# ── Config ───────────────────────────────────────────────────────────────────
DATASET_FILE = os.environ.get("METRICS_DATASET", "dataset.json")
OUTPUT_FILE  = os.environ.get("METRICS_OUTPUT", "metrics_snapshot.json")
LOG_LEVEL    = os.environ.get("METRICS_LOG_LEVEL", "INFO").upper()
VERSION      = "0.1.0"

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger(__name__)


def load_dataset(path: str = DATASET_FILE) -> dict:
    p = Path(path)
    if not p.exists():
        raise EnvironmentError(
            f"'{path}' not found. Save the user's GraphQL payload there "
            "or point METRICS_DATASET at it."
        )
    with p.open() as f:
        payload = json.load(f)
    # accept either {"user": {...}} or the bare user object
    return payload if "user" in payload else {"user": payload}


def load_query() -> dict:
    raw = os.environ.get("METRICS_QUERY", "").strip()
    return json.loads(raw) if raw else {}


def summary_frame(data: dict) -> pd.DataFrame:
    rows = [
        {
            "plugin": name,
            "status": "error" if isinstance(result, BaseException) else "ok",
            "detail": str(result)[:60],
        }
        for name, result in data.get("plugins", {}).items()
    ]
    return pd.DataFrame(rows, columns=["plugin", "status", "detail"])


async def run(data: dict, q: dict, registry: PluginRegistry) -> list:
    token = get_token()
    session = requests.Session()
    login = data["user"].get("login", "")

    imports = Collaborators(format=Formatter(), imgb64=ImageEncoder(session))
    pending = TaskGroup()
    conf = {
        "settings": {"notoken": not token},
        "package":  {"version": VERSION, "author": "profile-metrics"},
    }

    log.info(f"Computing metrics for {login}…")
    await compute(
        login, q,
        data=data, conf=conf, rest=RestClient(token, session),
        pending=pending, imports=imports, registry=registry,
    )
    log.info(f"Waiting on {len(pending)} pending task(s)…")
    return await pending.drain()


def main() -> None:
    data = load_dataset()
    q = load_query()

    try:
        results = asyncio.run(run(data, q, PluginRegistry()))
    except MetricsError as exc:
        log.error(f"Computation failed: {exc}")
        raise SystemExit(1)

    output_path = Path(OUTPUT_FILE)
    with output_path.open("w") as f:
        json.dump(data, f, indent=2, default=str)

    ranking = data["computed"]["ranking"]
    log.info(f"✓ Saved {output_path} ({output_path.stat().st_size / 1024:.1f} KB)")
    log.info(f"  Tasks completed: {len(results)}")
    log.info(f"  Rank:            {ranking['level']} ({ranking['percentile']:.1f}%)")

    df = summary_frame(data)
    if not df.empty:
        print("\n── Plugins ──────────────────────────────────────────────────────────────")
        print(df.to_string(index=False))


if __name__ == "__main__":
    main()
