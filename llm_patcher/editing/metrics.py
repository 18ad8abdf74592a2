"""
Apply metrics — one JSON line per apply or create attempt, kept under the
project so route and decline rates can be reviewed later.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

METRICS_DIR = ".llm_patcher"
METRICS_FILE = "apply_metrics.jsonl"


def metrics_path(project_root: str | None = None) -> str:
    return os.path.join(project_root or os.getcwd(), METRICS_DIR, METRICS_FILE)


def log_apply_metric(data: dict, project_root: str | None = None) -> None:
    """Append *data* (plus a UTC timestamp) to the metrics log.

    A failed write is logged and otherwise ignored; metrics never break
    an apply.
    """
    path = metrics_path(project_root)
    record = {"timestamp": datetime.now(timezone.utc).isoformat(), **data}
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")
    except OSError as exc:
        logger.warning("[Patch] Could not record apply metric: %s", exc)


def _load_records(path: str) -> list[dict]:
    if not os.path.isfile(path):
        return []
    records: list[dict] = []
    with open(path, encoding="utf-8") as f:
        for raw_line in f:
            raw_line = raw_line.strip()
            if not raw_line:
                continue
            try:
                records.append(json.loads(raw_line))
            except json.JSONDecodeError:
                logger.debug("[Patch] Skipping corrupt metrics line: %r", raw_line)
    return records


def read_apply_stats(last_n: int = 50, project_root: str | None = None) -> dict:
    """Summarise the *last_n* most recent attempts.

    Returns
    -------
    dict
        ``total`` plus percentages: ``success_rate``, ``decline_rate`` and
        ``routes`` (share of each route).
    """
    try:
        records = _load_records(metrics_path(project_root))[-last_n:]
    except OSError as exc:
        logger.warning("[Patch] Could not read apply metrics: %s", exc)
        records = []

    total = len(records)
    if total == 0:
        return {"total": 0, "success_rate": 0.0, "decline_rate": 0.0, "routes": {}}

    statuses = Counter(r.get("status") for r in records)
    routes = Counter(r.get("route", "unknown") for r in records)

    def pct(count: int) -> float:
        return count / total * 100

    return {
        "total": total,
        "success_rate": pct(statuses["applied"]),
        "decline_rate": pct(statuses["declined"]),
        "routes": {route: pct(n) for route, n in routes.most_common()},
    }
