"""Run artifact helpers for extraction reporting."""

from __future__ import annotations

import json
import os
from collections import Counter
from datetime import datetime, timezone
from typing import Any


def summarize_diagnostics(diagnostics: list[dict[str, Any]]) -> dict[str, int]:
    """Count diagnostics by kind, sorted by kind."""
    counts = Counter(str(item.get("kind", "unknown")) for item in diagnostics if isinstance(item, dict))
    return dict(sorted(counts.items()))


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON run report and return its path.

    Reports carrying a ``diagnostics`` list also get ``diagnostic_counts``.
    """
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    diagnostics = payload.get("diagnostics")
    if isinstance(diagnostics, list):
        payload.setdefault("diagnostic_counts", summarize_diagnostics(diagnostics))
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path


def write_graph_json(payload: dict[str, Any], output_file: str) -> str:
    """Write a serialized component graph and return its absolute path."""
    output_file = os.path.abspath(output_file)
    os.makedirs(os.path.dirname(output_file), exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    return output_file
