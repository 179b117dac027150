"""Run artifact helpers for operational reporting."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

DEFAULT_REPORT_DIR = "output/run_reports"


def build_run_report(
    header_path: str,
    namespace: str,
    stats: Any,
    artifacts: Mapping[str, str],
    status: str = "ok",
    error: Optional[str] = None,
    api: Any = None,
) -> dict[str, Any]:
    """Collect the per-run summary written next to the generated artifacts.

    Args:
        header_path: Public header the run parsed.
        namespace: Target namespace.
        stats: An ``AssemblyStats``/``ExtractionStats`` (``to_dict`` plus a
            ``dropped`` list), or None when the run failed before extraction.
        artifacts: Artifact kind to written path.
        status: ``ok`` or ``failed``.
        error: Failure message for failed runs.
        api: The assembled ``Api``; its class and method totals are added
            under ``api``.
    """
    report: dict[str, Any] = {
        "header": header_path,
        "namespace": namespace,
        "status": status,
        "artifacts": dict(artifacts),
    }
    if stats is not None:
        report["counts"] = stats.to_dict()
        report["dropped"] = [item.to_dict() for item in stats.dropped]
    if api is not None:
        report["api"] = api.to_dict()
    if error is not None:
        report["error"] = error
    return report


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = DEFAULT_REPORT_DIR,
) -> str:
    """Write a JSON run report and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
