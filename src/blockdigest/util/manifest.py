"""Run manifest helpers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Mapping


def write_manifest(step: str, payload: Mapping[str, Any], *, root: Path) -> Path:
    """Record a CLI run as JSON under root/logs/run_manifests, named by step and UTC time."""

    manifests_dir = Path(root) / "logs" / "run_manifests"
    manifests_dir.mkdir(parents=True, exist_ok=True)
    now = datetime.now(UTC)
    dest = manifests_dir / f"{step}_{now.strftime('%Y%m%dT%H%M%S%fZ')}.json"
    record = {"step": step, "finished_at": now.isoformat(timespec="seconds"), **payload}
    dest.write_text(json.dumps(record, indent=2, default=str), encoding="utf-8")
    return dest


__all__ = ["write_manifest"]
