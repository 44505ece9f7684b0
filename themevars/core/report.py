"""YAML run reports for mapping results."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import yaml

from themevars.core.mapper import MappingResult


def build_report(result: MappingResult, *, source: str = "", target: str = "",
                 theme_file: str = "") -> dict:
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "theme_file": theme_file,
        "source_collection": source,
        "target_collection": target,
        "success": result.success,
        "message": result.message,
        "counts": {
            "created": len(result.created),
            "updated": len(result.updated),
            "removed": len(result.removed),
            "failed": len(result.failed),
        },
        "created": [asdict(outcome) for outcome in result.created],
        "updated": [asdict(outcome) for outcome in result.updated],
        "failed": [asdict(outcome) for outcome in result.failed],
        "removed": list(result.removed),
    }


def write_report(result: MappingResult, path: str | Path, **context: str) -> Path:
    """Write a mapping result to ``path`` as YAML and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    report = build_report(result, **context)
    path.write_text(yaml.dump(report, default_flow_style=False, sort_keys=False),
                    encoding="utf-8")
    return path
