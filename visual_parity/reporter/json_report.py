"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from visual_parity.models.result import ComparisonResult


def generate_json_report(
    result: ComparisonResult,
    output_path: Path,
    heatmap_path: Optional[Path] = None,
) -> None:
    """Write a machine-readable JSON report."""
    report = result.model_dump(mode="json")
    if heatmap_path is not None:
        report["heatmap_path"] = str(heatmap_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
