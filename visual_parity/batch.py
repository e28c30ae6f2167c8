"""Batch comparison of many image pairs with a bounded worker pool."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from visual_parity.capture.loaders import load_image
from visual_parity.comparison.engine import compare
from visual_parity.errors import ParityError
from visual_parity.models.config import ParityConfig
from visual_parity.models.result import ComparisonResult
from visual_parity.reporter.heatmap import save_heatmap
from visual_parity.reporter.json_report import generate_json_report

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")


@dataclass(frozen=True)
class ImagePair:
    name: str
    reference_path: Path
    actual_path: Path


class BatchItem(BaseModel):
    name: str
    result: Optional[ComparisonResult] = None
    error: Optional[str] = None
    report_path: Optional[str] = None
    heatmap_path: Optional[str] = None
    duration_seconds: float = 0.0


def pairs_from_dirs(reference_dir: Path, actual_dir: Path) -> list[ImagePair]:
    """Pair images with the same file name in both directories."""
    pairs = []
    for ref in sorted(reference_dir.iterdir()):
        if ref.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        actual = actual_dir / ref.name
        if not actual.exists():
            logger.warning("No actual image for %s, skipping", ref.name)
            continue
        pairs.append(ImagePair(name=ref.stem, reference_path=ref, actual_path=actual))
    return pairs


class BatchRunner:
    """Runs comparisons concurrently, at most ``max_workers`` at a time."""

    def __init__(self, config: ParityConfig):
        self.config = config
        self.output_dir = Path(config.report_output_dir)

    def run(self, pairs: list[ImagePair]) -> list[BatchItem]:
        if not pairs:
            return []
        start = time.time()
        workers = max(1, min(self.config.max_workers, len(pairs)))
        logger.info("Comparing %d pairs with %d workers", len(pairs), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            items = list(pool.map(self._run_one, pairs))
        failed = sum(1 for item in items if item.error)
        logger.info("Batch complete in %.1fs: %d compared, %d failed",
                    time.time() - start, len(items) - failed, failed)
        return items

    def _run_one(self, pair: ImagePair) -> BatchItem:
        start = time.time()
        try:
            reference = load_image(pair.reference_path)
            actual = load_image(pair.actual_path)
            result = compare(reference, actual, config=self.config.comparison)
        except (ParityError, OSError) as e:
            logger.warning("Comparison failed for %s: %s", pair.name, e)
            return BatchItem(name=pair.name, error=str(e), duration_seconds=round(time.time() - start, 3))

        heatmap_path = None
        report_path = self.output_dir / f"{pair.name}.json"
        try:
            if self.config.write_heatmaps and result.diff_mask is not None and result.pixel_difference_count:
                heatmap_path = save_heatmap(
                    result.diff_mask, self.output_dir / f"{pair.name}_diff.png", background=reference
                )
            generate_json_report(result, report_path, heatmap_path)
        except OSError as e:
            logger.warning("Could not write report for %s: %s", pair.name, e)
            return BatchItem(
                name=pair.name,
                result=result,
                error=f"Report write failed: {e}",
                duration_seconds=round(time.time() - start, 3),
            )

        return BatchItem(
            name=pair.name,
            result=result,
            report_path=str(report_path),
            heatmap_path=str(heatmap_path) if heatmap_path else None,
            duration_seconds=round(time.time() - start, 3),
        )
