"""CLI entry point for visual-parity."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from visual_parity.batch import BatchRunner, pairs_from_dirs
from visual_parity.capture.loaders import load_image, load_records
from visual_parity.comparison.design_system import validate_design_system
from visual_parity.comparison.engine import compare as run_comparison
from visual_parity.comparison.palette import extract_palette
from visual_parity.errors import ParityError
from visual_parity.models.config import TOLERANCE_PRESETS, DesignSystem, ParityConfig, ToleranceConfig
from visual_parity.models.result import ComparisonResult, ComplianceReport
from visual_parity.reporter.heatmap import save_heatmap
from visual_parity.reporter.json_report import generate_json_report
from visual_parity.reporter.summary import build_summary

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "parity-config.json"

BUCKET_STYLES = {
    "excellent": "green",
    "good": "green",
    "acceptable": "yellow",
    "poor": "red",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: str, tolerance_level: Optional[str] = None) -> ParityConfig:
    if not Path(path).exists():
        logger.debug("No config at %s, using defaults", path)
        cfg = ParityConfig()
    else:
        cfg = ParityConfig.load(path)
    if tolerance_level:
        # Preset replaces the configured tolerances wholesale
        cfg.comparison = cfg.comparison.model_copy(
            update={"tolerances": ToleranceConfig.preset(tolerance_level)}
        )
        logger.debug("Using %s tolerances", tolerance_level)
    return cfg


tolerance_level_option = click.option(
    "--tolerance-level",
    type=click.Choice(list(TOLERANCE_PRESETS)),
    help="Use a preset instead of the configured tolerances",
)


def _print_result(result: ComparisonResult) -> None:
    if result.empty:
        console.print(f"[yellow]{result.recommendation}[/yellow]")
        return

    table = Table(title="Comparison Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    if result.score is not None:
        style = BUCKET_STYLES.get(result.bucket, "white")
        table.add_row("Score", f"[{style}]{result.score.score:.2f} ({result.bucket})[/{style}]")
    if result.ssim is not None:
        table.add_row("Size", f"{result.width}x{result.height}")
        table.add_row("SSIM", f"{result.ssim:.4f} ({result.similarity})")
        table.add_row("Pixel diff", f"{result.pixel_difference_count} px ({result.pixel_difference_percent:.2f}%)")
        table.add_row("Color diff", f"{result.color_difference_percent:.2f}%")
        table.add_row("Within threshold", "yes" if result.within_threshold else "[red]no[/red]")
    if result.property_summary is not None:
        summary = result.property_summary
        table.add_row("Property checks", f"{summary.passed_checks}/{summary.total_checks} passed")
        table.add_row("Critical", str(summary.critical_count))
    console.print(table)

    if result.differences:
        diffs = Table(title="Differences")
        diffs.add_column("#")
        diffs.add_column("Property")
        diffs.add_column("Reference")
        diffs.add_column("Actual")
        diffs.add_column("Severity")
        for entry in result.differences:
            color = "red" if entry.severity == "critical" else "yellow"
            diffs.add_row(
                str(entry.element_index),
                entry.property_path,
                str(entry.value_a),
                str(entry.value_b),
                f"[{color}]{entry.severity}[/{color}]",
            )
        console.print(diffs)
    console.print(f"\n{result.recommendation}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Compare rendered elements against design references."""
    setup_logging(verbose)


@cli.command()
@click.option("--output", "-o", default=DEFAULT_CONFIG, help="Config file path")
def init(output: str) -> None:
    """Create a default configuration file."""
    config_path = Path(output)
    if config_path.exists():
        if not click.confirm(f"{output} already exists. Overwrite?"):
            return
    ParityConfig().save(config_path)
    console.print(f"[green]Created {config_path}[/green]")


@cli.command()
@click.argument("reference", type=click.Path(exists=True, dir_okay=False))
@click.argument("actual", type=click.Path(exists=True, dir_okay=False))
@click.option("--records-a", type=click.Path(exists=True, dir_okay=False), help="Reference style records JSON")
@click.option("--records-b", type=click.Path(exists=True, dir_okay=False), help="Actual style records JSON")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--report", "-r", type=click.Path(dir_okay=False), help="Write a JSON report here")
@click.option("--heatmap", type=click.Path(dir_okay=False), help="Write the difference heat map PNG here")
@click.option("--strict", is_flag=True, help="Exit non-zero unless within threshold")
@tolerance_level_option
def compare(
    reference: str,
    actual: str,
    records_a: Optional[str],
    records_b: Optional[str],
    config: str,
    report: Optional[str],
    heatmap: Optional[str],
    strict: bool,
    tolerance_level: Optional[str],
) -> None:
    """Compare two images, and optionally their style records."""
    if (records_a is None) != (records_b is None):
        console.print("[red]--records-a and --records-b must be given together[/red]")
        sys.exit(2)
    try:
        cfg = _load_config(config, tolerance_level)
        ref_buffer, act_buffer = load_image(reference), load_image(actual)
        recs_a = load_records(records_a) if records_a else None
        recs_b = load_records(records_b) if records_b else None
        result = run_comparison(ref_buffer, act_buffer, recs_a, recs_b, cfg.comparison)
    except (ParityError, OSError, ValueError) as e:
        console.print(f"Comparison failed: {e}", style="red", markup=False)
        sys.exit(1)

    _print_result(result)
    heatmap_path = None
    if heatmap and result.diff_mask is not None and not result.empty:
        heatmap_path = save_heatmap(result.diff_mask, Path(heatmap), background=ref_buffer)
        console.print(f"  Heat map: [blue]{heatmap_path}[/blue]")
    if report:
        generate_json_report(result, Path(report), heatmap_path)
        console.print(f"  JSON report: [blue]{report}[/blue]")
    if strict and not result.within_threshold:
        sys.exit(1)


@cli.command()
@click.argument("records_a", type=click.Path(exists=True, dir_okay=False))
@click.argument("records_b", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--report", "-r", type=click.Path(dir_okay=False), help="Write a JSON report here")
@tolerance_level_option
def properties(
    records_a: str,
    records_b: str,
    config: str,
    report: Optional[str],
    tolerance_level: Optional[str],
) -> None:
    """Compare two style record files under the configured tolerances."""
    try:
        cfg = _load_config(config, tolerance_level)
        result = run_comparison(
            records_a=load_records(records_a),
            records_b=load_records(records_b),
            config=cfg.comparison,
        )
    except (ParityError, OSError, ValueError) as e:
        console.print(f"Comparison failed: {e}", style="red", markup=False)
        sys.exit(1)
    _print_result(result)
    if report:
        generate_json_report(result, Path(report))
        console.print(f"  JSON report: [blue]{report}[/blue]")


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option("--limit", "-n", default=10, show_default=True, help="Number of colors")
def palette(image: str, limit: int) -> None:
    """Show the dominant colors of an image."""
    colors = extract_palette(load_image(image), limit)
    if not colors:
        console.print("[yellow]No opaque pixels[/yellow]")
        return
    table = Table(title=f"Palette: {image}")
    table.add_column("Color")
    table.add_column("RGB")
    table.add_column("Pixels", justify="right")
    table.add_column("Share", justify="right")
    for color in colors:
        table.add_row(
            f"[{color.hex}]██[/] {color.hex}",
            ", ".join(str(c) for c in color.rgb),
            str(color.count),
            f"{color.percentage:.2f}%",
        )
    console.print(table)


def _print_compliance(report: ComplianceReport) -> None:
    style = {"Excellent": "green", "Good": "green", "Acceptable": "yellow"}.get(report.compliance_level, "red")
    console.print(
        f"Design system compliance: [{style}]{report.compliance_rate:.2f}% ({report.compliance_level})[/{style}]"
        f"  {report.passed_checks}/{report.total_checks} checks over {report.total_elements} elements"
    )
    if report.violations:
        table = Table(title="Violations")
        table.add_column("#")
        table.add_column("Element")
        table.add_column("Property")
        table.add_column("Value")
        for check in report.violations:
            table.add_row(
                str(check.element_index),
                Text(check.element),
                f"{check.category}.{check.property_name}",
                str(check.actual),
            )
        console.print(table)
    for recommendation in report.recommendations:
        console.print(f"  - {recommendation}")


@cli.command("design-system")
@click.argument("records", type=click.Path(exists=True, dir_okay=False))
@click.argument("tokens", type=click.Path(exists=True, dir_okay=False))
@click.option("--report", "-r", type=click.Path(dir_okay=False), help="Write a JSON report here")
@click.option("--min-rate", type=float, help="Exit non-zero below this compliance rate")
def design_system(records: str, tokens: str, report: Optional[str], min_rate: Optional[float]) -> None:
    """Check style records against a design system's allowed tokens."""
    try:
        result = validate_design_system(load_records(records), DesignSystem.load(tokens))
    except (ParityError, OSError, ValueError) as e:
        console.print(f"Validation failed: {e}", style="red", markup=False)
        sys.exit(1)

    _print_compliance(result)
    if report:
        path = Path(report)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(result.model_dump_json(indent=2))
        console.print(f"  JSON report: [blue]{report}[/blue]")
    if min_rate is not None and result.compliance_rate < min_rate:
        sys.exit(1)


@cli.command()
@click.argument("reference_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("actual_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--workers", "-w", type=int, help="Override max concurrent comparisons")
@tolerance_level_option
def batch(
    reference_dir: str,
    actual_dir: str,
    config: str,
    workers: Optional[int],
    tolerance_level: Optional[str],
) -> None:
    """Compare every same-named image in two directories."""
    cfg = _load_config(config, tolerance_level)
    if workers is not None:
        cfg.max_workers = workers
    pairs = pairs_from_dirs(Path(reference_dir), Path(actual_dir))
    if not pairs:
        console.print("[yellow]No matching image pairs found[/yellow]")
        return

    items = BatchRunner(cfg).run(pairs)
    table = Table(title="Batch Results")
    table.add_column("Name", style="bold")
    table.add_column("Score")
    table.add_column("SSIM")
    table.add_column("Pixel diff")
    table.add_column("Report")
    failed = 0
    for item in items:
        if item.error or item.result is None:
            failed += 1
            table.add_row(item.name, "[red]error[/red]", "", "", item.error or "")
            continue
        result = item.result
        if result.empty:
            table.add_row(item.name, "[yellow]empty[/yellow]", "", "", item.report_path or "")
            continue
        style = BUCKET_STYLES.get(result.bucket, "white")
        table.add_row(
            item.name,
            f"[{style}]{result.score.score:.2f}[/{style}]",
            f"{result.ssim:.4f}",
            f"{result.pixel_difference_percent:.2f}%",
            item.report_path or "",
        )
    console.print(table)
    if failed:
        sys.exit(1)


@cli.command()
@click.argument("report_file", type=click.Path(exists=True, dir_okay=False))
def summary(report_file: str) -> None:
    """Print a text summary of a saved JSON report."""
    result = ComparisonResult.model_validate_json(Path(report_file).read_text())
    console.print(build_summary(result), markup=False, highlight=False)


if __name__ == "__main__":
    cli()
