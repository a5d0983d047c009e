import logging
from datetime import datetime
from pathlib import Path
from typing import List

from betaprior.domain.schemas import CalibrationResult
from betaprior.core.math_engine import prior_summary

logger = logging.getLogger(__name__)


def render_markdown_report(result: CalibrationResult) -> str:
    request = result.request
    summary = prior_summary(result.best_shape_a, result.best_shape_b, request.target_coverage)

    lines: List[str] = [
        "# Beta Prior Calibration Report",
        "",
        f"Generated: {datetime.now().isoformat(timespec='seconds')}",
        "",
        "## Request",
        "",
        "| Parameter | Value |",
        "|---|---|",
        f"| Target mean | {request.target_mean:.4f} |",
        f"| Interval | [{request.lower_bound:.4f}, {request.upper_bound:.4f}] |",
        f"| Target coverage | {request.target_coverage:.4f} |",
        f"| Max equivalent sample size | {request.max_equivalent_sample_size} |",
        f"| Max shape a | {request.max_shape_a} |",
        f"| Searched a | 1..{request.effective_max_shape_a} |",
        "",
        "## Selected Prior",
        "",
        f"**Beta({result.best_shape_a}, {result.best_shape_b})**, "
        f"equivalent sample size {result.equivalent_sample_size}",
        "",
        "| Quantity | Value |",
        "|---|---|",
        f"| Coverage of [{request.lower_bound:.4f}, {request.upper_bound:.4f}] | {result.best_coverage:.6f} |",
        f"| Squared deviation | {result.minimal_deviation:.3e} |",
        f"| Mean | {summary['mean']:.6f} |",
        f"| Std. deviation | {summary['std']:.6f} |",
        f"| Mode | {'n/a' if summary['mode'] is None else format(summary['mode'], '.6f')} |",
        f"| Equal-tailed {request.target_coverage:.0%} interval | "
        f"[{summary['interval_lower']:.4f}, {summary['interval_upper']:.4f}] |",
        "",
    ]

    if result.is_minimum_unique:
        lines.append("The minimum is unique.")
    else:
        lines.append("**Warning:** the minimum is not unique; the smallest shape a was kept.")
    lines.append("")

    if result.skipped_shape_a:
        lines.append(
            f"Skipped {len(result.skipped_shape_a)} degenerate candidates (b < 1): "
            f"a = {', '.join(str(a) for a in result.skipped_shape_a)}"
        )
        lines.append("")

    lines += [
        "## Candidates",
        "",
        "| a | b | a + b | Coverage | Squared deviation |",
        "|---|---|---|---|---|",
    ]
    for e in result.evaluations:
        a_cell = f"**{e.shape_a}**" if e.shape_a == result.best_shape_a else str(e.shape_a)
        lines.append(
            f"| {a_cell} | {e.shape_b} | {e.equivalent_sample_size} | "
            f"{e.coverage:.6f} | {e.squared_deviation:.3e} |"
        )
    lines.append("")

    return "\n".join(lines)


def generate_markdown_report(result: CalibrationResult, output_path: Path) -> None:
    """Writes the calibration audit report to `output_path`."""
    output_path = Path(output_path)
    output_path.write_text(render_markdown_report(result), encoding="utf-8")
    logger.info("Report written to %s", output_path)
