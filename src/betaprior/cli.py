import logging
import typer
from pathlib import Path
from typing import Optional

from betaprior.core.calibration_engine import CalibrationFactory, IntegerGridBeta, build_request
from betaprior.core.math_engine import prior_summary
from betaprior.domain.exceptions import InvalidRequest
from betaprior.domain.schemas import CalibrationResult
from betaprior.infrastructure.reports import generate_markdown_report
from betaprior.models import DEFAULT_CONFIG

__version__ = "0.1.0"

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """betaprior: elicit Beta priors from a mean and a credible interval."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.captureWarnings(True)


@app.command()
def version() -> None:
    """Print version."""
    typer.echo(f"betaprior {__version__}")


def _echo_result(result: CalibrationResult) -> None:
    request = result.request
    summary = prior_summary(result.best_shape_a, result.best_shape_b, request.target_coverage)

    typer.echo(f"Selected prior: Beta({result.best_shape_a}, {result.best_shape_b})")
    typer.echo(f"Equivalent sample size: {result.equivalent_sample_size}")
    typer.echo(
        f"Coverage of [{request.lower_bound}, {request.upper_bound}]: "
        f"{result.best_coverage:.6f} (target {request.target_coverage})"
    )
    typer.echo(f"Squared deviation: {result.minimal_deviation:.3e}")
    typer.echo(
        f"Equal-tailed interval: [{summary['interval_lower']:.4f}, {summary['interval_upper']:.4f}]"
    )
    typer.echo(f"Unique minimum: {'yes' if result.is_minimum_unique else 'no'}")


@app.command()
def calibrate(
    mean: float = typer.Option(..., "--mean", help="Target prior mean, in (0, 1)."),
    lower: float = typer.Option(..., "--lower", help="Lower bound of the credible interval."),
    upper: float = typer.Option(..., "--upper", help="Upper bound of the credible interval."),
    coverage: float = typer.Option(DEFAULT_CONFIG.target_coverage, "--coverage", help="Target probability mass inside the interval."),
    max_ess: int = typer.Option(DEFAULT_CONFIG.limits.max_equivalent_sample_size, "--max-ess", help="Largest equivalent sample size (a + b) to consider."),
    max_a: int = typer.Option(DEFAULT_CONFIG.limits.max_shape_a, "--max-a", help="Largest shape a to consider."),
    method: str = typer.Option(DEFAULT_CONFIG.method, "--method", help="Calibration method: [grid]"),
    output_report: Optional[Path] = typer.Option(None, help="Output report in Markdown format."),
    output_csv: Optional[Path] = typer.Option(None, help="Output CSV with every evaluated candidate."),
    output_json: Optional[Path] = typer.Option(None, help="Save the fitted calibration as JSON."),
) -> None:
    """
    Searches integer Beta shape parameters matching the target mean and
    the target coverage of [lower, upper].
    """
    try:
        calibration = CalibrationFactory.create(method)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        request = build_request(mean, lower, upper, p=coverage, max_ess=max_ess, max_a=max_a)
        result = calibration.fit(request)
    except InvalidRequest as e:
        typer.echo(f"Error: invalid calibration request: {e}", err=True)
        raise typer.Exit(code=1)

    _echo_result(result)

    if output_report:
        generate_markdown_report(result, output_report)
        typer.echo(f"Calibration report generated at: {output_report}")

    if output_csv:
        calibration.evaluations_frame().to_csv(output_csv, index=False)
        typer.echo(f"Candidate evaluations saved to: {output_csv}")

    if output_json:
        output_json.write_text(calibration.save(), encoding="utf-8")
        typer.echo(f"Calibration saved to: {output_json}")


@app.command()
def inspect(
    path: Path = typer.Argument(..., exists=True, readable=True, help="JSON file written by 'calibrate --output-json'."),
) -> None:
    """Print the summary of a saved calibration."""
    try:
        calibration = IntegerGridBeta.load(path.read_text(encoding="utf-8"))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    _echo_result(calibration.result)


if __name__ == "__main__":
    app()
