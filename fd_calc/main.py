"""Command-line interface for the fixed-deposit calculator.

This module uses the ``click`` library to implement a multi-command interface.
Users can compute the maturity of a deposit together with a plain-language
explanation, or compare the same deposit across all compounding frequencies.
Results can be printed to the terminal or exported to JSON.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import click

from .data_models import CompoundingFrequency, FDParameters
from .engine import FDValidationError, compare_frequencies, compute_maturity, validate_parameters
from .explainer import ExplanationClient, ExplainerConfig, explain_results
from .formatter import print_comparison, print_explanation, print_summary, result_to_dict
from .utils import configure_logging, parse_amount, parse_percent

FREQUENCY_CHOICES = ["annually", "semi-annually", "quarterly", "monthly"]

_FIELD_OPTIONS = {
    "principal": "--principal",
    "tenure": "--tenure",
    "interest_rate": "--rate",
    "compounding_frequency": "--frequency",
}


def _amount(ctx: click.Context, param: click.Parameter, value: str) -> float:
    try:
        return parse_amount(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param)


def _percent(ctx: click.Context, param: click.Parameter, value: str) -> float:
    try:
        return parse_percent(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param)


def build_parameters_from_options(
    principal: float, tenure: float, rate: float, frequency: str
) -> FDParameters:
    """Build ``FDParameters`` from parsed options.

    The deposit is validated here so that range errors are reported as usage
    errors naming the offending option, before anything is computed.
    """
    params = FDParameters(
        principal=principal,
        tenure_years=tenure,
        annual_rate_percent=rate,
        compounding_frequency=CompoundingFrequency.parse(frequency),
    )
    try:
        validate_parameters(params)
    except FDValidationError as exc:
        raise _usage_error(exc)
    return params


def _usage_error(exc: FDValidationError) -> click.BadParameter:
    """Report the first invalid field as a bad value for its option."""
    field, message = next(iter(exc.errors.items()))
    return click.BadParameter(message, param_hint=_FIELD_OPTIONS.get(field, field))


def export_to_json(path: Path, data: dict) -> None:
    """Export a calculation to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def deposit_options(func):
    """Attach the principal, tenure and rate options shared by every command."""
    func = click.option(
        "--rate", "-r", "rate", required=True, callback=_percent, help="Annual interest rate (percent)"
    )(func)
    func = click.option(
        "--tenure", "-t", "tenure", required=True, type=float, help="Deposit tenure in years"
    )(func)
    func = click.option(
        "--principal", "-p", "principal", required=True, callback=_amount, help="Amount deposited (e.g. 100000 or 100k)"
    )(func)
    return func


@click.group()
@click.option("--log-level", default=lambda: os.environ.get("FD_LOG_LEVEL", "INFO"), show_default="INFO", help="Logging level")
def cli(log_level: str) -> None:
    """A fixed-deposit calculator with plain-language explanations."""
    configure_logging(log_level)


@cli.command()
@deposit_options
@click.option(
    "--frequency",
    "-f",
    "frequency",
    type=click.Choice(FREQUENCY_CHOICES, case_sensitive=False),
    default="annually",
    show_default=True,
    help="Compounding frequency",
)
@click.option("--explain/--no-explain", default=True, help="Request a plain-language explanation")
@click.option("--timeout", type=float, help="Explanation request timeout in seconds")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def calculate(
    principal: float,
    tenure: float,
    rate: float,
    frequency: str,
    explain: bool,
    timeout: Optional[float],
    output: Optional[str],
) -> None:
    """Compute the maturity amount and interest earned for a deposit."""
    params = build_parameters_from_options(principal, tenure, rate, frequency)
    try:
        result = compute_maturity(params)
    except FDValidationError as exc:
        raise _usage_error(exc)

    explanation = None
    if explain:
        config = ExplainerConfig.from_env()
        if timeout is not None:
            config = ExplainerConfig(config.api_url, config.api_key, config.model, timeout)
        explanation = explain_results(params, result, ExplanationClient(config))

    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Unsupported output format; use .json", param_hint="--output")
        export_to_json(path, result_to_dict(params, result, explanation.text if explanation else None))
        click.echo(f"Result exported to {path}")
        return

    print_summary(params, result)
    if explanation is not None:
        print_explanation(explanation.text, ok=explanation.ok)


@cli.command()
@deposit_options
def compare(principal: float, tenure: float, rate: float) -> None:
    """Compare one deposit across every compounding frequency.

    Example:

        fd-calc compare -p 100k -t 5 -r 6.5
    """
    build_parameters_from_options(principal, tenure, rate, "annually")
    try:
        rows = compare_frequencies(principal, tenure, rate)
    except FDValidationError as exc:
        raise _usage_error(exc)
    print_comparison(rows)


if __name__ == "__main__":
    cli()
