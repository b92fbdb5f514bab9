"""Output helpers for the fixed-deposit calculator.

This module renders deposit results, explanations and frequency comparisons as
plain text for the terminal, and converts results into JSON-serialisable
dictionaries for export. Values are rounded here and nowhere else.
"""

from __future__ import annotations

import textwrap
from typing import Any, Dict, Iterable, Optional, Tuple

import click

from .data_models import CompoundingFrequency, FDParameters, FDResult
from .utils import format_currency


def print_summary(params: FDParameters, result: FDResult) -> None:
    """Print the submitted deposit and its computed figures."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Principal          : {format_currency(params.principal)}")
    click.echo(f"Tenure             : {params.tenure_years:g} years")
    click.echo(f"Interest rate      : {params.annual_rate_percent:g}%")
    click.echo(f"Compounding        : {CompoundingFrequency.parse(params.compounding_frequency).value}")
    click.echo(f"Maturity amount    : {format_currency(result.maturity_amount)}")
    click.echo(f"Total interest     : {format_currency(result.total_interest)}")
    click.echo("-" * 72)


def print_explanation(text: str, ok: bool = True) -> None:
    """Print the explanation block, wrapped to the summary width."""
    click.echo("Explanation")
    click.echo("-" * 72)
    for paragraph in text.splitlines() or [""]:
        click.echo(textwrap.fill(paragraph, width=72) if paragraph else "")
    if not ok:
        click.secho("(explanation service unavailable)", fg="yellow")
    click.echo("-" * 72)


def print_comparison(rows: Iterable[Tuple[CompoundingFrequency, FDResult]]) -> None:
    """Print maturity and interest for each compounding frequency.

    The last column shows the extra interest over annual compounding, which is
    the first row.
    """
    click.echo("Comparison")
    click.echo("=" * 72)
    click.echo(f"{'Frequency':15s} {'Maturity':>18s} {'Interest':>18s} {'vs Annually':>16s}")
    baseline: Optional[float] = None
    for frequency, result in rows:
        if baseline is None:
            baseline = result.total_interest
        diff = result.total_interest - baseline
        click.echo(
            f"{frequency.value:15s} {result.maturity_amount:18,.2f} "
            f"{result.total_interest:18,.2f} {diff:16,.2f}"
        )
    click.echo("=" * 72)


def result_to_dict(
    params: FDParameters, result: FDResult, explanation: Optional[str] = None
) -> Dict[str, Any]:
    """Convert a calculation into a dictionary suitable for ``json.dump``."""
    data: Dict[str, Any] = {
        "parameters": {
            "principal": params.principal,
            "tenure_years": params.tenure_years,
            "annual_rate_percent": params.annual_rate_percent,
            "compounding_frequency": CompoundingFrequency.parse(params.compounding_frequency).value,
        },
        "result": {
            "maturity_amount": round(result.maturity_amount, 2),
            "total_interest": round(result.total_interest, 2),
        },
    }
    if explanation is not None:
        data["explanation"] = explanation
    return data
