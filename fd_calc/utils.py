"""Utility functions for the fixed-deposit calculator.

This module provides helpers for turning user input into floats and for
formatting amounts for display. Inputs may contain thousands separators and the
shorthand suffixes ``k`` (thousand), ``l``/``lakh`` (hundred thousand) and ``m``
(million).
"""

from __future__ import annotations

import logging
import math

_SUFFIXES = (
    ("lakh", 100_000.0),
    ("k", 1_000.0),
    ("l", 100_000.0),
    ("m", 1_000_000.0),
)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("100000", "100,000.50") and shorthand such as
    "100k" or "1.5m". Returns a float.

    Raises
    ------
    ValueError
        If the string is empty or not a finite number.
    """
    cleaned = str(value).strip().lower().replace(",", "").replace("_", "")
    factor = 1.0
    for suffix, multiplier in _SUFFIXES:
        if cleaned.endswith(suffix):
            factor = multiplier
            cleaned = cleaned[: -len(suffix)].strip()
            break
    try:
        number = float(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not math.isfinite(number):
        raise ValueError(f"Invalid numeric value: {value}")
    return number


def parse_number(value: str) -> float:
    """Parse a plain finite number such as a tenure in years. No suffixes."""
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid number: {value}") from exc
    if not math.isfinite(number):
        raise ValueError(f"Invalid number: {value}")
    return number


def parse_percent(value: str) -> float:
    """Parse a rate such as "6.5" or "6.5%" into percent units.

    Unlike an amount, a rate is always read as a percentage: "6.5" means 6.5 %.
    """
    cleaned = str(value).strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    try:
        return parse_number(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid percentage: {value}") from exc


def format_currency(amount: float, symbol: str = "$") -> str:
    """Format ``amount`` with a currency symbol, grouping and two decimals."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging once for the CLI and web entry points."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
