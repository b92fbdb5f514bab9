"""Data models for the fixed-deposit calculator.

This module defines the compounding frequency enumeration and the dataclasses
representing the deposit a user submits and the figures derived from it. The
wire contract with the explanation service lives in ``fd_calc.explainer``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class CompoundingFrequency(str, Enum):
    """How often interest is added to the principal within a year."""

    ANNUALLY = "Annually"
    SEMI_ANNUALLY = "Semi-annually"
    QUARTERLY = "Quarterly"
    MONTHLY = "Monthly"

    @classmethod
    def parse(cls, value: str) -> "CompoundingFrequency":
        """Return the frequency matching ``value``.

        Matching ignores case, spaces, hyphens and underscores, so
        ``"Semi-annually"``, ``"SemiAnnually"`` and ``"semi_annually"`` are all
        accepted. ``"yearly"`` and ``"half-yearly"`` are recognised as well.

        Raises
        ------
        ValueError
            If the value does not name a known frequency.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for ch in " -_":
            key = key.replace(ch, "")
        frequency = _FREQUENCY_ALIASES.get(key)
        if frequency is None:
            raise ValueError(f"Unknown compounding frequency: {value}")
        return frequency


_FREQUENCY_ALIASES: Dict[str, CompoundingFrequency] = {
    "annually": CompoundingFrequency.ANNUALLY,
    "annual": CompoundingFrequency.ANNUALLY,
    "yearly": CompoundingFrequency.ANNUALLY,
    "semiannually": CompoundingFrequency.SEMI_ANNUALLY,
    "semiannual": CompoundingFrequency.SEMI_ANNUALLY,
    "halfyearly": CompoundingFrequency.SEMI_ANNUALLY,
    "quarterly": CompoundingFrequency.QUARTERLY,
    "monthly": CompoundingFrequency.MONTHLY,
}


@dataclass(frozen=True)
class FDParameters:
    """The deposit as submitted by the user.

    Attributes
    ----------
    principal: float
        Amount deposited. Must be at least 1.
    tenure_years: float
        Term of the deposit in years. Must be at least 1.
    annual_rate_percent: float
        Nominal annual interest rate in percent, between 0.1 and 100.
    compounding_frequency: CompoundingFrequency
        How often interest is compounded.
    """

    principal: float
    tenure_years: float
    annual_rate_percent: float
    compounding_frequency: CompoundingFrequency = CompoundingFrequency.ANNUALLY


@dataclass(frozen=True)
class FDResult:
    """Figures derived from an ``FDParameters`` instance.

    Values are kept at full precision; rounding happens only when they are
    formatted for display.
    """

    maturity_amount: float
    total_interest: float
