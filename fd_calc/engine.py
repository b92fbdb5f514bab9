"""Core calculation engine for the fixed-deposit calculator.

This module validates deposit parameters and applies the compound-interest
formula to them. Everything here is a pure function of its arguments: identical
parameters always produce identical results.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Tuple

from .data_models import CompoundingFrequency, FDParameters, FDResult

logger = logging.getLogger(__name__)

MIN_PRINCIPAL = 1.0
MIN_TENURE_YEARS = 1.0
MIN_RATE_PERCENT = 0.1
MAX_RATE_PERCENT = 100.0

MATURITY_TOO_LARGE = "The maturity amount is too large to compute."

_PERIODS_PER_YEAR: Dict[CompoundingFrequency, int] = {
    CompoundingFrequency.ANNUALLY: 1,
    CompoundingFrequency.SEMI_ANNUALLY: 2,
    CompoundingFrequency.QUARTERLY: 4,
    CompoundingFrequency.MONTHLY: 12,
}


class FDValidationError(ValueError):
    """Raised when deposit parameters fall outside the accepted ranges.

    ``errors`` maps each offending field (``principal``, ``tenure``,
    ``interest_rate``, ``compounding_frequency``) to a user-facing message.
    """

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in self.errors.items()))


def periods_per_year(frequency: CompoundingFrequency) -> int:
    """Return the number of compounding periods in a year for ``frequency``."""
    return _PERIODS_PER_YEAR[CompoundingFrequency.parse(frequency)]


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_parameters(params: FDParameters) -> None:
    """Check every field of ``params`` and report all failures together.

    Raises
    ------
    FDValidationError
        If principal < 1, tenure < 1 year, or the rate lies outside
        [0.1, 100] percent.
    """
    errors: Dict[str, str] = {}

    if not _is_number(params.principal):
        errors["principal"] = "Please enter a valid number."
    elif params.principal < MIN_PRINCIPAL:
        errors["principal"] = "Principal must be at least 1."

    if not _is_number(params.tenure_years):
        errors["tenure"] = "Please enter a valid number."
    elif params.tenure_years < MIN_TENURE_YEARS:
        errors["tenure"] = "Tenure must be at least 1 year."

    if not _is_number(params.annual_rate_percent):
        errors["interest_rate"] = "Please enter a valid number."
    elif params.annual_rate_percent < MIN_RATE_PERCENT:
        errors["interest_rate"] = "Interest rate must be at least 0.1%."
    elif params.annual_rate_percent > MAX_RATE_PERCENT:
        errors["interest_rate"] = "Interest rate cannot exceed 100%."

    try:
        CompoundingFrequency.parse(params.compounding_frequency)
    except ValueError:
        errors["compounding_frequency"] = "Please choose a valid compounding frequency."

    if errors:
        raise FDValidationError(errors)


def compute_maturity(params: FDParameters) -> FDResult:
    """Compute the maturity amount and interest earned for a deposit.

    The formula is:

        A = P * (1 + r / n) ^ (n * t)

    where ``P`` is the principal, ``r`` the annual rate as a fraction, ``n`` the
    number of compounding periods per year and ``t`` the tenure in years. The
    interest earned is ``A - P``. No rounding is applied.

    Raises
    ------
    FDValidationError
        If the parameters are out of range, or the maturity amount does not
        fit in a float.
    """
    validate_parameters(params)
    n = periods_per_year(params.compounding_frequency)
    rate = params.annual_rate_percent / 100.0
    try:
        maturity_amount = params.principal * (1.0 + rate / n) ** (n * params.tenure_years)
    except OverflowError:
        maturity_amount = math.inf
    if not math.isfinite(maturity_amount):
        raise FDValidationError({"tenure": MATURITY_TOO_LARGE})
    total_interest = maturity_amount - params.principal
    logger.debug(
        "Computed maturity %.6f for principal=%s tenure=%s rate=%s n=%d",
        maturity_amount,
        params.principal,
        params.tenure_years,
        params.annual_rate_percent,
        n,
    )
    return FDResult(maturity_amount=maturity_amount, total_interest=total_interest)


def compare_frequencies(
    principal: float, tenure_years: float, annual_rate_percent: float
) -> List[Tuple[CompoundingFrequency, FDResult]]:
    """Compute the same deposit under every compounding frequency.

    Results are returned in the order the frequencies are declared, from
    annual to monthly compounding.
    """
    results: List[Tuple[CompoundingFrequency, FDResult]] = []
    for frequency in CompoundingFrequency:
        params = FDParameters(principal, tenure_years, annual_rate_percent, frequency)
        results.append((frequency, compute_maturity(params)))
    return results
