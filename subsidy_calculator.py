"""
ACA Premium Tax Credit (Subsidy) Estimator

Estimates the monthly advance premium tax credit (APTC) for a household
shopping the Individual marketplace.

Subsidy = Benchmark (SLCSP) - (Annual Income x Applicable Percentage / 12)

Key concepts:
- FPL (Federal Poverty Level): income threshold scaled by household size
- Applicable percentage: share of income the household is expected to pay
  toward the benchmark plan, read off a piecewise-linear curve over FPL %
- SLCSP (Second Lowest Cost Silver Plan): the benchmark premium, selected
  by subsidy_utils.select_benchmark_premium()

Every function takes a SubsidyPolicy so coverage years never share state.
Rounding happens only on the returned values.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any

from subsidy_policy import AboveCapRule, SubsidyPolicy, get_subsidy_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubsidyResult:
    """Estimated subsidy for one household against one benchmark premium."""
    subsidy: int
    fpl_percent: int
    eligible: bool
    monthly_contribution: int

    # Unrounded applicable percentage (decimal), None when not eligible
    applicable_percentage: Optional[float] = None
    coverage_year: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON / template consumers."""
        return {
            'subsidy': self.subsidy,
            'fpl_percent': self.fpl_percent,
            'eligible': self.eligible,
            'monthly_contribution': self.monthly_contribution,
            'applicable_percentage': self.applicable_percentage,
            'coverage_year': self.coverage_year,
        }


def round_currency(value: float) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _resolve(policy: Optional[SubsidyPolicy]) -> SubsidyPolicy:
    return policy if policy is not None else get_subsidy_policy()


def federal_poverty_level(household_size: int, policy: Optional[SubsidyPolicy] = None) -> float:
    """
    Get the Federal Poverty Level for a household size.

    Sizes below 1 are treated as a household of one.

    Args:
        household_size: Number of people in household
        policy: Coverage-year policy (default year when omitted)

    Returns:
        Annual FPL in dollars
    """
    policy = _resolve(policy)
    additional_people = max(0, household_size - 1)
    return policy.fpl_base + additional_people * policy.fpl_per_additional_person


def federal_poverty_level_percent(income: float, household_size: int,
                                  policy: Optional[SubsidyPolicy] = None) -> float:
    """
    Household income as a percentage of FPL (e.g. 200.0 for 200% FPL).

    Args:
        income: Annual household income in dollars
        household_size: Number of people in household
        policy: Coverage-year policy

    Returns:
        Unrounded FPL percentage
    """
    return (income / federal_poverty_level(household_size, policy)) * 100


def get_applicable_percentage(fpl_percent: float,
                              policy: Optional[SubsidyPolicy] = None) -> Optional[float]:
    """
    Get the applicable percentage of income for a given FPL percentage.

    Bands are checked in ascending order and the first band whose upper
    bound is >= fpl_percent wins, so an exact boundary uses the lower band.

    Args:
        fpl_percent: Household income as percentage of FPL
        policy: Coverage-year policy

    Returns:
        Applicable percentage as decimal (e.g. 0.021 for 2.10%), or None if
        the household is not eligible for a premium tax credit
    """
    policy = _resolve(policy)

    if fpl_percent < policy.min_fpl_percent:
        return None

    if fpl_percent > policy.max_fpl_percent:
        if policy.above_cap_rule == AboveCapRule.CAP:
            return policy.above_cap_percentage
        return None

    for band in policy.bands:
        if fpl_percent <= band.fpl_upper:
            return band.interpolate(fpl_percent)

    # Unreachable: fpl_percent <= max_fpl_percent matches the last band
    return None


def estimate_subsidy(income: float, household_size: int, benchmark_monthly_premium: float,
                     policy: Optional[SubsidyPolicy] = None) -> SubsidyResult:
    """
    Estimate the monthly premium tax credit for a household.

    Below the bottom band the household contributes nothing (another program
    applies). Past the top band under an INELIGIBLE rule it pays the full
    benchmark premium.

    Args:
        income: Annual household income in dollars
        household_size: Number of people in household
        benchmark_monthly_premium: Monthly SLCSP premium for the household
        policy: Coverage-year policy (default year when omitted)

    Returns:
        SubsidyResult with whole-dollar amounts
    """
    policy = _resolve(policy)
    fpl_percent = federal_poverty_level_percent(income, household_size, policy)
    applicable_pct = get_applicable_percentage(fpl_percent, policy)

    if applicable_pct is None:
        below_floor = fpl_percent < policy.min_fpl_percent
        logger.debug(
            f"SUBSIDY: {fpl_percent:.1f}% FPL not eligible for {policy.coverage_year} "
            f"({'below' if below_floor else 'above'} range)"
        )
        return SubsidyResult(
            subsidy=0,
            fpl_percent=round_currency(fpl_percent),
            eligible=False,
            monthly_contribution=0 if below_floor else round_currency(benchmark_monthly_premium),
            coverage_year=policy.coverage_year,
        )

    # Expected monthly contribution = annual income x applicable % / 12
    monthly_contribution = (income * applicable_pct) / 12

    # Subsidy covers the gap between the benchmark and the expected contribution
    subsidy = max(0.0, benchmark_monthly_premium - monthly_contribution)

    return SubsidyResult(
        subsidy=round_currency(subsidy),
        fpl_percent=round_currency(fpl_percent),
        eligible=True,
        monthly_contribution=round_currency(monthly_contribution),
        applicable_percentage=applicable_pct,
        coverage_year=policy.coverage_year,
    )
