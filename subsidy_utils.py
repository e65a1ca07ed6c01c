"""
Subsidy Utilities - Benchmark Selection and Plan Pricing

Helpers shared by the plan list, plan detail and comparison views:
- SLCSP (Second Lowest Cost Silver Plan) benchmark selection
- Premium choice for tobacco users
- Net (subsidized) premium per plan
- Sorting plan results by premium, deductible or out-of-pocket maximum
"""

import math
from typing import Dict, Any, Iterable, List, Optional

from constants import (
    BENCHMARK_METAL_LEVEL,
    DEFAULT_BENCHMARK_PREMIUM,
    DEFAULT_SORT,
    NON_SILVER_BENCHMARK_FACTOR,
    SORT_OPTIONS,
)
from subsidy_calculator import SubsidyResult, round_currency
from utils import parse_currency


def _is_missing(value) -> bool:
    # pandas hands back NaN for NULL numeric columns
    return value is None or (isinstance(value, float) and math.isnan(value))


# =============================================================================
# PREMIUMS
# =============================================================================

def premium_for_profile(rate: Optional[Dict[str, Any]], tobacco: bool = False) -> Optional[float]:
    """
    Get the monthly premium from a rate row for the selected tobacco profile.

    Tobacco users pay individual_tobacco_rate when the issuer files one,
    otherwise the standard individual_rate applies.

    Args:
        rate: Dict with individual_rate and individual_tobacco_rate (or None)
        tobacco: Whether the applicant uses tobacco

    Returns:
        Monthly premium, or None if no rate is available
    """
    if not rate:
        return None

    # Rate PUF columns are text ("$412.50", "Not Applicable")
    tobacco_rate = parse_currency(rate.get('individual_tobacco_rate'))
    if tobacco and tobacco_rate:
        return tobacco_rate

    return parse_currency(rate.get('individual_rate'))


# =============================================================================
# BENCHMARK (SLCSP)
# =============================================================================

def select_benchmark_premium(silver_premiums: Iterable[Optional[float]],
                             default: Optional[float] = DEFAULT_BENCHMARK_PREMIUM) -> Optional[float]:
    """
    Select the benchmark premium (second-lowest Silver) for a rating area.

    Args:
        silver_premiums: Monthly premiums of Silver plans for the profile
        default: Value returned when no Silver premium is available

    Returns:
        Second-lowest premium; the only premium if there is just one;
        default if there are none
    """
    premiums = sorted(p for p in map(parse_currency, silver_premiums) if p is not None)

    if len(premiums) >= 2:
        return premiums[1]
    if premiums:
        return premiums[0]
    return default


def benchmark_from_plans(plans: List[Dict[str, Any]],
                         default: Optional[float] = DEFAULT_BENCHMARK_PREMIUM) -> Optional[float]:
    """
    Select the benchmark from priced plan records (uses 'metal_level' and 'monthly_premium').
    """
    silver_premiums = [
        plan.get('monthly_premium')
        for plan in plans
        if plan.get('metal_level') == BENCHMARK_METAL_LEVEL
    ]
    return select_benchmark_premium(silver_premiums, default=default)


def estimate_benchmark_for_plan(metal_level: str, monthly_premium: float) -> float:
    """
    Approximate the benchmark from a single plan's premium.

    Used on the plan detail view where the rest of the rating area is not
    loaded. A Silver plan is its own benchmark; other tiers are scaled up.
    """
    if metal_level == BENCHMARK_METAL_LEVEL:
        return monthly_premium
    return monthly_premium * NON_SILVER_BENCHMARK_FACTOR


# =============================================================================
# NET PREMIUM
# =============================================================================

def apply_subsidy(monthly_premium: Optional[float],
                  subsidy_result: Optional[SubsidyResult]) -> Optional[int]:
    """
    Calculate the premium after the estimated subsidy.

    Args:
        monthly_premium: Plan's monthly premium
        subsidy_result: Result from estimate_subsidy(), or None

    Returns:
        Whole-dollar net premium (minimum 0), or None if no premium or the
        household is not eligible
    """
    premium = parse_currency(monthly_premium)
    if premium is None or subsidy_result is None or not subsidy_result.eligible:
        return None
    return max(0, round_currency(premium - subsidy_result.subsidy))


# =============================================================================
# SORTING
# =============================================================================

def _sort_value(value, missing: float) -> float:
    # Zero, blank and "Not Applicable" all count as unknown
    parsed = parse_currency(value)
    if not parsed:
        return missing
    return parsed


def effective_premium(plan: Dict[str, Any], subsidy_result: Optional[SubsidyResult] = None) -> float:
    """Premium used for price sorting: net premium when available, else gross."""
    subsidized = plan.get('subsidized_premium')
    if subsidy_result is not None and subsidy_result.eligible and isinstance(subsidized, (int, float)) \
            and not _is_missing(subsidized):
        return float(subsidized)
    return _sort_value(plan.get('monthly_premium'), math.inf)


def sort_plans(plans: List[Dict[str, Any]], sort_option: Optional[str] = None,
               subsidy_result: Optional[SubsidyResult] = None) -> List[Dict[str, Any]]:
    """
    Sort plan records for display.

    Unknown options fall back to price_asc. Plans with no premium or
    deductible sort after those that have one in ascending orders.

    Args:
        plans: Plan records (dicts)
        sort_option: One of SORT_OPTIONS
        subsidy_result: Household subsidy, so price sorts use net premium

    Returns:
        New sorted list
    """
    option = sort_option if sort_option in SORT_OPTIONS else DEFAULT_SORT

    if option == 'price_desc':
        key = lambda p: -effective_premium(p, subsidy_result)  # noqa: E731
    elif option == 'deductible_asc':
        key = lambda p: _sort_value(p.get('medical_deductible_individual'), math.inf)  # noqa: E731
    elif option == 'deductible_desc':
        key = lambda p: -_sort_value(p.get('medical_deductible_individual'), 0)  # noqa: E731
    elif option == 'oop_asc':
        key = lambda p: _sort_value(p.get('medical_moop_individual'), math.inf)  # noqa: E731
    else:
        key = lambda p: effective_premium(p, subsidy_result)  # noqa: E731

    return sorted(plans, key=key)
