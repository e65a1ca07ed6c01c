"""
Coverage-Year Subsidy Policies

Each coverage year has its own FPL schedule, applicable percentage table and
rule for households above 400% FPL. Policies are immutable values so several
years can be used side by side (e.g. year-over-year comparison views).

Key concepts:
- FPL schedule: base amount for one person plus a per-person increment
- Contribution bands: piecewise-linear applicable percentage curve
- Above-cap rule: what happens past the top band (no subsidy, or a flat cap)
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

from constants import (
    FPL_2026_BASE,
    FPL_2026_PER_ADDITIONAL_PERSON,
    FPL_2025_BASE,
    FPL_2025_PER_ADDITIONAL_PERSON,
    ACA_APPLICABLE_PERCENTAGE_2026,
    ACA_APPLICABLE_PERCENTAGE_2025,
    ACA_ABOVE_CAP_PERCENTAGE_2025,
    DEFAULT_COVERAGE_YEAR,
)

load_dotenv()

logger = logging.getLogger(__name__)


class AboveCapRule(Enum):
    """
    Treatment of households above the top contribution band.

    INELIGIBLE: no premium tax credit (the "subsidy cliff")
    CAP: contribution capped at a flat percentage of income, no upper limit
    """
    INELIGIBLE = "ineligible"
    CAP = "cap"


@dataclass(frozen=True)
class ContributionBand:
    """One segment of the applicable percentage curve."""
    fpl_lower: float
    fpl_upper: float
    pct_at_lower: float
    pct_at_upper: float

    def interpolate(self, fpl_percent: float) -> float:
        """Linear interpolation between the band's endpoint percentages."""
        if self.fpl_upper == self.fpl_lower:
            return self.pct_at_lower
        ratio = (fpl_percent - self.fpl_lower) / (self.fpl_upper - self.fpl_lower)
        return self.pct_at_lower + ratio * (self.pct_at_upper - self.pct_at_lower)


@dataclass(frozen=True)
class SubsidyPolicy:
    """
    Premium tax credit rules for one coverage year.

    Validated on construction; an inconsistent table raises ValueError
    rather than producing wrong estimates later.
    """
    coverage_year: int
    fpl_base: float
    fpl_per_additional_person: float
    bands: Tuple[ContributionBand, ...]
    above_cap_rule: AboveCapRule = AboveCapRule.INELIGIBLE
    above_cap_percentage: Optional[float] = None

    def __post_init__(self):
        if self.fpl_base <= 0 or self.fpl_per_additional_person <= 0:
            raise ValueError(
                f"{self.coverage_year}: FPL figures must be positive "
                f"(base={self.fpl_base}, per_additional={self.fpl_per_additional_person})"
            )
        if not self.bands:
            raise ValueError(f"{self.coverage_year}: at least one contribution band is required")

        previous = None
        for band in self.bands:
            if band.fpl_upper < band.fpl_lower:
                raise ValueError(
                    f"{self.coverage_year}: band {band.fpl_lower}-{band.fpl_upper} is inverted"
                )
            if band.pct_at_upper < band.pct_at_lower:
                raise ValueError(
                    f"{self.coverage_year}: band {band.fpl_lower}-{band.fpl_upper} decreases"
                )
            if previous is not None:
                if band.fpl_lower != previous.fpl_upper:
                    raise ValueError(
                        f"{self.coverage_year}: bands are not contiguous at "
                        f"{previous.fpl_upper} / {band.fpl_lower}"
                    )
                if band.pct_at_lower < previous.pct_at_upper:
                    raise ValueError(
                        f"{self.coverage_year}: contribution decreases at {band.fpl_lower}% FPL"
                    )
            previous = band

        if self.above_cap_rule == AboveCapRule.CAP and self.above_cap_percentage is None:
            raise ValueError(f"{self.coverage_year}: CAP rule requires above_cap_percentage")

    @classmethod
    def from_table(cls, coverage_year: int, fpl_base: float, fpl_per_additional_person: float,
                   table, above_cap_rule: AboveCapRule = AboveCapRule.INELIGIBLE,
                   above_cap_percentage: Optional[float] = None) -> "SubsidyPolicy":
        """Build a policy from (lower, upper, pct_lower, pct_upper) tuples."""
        return cls(
            coverage_year=coverage_year,
            fpl_base=fpl_base,
            fpl_per_additional_person=fpl_per_additional_person,
            bands=tuple(ContributionBand(*row) for row in table),
            above_cap_rule=above_cap_rule,
            above_cap_percentage=above_cap_percentage,
        )

    @property
    def min_fpl_percent(self) -> float:
        """Lowest eligible FPL percentage (bottom of the first band)."""
        return self.bands[0].fpl_lower

    @property
    def max_fpl_percent(self) -> float:
        """Top of the last band; above it the above-cap rule applies."""
        return self.bands[-1].fpl_upper


POLICY_2026 = SubsidyPolicy.from_table(
    coverage_year=2026,
    fpl_base=FPL_2026_BASE,
    fpl_per_additional_person=FPL_2026_PER_ADDITIONAL_PERSON,
    table=ACA_APPLICABLE_PERCENTAGE_2026,
    above_cap_rule=AboveCapRule.INELIGIBLE,
)

POLICY_2025 = SubsidyPolicy.from_table(
    coverage_year=2025,
    fpl_base=FPL_2025_BASE,
    fpl_per_additional_person=FPL_2025_PER_ADDITIONAL_PERSON,
    table=ACA_APPLICABLE_PERCENTAGE_2025,
    above_cap_rule=AboveCapRule.CAP,
    above_cap_percentage=ACA_ABOVE_CAP_PERCENTAGE_2025,
)

SUBSIDY_POLICIES: Dict[int, SubsidyPolicy] = {
    POLICY_2025.coverage_year: POLICY_2025,
    POLICY_2026.coverage_year: POLICY_2026,
}


def get_default_coverage_year() -> int:
    """
    Coverage year from the COVERAGE_YEAR environment variable.

    Falls back to DEFAULT_COVERAGE_YEAR when unset or not a number.
    """
    raw = os.getenv("COVERAGE_YEAR", "").strip()
    if not raw:
        return DEFAULT_COVERAGE_YEAR
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid COVERAGE_YEAR={raw!r}, using {DEFAULT_COVERAGE_YEAR}")
        return DEFAULT_COVERAGE_YEAR


def get_subsidy_policy(coverage_year: Optional[int] = None) -> SubsidyPolicy:
    """
    Get the subsidy policy for a coverage year.

    Args:
        coverage_year: Plan year (defaults to get_default_coverage_year())

    Returns:
        SubsidyPolicy for that year

    Raises:
        ValueError: If no policy is configured for the year
    """
    year = coverage_year if coverage_year is not None else get_default_coverage_year()
    policy = SUBSIDY_POLICIES.get(int(year))
    if policy is None:
        supported = ', '.join(str(y) for y in sorted(SUBSIDY_POLICIES))
        raise ValueError(f"No subsidy policy for coverage year {year} (supported: {supported})")
    return policy
