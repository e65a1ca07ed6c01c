"""
Plan Pricing Service

Prices marketplace plans for a household: loads plans and rates for a
location, picks the benchmark (second-lowest Silver) premium, estimates the
subsidy, and attaches net premiums for display.

Used by the plan list, plan detail and comparison views. Rendering the
results is left to the presentation layer.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

import pandas as pd

from constants import DEFAULT_AGE, DEFAULT_HOUSEHOLD_SIZE, DEFAULT_SORT, MAX_COMPARE_PLANS
from database import DatabaseConnection
from queries import PlanQueries, RateQueries, BenefitQueries
from subsidy_calculator import SubsidyResult, estimate_subsidy
from subsidy_policy import SubsidyPolicy, get_subsidy_policy
from subsidy_utils import (
    apply_subsidy,
    benchmark_from_plans,
    estimate_benchmark_for_plan,
    premium_for_profile,
    sort_plans,
)
from utils import (
    DataFormatter,
    match_service_area_counties,
    normalize_zip,
    parse_age,
    parse_household_size,
    parse_income,
    parse_tobacco,
)

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for scripts and app entry points."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%H:%M:%S',
        force=True  # Override any existing config
    )


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    if df is None or df.empty:
        return []
    # NULLs come back as NaN; the presentation layer expects None
    return df.astype(object).where(pd.notna(df), None).to_dict('records')


def _column(df: pd.DataFrame, name: str) -> List[Any]:
    if df is None or df.empty or name not in df.columns:
        return []
    return df[name].tolist()


def describe_subsidy(result: Optional[SubsidyResult]) -> str:
    """One-line summary of a subsidy estimate for display."""
    if result is None:
        return "Enter income to estimate savings"
    fmt = DataFormatter
    if result.eligible:
        return (f"Estimated tax credit {fmt.format_currency(result.subsidy)}/mo "
                f"({fmt.format_percentage(result.fpl_percent)} FPL, "
                f"you pay {fmt.format_currency(result.monthly_contribution)}/mo for the benchmark plan)")
    if result.monthly_contribution == 0:
        return (f"Income is {fmt.format_percentage(result.fpl_percent)} FPL, below the premium tax "
                f"credit range; check Medicaid eligibility")
    return (f"Income is {fmt.format_percentage(result.fpl_percent)} FPL, above the premium tax "
            f"credit range; no subsidy")


@dataclass
class HouseholdProfile:
    """Pricing inputs from the search form, already parsed."""
    age: str = DEFAULT_AGE
    tobacco: bool = False
    income: Optional[float] = None
    household_size: int = DEFAULT_HOUSEHOLD_SIZE

    @classmethod
    def from_form(cls, age=None, tobacco=None, income=None, household=None) -> "HouseholdProfile":
        """Parse raw query-string values (income may contain commas)."""
        return cls(
            age=parse_age(age),
            tobacco=parse_tobacco(tobacco),
            income=parse_income(income),
            household_size=parse_household_size(household),
        )


@dataclass
class PlanSearchResult:
    """Priced plans for a county plus the filter options to show alongside them."""
    plans: List[Dict[str, Any]]
    profile: HouseholdProfile
    sort: str = DEFAULT_SORT
    benchmark_premium: Optional[float] = None
    subsidy: Optional[SubsidyResult] = None
    metal_levels: List[str] = field(default_factory=list)
    plan_types: List[str] = field(default_factory=list)
    issuers: List[str] = field(default_factory=list)

    @property
    def subsidy_summary(self) -> str:
        return describe_subsidy(self.subsidy)


@dataclass
class PlanDetail:
    """One plan with its benefits, rate table and household pricing."""
    plan: Dict[str, Any]
    benefits: List[Dict[str, Any]]
    rates: List[Dict[str, Any]]
    profile: HouseholdProfile
    monthly_premium: Optional[float] = None
    subsidy: Optional[SubsidyResult] = None

    @property
    def subsidized_premium(self) -> Optional[int]:
        return apply_subsidy(self.monthly_premium, self.subsidy)


class PlanPricingService:
    """
    Prices plans for a household against one coverage year's subsidy policy.

    Instances hold a database connection and are not shared across threads.
    """

    def __init__(self, db: DatabaseConnection, policy: Optional[SubsidyPolicy] = None):
        """
        Initialize the pricing service.

        Args:
            db: Database connection
            policy: Subsidy policy (defaults to the configured coverage year)
        """
        self.db = db
        self.policy = policy or get_subsidy_policy()

    # -------------------------------------------------------------------------
    # Location
    # -------------------------------------------------------------------------

    def list_states(self) -> List[str]:
        """State codes with Individual market plans, for the landing page."""
        return _column(PlanQueries.get_available_states(self.db), 'state_code')

    def find_counties_for_zip(self, zip_code: str) -> Optional[Dict[str, Any]]:
        """
        Resolve a ZIP code to the service area counties that have plans.

        Returns:
            Dict with zip, state, city, counties (and message when no county
            has plans), or None if the ZIP is unknown
        """
        zip_code = normalize_zip(zip_code)
        locations = PlanQueries.get_zip_locations(self.db, zip_code)
        if locations.empty:
            return None

        state = locations.iloc[0]['state']
        city = locations.iloc[0]['city']
        zip_counties = list(dict.fromkeys(locations['county'].tolist()))

        service_area_counties = _column(PlanQueries.get_counties_by_state(self.db, state), 'county_name')
        counties = match_service_area_counties(zip_counties, service_area_counties)

        result = {'zip': zip_code, 'state': state, 'city': city, 'counties': counties}
        if not counties:
            logger.info(f"ZIP LOOKUP: {zip_code} ({', '.join(zip_counties)}) has no marketplace plans")
            result['message'] = 'No marketplace plans available in this area'
        return result

    # -------------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------------

    def estimate(self, income: Optional[float], household_size: int,
                 benchmark_premium: Optional[float]) -> Optional[SubsidyResult]:
        """
        Estimate the subsidy, or None when income or benchmark is missing.
        """
        if not income or not benchmark_premium:
            return None
        return estimate_subsidy(income, household_size, benchmark_premium, self.policy)

    def _rates_by_plan(self, plan_ids: List[str], age: str) -> Dict[str, Dict[str, Any]]:
        rates = RateQueries.get_rates_for_plans(self.db, plan_ids, age)
        rates_map = {}
        for rate in _records(rates):
            # First row per plan wins (duplicates across rating areas)
            rates_map.setdefault(rate['plan_id'], rate)
        return rates_map

    def search_plans(self, state: str, county: str, profile: Optional[HouseholdProfile] = None,
                     metal_level: Optional[str] = None, plan_type: Optional[str] = None,
                     issuer: Optional[str] = None, sort: Optional[str] = None) -> PlanSearchResult:
        """
        Find and price the plans sold in a county.

        Args:
            state: Two-letter state code
            county: Service area county name
            profile: Household pricing inputs
            metal_level, plan_type, issuer: Optional filters ('all' = no filter)
            sort: One of SORT_OPTIONS (default price_asc)

        Returns:
            PlanSearchResult with priced, sorted plans
        """
        profile = profile or HouseholdProfile()

        plans = _records(PlanQueries.get_plans_by_county(
            self.db, state, county, metal_level=metal_level, plan_type=plan_type, issuer=issuer
        ))
        plan_ids = [p['standard_component_id'] for p in plans if p.get('standard_component_id')]
        rates_map = self._rates_by_plan(plan_ids, profile.age) if plan_ids else {}

        for plan in plans:
            plan['monthly_premium'] = premium_for_profile(
                rates_map.get(plan.get('standard_component_id')), profile.tobacco
            )

        benchmark = benchmark_from_plans(plans) if profile.income else None
        subsidy = self.estimate(profile.income, profile.household_size, benchmark)

        if subsidy is not None and subsidy.eligible:
            for plan in plans:
                net = apply_subsidy(plan['monthly_premium'], subsidy)
                if net is not None:
                    plan['subsidized_premium'] = net

        sort_option = sort or DEFAULT_SORT
        plans = sort_plans(plans, sort_option, subsidy)

        logger.info(
            f"PLAN SEARCH: {len(plans)} plans in {county}, {state} "
            f"(benchmark={benchmark}, eligible={subsidy.eligible if subsidy else None})"
        )

        return PlanSearchResult(
            plans=plans,
            profile=profile,
            sort=sort_option,
            benchmark_premium=benchmark,
            subsidy=subsidy,
            metal_levels=_column(PlanQueries.get_metal_levels(self.db, state), 'metal_level'),
            plan_types=_column(PlanQueries.get_plan_types(self.db, state), 'plan_type'),
            issuers=_column(PlanQueries.get_issuers(self.db, state, county), 'issuer_name'),
        )

    def get_plan_detail(self, plan_id: str,
                        profile: Optional[HouseholdProfile] = None) -> Optional[PlanDetail]:
        """
        Load one plan with benefits and rates, priced for the household.

        The rest of the rating area isn't loaded here, so the benchmark is
        approximated from this plan's own premium.

        Returns:
            PlanDetail, or None if the plan doesn't exist
        """
        profile = profile or HouseholdProfile()

        plan_rows = _records(PlanQueries.get_plan(self.db, plan_id))
        if not plan_rows:
            logger.info(f"PLAN DETAIL: {plan_id} not found")
            return None
        plan = plan_rows[0]
        base_id = plan.get('standard_component_id') or plan_id

        benefits = _records(BenefitQueries.get_covered_benefits(self.db, base_id))
        rates = _records(RateQueries.get_rates_by_age(self.db, base_id))

        rate_for_age = next((r for r in rates if str(r.get('age')) == profile.age), None)
        monthly_premium = premium_for_profile(rate_for_age, profile.tobacco)

        subsidy = None
        if profile.income and monthly_premium:
            benchmark = estimate_benchmark_for_plan(plan.get('metal_level'), monthly_premium)
            subsidy = self.estimate(profile.income, profile.household_size, benchmark)

        return PlanDetail(
            plan=plan,
            benefits=benefits,
            rates=rates,
            profile=profile,
            monthly_premium=monthly_premium,
            subsidy=subsidy,
        )

    def compare_plans(self, plan_ids: List[str]) -> Dict[str, Any]:
        """
        Load up to MAX_COMPARE_PLANS plans side by side.

        Returns:
            Dict with:
            - plans: plan records
            - benefits_map: plan_id -> covered benefit records
            - rates_map: plan_id -> age rate records
            - all_benefits: sorted union of benefit names
        """
        plan_ids = [pid for pid in plan_ids if pid][:MAX_COMPARE_PLANS]
        plans = _records(PlanQueries.get_plans_by_ids(self.db, plan_ids))

        benefits_map = {}
        rates_map = {}
        for plan in plans:
            base_id = plan.get('standard_component_id') or plan['plan_id']
            benefits_map[plan['plan_id']] = _records(BenefitQueries.get_covered_benefits(self.db, base_id))
            rates_map[plan['plan_id']] = _records(
                RateQueries.get_rates_by_age(self.db, base_id, include_tobacco=False)
            )

        all_benefits = sorted({
            b['benefit_name']
            for benefits in benefits_map.values()
            for b in benefits
            if b.get('benefit_name')
        })

        return {
            'plans': plans,
            'benefits_map': benefits_map,
            'rates_map': rates_map,
            'all_benefits': all_benefits,
        }


if __name__ == "__main__":
    import argparse

    from database import get_database_connection

    parser = argparse.ArgumentParser(description="Marketplace plan lookup with subsidy estimate")
    parser.add_argument("zip", nargs="?", help="ZIP code to look up (omit to list states)")
    parser.add_argument("--income", help="Annual household income, e.g. 45,000")
    parser.add_argument("--household", default="1", help="Household size")
    parser.add_argument("--age", default=DEFAULT_AGE, help="Age as rated in the Rate PUF")
    parser.add_argument("--tobacco", action="store_true", help="Price at tobacco rates")
    parser.add_argument("--sort", default=DEFAULT_SORT, help="price_asc, price_desc, deductible_asc, ...")
    parser.add_argument("--limit", type=int, default=10, help="Plans to show")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    configure_logging(logging.DEBUG if args.debug else logging.INFO)

    service = PlanPricingService(get_database_connection())
    fmt = DataFormatter

    if not args.zip:
        print("States with marketplace plans")
        print("=" * 50)
        print(", ".join(service.list_states()))
        raise SystemExit(0)

    location = service.find_counties_for_zip(args.zip)
    if location is None:
        print(f"✗ ZIP {args.zip} not found")
        raise SystemExit(1)
    if not location['counties']:
        print(f"✗ {location['message']}")
        raise SystemExit(1)

    profile = HouseholdProfile.from_form(age=args.age, tobacco=args.tobacco,
                                         income=args.income, household=args.household)
    county = location['counties'][0]
    result = service.search_plans(location['state'], county, profile, sort=args.sort)

    print(f"{county}, {location['state']} ({location['city']})")
    print("=" * 50)
    print(result.subsidy_summary)
    print("-" * 50)
    for plan in result.plans[:args.limit]:
        net = plan.get('subsidized_premium')
        price = fmt.format_currency(plan.get('monthly_premium'))
        if net is not None:
            price += f" -> {fmt.format_currency(net)}"
        print(f"  {fmt.format_plan_name(plan.get('plan_marketing_name') or plan['plan_id'], 40):40} "
              f"{plan.get('metal_level') or '':10} {price}")
