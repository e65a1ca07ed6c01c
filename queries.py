"""
SQL queries for the Marketplace Plan Browser
All queries against the imported PUF tables (plans, service_areas, rates,
benefits, zip_codes) in PostgreSQL
"""

import logging
from typing import List, Optional

import pandas as pd

from constants import (
    AGE_BAND_0_14,
    AGE_BAND_14_AND_UNDER,
    AGE_BAND_64_PLUS,
    EXCLUDED_METAL_LEVELS,
    METAL_LEVEL_ORDER,
)
from database import DatabaseConnection
from utils import normalize_zip

logger = logging.getLogger(__name__)

# Base plan rows only (the "-01" variant is the on-exchange, no-CSR plan)
BASE_VARIANT_FILTER = "p.plan_id LIKE '%%-01'"

_EXCLUDED_METALS_SQL = ', '.join(f"'{m}'" for m in EXCLUDED_METAL_LEVELS)

_METAL_SORT_SQL = "CASE p.metal_level\n" + "\n".join(
    f"            WHEN '{metal}' THEN {order}" for metal, order in METAL_LEVEL_ORDER.items()
) + f"\n            ELSE {len(METAL_LEVEL_ORDER) + 1}\n        END"

# Numeric ages sort naturally, child bands first, "64 and over" last
_AGE_SORT_SQL = f"""CASE
                WHEN age = '{AGE_BAND_0_14}' THEN 0
                WHEN age = '{AGE_BAND_14_AND_UNDER}' THEN 0
                WHEN age = '{AGE_BAND_64_PLUS}' THEN 64
                WHEN age ~ '^[0-9]+$' THEN CAST(age AS INTEGER)
                ELSE 100
            END"""


class PlanQueries:
    """SQL queries for plan data retrieval"""

    @staticmethod
    def get_available_states(db: DatabaseConnection) -> pd.DataFrame:
        """Get list of states with available Individual market plans"""
        query = """
        SELECT DISTINCT state_code
        FROM plans
        WHERE market_coverage = 'Individual'
        ORDER BY state_code
        """
        return db.execute_query(query)

    @staticmethod
    def get_counties_by_state(db: DatabaseConnection, state: str) -> pd.DataFrame:
        """
        Get counties in a state that have Individual market plans

        Args:
            db: Database connection
            state: Two-letter state code

        Returns:
            DataFrame with county_name column
        """
        query = """
        SELECT DISTINCT sa.county_name
        FROM service_areas sa
        JOIN plans p ON p.service_area_id = sa.service_area_id AND p.state_code = sa.state_code
        WHERE sa.state_code = %s
            AND sa.county_name IS NOT NULL
            AND p.market_coverage = 'Individual'
        ORDER BY sa.county_name
        """
        return db.execute_query(query, (state,))

    @staticmethod
    def get_zip_locations(db: DatabaseConnection, zip_code: str) -> pd.DataFrame:
        """
        Get state, county and city entries for a ZIP code

        A ZIP can straddle counties, so several rows may come back.

        Args:
            db: Database connection
            zip_code: ZIP code (ZIP+4 and missing leading zeros are handled)

        Returns:
            DataFrame with state, county, city columns
        """
        zip_code = normalize_zip(zip_code)
        logger.debug(f"ZIP LOOKUP: Looking up {zip_code}")

        query = """
        SELECT state, county, city
        FROM zip_codes
        WHERE zip_code = %s
        """
        result = db.execute_query(query, (zip_code,))
        if result.empty:
            logger.warning(f"ZIP code {zip_code} not found in zip_codes")
        return result

    @staticmethod
    def get_metal_levels(db: DatabaseConnection, state: str) -> pd.DataFrame:
        """Get metal levels offered in a state, in display order"""
        query = f"""
        SELECT DISTINCT p.metal_level,
            {_METAL_SORT_SQL} AS sort_order
        FROM plans p
        WHERE p.state_code = %s
            AND p.metal_level IS NOT NULL
            AND p.market_coverage = 'Individual'
            AND p.metal_level NOT IN ({_EXCLUDED_METALS_SQL})
        ORDER BY sort_order
        """
        return db.execute_query(query, (state,))

    @staticmethod
    def get_plan_types(db: DatabaseConnection, state: str) -> pd.DataFrame:
        """Get plan types (HMO, PPO, EPO, POS) offered in a state"""
        query = """
        SELECT DISTINCT plan_type
        FROM plans
        WHERE state_code = %s
            AND plan_type IS NOT NULL
            AND market_coverage = 'Individual'
        ORDER BY plan_type
        """
        return db.execute_query(query, (state,))

    @staticmethod
    def get_issuers(db: DatabaseConnection, state: str, county: str) -> pd.DataFrame:
        """Get issuers selling Individual market plans in a county"""
        query = f"""
        SELECT DISTINCT p.issuer_name
        FROM plans p
        JOIN service_areas sa ON p.service_area_id = sa.service_area_id AND p.state_code = sa.state_code
        WHERE sa.state_code = %s
            AND sa.county_name = %s
            AND p.market_coverage = 'Individual'
            AND {BASE_VARIANT_FILTER}
            AND p.issuer_name IS NOT NULL
            AND p.metal_level NOT IN ({_EXCLUDED_METALS_SQL})
        ORDER BY p.issuer_name
        """
        return db.execute_query(query, (state, county))

    @staticmethod
    def get_plans_by_county(db: DatabaseConnection, state: str, county: str,
                            metal_level: Optional[str] = None,
                            plan_type: Optional[str] = None,
                            issuer: Optional[str] = None) -> pd.DataFrame:
        """
        Get Individual market plans sold in a county, with optional filters

        Args:
            db: Database connection
            state: Two-letter state code
            county: Service area county name
            metal_level: Bronze, Silver, Gold, ... ('all' or None for no filter)
            plan_type: HMO, PPO, EPO, POS ('all' or None for no filter)
            issuer: Issuer name ('all' or None for no filter)

        Returns:
            DataFrame of plans
        """
        query = f"""
        SELECT DISTINCT p.*
        FROM plans p
        JOIN service_areas sa ON p.service_area_id = sa.service_area_id AND p.state_code = sa.state_code
        WHERE sa.state_code = %s
            AND sa.county_name = %s
            AND p.market_coverage = 'Individual'
            AND {BASE_VARIANT_FILTER}
            AND p.metal_level NOT IN ({_EXCLUDED_METALS_SQL})
        """
        params = [state, county]

        if metal_level and metal_level != 'all':
            query += " AND p.metal_level = %s"
            params.append(metal_level)
        if plan_type and plan_type != 'all':
            query += " AND p.plan_type = %s"
            params.append(plan_type)
        if issuer and issuer != 'all':
            query += " AND p.issuer_name = %s"
            params.append(issuer)

        query += " ORDER BY p.metal_level, p.medical_deductible_individual, p.plan_marketing_name"

        return db.execute_query(query, tuple(params))

    @staticmethod
    def get_plan(db: DatabaseConnection, plan_id: str) -> pd.DataFrame:
        """Get a single plan by plan_id (empty DataFrame if not found)"""
        return db.execute_query("SELECT * FROM plans WHERE plan_id = %s", (plan_id,))

    @staticmethod
    def get_plans_by_ids(db: DatabaseConnection, plan_ids: List[str]) -> pd.DataFrame:
        """Get several plans by plan_id"""
        if not plan_ids:
            return pd.DataFrame()
        return db.read_sql(
            "SELECT * FROM plans WHERE plan_id = ANY(%(plan_ids)s)",
            params={'plan_ids': list(plan_ids)},
        )


class RateQueries:
    """SQL queries for premium rates"""

    @staticmethod
    def get_rates_for_plans(db: DatabaseConnection, plan_ids: List[str], age: str) -> pd.DataFrame:
        """
        Get individual and tobacco rates for many plans at one age

        Args:
            db: Database connection
            plan_ids: Standard component IDs (rates are keyed by base plan)
            age: Age as stored in the Rate PUF ("30", "0-14", "64 and over")

        Returns:
            DataFrame with plan_id, individual_rate, individual_tobacco_rate
        """
        if not plan_ids:
            return pd.DataFrame(columns=['plan_id', 'individual_rate', 'individual_tobacco_rate'])

        query = """
        SELECT plan_id, individual_rate, individual_tobacco_rate
        FROM rates
        WHERE plan_id = ANY(%(plan_ids)s)
            AND age = %(age)s
        """
        result = db.read_sql(query, params={'plan_ids': list(plan_ids), 'age': str(age)})

        if result.empty:
            logger.warning(f"No rates found for {len(plan_ids)} plans at age {age}")
        return result

    @staticmethod
    def get_rates_by_age(db: DatabaseConnection, plan_id: str,
                         include_tobacco: bool = True) -> pd.DataFrame:
        """
        Get a plan's full age rate table, youngest first

        Args:
            db: Database connection
            plan_id: Standard component ID
            include_tobacco: Include the individual_tobacco_rate column

        Returns:
            DataFrame with age, individual_rate (and individual_tobacco_rate)
        """
        columns = "age, individual_rate, individual_tobacco_rate" if include_tobacco else "age, individual_rate"
        query = f"""
        SELECT DISTINCT {columns},
            {_AGE_SORT_SQL} AS sort_order
        FROM rates
        WHERE plan_id = %s
        ORDER BY sort_order
        """
        result = db.execute_query(query, (plan_id,))
        return result.drop(columns=['sort_order'], errors='ignore')


class BenefitQueries:
    """SQL queries for plan benefits and cost sharing"""

    @staticmethod
    def get_covered_benefits(db: DatabaseConnection, plan_id: str) -> pd.DataFrame:
        """
        Get covered benefits for a plan, alphabetically

        Args:
            db: Database connection
            plan_id: Standard component ID

        Returns:
            DataFrame of benefit rows (copays, coinsurance, limits)
        """
        query = """
        SELECT *
        FROM benefits
        WHERE plan_id = %s
            AND is_covered = '1'
        ORDER BY benefit_name
        """
        return db.execute_query(query, (plan_id,))
