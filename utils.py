"""
Utility functions for the Marketplace Plan Browser
Includes request input parsing, county matching, and data formatting
"""

import re
import pandas as pd
from typing import Iterable, List, Optional

from constants import COUNTY_NAME_SUFFIXES, DEFAULT_AGE, DEFAULT_HOUSEHOLD_SIZE

_COUNTY_SUFFIX_PATTERN = re.compile(
    r"\s(" + "|".join(re.escape(s) for s in COUNTY_NAME_SUFFIXES) + r")\b",
    re.IGNORECASE,
)


def parse_currency(value_str) -> Optional[float]:
    """
    Parse a currency string to a float.

    Args:
        value_str: Currency value as string (e.g., "$45,000", "45000", "45000.50")

    Returns:
        Float value, or None if empty/invalid

    Examples:
        >>> parse_currency('$45,000')
        45000.0
        >>> parse_currency('')
        None
    """
    if value_str is None:
        return None
    if not isinstance(value_str, str) and pd.isna(value_str):
        return None

    value_str = str(value_str).strip()
    if value_str == '' or value_str.lower() in ('nan', 'none', 'null'):
        return None

    # Remove currency symbols and commas
    cleaned = value_str.replace('$', '').replace(',', '').strip()

    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_income(value_str) -> Optional[float]:
    """
    Parse annual household income from a form value.

    Zero, negative and unparseable values return None so callers skip the
    subsidy estimate instead of calculating against no income.
    """
    income = parse_currency(value_str)
    if income is None or income <= 0:
        return None
    return income


def parse_household_size(value) -> int:
    """Parse household size; missing or invalid input means a household of one."""
    try:
        size = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_HOUSEHOLD_SIZE
    return max(1, size)


def parse_age(value) -> str:
    """
    Normalize the age filter to the Rate PUF's string form.

    Ages are stored as text ("30", "0-14", "64 and over"), so anything
    non-empty is passed through; blank falls back to DEFAULT_AGE.
    """
    if value is None:
        return DEFAULT_AGE
    age = str(value).strip()
    return age or DEFAULT_AGE


def parse_tobacco(value) -> bool:
    """Checkbox values arrive as 'on'; booleans pass through."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('on', 'true', '1', 'yes')


def normalize_zip(zip_code) -> str:
    """
    Normalize a ZIP code to 5 digits.

    Handles ZIP+4 (e.g., "29654-7352" -> "29654") and restores leading zeros
    lost to numeric storage (e.g., 2134 -> "02134").
    """
    return str(zip_code).strip().split('-')[0].zfill(5)[:5]


def strip_county_suffix(county_name: str) -> str:
    """Lower-case a county name and drop suffixes like 'County' or 'Parish'."""
    return _COUNTY_SUFFIX_PATTERN.sub('', county_name.lower()).strip()


def match_service_area_counties(zip_counties: Iterable[str],
                                service_area_counties: Iterable[str]) -> List[str]:
    """
    Match ZIP reference county names to service area county names.

    ZIP data says "Los Angeles" while the Service Area PUF may say
    "Los Angeles County". For each ZIP county, tries an exact match, then a
    case-insensitive prefix or whole-word match, then a comparison with
    suffixes stripped.

    Args:
        zip_counties: County names from the ZIP reference data
        service_area_counties: County names with marketplace plans

    Returns:
        Matched service area county names, de-duplicated, in input order
    """
    service_area_counties = [c for c in service_area_counties if c]
    matched: List[str] = []

    for zip_county in zip_counties:
        if not zip_county:
            continue

        if zip_county in service_area_counties:
            match = zip_county
        else:
            match = None
            zip_county_lower = zip_county.lower()
            for sa_county in service_area_counties:
                sa_county_lower = sa_county.lower()
                if (sa_county_lower.startswith(zip_county_lower) or
                        (zip_county_lower + ' ') in sa_county_lower or
                        strip_county_suffix(sa_county) == zip_county_lower):
                    match = sa_county
                    break

        if match and match not in matched:
            matched.append(match)

    return matched


class DataFormatter:
    """Format data for display"""

    @staticmethod
    def format_currency(amount: Optional[float], include_sign: bool = False) -> str:
        """Format number as whole-dollar currency

        Args:
            amount: Dollar amount to format
            include_sign: If True, include + or - sign for positive/negative values
        """
        if amount is None:
            return "—"
        if include_sign:
            if amount >= 0:
                return f"+${amount:,.0f}"
            else:
                return f"-${abs(amount):,.0f}"
        return f"${amount:,.0f}"

    @staticmethod
    def format_percentage(pct: Optional[float], decimals: int = 0) -> str:
        """Format number as percentage"""
        if pct is None:
            return "—"
        return f"{pct:.{decimals}f}%"

    @staticmethod
    def format_plan_name(plan_name: str, max_length: int = 50) -> str:
        """Truncate long plan names"""
        if len(plan_name) > max_length:
            return plan_name[:max_length-3] + "..."
        return plan_name
