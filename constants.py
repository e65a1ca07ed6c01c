"""
Constants and reference data for the Marketplace Plan Browser
Includes coverage-year subsidy figures and plan display configuration
"""

# ==============================================================================
# FEDERAL POVERTY LEVEL (prior-year HHS guidelines apply to each coverage year)
# ==============================================================================
# Source: HHS Poverty Guidelines, 48 contiguous states + DC

# 2025 guidelines - used for 2026 coverage
FPL_2026_BASE = 15650  # 1 person
FPL_2026_PER_ADDITIONAL_PERSON = 5500

# 2024 guidelines - used for 2025 coverage
FPL_2025_BASE = 15060  # 1 person
FPL_2025_PER_ADDITIONAL_PERSON = 5380

# ==============================================================================
# ACA APPLICABLE PERCENTAGE TABLES
# ==============================================================================
# (fpl_lower, fpl_upper, pct_at_lower, pct_at_upper), percentages as decimals.
# Linear interpolation within each band.

# 2026: enhanced credits expired, IRS Rev. Proc. 2025-25
ACA_APPLICABLE_PERCENTAGE_2026 = [
    (100, 133, 0.0210, 0.0210),
    (133, 150, 0.0314, 0.0419),
    (150, 200, 0.0419, 0.0660),
    (200, 250, 0.0660, 0.0844),
    (250, 300, 0.0844, 0.0996),
    (300, 400, 0.0996, 0.0996),
]

# 2025: American Rescue Plan / IRA enhanced credits
ACA_APPLICABLE_PERCENTAGE_2025 = [
    (100, 150, 0.0000, 0.0000),
    (150, 200, 0.0000, 0.0200),
    (200, 250, 0.0200, 0.0400),
    (250, 300, 0.0400, 0.0600),
    (300, 400, 0.0600, 0.0850),
]

# Above 400% FPL: 2025 caps contribution at 8.5% of income (no cliff)
ACA_ABOVE_CAP_PERCENTAGE_2025 = 0.085

DEFAULT_COVERAGE_YEAR = 2026

# ==============================================================================
# BENCHMARK / PRICING DEFAULTS
# ==============================================================================

# Benchmark used when no Silver plan has a rate for the selected profile
DEFAULT_BENCHMARK_PREMIUM = 500

# Non-Silver plan detail pages approximate the benchmark from the plan's own
# premium (Silver plans run roughly 10-20% above Bronze)
NON_SILVER_BENCHMARK_FACTOR = 1.15

DEFAULT_AGE = '30'
DEFAULT_HOUSEHOLD_SIZE = 1
MAX_COMPARE_PLANS = 4

# ==============================================================================
# PLAN DISPLAY
# ==============================================================================

# Metal levels in display order
METAL_LEVEL_ORDER = {
    'Catastrophic': 1,
    'Bronze': 2,
    'Expanded Bronze': 3,
    'Silver': 4,
    'Gold': 5,
    'Platinum': 6,
}

BENCHMARK_METAL_LEVEL = 'Silver'

# Dental-only metal levels in the Plan Attributes PUF
EXCLUDED_METAL_LEVELS = ['High', 'Low']

# Sort options for plan results
SORT_OPTIONS = {
    'price_asc': 'Premium: Low to High',
    'price_desc': 'Premium: High to Low',
    'deductible_asc': 'Deductible: Low to High',
    'deductible_desc': 'Deductible: High to Low',
    'oop_asc': 'Out-of-Pocket Max: Low to High',
}
DEFAULT_SORT = 'price_asc'

# Age bands stored as strings in the Rate PUF
AGE_BAND_0_14 = "0-14"
AGE_BAND_14_AND_UNDER = "14 and under"
AGE_BAND_64_PLUS = "64 and over"

# Suffixes stripped from service area county names when matching
COUNTY_NAME_SUFFIXES = [
    'city and borough',
    'census area',
    'municipality',
    'borough',
    'parish',
    'county',
]


if __name__ == "__main__":
    # Display constants for verification
    print("Marketplace Plan Browser Constants")
    print("=" * 50)
    print(f"\n2026 FPL: ${FPL_2026_BASE:,} + ${FPL_2026_PER_ADDITIONAL_PERSON:,}/person")
    print(f"2025 FPL: ${FPL_2025_BASE:,} + ${FPL_2025_PER_ADDITIONAL_PERSON:,}/person")
    print(f"\nMetal Levels: {', '.join(METAL_LEVEL_ORDER)}")
    print(f"Sort Options: {', '.join(SORT_OPTIONS)}")
