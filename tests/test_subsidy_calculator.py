"""
Test Suite for the Premium Tax Credit Estimator

Covers FPL calculation, the applicable percentage curve and the subsidy
estimate under both shipped coverage years.

Run with: python -m unittest discover -s tests -t .
"""

import unittest

from subsidy_calculator import (
    SubsidyResult,
    estimate_subsidy,
    federal_poverty_level,
    federal_poverty_level_percent,
    get_applicable_percentage,
    round_currency,
)
from subsidy_policy import POLICY_2025, POLICY_2026


# =============================================================================
# Federal Poverty Level
# =============================================================================

class TestFederalPovertyLevel(unittest.TestCase):
    """FPL by household size"""

    def test_single_person(self):
        """One person gets the base amount"""
        self.assertEqual(federal_poverty_level(1, POLICY_2026), 15650)

    def test_family_of_four(self):
        """Each additional person adds the per-person increment"""
        self.assertEqual(federal_poverty_level(4, POLICY_2026), 15650 + 3 * 5500)

    def test_zero_and_negative_sizes_clamp_to_one(self):
        """Household sizes below 1 behave like a household of one"""
        for size in (0, -1, -10):
            with self.subTest(size=size):
                self.assertEqual(federal_poverty_level(size, POLICY_2026),
                                 federal_poverty_level(1, POLICY_2026))

    def test_policy_selects_schedule(self):
        """2025 coverage uses the older guidelines"""
        self.assertEqual(federal_poverty_level(1, POLICY_2025), 15060)
        self.assertEqual(federal_poverty_level(3, POLICY_2025), 15060 + 2 * 5380)

    def test_default_policy_is_2026(self):
        """Omitting the policy uses the default coverage year"""
        self.assertEqual(federal_poverty_level(2), federal_poverty_level(2, POLICY_2026))


class TestFederalPovertyLevelPercent(unittest.TestCase):
    """Income as a percentage of FPL"""

    def test_income_at_poverty_line_is_100(self):
        """Income exactly at FPL is exactly 100%"""
        for size in range(1, 9):
            with self.subTest(size=size):
                fpl = federal_poverty_level(size, POLICY_2026)
                self.assertEqual(federal_poverty_level_percent(fpl, size, POLICY_2026), 100)

    def test_zero_income(self):
        """No income is 0% FPL, not an error"""
        self.assertEqual(federal_poverty_level_percent(0, 1, POLICY_2026), 0)

    def test_double_fpl(self):
        """Twice FPL is 200%"""
        self.assertAlmostEqual(federal_poverty_level_percent(31300, 1, POLICY_2026), 200.0)


# =============================================================================
# Applicable Percentage Curve
# =============================================================================

class TestApplicablePercentage2026(unittest.TestCase):
    """2026 curve: 2.10% - 9.96%, no subsidy above 400% FPL"""

    def test_below_100_not_eligible(self):
        """Below 100% FPL returns the not-eligible sentinel"""
        self.assertIsNone(get_applicable_percentage(99.9, POLICY_2026))
        self.assertIsNone(get_applicable_percentage(0, POLICY_2026))

    def test_above_400_not_eligible(self):
        """Above 400% FPL returns the not-eligible sentinel"""
        self.assertIsNone(get_applicable_percentage(400.01, POLICY_2026))
        self.assertIsNone(get_applicable_percentage(1000, POLICY_2026))

    def test_flat_bottom_band(self):
        """100-133% FPL is a flat 2.10%"""
        for fpl in (100, 115, 133):
            with self.subTest(fpl=fpl):
                self.assertAlmostEqual(get_applicable_percentage(fpl, POLICY_2026), 0.0210)

    def test_flat_top_band(self):
        """300-400% FPL is a flat 9.96%"""
        for fpl in (300.5, 350, 400):
            with self.subTest(fpl=fpl):
                self.assertAlmostEqual(get_applicable_percentage(fpl, POLICY_2026), 0.0996)

    def test_interpolation_midpoint(self):
        """Midpoint of 150-200% is halfway between 4.19% and 6.60%"""
        self.assertAlmostEqual(get_applicable_percentage(175, POLICY_2026), (0.0419 + 0.0660) / 2)

    def test_interpolation_quarter(self):
        """Quarter of the way through 200-250%"""
        expected = 0.0660 + 0.25 * (0.0844 - 0.0660)
        self.assertAlmostEqual(get_applicable_percentage(212.5, POLICY_2026), expected)

    def test_boundary_uses_lower_band(self):
        """At 133% the lower (flat 2.10%) band applies, not 3.14%"""
        self.assertAlmostEqual(get_applicable_percentage(133, POLICY_2026), 0.0210)
        self.assertAlmostEqual(get_applicable_percentage(133.01, POLICY_2026),
                               0.0314 + (0.01 / 17) * (0.0419 - 0.0314))

    def test_non_decreasing(self):
        """Percentage never falls as income rises through 100-400%"""
        previous = 0.0
        fpl = 100.0
        while fpl <= 400.0:
            current = get_applicable_percentage(fpl, POLICY_2026)
            self.assertGreaterEqual(current, previous, f"decrease at {fpl}% FPL")
            previous = current
            fpl += 0.25

    def test_continuous_at_interpolated_boundaries(self):
        """Band below and band above agree at each shared boundary"""
        bands = POLICY_2026.bands
        for lower, upper in zip(bands, bands[1:]):
            if lower.fpl_upper == 133:
                # Statutory step from 2.10% to 3.14%
                self.assertLess(lower.interpolate(133), upper.interpolate(133))
                continue
            with self.subTest(boundary=lower.fpl_upper):
                self.assertAlmostEqual(lower.interpolate(lower.fpl_upper),
                                       upper.interpolate(upper.fpl_lower))


class TestApplicablePercentage2025(unittest.TestCase):
    """2025 curve: 0% - 8.5%, capped at 8.5% above 400% FPL"""

    def test_below_100_not_eligible(self):
        """Below 100% FPL is still not eligible"""
        self.assertIsNone(get_applicable_percentage(80, POLICY_2025))

    def test_zero_contribution_band(self):
        """100-150% FPL contributes nothing"""
        self.assertEqual(get_applicable_percentage(140, POLICY_2025), 0.0)

    def test_above_400_capped(self):
        """Above 400% FPL the contribution is capped at 8.5%"""
        self.assertAlmostEqual(get_applicable_percentage(401, POLICY_2025), 0.085)
        self.assertAlmostEqual(get_applicable_percentage(2000, POLICY_2025), 0.085)

    def test_continuous_everywhere(self):
        """No jumps at any boundary, including the 400% cap"""
        bands = POLICY_2025.bands
        for lower, upper in zip(bands, bands[1:]):
            with self.subTest(boundary=lower.fpl_upper):
                self.assertAlmostEqual(lower.interpolate(lower.fpl_upper),
                                       upper.interpolate(upper.fpl_lower))
        self.assertAlmostEqual(get_applicable_percentage(400, POLICY_2025),
                               get_applicable_percentage(400.001, POLICY_2025))


# =============================================================================
# Subsidy Estimate
# =============================================================================

class TestEstimateSubsidy2026(unittest.TestCase):
    """Worked examples under 2026 rules"""

    def test_single_adult_128_percent(self):
        """$20,000, household of 1, $500 benchmark"""
        result = estimate_subsidy(20000, 1, 500, POLICY_2026)
        self.assertTrue(result.eligible)
        self.assertEqual(result.fpl_percent, 128)
        self.assertEqual(result.monthly_contribution, 35)
        self.assertEqual(result.subsidy, 465)

    def test_below_poverty_line(self):
        """$10,000, household of 1: below 100% FPL pays nothing, gets nothing"""
        result = estimate_subsidy(10000, 1, 500, POLICY_2026)
        self.assertFalse(result.eligible)
        self.assertEqual(result.fpl_percent, 64)
        self.assertEqual(result.subsidy, 0)
        self.assertEqual(result.monthly_contribution, 0)

    def test_above_cliff(self):
        """$200,000, household of 1: pays the full benchmark"""
        result = estimate_subsidy(200000, 1, 500, POLICY_2026)
        self.assertFalse(result.eligible)
        self.assertGreater(result.fpl_percent, 400)
        self.assertEqual(result.subsidy, 0)
        self.assertEqual(result.monthly_contribution, 500)

    def test_family_of_four(self):
        """$40,000, household of 4, $800 benchmark"""
        result = estimate_subsidy(40000, 4, 800, POLICY_2026)
        self.assertTrue(result.eligible)
        self.assertEqual(result.fpl_percent, 124)
        self.assertEqual(result.monthly_contribution, 70)
        self.assertEqual(result.subsidy, 730)

    def test_contribution_exceeds_benchmark(self):
        """Cheap benchmark: subsidy floors at zero but household stays eligible"""
        result = estimate_subsidy(60000, 1, 100, POLICY_2026)
        self.assertTrue(result.eligible)
        self.assertEqual(result.subsidy, 0)
        self.assertGreater(result.monthly_contribution, 100)

    def test_above_cliff_rounds_benchmark(self):
        """Full-benchmark contribution is rounded to whole dollars"""
        result = estimate_subsidy(200000, 1, 512.50, POLICY_2026)
        self.assertEqual(result.monthly_contribution, 513)

    def test_subsidy_uses_unrounded_contribution(self):
        """Rounding applies only to the outputs"""
        # 25000 is 159.74% FPL, an interpolated band
        result = estimate_subsidy(25000, 1, 600, POLICY_2026)
        fpl = federal_poverty_level_percent(25000, 1, POLICY_2026)
        contribution = 25000 * get_applicable_percentage(fpl, POLICY_2026) / 12
        self.assertEqual(result.subsidy, round_currency(600 - contribution))
        self.assertEqual(result.monthly_contribution, round_currency(contribution))

    def test_household_size_zero_same_as_one(self):
        """Invalid household size is clamped, not rejected"""
        self.assertEqual(estimate_subsidy(20000, 0, 500, POLICY_2026),
                         estimate_subsidy(20000, 1, 500, POLICY_2026))

    def test_zero_income(self):
        """No income is below 100% FPL"""
        result = estimate_subsidy(0, 2, 700, POLICY_2026)
        self.assertFalse(result.eligible)
        self.assertEqual(result.fpl_percent, 0)
        self.assertEqual(result.monthly_contribution, 0)

    def test_never_negative(self):
        """Subsidy and contribution are never negative"""
        for income in range(0, 250001, 2500):
            for benchmark in (0, 150, 450, 1200):
                with self.subTest(income=income, benchmark=benchmark):
                    result = estimate_subsidy(income, 2, benchmark, POLICY_2026)
                    self.assertGreaterEqual(result.subsidy, 0)
                    self.assertGreaterEqual(result.monthly_contribution, 0)

    def test_subsidy_non_increasing_with_income(self):
        """More income never means a larger subsidy within the eligible range"""
        fpl = federal_poverty_level(1, POLICY_2026)
        previous = None
        income = fpl
        while income <= fpl * 4:
            result = estimate_subsidy(income, 1, 800, POLICY_2026)
            self.assertTrue(result.eligible)
            if previous is not None:
                self.assertLessEqual(result.subsidy, previous, f"increase at ${income:,.0f}")
            previous = result.subsidy
            income += 250

    def test_result_records_policy_year(self):
        """Result carries the coverage year and applicable percentage"""
        result = estimate_subsidy(20000, 1, 500, POLICY_2026)
        self.assertEqual(result.coverage_year, 2026)
        self.assertAlmostEqual(result.applicable_percentage, 0.021)
        ineligible = estimate_subsidy(10000, 1, 500, POLICY_2026)
        self.assertIsNone(ineligible.applicable_percentage)


class TestEstimateSubsidy2025(unittest.TestCase):
    """Worked examples under 2025 (enhanced credit) rules"""

    def test_high_income_capped_not_cut_off(self):
        """$200,000 is eligible, contribution capped at 8.5% of income"""
        result = estimate_subsidy(200000, 1, 1500, POLICY_2025)
        self.assertTrue(result.eligible)
        self.assertEqual(result.monthly_contribution, 1417)
        self.assertEqual(result.subsidy, 83)

    def test_high_income_cheap_benchmark(self):
        """Cap above benchmark: eligible, but subsidy is zero"""
        result = estimate_subsidy(200000, 1, 500, POLICY_2025)
        self.assertTrue(result.eligible)
        self.assertEqual(result.subsidy, 0)

    def test_zero_contribution_band(self):
        """Below 150% FPL the benchmark is fully covered"""
        result = estimate_subsidy(20000, 1, 500, POLICY_2025)
        self.assertTrue(result.eligible)
        self.assertEqual(result.monthly_contribution, 0)
        self.assertEqual(result.subsidy, 500)

    def test_below_poverty_line(self):
        """Below 100% FPL is still not eligible"""
        result = estimate_subsidy(10000, 1, 500, POLICY_2025)
        self.assertFalse(result.eligible)
        self.assertEqual(result.monthly_contribution, 0)

    def test_years_differ(self):
        """The two coverage years are not merged"""
        self.assertNotEqual(estimate_subsidy(60000, 1, 700, POLICY_2025),
                            estimate_subsidy(60000, 1, 700, POLICY_2026))

    def test_subsidy_non_increasing_with_income(self):
        """Monotonic through the bands and past 400% FPL"""
        previous = None
        for income in range(15060, 150001, 500):
            result = estimate_subsidy(income, 1, 900, POLICY_2025)
            if previous is not None:
                self.assertLessEqual(result.subsidy, previous, f"increase at ${income:,}")
            previous = result.subsidy


class TestSubsidyResult(unittest.TestCase):
    """Result value object"""

    def test_to_dict(self):
        """Dictionary form exposes the display fields"""
        result = SubsidyResult(subsidy=465, fpl_percent=128, eligible=True,
                               monthly_contribution=35, applicable_percentage=0.021,
                               coverage_year=2026)
        data = result.to_dict()
        self.assertEqual(data['subsidy'], 465)
        self.assertEqual(data['fpl_percent'], 128)
        self.assertTrue(data['eligible'])
        self.assertEqual(data['monthly_contribution'], 35)
        self.assertEqual(data['coverage_year'], 2026)

    def test_round_currency_halves_up(self):
        """Halves round away from zero, unlike round()"""
        self.assertEqual(round_currency(0.5), 1)
        self.assertEqual(round_currency(2.5), 3)
        self.assertEqual(round_currency(2.49), 2)


if __name__ == '__main__':
    unittest.main()
