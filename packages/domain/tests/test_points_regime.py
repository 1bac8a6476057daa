"""Tests for the complementary (points-based) retirement regime."""

import pytest
from datetime import date
from decimal import Decimal

from patrimoine_domain.schemas import (
    GeneralRegime,
    GeneralRegimeSituation,
    PensionTaxes,
    PointsRegime,
    PointsRegimeSituation,
)

BIRTH = date(1964, 9, 22)


@pytest.fixture
def regime():
    return PointsRegime()


@pytest.fixture
def general():
    return GeneralRegime()


def full_career(acquired_quarters: int) -> GeneralRegimeSituation:
    """Career record ending on Dec 31, 2026 with the given quarters."""
    return GeneralRegimeSituation(as_of_year=2026, acquired_quarters=acquired_quarters)


def early_career() -> GeneralRegimeSituation:
    return GeneralRegimeSituation(as_of_year=2019, acquired_quarters=135)


# =============================================================================
# Grid Coefficients
# =============================================================================

class TestGridCoefficients:

    @pytest.mark.parametrize("quarters,expected", [
        (1, Decimal("0.7625")),
        (8, Decimal("0.64")),
        (10, Decimal("0.605")),
        (20, Decimal("0.43")),
        (25, Decimal("0.43")),
    ])
    def test_before_legal_age(self, regime, quarters, expected):
        assert regime.before_legal_age_coefficient(quarters) == expected

    def test_before_legal_age_miss(self, regime):
        assert regime.before_legal_age_coefficient(0) is None

    @pytest.mark.parametrize("missing,after,expected", [
        (10, 14, Decimal("0.94")),
        (4, 4, Decimal("0.96")),
        (16, 4, Decimal("0.83")),
        (5, 20, Decimal("1.00")),
        (25, 0, Decimal("0.78")),
    ])
    def test_after_legal_age_takes_most_favourable(self, regime, missing, after, expected):
        assert regime.after_legal_age_coefficient(missing, after) == expected

    @pytest.mark.parametrize("missing,expected", [
        (1, Decimal("0.99")),
        (12, Decimal("0.88")),
        (13, Decimal("0.8675")),
        (14, Decimal("0.855")),
        (20, Decimal("0.78")),
    ])
    def test_after_legal_age_reduction_steepens_after_twelve_quarters(self, regime, missing, expected):
        assert regime.after_legal_age_coefficient(missing, 0) == expected

    def test_after_legal_age_beyond_grid_is_clamped(self, regime):
        assert regime.after_legal_age_coefficient(16, 21) == Decimal("1")
        assert regime.after_legal_age_coefficient(16, 40) == Decimal("1")

    def test_after_legal_age_miss(self, regime):
        assert regime.after_legal_age_coefficient(-1, 0) is None

    def test_grid_must_ascend(self):
        with pytest.raises(ValueError, match="not ascending"):
            PointsRegime(full_rate_bonus_grid=[
                {"years_beyond_full_rate": 1, "coefficient": "1.1", "duration_years": 1},
                {"years_beyond_full_rate": 0, "coefficient": "1.0", "duration_years": 0},
            ])


# =============================================================================
# Children
# =============================================================================

class TestChildrenBonus:

    @pytest.mark.parametrize("count,expected", [
        (-1, Decimal("1")),
        (0, Decimal("1")),
        (1, Decimal("1.05")),
        (2, Decimal("1.10")),
        (4, Decimal("1.10")),
    ])
    def test_dependent_children(self, regime, count, expected):
        assert regime.child_bonus_coefficient(count) == expected

    def test_born_children(self, regime):
        assert regime.born_children_bonus(Decimal("1000"), 2) == Decimal("0")
        assert regime.born_children_bonus(Decimal("1000"), 3) == Decimal("100")

    def test_born_children_capped(self, regime):
        assert regime.born_children_bonus(Decimal("30000"), 3) == Decimal("2071.58")


# =============================================================================
# Points
# =============================================================================

class TestProjectedPoints:

    @pytest.fixture
    def situation(self):
        return PointsRegimeSituation(as_of_year=2019, points_balance=10000, points_per_year=100)

    def test_whole_years(self, regime, situation):
        assert regime.projected_points(situation, date(2025, 12, 31)) == 10600

    def test_partial_year_by_months(self, regime, situation):
        # 6 years 6 months
        assert regime.projected_points(situation, date(2026, 7, 1)) == 10650

    def test_unemployment_keeps_accruing(self, regime, situation):
        points = regime.projected_points(situation, date(2025, 12, 31), date(2026, 12, 31))
        assert points == 10700

    def test_retired_before_record(self, regime, situation):
        assert regime.projected_points(situation, date(2018, 6, 30)) == 10000


# =============================================================================
# Minoration / Majoration
# =============================================================================

class TestCoefficient:
    """Decision table for a person born 1964-09-22 (reference 169, legal ages 62 and 68)."""

    def coefficient(self, regime, general, situation, retirement, liquidation, year):
        return regime.minoration_majoration_coefficient(
            BIRTH, general, situation, retirement, None, liquidation, year
        )

    @pytest.mark.parametrize("acquired,expected", [
        (169, Decimal("1.0")),
        (173, Decimal("1.10")),
        (177, Decimal("1.20")),
        (181, Decimal("1.0")),
    ])
    def test_full_rate_bonus(self, regime, general, acquired, expected):
        coefficient = self.coefficient(
            regime, general, full_career(acquired), date(2026, 12, 31), date(2027, 1, 1), 2027
        )
        assert coefficient == expected

    def test_bonus_lasts_limited_years(self, regime, general):
        args = (regime, general, full_career(173), date(2026, 12, 31), date(2027, 1, 1))
        assert self.coefficient(*args, 2028) == Decimal("1.10")
        assert self.coefficient(*args, 2029) == Decimal("1")

    def test_full_rate_legal_age_reached(self, regime, general):
        args = (regime, general, full_career(177), date(2026, 12, 31), date(2027, 1, 1))
        assert self.coefficient(*args, 2031) == Decimal("1")
        assert self.coefficient(*args, 2032) == Decimal("1")

    def test_claim_before_legal_age(self, regime, general):
        # 153 quarters, 8 quarters before 2026-09-22
        coefficient = self.coefficient(
            regime, general, early_career(), date(2024, 9, 22), date(2024, 9, 22), 2024
        )
        assert coefficient == Decimal("0.64")

    def test_claim_too_early(self, regime, general):
        coefficient = self.coefficient(
            regime, general, early_career(), date(2020, 9, 22), date(2020, 9, 22), 2020
        )
        assert coefficient is None

    def test_claim_after_legal_age_without_full_rate(self, regime, general):
        # 16 quarters missing, 4 quarters after the legal age
        coefficient = self.coefficient(
            regime, general, early_career(), date(2024, 9, 22), date(2027, 9, 22), 2027
        )
        assert coefficient == Decimal("0.83")

    @pytest.mark.parametrize("retirement,expected", [
        # 155 quarters: 14 missing at the legal age
        (date(2024, 12, 31), Decimal("0.855")),
        # 143 quarters: 26 missing, maximum reduction
        (date(2022, 1, 1), Decimal("0.78")),
    ])
    def test_claim_just_after_legal_age(self, regime, general, retirement, expected):
        coefficient = self.coefficient(
            regime, general, early_career(), retirement, date(2026, 10, 2), 2026
        )
        assert coefficient == expected

    @pytest.mark.parametrize("liquidation", [
        date(2031, 9, 22),
        date(2032, 3, 22),
        date(2032, 9, 22),
        date(2035, 1, 1),
    ])
    def test_claim_late_without_full_rate_is_not_reduced(self, regime, general, liquidation):
        # 16 quarters missing, claimed 20 quarters or more after the legal age
        coefficient = self.coefficient(
            regime, general, early_career(), date(2024, 9, 22), liquidation, liquidation.year
        )
        assert coefficient == Decimal("1")

    def test_evaluation_before_liquidation(self, regime, general):
        coefficient = self.coefficient(
            regime, general, full_career(173), date(2026, 12, 31), date(2027, 1, 1), 2026
        )
        assert coefficient is None


# =============================================================================
# Pension
# =============================================================================

class TestPension:

    @pytest.fixture
    def points(self):
        return PointsRegimeSituation(as_of_year=2026, points_balance=10000)

    def pension(self, regime, general, points, **overrides):
        kwargs = dict(
            birth_date=BIRTH,
            situation=points,
            general_regime=general,
            general_situation=full_career(169),
            date_of_retirement=date(2026, 12, 31),
            date_of_end_of_unemployment_alloc=None,
            date_of_pension_liquid=date(2027, 1, 1),
            born_child_count=0,
            dependent_child_count=0,
            taxes=PensionTaxes(),
        )
        kwargs.update(overrides)
        return regime.pension(**kwargs)

    def test_pension_at_full_rate(self, regime, general, points):
        pension = self.pension(regime, general, points)
        assert pension.points == 10000
        assert pension.coefficient == Decimal("1.0")
        assert pension.gross == Decimal("12714")
        assert pension.net == Decimal("12714") * Decimal("0.899")

    def test_dependent_children_majoration(self, regime, general, points):
        pension = self.pension(regime, general, points, dependent_child_count=2)
        assert pension.gross == Decimal("13985.4")

    def test_born_children_majoration(self, regime, general, points):
        pension = self.pension(regime, general, points, born_child_count=3)
        assert pension.born_children_bonus == Decimal("1271.4")
        assert pension.gross == Decimal("13985.4")

    def test_majorations_do_not_add_up(self, regime, general, points):
        pension = self.pension(regime, general, points, born_child_count=3, dependent_child_count=2)
        assert pension.gross == Decimal("13985.4")

    def test_before_minimum_age(self, regime, general, points):
        assert self.pension(regime, general, points, date_of_pension_liquid=date(2021, 1, 1)) is None

    def test_evaluation_before_liquidation(self, regime, general, points):
        with pytest.raises(ValueError):
            self.pension(regime, general, points, evaluation_year=2026)

    def test_revalued(self, regime, general, points):
        pension = self.pension(
            regime, general, points, devaluation_rate=Decimal("1"), evaluation_year=2029
        )
        assert pension.gross == Decimal("12714") * Decimal("0.9801")
