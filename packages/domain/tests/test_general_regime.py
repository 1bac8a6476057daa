"""Tests for the general (quarters-based) retirement regime.

Reference career used throughout: born 1964-09-22 (reference duration 169
quarters, full-rate legal age 68), 135 quarters acquired at the end of 2019.
"""

import pytest
from datetime import date
from decimal import Decimal

from patrimoine_domain.schemas import (
    GeneralRegime,
    GeneralRegimeSituation,
    OutOfBounds,
    PensionTaxes,
    revaluation_coefficient,
)

BIRTH = date(1964, 9, 22)


@pytest.fixture
def regime():
    return GeneralRegime()


@pytest.fixture
def situation():
    return GeneralRegimeSituation(
        as_of_year=2019,
        acquired_quarters=135,
        average_annual_wage=Decimal("30000"),
    )


# =============================================================================
# Grids
# =============================================================================

class TestGrids:
    """Generation grid and unemployment credit grid."""

    def test_reference_values_for_1964(self, regime):
        assert regime.reference_duration(1964) == 169
        assert regime.full_rate_legal_age(1964) == 68

    @pytest.mark.parametrize("birth_year,quarters,age", [
        (1900, 160, 65),
        (1948, 160, 65),
        (1949, 161, 65),
        (1950, 162, 65),
        (1951, 163, 65),
        (1952, 164, 65),
        (1953, 165, 66),
        (1954, 165, 66),
        (1955, 166, 66),
        (1958, 167, 67),
        (1961, 168, 67),
        (1963, 168, 67),
        (1964, 169, 68),
        (1967, 170, 69),
        (1970, 171, 70),
        (1973, 172, 71),
        (1980, 172, 71),
    ])
    def test_generation_thresholds(self, regime, birth_year, quarters, age):
        assert regime.reference_duration(birth_year) == quarters
        assert regime.full_rate_legal_age(birth_year) == age

    def test_generation_before_grid(self, regime):
        assert regime.reference_duration(1899) is None
        assert regime.full_rate_legal_age(1899) is None
        assert regime.full_rate_legal_date(date(1899, 1, 1)) is None

    @pytest.mark.parametrize("acquired,credited", [(0, 4), (1, 4), (79, 4), (80, 20), (90, 20)])
    def test_unemployment_credit(self, regime, acquired, credited):
        assert regime.credited_unemployment_quarters(acquired) == credited

    def test_legal_dates(self, regime):
        assert regime.full_rate_legal_date(BIRTH) == date(2032, 9, 22)
        assert regime.minimum_legal_date(BIRTH) == date(2026, 9, 22)

    def test_grid_must_ascend(self):
        with pytest.raises(ValueError, match="not ascending"):
            GeneralRegime(reference_duration_grid=[
                {"birth_year": 1960, "quarters": 168, "full_rate_age": 67},
                {"birth_year": 1950, "quarters": 162, "full_rate_age": 65},
            ])

    def test_override_from_mapping(self):
        regime = GeneralRegime.model_validate({"max_decote_quarters": 12})
        assert regime.max_decote_quarters == 12
        assert regime.reference_duration(1964) == 169


# =============================================================================
# Insured Duration
# =============================================================================

class TestInsuredDuration:
    """Quarters accrued from the recorded situation to the end of activity."""

    def test_accrual_until_retirement(self, regime, situation):
        duration = regime.insured_duration(BIRTH, situation, date(2025, 12, 31))
        assert duration.uncapped == 159
        assert duration.capped == 159

    def test_partial_year_rounded_down(self, regime, situation):
        duration = regime.insured_duration(BIRTH, situation, date(2026, 9, 30))
        assert duration.uncapped == 162

    def test_capped_at_reference_duration(self, regime, situation):
        duration = regime.insured_duration(BIRTH, situation, date(2045, 12, 31))
        assert duration.uncapped == 159 + 80
        assert duration.capped == 169

    def test_unemployment_capped_at_minimum_legal_age(self, regime, situation):
        # end of allowance 2024-12-31 + 20 credited quarters is beyond 2026-09-22
        duration = regime.insured_duration(
            BIRTH, situation, date(2021, 12, 31), date(2024, 12, 31)
        )
        assert duration.uncapped == 161

    @pytest.mark.parametrize("end_of_allowance", [
        date(2026, 6, 30),
        date(2029, 12, 31),
        date(2040, 12, 31),
    ])
    def test_unemployment_after_late_retirement(self, regime, situation, end_of_allowance):
        # activity until 2027-12-31 is beyond the minimum legal age
        without = regime.insured_duration(BIRTH, situation, date(2027, 12, 31))
        duration = regime.insured_duration(BIRTH, situation, date(2027, 12, 31), end_of_allowance)
        assert without.uncapped == 167
        assert duration.uncapped == 167

    def test_unemployment_never_shortens_activity(self, regime, situation):
        for retirement in [date(2021, 12, 31), date(2025, 6, 30), date(2028, 3, 31)]:
            without = regime.insured_duration(BIRTH, situation, retirement)
            duration = regime.insured_duration(BIRTH, situation, retirement, date(2029, 12, 31))
            assert duration.uncapped >= without.uncapped

    def test_unemployment_with_few_quarters(self, regime):
        situation = GeneralRegimeSituation(as_of_year=2019, acquired_quarters=79)
        duration = regime.insured_duration(
            BIRTH, situation, date(2018, 12, 31), date(2021, 12, 31)
        )
        # 2019-12-31 to 2022-12-31: 12 quarters
        assert duration.uncapped == 91

    def test_situation_after_retirement(self, regime):
        situation = GeneralRegimeSituation(as_of_year=2027, acquired_quarters=150)
        duration = regime.insured_duration(BIRTH, situation, date(2026, 12, 31))
        assert duration.uncapped == 150

    def test_unknown_generation(self, regime, situation):
        assert regime.insured_duration(date(1899, 1, 1), situation, date(1960, 1, 1)) is None

    def test_missing_quarters(self, regime, situation):
        assert regime.missing_quarters_for_full_rate(BIRTH, situation, date(2026, 9, 30)) == 7
        assert regime.missing_quarters_for_full_rate(BIRTH, situation, date(2045, 12, 31)) == -70

    def test_full_rate_date(self, regime, situation):
        # 34 quarters missing at the end of 2019
        assert regime.full_rate_date(BIRTH, situation) == date(2028, 6, 30)

    def test_full_rate_date_already_reached(self, regime):
        situation = GeneralRegimeSituation(as_of_year=2019, acquired_quarters=180)
        assert regime.full_rate_date(BIRTH, situation) == date(2019, 12, 31)


# =============================================================================
# Discount / Bonus
# =============================================================================

class TestDiscountAndBonus:
    """Décote and surcote are mutually exclusive."""

    def test_discount_limited_by_duration(self, regime):
        assert regime.discount_quarters(BIRTH, 160, 169, date(2026, 9, 22)) == 9

    def test_discount_limited_by_age(self, regime):
        # 4 quarters before the full-rate legal age
        assert regime.discount_quarters(BIRTH, 160, 169, date(2031, 9, 22)) == 4

    def test_discount_never_exceeds_twenty(self, regime):
        assert regime.discount_quarters(BIRTH, 100, 169, date(2026, 9, 22)) == 20
        assert regime.discount_quarters(BIRTH, 0, 169, date(2026, 9, 22)) == 20

    def test_no_discount_after_full_rate_age(self, regime):
        assert regime.discount_quarters(BIRTH, 100, 169, date(2033, 1, 1)) == 0

    def test_discount_raises_when_reference_reached(self, regime):
        with pytest.raises(OutOfBounds):
            regime.discount_quarters(BIRTH, 169, 169, date(2026, 9, 22))

    def test_bonus(self, regime):
        assert regime.bonus_quarters(173, 169) == 4
        assert regime.bonus_quarters(169, 169) == 0
        with pytest.raises(OutOfBounds):
            regime.bonus_quarters(168, 169)

    def test_exactly_one_branch_applies(self, regime):
        for insured in range(140, 200):
            outcomes = []
            try:
                regime.discount_quarters(BIRTH, insured, 169, date(2026, 9, 22))
                outcomes.append("discount")
            except OutOfBounds:
                pass
            try:
                regime.bonus_quarters(insured, 169)
                outcomes.append("bonus")
            except OutOfBounds:
                pass
            assert len(outcomes) == 1

    def test_signed_quarters(self, regime):
        assert regime.signed_quarters_beyond_full_rate(BIRTH, 160, 169, date(2026, 9, 22)) == -9
        assert regime.signed_quarters_beyond_full_rate(BIRTH, 173, 169, date(2026, 9, 22)) == 4

    def test_pension_rate(self, regime):
        assert regime.pension_rate(BIRTH, 160, 169, date(2026, 9, 22)) == Decimal("44.375")
        assert regime.pension_rate(BIRTH, 169, 169, date(2026, 9, 22)) == Decimal("50")
        assert regime.pension_rate(BIRTH, 173, 169, date(2026, 9, 22)) == Decimal("52.5")

    def test_pension_rate_unknown_generation(self, regime):
        assert regime.pension_rate(date(1899, 1, 1), 100, 160, date(1961, 1, 1)) is None


# =============================================================================
# Pension
# =============================================================================

class TestPension:
    """Gross pension, child bonus, revaluation and net pension."""

    def test_child_bonus(self, regime):
        assert regime.child_bonus_percent(2) == Decimal("0")
        assert regime.child_bonus_percent(3) == Decimal("10")
        assert regime.child_bonus_percent(5) == Decimal("10")

    def test_gross_pension_at_full_rate(self, regime):
        gross = regime.gross_pension(Decimal("30000"), Decimal("50"), Decimal("0"), 169, 169)
        assert gross == Decimal("15000")

    def test_revaluation(self):
        assert revaluation_coefficient(2030, 2030, Decimal("1")) == Decimal("1")
        assert revaluation_coefficient(2032, 2030, Decimal("1")) == Decimal("0.9801")

    def test_revaluation_before_liquidation(self):
        with pytest.raises(ValueError, match="before liquidation"):
            revaluation_coefficient(2029, 2030, Decimal("1"))

    def test_pension_with_discount(self, regime, situation):
        taxes = PensionTaxes()
        pension = regime.pension(
            birth_date=BIRTH,
            situation=situation,
            date_of_retirement=date(2026, 9, 30),
            date_of_end_of_unemployment_alloc=None,
            date_of_pension_liquid=date(2026, 9, 30),
            child_count=3,
            taxes=taxes,
        )
        # rate uses the uncapped duration: 7 quarters missing
        assert pension.uncapped_duration == 162
        assert pension.capped_duration == 162
        assert pension.reference_duration == 169
        assert pension.rate == Decimal("45.625")
        assert pension.child_bonus_percent == Decimal("10")
        expected = 30000 * 0.45625 * 1.10 * 162 / 169
        assert float(pension.gross) == pytest.approx(expected)
        assert float(pension.net) == pytest.approx(expected * (1 - 0.091))

    def test_pension_with_bonus_is_prorated_on_capped_duration(self, regime, situation):
        pension = regime.pension(
            birth_date=BIRTH,
            situation=situation,
            date_of_retirement=date(2030, 12, 31),
            date_of_end_of_unemployment_alloc=None,
            date_of_pension_liquid=date(2031, 1, 1),
            child_count=0,
            taxes=PensionTaxes(),
        )
        # 135 + 44 = 179 quarters: 10 quarters of surcote
        assert pension.uncapped_duration == 179
        assert pension.capped_duration == 169
        assert pension.rate == Decimal("56.25")
        assert pension.gross == Decimal("30000") * Decimal("0.5625")

    def test_pension_revalued(self, regime, situation):
        kwargs = dict(
            birth_date=BIRTH,
            situation=situation,
            date_of_retirement=date(2030, 12, 31),
            date_of_end_of_unemployment_alloc=None,
            date_of_pension_liquid=date(2031, 1, 1),
            child_count=0,
            taxes=PensionTaxes(),
        )
        base = regime.pension(**kwargs)
        revalued = regime.pension(**kwargs, devaluation_rate=Decimal("1"), evaluation_year=2033)
        assert revalued.gross == base.gross * Decimal("0.9801")

    def test_pension_evaluated_before_liquidation(self, regime, situation):
        with pytest.raises(ValueError):
            regime.pension(
                birth_date=BIRTH,
                situation=situation,
                date_of_retirement=date(2030, 12, 31),
                date_of_end_of_unemployment_alloc=None,
                date_of_pension_liquid=date(2031, 1, 1),
                child_count=0,
                taxes=PensionTaxes(),
                evaluation_year=2030,
            )

    def test_pension_unknown_generation(self, regime, situation):
        pension = regime.pension(
            birth_date=date(1899, 1, 1),
            situation=situation,
            date_of_retirement=date(1960, 12, 31),
            date_of_end_of_unemployment_alloc=None,
            date_of_pension_liquid=date(1961, 1, 1),
            child_count=0,
            taxes=PensionTaxes(),
        )
        assert pension is None
