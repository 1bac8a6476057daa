"""Complementary (points-based) retirement regime.

The yearly pension is the number of points acquired times the value of a point,
weighted by a minoration / majoration coefficient that depends on how the claim
date relates to the general-regime full rate:

    base  = points * point_value * coefficient
    gross = base + max(dependent children majoration, born children majoration)

Coefficient decision table (beyond = uncapped insured duration - reference duration):

    beyond < 0, claim from the full-rate legal age       -> 1.0
    beyond < 0, claim at or after the minimum legal age  -> after_legal_age_grid
    beyond < 0, claim 1 to 20 quarters before legal age  -> before_legal_age_grid
    beyond < 0, claim earlier                            -> None
    beyond >= 0, aged at least the full-rate legal age   -> 1.0
    beyond >= 0, otherwise                               -> full_rate_bonus_grid,
                                                            for a limited number of years
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import Field, field_validator

from .base import ParameterModel, Coefficient, MoneyAmount, PercentRate, PointCount, Year
from .dates import (
    add_years,
    fractional_years_between,
    last_day_of,
    quarters_rounded_down,
    quarters_rounded_up,
    whole_years_between,
)
from .general_regime import GeneralRegime, GeneralRegimeSituation, revaluation_coefficient
from .pension_taxes import PensionTaxes
from .rate_grid import check_ascending, last_at_or_below

logger = logging.getLogger(__name__)


# =============================================================================
# Situation & Grids
# =============================================================================

class PointsRegimeSituation(ParameterModel):
    """Points record known at Dec 31 of as_of_year."""

    as_of_year: Year = Field(description="Year of the record (taken at Dec 31)")

    points_balance: PointCount = Field(description="Points acquired up to the end of as_of_year")

    points_per_year: PointCount = Field(
        default=0,
        description="Points acquired per year of activity (or of unemployment)"
    )


class BeforeLegalAgeSlice(ParameterModel):
    """Minoration for a claim made some quarters before the minimum legal age."""

    quarters_before_legal_age: int = Field(ge=0)
    coefficient: Coefficient


class AfterLegalAgeSlice(ParameterModel):
    """Minoration for a claim after the legal age without the full rate."""

    missing_quarters: int = Field(ge=0)
    quarters_after_legal_age: int = Field(ge=0)
    coefficient: Coefficient


class FullRateBonusSlice(ParameterModel):
    """Temporary majoration for a claim made after reaching the full rate."""

    years_beyond_full_rate: int = Field(ge=0)
    coefficient: Coefficient
    duration_years: int = Field(ge=0, description="Years during which the coefficient applies")


class PointsChildrenBonus(ParameterModel):
    """Children-related majorations of the complementary pension."""

    born_children_bonus_percent: PercentRate = Field(default=Decimal("10"))
    born_children_min: int = Field(default=3, ge=0)
    born_children_bonus_cap: MoneyAmount = Field(
        default=Decimal("2071.58"),
        description="Yearly ceiling of the born children majoration"
    )
    dependent_child_bonus_percent: PercentRate = Field(default=Decimal("5"))
    dependent_children_max: int = Field(default=2, ge=0)


class PointsRegimePension(ParameterModel):
    """Result of a points-regime pension computation."""

    points: int
    coefficient: Decimal
    child_bonus_coefficient: Decimal
    born_children_bonus: Decimal
    gross: Decimal
    net: Decimal


def _default_before_legal_age_grid() -> List[BeforeLegalAgeSlice]:
    return [
        BeforeLegalAgeSlice(
            quarters_before_legal_age=q,
            coefficient=Decimal("0.78") - Decimal("0.0175") * q,
        )
        for q in range(1, 21)
    ]


def _after_legal_age_reduction(missing_quarters: int) -> Decimal:
    # 1% per missing quarter up to 12, then 1.25%
    if missing_quarters <= 12:
        return Decimal("0.01") * missing_quarters
    return Decimal("0.12") + Decimal("0.0125") * (missing_quarters - 12)


def _default_after_legal_age_grid() -> List[AfterLegalAgeSlice]:
    return [
        AfterLegalAgeSlice(
            missing_quarters=i,
            quarters_after_legal_age=20 - i,
            coefficient=1 - _after_legal_age_reduction(i),
        )
        for i in range(0, 21)
    ]


def _default_full_rate_bonus_grid() -> List[FullRateBonusSlice]:
    return [
        FullRateBonusSlice(years_beyond_full_rate=0, coefficient=Decimal("1.0"), duration_years=0),
        FullRateBonusSlice(years_beyond_full_rate=1, coefficient=Decimal("1.10"), duration_years=1),
        FullRateBonusSlice(years_beyond_full_rate=2, coefficient=Decimal("1.20"), duration_years=1),
        FullRateBonusSlice(years_beyond_full_rate=3, coefficient=Decimal("1.0"), duration_years=0),
    ]


def _accrued_points(points_per_year: int, start: date, end: date) -> Decimal:
    if start >= end:
        return Decimal("0")
    years, months = fractional_years_between(start, end)
    return points_per_year * (Decimal(years) + Decimal(months) / 12)


# =============================================================================
# Points Regime Engine
# =============================================================================

class PointsRegime(ParameterModel):
    """Parameters and computations of the complementary points regime.

    Example:
        regime = PointsRegime()
        regime.before_legal_age_coefficient(10)          # 0.605
        regime.after_legal_age_coefficient(10, 14)       # 0.94
        regime.child_bonus_coefficient(3)                # 1.10
    """

    before_legal_age_grid: List[BeforeLegalAgeSlice] = Field(
        default_factory=_default_before_legal_age_grid
    )

    after_legal_age_grid: List[AfterLegalAgeSlice] = Field(
        default_factory=_default_after_legal_age_grid
    )

    full_rate_bonus_grid: List[FullRateBonusSlice] = Field(
        default_factory=_default_full_rate_bonus_grid
    )

    point_value: MoneyAmount = Field(default=Decimal("1.2714"), description="Value of one point")

    minimum_age: int = Field(default=57, ge=0, description="Minimum age to claim the pension")

    children: PointsChildrenBonus = Field(default_factory=PointsChildrenBonus)

    @field_validator("before_legal_age_grid")
    @classmethod
    def validate_before_grid(cls, v: List[BeforeLegalAgeSlice]) -> List[BeforeLegalAgeSlice]:
        check_ascending([s.quarters_before_legal_age for s in v], "before legal age grid")
        return v

    @field_validator("after_legal_age_grid")
    @classmethod
    def validate_after_grid(cls, v: List[AfterLegalAgeSlice]) -> List[AfterLegalAgeSlice]:
        check_ascending([s.missing_quarters for s in v], "after legal age grid")
        return v

    @field_validator("full_rate_bonus_grid")
    @classmethod
    def validate_bonus_grid(cls, v: List[FullRateBonusSlice]) -> List[FullRateBonusSlice]:
        check_ascending([s.years_beyond_full_rate for s in v], "full rate bonus grid")
        return v

    def minimum_claim_date(self, birth_date: date) -> date:
        return add_years(birth_date, self.minimum_age)

    # -------------------------------------------------------------------------
    # Coefficients
    # -------------------------------------------------------------------------

    def before_legal_age_coefficient(self, quarters_before: int) -> Optional[Decimal]:
        found = last_at_or_below(
            self.before_legal_age_grid, lambda s: s.quarters_before_legal_age, quarters_before
        )
        if found is None:
            logger.warning("no coefficient for a claim %s quarters before legal age", quarters_before)
            return None
        return found.coefficient

    def after_legal_age_coefficient(
        self,
        missing_quarters: int,
        quarters_after_legal_age: int,
    ) -> Optional[Decimal]:
        """Most favourable of the missing-quarters and quarters-after-legal-age rows.

        Returns:
            max(c1, c2), where c1 is the last row with missing_quarters <= the value
            and c2 the last row with quarters_after_legal_age >= the value, the value
            being clamped to the largest quarters_after_legal_age of the grid; None if
            either lookup misses
        """
        by_missing = last_at_or_below(
            self.after_legal_age_grid, lambda s: s.missing_quarters, missing_quarters
        )
        by_age = None
        if self.after_legal_age_grid:
            quarters_after_legal_age = min(
                quarters_after_legal_age,
                max(s.quarters_after_legal_age for s in self.after_legal_age_grid),
            )
        for grid_slice in self.after_legal_age_grid:
            if grid_slice.quarters_after_legal_age >= quarters_after_legal_age:
                by_age = grid_slice
        if by_missing is None or by_age is None:
            logger.warning(
                "no coefficient for %s missing quarters, %s quarters after legal age",
                missing_quarters, quarters_after_legal_age,
            )
            return None
        return max(by_missing.coefficient, by_age.coefficient)

    def minoration_majoration_coefficient(
        self,
        birth_date: date,
        general_regime: GeneralRegime,
        general_situation: GeneralRegimeSituation,
        date_of_retirement: date,
        date_of_end_of_unemployment_alloc: Optional[date],
        date_of_pension_liquid: date,
        evaluation_year: int,
    ) -> Optional[Decimal]:
        """Coefficient applied to the points pension in evaluation_year.

        Returns:
            The coefficient, or None when the claim is too early, a lookup misses,
            or evaluation_year ends before the claim
        """
        duration = general_regime.insured_duration(
            birth_date, general_situation, date_of_retirement, date_of_end_of_unemployment_alloc
        )
        reference = general_regime.reference_duration(birth_date.year)
        if duration is None or reference is None:
            return None
        beyond = duration.uncapped - reference

        if evaluation_year < date_of_pension_liquid.year:
            return None
        delay = whole_years_between(date_of_pension_liquid, last_day_of(evaluation_year))

        if beyond < 0:
            full_rate_date = general_regime.full_rate_legal_date(birth_date)
            if full_rate_date is not None and date_of_pension_liquid >= full_rate_date:
                return Decimal("1")
            legal_date = general_regime.minimum_legal_date(birth_date)
            quarters_before = quarters_rounded_up(date_of_pension_liquid, legal_date)
            if quarters_before <= 0:
                quarters_after = quarters_rounded_down(legal_date, date_of_pension_liquid)
                return self.after_legal_age_coefficient(-beyond, quarters_after)
            if quarters_before <= (general_regime.minimum_legal_age - self.minimum_age) * 4:
                return self.before_legal_age_coefficient(quarters_before)
            logger.debug("claim %s quarters before legal age: not allowed", quarters_before)
            return None

        full_rate_age = general_regime.full_rate_legal_age(birth_date.year)
        if full_rate_age is None:
            return None
        if evaluation_year - birth_date.year >= full_rate_age:
            return Decimal("1")

        found = last_at_or_below(
            self.full_rate_bonus_grid, lambda s: s.years_beyond_full_rate, beyond // 4
        )
        if found is None:
            logger.warning("no full rate bonus for %s years beyond full rate", beyond // 4)
            return None
        if delay <= found.duration_years:
            return found.coefficient
        return Decimal("1")

    def child_bonus_coefficient(self, dependent_child_count: int) -> Decimal:
        """Majoration for dependent children: 1.0, 1.05, then 1.10 from two children."""
        counted = min(max(dependent_child_count, 0), self.children.dependent_children_max)
        return 1 + self.children.dependent_child_bonus_percent * counted / 100

    def born_children_bonus(self, pension_before_bonus: Decimal, born_child_count: int) -> Decimal:
        """Majoration for parents of born_children_min children, capped."""
        if born_child_count < self.children.born_children_min:
            return Decimal("0")
        bonus = pension_before_bonus * self.children.born_children_bonus_percent / 100
        return min(bonus, self.children.born_children_bonus_cap)

    # -------------------------------------------------------------------------
    # Points & pension
    # -------------------------------------------------------------------------

    def projected_points(
        self,
        situation: PointsRegimeSituation,
        date_of_retirement: date,
        date_of_end_of_unemployment_alloc: Optional[date] = None,
    ) -> int:
        """Points balance projected to the end of activity and unemployment.

        Partial years accrue proportionally by whole months.
        """
        reference_date = last_day_of(situation.as_of_year)
        activity = _accrued_points(situation.points_per_year, reference_date, date_of_retirement)
        unemployment = Decimal("0")
        if date_of_end_of_unemployment_alloc is not None and reference_date < date_of_end_of_unemployment_alloc:
            unemployment = _accrued_points(
                situation.points_per_year,
                max(reference_date, date_of_retirement),
                date_of_end_of_unemployment_alloc,
            )
        return situation.points_balance + int(activity + unemployment)

    def pension(
        self,
        birth_date: date,
        situation: PointsRegimeSituation,
        general_regime: GeneralRegime,
        general_situation: GeneralRegimeSituation,
        date_of_retirement: date,
        date_of_end_of_unemployment_alloc: Optional[date],
        date_of_pension_liquid: date,
        born_child_count: int,
        dependent_child_count: int,
        taxes: PensionTaxes,
        devaluation_rate: Decimal = Decimal("0"),
        evaluation_year: Optional[int] = None,
    ) -> Optional[PointsRegimePension]:
        """Gross and net yearly complementary pension.

        Returns:
            PointsRegimePension, or None before the minimum claim date or on a lookup miss

        Raises:
            ValueError: If evaluation_year is before the liquidation year
        """
        if date_of_pension_liquid < self.minimum_claim_date(birth_date):
            logger.debug("points pension claimed before minimum age %s", self.minimum_age)
            return None
        if evaluation_year is not None and evaluation_year < date_of_pension_liquid.year:
            raise ValueError(
                f"evaluation year {evaluation_year} is before liquidation year {date_of_pension_liquid.year}"
            )

        coefficient = self.minoration_majoration_coefficient(
            birth_date,
            general_regime,
            general_situation,
            date_of_retirement,
            date_of_end_of_unemployment_alloc,
            date_of_pension_liquid,
            evaluation_year if evaluation_year is not None else date_of_pension_liquid.year,
        )
        if coefficient is None:
            return None

        points = self.projected_points(situation, date_of_retirement, date_of_end_of_unemployment_alloc)
        base = points * self.point_value * coefficient
        child_coefficient = self.child_bonus_coefficient(dependent_child_count)
        born_bonus = self.born_children_bonus(base, born_child_count)
        gross = base + max(base * (child_coefficient - 1), born_bonus)

        if evaluation_year is not None:
            gross = gross * revaluation_coefficient(
                evaluation_year, date_of_pension_liquid.year, devaluation_rate
            )

        return PointsRegimePension(
            points=points,
            coefficient=coefficient,
            child_bonus_coefficient=child_coefficient,
            born_children_bonus=born_bonus,
            gross=gross,
            net=taxes.net_points_regime(gross),
        )
