"""General (quarters-based) wage-earner retirement regime.

The pension is computed from the average annual wage (SAM), a rate that depends on
the number of quarters missing or exceeding the reference duration, and a
proration of the insured duration:

    gross = SAM * rate/100 * (1 + child_bonus/100) * capped_duration / reference_duration

Rate:
    - Discount (décote) when the insured duration is below the reference duration:
      rate = max_rate - decote_per_quarter * n, with n limited by the age at
      liquidation and by max_decote_quarters
    - Bonus (surcote) otherwise:
      rate = max_rate * (1 + surcote_per_quarter * n / 100)

The rate is computed on the uncapped insured duration, the proration on the
duration capped at the reference duration.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import Field, field_validator

from .base import ParameterModel, MoneyAmount, PercentRate, QuarterCount, Year
from .dates import add_quarters, add_years, last_day_of, quarters_rounded_down, quarters_rounded_up
from .errors import OutOfBounds
from .pension_taxes import PensionTaxes
from .rate_grid import check_ascending, last_at_or_below

logger = logging.getLogger(__name__)


# =============================================================================
# Situation & Grids
# =============================================================================

class GeneralRegimeSituation(ParameterModel):
    """Career record known at Dec 31 of as_of_year."""

    as_of_year: Year = Field(description="Year of the record (taken at Dec 31)")

    acquired_quarters: QuarterCount = Field(
        description="Quarters validated up to the end of as_of_year"
    )

    average_annual_wage: MoneyAmount = Field(
        default=Decimal("0"),
        description="Average of the best annual wages (SAM)"
    )


class ReferenceDurationSlice(ParameterModel):
    """Reference duration and full-rate legal age by generation."""

    birth_year: int
    quarters: QuarterCount
    full_rate_age: int = Field(ge=0)


class UnemploymentCreditSlice(ParameterModel):
    """Quarters credited after the end of unemployment allowances."""

    acquired_quarters: QuarterCount
    credited_quarters: QuarterCount


class InsuredDuration(ParameterModel):
    """Insured duration at retirement, raw and capped at the reference duration."""

    uncapped: int
    capped: int


class GeneralRegimePension(ParameterModel):
    """Result of a general-regime pension computation."""

    rate: PercentRate
    child_bonus_percent: PercentRate
    reference_duration: int
    capped_duration: int
    uncapped_duration: int
    gross: Decimal
    net: Decimal


def _default_reference_duration_grid() -> List[ReferenceDurationSlice]:
    rows = [
        (1900, 160, 65), (1949, 161, 65), (1950, 162, 65), (1951, 163, 65),
        (1952, 164, 65), (1953, 165, 66), (1955, 166, 66), (1958, 167, 67),
        (1961, 168, 67), (1964, 169, 68), (1967, 170, 69), (1970, 171, 70),
        (1973, 172, 71),
    ]
    return [
        ReferenceDurationSlice(birth_year=year, quarters=quarters, full_rate_age=age)
        for year, quarters, age in rows
    ]


def _default_unemployment_credit_grid() -> List[UnemploymentCreditSlice]:
    return [
        UnemploymentCreditSlice(acquired_quarters=0, credited_quarters=4),
        UnemploymentCreditSlice(acquired_quarters=80, credited_quarters=20),
    ]


def revaluation_coefficient(
    evaluation_year: int,
    liquidation_year: int,
    devaluation_rate: Decimal,
) -> Decimal:
    """Cumulated revaluation of a pension between liquidation and evaluation.

    Pensions lose devaluation_rate % of purchasing power per year:
        (1 - devaluation_rate/100) ** (evaluation_year - liquidation_year)

    Raises:
        ValueError: If evaluation_year is before liquidation_year
    """
    if evaluation_year < liquidation_year:
        raise ValueError(
            f"evaluation year {evaluation_year} is before liquidation year {liquidation_year}"
        )
    return (1 - Decimal(devaluation_rate) / 100) ** (evaluation_year - liquidation_year)


# =============================================================================
# General Regime Engine
# =============================================================================

class GeneralRegime(ParameterModel):
    """Parameters and computations of the general regime.

    Grid lookups return None on a miss; methods depending on a lookup propagate
    that None to their caller.

    Example:
        regime = GeneralRegime()
        regime.reference_duration(1964)    # 169
        regime.full_rate_legal_age(1964)   # 68
    """

    reference_duration_grid: List[ReferenceDurationSlice] = Field(
        default_factory=_default_reference_duration_grid,
        description="Reference duration and full-rate age by birth year (ascending)"
    )

    unemployment_credit_grid: List[UnemploymentCreditSlice] = Field(
        default_factory=_default_unemployment_credit_grid,
        description="Credited quarters after unemployment by acquired quarters (ascending)"
    )

    minimum_legal_age: int = Field(default=62, ge=0)
    sam_years: int = Field(default=25, ge=1, description="Number of best years in the SAM")
    max_rate: PercentRate = Field(default=Decimal("50"))
    decote_per_quarter: PercentRate = Field(default=Decimal("0.625"))
    surcote_per_quarter: PercentRate = Field(default=Decimal("1.25"))
    max_decote_quarters: int = Field(default=20, ge=0)
    child_bonus_min_children: int = Field(default=3, ge=0)
    child_bonus: PercentRate = Field(default=Decimal("10"))

    @field_validator("reference_duration_grid")
    @classmethod
    def validate_reference_grid(cls, v: List[ReferenceDurationSlice]) -> List[ReferenceDurationSlice]:
        check_ascending([s.birth_year for s in v], "reference duration grid")
        return v

    @field_validator("unemployment_credit_grid")
    @classmethod
    def validate_unemployment_grid(cls, v: List[UnemploymentCreditSlice]) -> List[UnemploymentCreditSlice]:
        check_ascending([s.acquired_quarters for s in v], "unemployment credit grid")
        return v

    # -------------------------------------------------------------------------
    # Grid lookups
    # -------------------------------------------------------------------------

    def _generation(self, birth_year: int) -> Optional[ReferenceDurationSlice]:
        found = last_at_or_below(self.reference_duration_grid, lambda s: s.birth_year, birth_year)
        if found is None:
            logger.warning("no reference duration for birth year %s", birth_year)
        return found

    def reference_duration(self, birth_year: int) -> Optional[int]:
        """Quarters required for the full rate (durée de référence)."""
        generation = self._generation(birth_year)
        return None if generation is None else generation.quarters

    def full_rate_legal_age(self, birth_year: int) -> Optional[int]:
        """Age from which the full rate is granted whatever the insured duration."""
        generation = self._generation(birth_year)
        return None if generation is None else generation.full_rate_age

    def credited_unemployment_quarters(self, acquired_quarters: int) -> Optional[int]:
        found = last_at_or_below(
            self.unemployment_credit_grid, lambda s: s.acquired_quarters, acquired_quarters
        )
        if found is None:
            logger.warning("no unemployment credit for %s acquired quarters", acquired_quarters)
            return None
        return found.credited_quarters

    def full_rate_legal_date(self, birth_date: date) -> Optional[date]:
        age = self.full_rate_legal_age(birth_date.year)
        return None if age is None else add_years(birth_date, age)

    def minimum_legal_date(self, birth_date: date) -> date:
        return add_years(birth_date, self.minimum_legal_age)

    # -------------------------------------------------------------------------
    # Durations
    # -------------------------------------------------------------------------

    def insured_duration(
        self,
        birth_date: date,
        situation: GeneralRegimeSituation,
        date_of_retirement: date,
        date_of_end_of_unemployment_alloc: Optional[date] = None,
    ) -> Optional[InsuredDuration]:
        """Insured duration (in quarters) reached when the pension is claimed.

        Quarters keep accruing from the recorded situation until the end of
        activity. After unemployment, accrual goes on until the end of the allowance
        plus the credited quarters, but not beyond the minimum legal age unless the
        activity itself ended later.

        Args:
            birth_date: Birth date of the insured
            situation: Last known career record
            date_of_retirement: End of professional activity
            date_of_end_of_unemployment_alloc: End of unemployment allowances, if any

        Returns:
            InsuredDuration, or None if a grid lookup misses
        """
        reference = self.reference_duration(birth_date.year)
        if reference is None:
            return None

        if date_of_end_of_unemployment_alloc is None:
            end_of_accrual = date_of_retirement
        else:
            credited = self.credited_unemployment_quarters(situation.acquired_quarters)
            if credited is None:
                return None
            end_of_accrual = max(
                date_of_retirement,
                min(
                    add_quarters(date_of_end_of_unemployment_alloc, credited),
                    self.minimum_legal_date(birth_date),
                ),
            )

        reference_date = last_day_of(situation.as_of_year)
        if reference_date >= end_of_accrual:
            uncapped = situation.acquired_quarters
        else:
            uncapped = situation.acquired_quarters + quarters_rounded_down(reference_date, end_of_accrual)

        return InsuredDuration(uncapped=uncapped, capped=min(uncapped, reference))

    def missing_quarters_for_full_rate(
        self,
        birth_date: date,
        situation: GeneralRegimeSituation,
        date_of_retirement: date,
        date_of_end_of_unemployment_alloc: Optional[date] = None,
    ) -> Optional[int]:
        """reference - uncapped insured duration (negative when beyond full rate)."""
        reference = self.reference_duration(birth_date.year)
        duration = self.insured_duration(
            birth_date, situation, date_of_retirement, date_of_end_of_unemployment_alloc
        )
        if reference is None or duration is None:
            return None
        return reference - duration.uncapped

    def full_rate_date(self, birth_date: date, situation: GeneralRegimeSituation) -> Optional[date]:
        """Date at which the reference duration is reached if activity goes on."""
        reference = self.reference_duration(birth_date.year)
        if reference is None:
            return None
        missing = max(0, reference - situation.acquired_quarters)
        return add_quarters(last_day_of(situation.as_of_year), missing)

    # -------------------------------------------------------------------------
    # Discount / bonus
    # -------------------------------------------------------------------------

    def discount_quarters(
        self,
        birth_date: date,
        insured_duration: int,
        reference_duration: int,
        date_of_pension_liquid: date,
    ) -> Optional[int]:
        """Quarters of décote.

        The smallest of: quarters missing to the full-rate legal age at liquidation,
        quarters missing to the reference duration, and max_decote_quarters.

        Raises:
            OutOfBounds: If insured_duration >= reference_duration (bonus applies)
        """
        if insured_duration >= reference_duration:
            raise OutOfBounds(
                f"insured duration {insured_duration} reaches reference {reference_duration}"
            )
        full_rate_date = self.full_rate_legal_date(birth_date)
        if full_rate_date is None:
            return None
        quarters_to_age = max(0, quarters_rounded_up(date_of_pension_liquid, full_rate_date))
        quarters_to_duration = reference_duration - insured_duration
        return min(quarters_to_age, quarters_to_duration, self.max_decote_quarters)

    def bonus_quarters(self, insured_duration: int, reference_duration: int) -> int:
        """Quarters of surcote.

        Raises:
            OutOfBounds: If insured_duration < reference_duration (discount applies)
        """
        if insured_duration < reference_duration:
            raise OutOfBounds(
                f"insured duration {insured_duration} below reference {reference_duration}"
            )
        return insured_duration - reference_duration

    def signed_quarters_beyond_full_rate(
        self,
        birth_date: date,
        insured_duration: int,
        reference_duration: int,
        date_of_pension_liquid: date,
    ) -> Optional[int]:
        """-discount quarters, or +bonus quarters."""
        try:
            discount = self.discount_quarters(
                birth_date, insured_duration, reference_duration, date_of_pension_liquid
            )
        except OutOfBounds:
            return self.bonus_quarters(insured_duration, reference_duration)
        return None if discount is None else -discount

    def pension_rate(
        self,
        birth_date: date,
        insured_duration: int,
        reference_duration: int,
        date_of_pension_liquid: date,
    ) -> Optional[Decimal]:
        """Pension rate in percent (50 at full rate)."""
        try:
            discount = self.discount_quarters(
                birth_date, insured_duration, reference_duration, date_of_pension_liquid
            )
        except OutOfBounds:
            bonus = self.bonus_quarters(insured_duration, reference_duration)
            return self.max_rate * (1 + self.surcote_per_quarter * bonus / 100)
        if discount is None:
            return None
        return self.max_rate - self.decote_per_quarter * discount

    # -------------------------------------------------------------------------
    # Pension
    # -------------------------------------------------------------------------

    def child_bonus_percent(self, child_count: int) -> Decimal:
        """Pension increase for parents of at least child_bonus_min_children children."""
        if child_count >= self.child_bonus_min_children:
            return self.child_bonus
        return Decimal("0")

    def gross_pension(
        self,
        average_wage: Decimal,
        pension_rate: Decimal,
        child_bonus_percent: Decimal,
        capped_duration: int,
        reference_duration: int,
    ) -> Decimal:
        return (
            average_wage
            * pension_rate / 100
            * (1 + child_bonus_percent / 100)
            * capped_duration / reference_duration
        )

    def pension(
        self,
        birth_date: date,
        situation: GeneralRegimeSituation,
        date_of_retirement: date,
        date_of_end_of_unemployment_alloc: Optional[date],
        date_of_pension_liquid: date,
        child_count: int,
        taxes: PensionTaxes,
        devaluation_rate: Decimal = Decimal("0"),
        evaluation_year: Optional[int] = None,
    ) -> Optional[GeneralRegimePension]:
        """Gross and net yearly pension.

        Args:
            birth_date: Birth date of the insured
            situation: Last known career record
            date_of_retirement: End of professional activity
            date_of_end_of_unemployment_alloc: End of unemployment allowances, if any
            date_of_pension_liquid: Date the pension is claimed
            child_count: Number of children born (child bonus)
            taxes: Social levies applied to get the net pension
            devaluation_rate: Yearly loss of purchasing power in percent
            evaluation_year: Year of the evaluation; revalues the pension when given

        Returns:
            GeneralRegimePension, or None if a grid lookup misses

        Raises:
            ValueError: If evaluation_year is before the liquidation year
        """
        reference = self.reference_duration(birth_date.year)
        if reference is None:
            return None
        duration = self.insured_duration(
            birth_date, situation, date_of_retirement, date_of_end_of_unemployment_alloc
        )
        if duration is None:
            return None
        rate = self.pension_rate(birth_date, duration.uncapped, reference, date_of_pension_liquid)
        if rate is None:
            return None

        bonus = self.child_bonus_percent(child_count)
        gross = self.gross_pension(
            situation.average_annual_wage, rate, bonus, duration.capped, reference
        )
        if evaluation_year is not None:
            gross = gross * revaluation_coefficient(
                evaluation_year, date_of_pension_liquid.year, devaluation_rate
            )

        return GeneralRegimePension(
            rate=rate,
            child_bonus_percent=bonus,
            reference_duration=reference,
            capped_duration=duration.capped,
            uncapped_duration=duration.uncapped,
            gross=gross,
            net=taxes.net_general_regime(gross),
        )
