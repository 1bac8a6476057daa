"""Model configuration: every regulatory parameter set used by a simulation.

ModelCFG() holds the reference values. Any subset can be overridden from a mapping
(e.g. loaded by the caller from JSON or YAML):

    cfg = ModelCFG.model_validate({
        "retirement": {"devaluation_rate": 1.5},
        "fiscal": {"inheritance": {"child_allowance": 120000}},
    })

All parameter sets are frozen, so a configuration can be shared between runs.
"""

import logging
from decimal import Decimal
from typing import Optional
from pydantic import Field

from .base import ParameterModel, PercentRate
from .demembrement import Demembrement
from .family import Adult, Household
from .general_regime import GeneralRegime, GeneralRegimePension
from .inheritance import InheritanceDuties, LifeInsuranceDuties
from .pension_taxes import PensionTaxes
from .points_regime import PointsRegime, PointsRegimePension
from .reversion import PensionReversion

logger = logging.getLogger(__name__)


class FiscalModel(ParameterModel):
    """Taxes and duties."""

    pension_taxes: PensionTaxes = Field(default_factory=PensionTaxes)
    demembrement: Demembrement = Field(default_factory=Demembrement)
    inheritance: InheritanceDuties = Field(default_factory=InheritanceDuties)
    life_insurance: LifeInsuranceDuties = Field(default_factory=LifeInsuranceDuties)


class RetirementModel(ParameterModel):
    """Retirement regimes, reversion and pension revaluation."""

    general_regime: GeneralRegime = Field(default_factory=GeneralRegime)
    points_regime: PointsRegime = Field(default_factory=PointsRegime)
    reversion: PensionReversion = Field(default_factory=PensionReversion)

    devaluation_rate: PercentRate = Field(
        default=Decimal("1.0"),
        description="Yearly loss of purchasing power of pensions in percent"
    )

    def general_regime_pension(
        self,
        adult: Adult,
        fiscal: FiscalModel,
        evaluation_year: int,
    ) -> Optional[GeneralRegimePension]:
        """General-regime pension of adult in evaluation_year.

        Returns:
            The pension, or None if the adult has no career record or has not
            claimed the pension by evaluation_year
        """
        if (
            adult.general_regime_situation is None
            or adult.date_of_retirement is None
            or adult.date_of_pension_liquid is None
        ):
            return None
        if evaluation_year < adult.date_of_pension_liquid.year:
            logger.debug("%s: general pension not claimed in %s", adult.name, evaluation_year)
            return None

        return self.general_regime.pension(
            birth_date=adult.birth_date,
            situation=adult.general_regime_situation,
            date_of_retirement=adult.date_of_retirement,
            date_of_end_of_unemployment_alloc=adult.date_of_end_of_unemployment_alloc,
            date_of_pension_liquid=adult.date_of_pension_liquid,
            child_count=adult.nb_of_children_born,
            taxes=fiscal.pension_taxes,
            devaluation_rate=self.devaluation_rate,
            evaluation_year=evaluation_year,
        )

    def points_regime_pension(
        self,
        adult: Adult,
        household: Household,
        fiscal: FiscalModel,
        evaluation_year: int,
    ) -> Optional[PointsRegimePension]:
        """Complementary pension of adult in evaluation_year."""
        liquidation = adult.points_liquidation_date
        if (
            adult.points_regime_situation is None
            or adult.general_regime_situation is None
            or adult.date_of_retirement is None
            or liquidation is None
        ):
            return None
        if evaluation_year < liquidation.year:
            logger.debug("%s: points pension not claimed in %s", adult.name, evaluation_year)
            return None

        return self.points_regime.pension(
            birth_date=adult.birth_date,
            situation=adult.points_regime_situation,
            general_regime=self.general_regime,
            general_situation=adult.general_regime_situation,
            date_of_retirement=adult.date_of_retirement,
            date_of_end_of_unemployment_alloc=adult.date_of_end_of_unemployment_alloc,
            date_of_pension_liquid=liquidation,
            born_child_count=adult.nb_of_children_born,
            dependent_child_count=household.dependent_children_count(evaluation_year),
            taxes=fiscal.pension_taxes,
            devaluation_rate=self.devaluation_rate,
            evaluation_year=evaluation_year,
        )


class ModelCFG(ParameterModel):
    """Root configuration of a simulation.

    Example:
        cfg = ModelCFG()
        cfg.retirement.general_regime.reference_duration(1964)  # 169
        cfg.fiscal.demembrement.split(Decimal("100"), 60)       # 50 / 50
    """

    retirement: RetirementModel = Field(default_factory=RetirementModel)
    fiscal: FiscalModel = Field(default_factory=FiscalModel)
