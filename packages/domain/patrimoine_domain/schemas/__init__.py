"""Household wealth domain schemas.

This package contains the Pydantic models and rules of the domain layer:
- Base types, conventions and errors
- Rate grids and calendar arithmetic
- General and complementary retirement regimes, pension taxes and reversion
- Demembrement, inheritance options and duties
- Owners, ownership, life-insurance clauses
- Household members and patrimoine
- Succession transfers on death
- Model configuration

Usage:
    from patrimoine_domain.schemas import (
        ModelCFG, Household, Adult, Child, Patrimoine, Asset,
        Ownership, Owner, DeathEvent, FiscalOption
    )
"""

# Base types
from .base import (
    DomainModel,
    ParameterModel,
    MoneyAmount,
    Amount,
    PercentRate,
    OwnedFraction,
    UnitFraction,
    Coefficient,
    QuarterCount,
    PointCount,
    Year,
    Age,
    PersonName,
)

# Errors
from .errors import (
    PatrimoineError,
    GridSliceNotFound,
    OutOfBounds,
    InvalidOwnership,
    NotDismembered,
    OwnersError,
    OwnerDoesNotExist,
    NoNewOwners,
)

# Grids
from .rate_grid import RateSlice, RateGrid, last_at_or_below

# Pensions
from .pension_taxes import PensionTaxes
from .reversion import PensionReversion
from .general_regime import (
    GeneralRegimeSituation,
    ReferenceDurationSlice,
    UnemploymentCreditSlice,
    InsuredDuration,
    GeneralRegimePension,
    GeneralRegime,
    revaluation_coefficient,
)
from .points_regime import (
    PointsRegimeSituation,
    BeforeLegalAgeSlice,
    AfterLegalAgeSlice,
    FullRateBonusSlice,
    PointsChildrenBonus,
    PointsRegimePension,
    PointsRegime,
)

# Demembrement & inheritance
from .demembrement import DemembrementSlice, DemembrementSplit, Demembrement
from .inheritance import (
    RightShares,
    InheritanceSharing,
    FiscalOption,
    as_fiscal_option,
    TaxedAmount,
    InheritanceDuties,
    LifeInsuranceDuties,
)

# Ownership
from .owners import (
    Owner,
    Owners,
    sum_of_fractions,
    percentage_ok,
    owners_are_valid,
    owners_equal,
    group_owner_shares,
    replace_owner,
    find_owner,
)
from .ownership import AgeOf, EvaluationMethod, Ownership
from .life_insurance import LifeInsuranceClause

# Family & patrimoine
from .family import LifeEvent, Adult, Child, Person, Household
from .patrimoine import Asset, Patrimoine

# Succession
from .succession import (
    DeathEvent,
    heir_shares,
    transfer_ownership,
    transfer_life_insurance,
)

# Configuration
from .model import FiscalModel, RetirementModel, ModelCFG

__all__ = [
    # Base
    "DomainModel",
    "ParameterModel",
    "MoneyAmount",
    "Amount",
    "PercentRate",
    "OwnedFraction",
    "UnitFraction",
    "Coefficient",
    "QuarterCount",
    "PointCount",
    "Year",
    "Age",
    "PersonName",
    # Errors
    "PatrimoineError",
    "GridSliceNotFound",
    "OutOfBounds",
    "InvalidOwnership",
    "NotDismembered",
    "OwnersError",
    "OwnerDoesNotExist",
    "NoNewOwners",
    # Grids
    "RateSlice",
    "RateGrid",
    "last_at_or_below",
    # Pensions
    "PensionTaxes",
    "PensionReversion",
    "GeneralRegimeSituation",
    "ReferenceDurationSlice",
    "UnemploymentCreditSlice",
    "InsuredDuration",
    "GeneralRegimePension",
    "GeneralRegime",
    "revaluation_coefficient",
    "PointsRegimeSituation",
    "BeforeLegalAgeSlice",
    "AfterLegalAgeSlice",
    "FullRateBonusSlice",
    "PointsChildrenBonus",
    "PointsRegimePension",
    "PointsRegime",
    # Demembrement & inheritance
    "DemembrementSlice",
    "DemembrementSplit",
    "Demembrement",
    "RightShares",
    "InheritanceSharing",
    "FiscalOption",
    "as_fiscal_option",
    "TaxedAmount",
    "InheritanceDuties",
    "LifeInsuranceDuties",
    # Ownership
    "Owner",
    "Owners",
    "sum_of_fractions",
    "percentage_ok",
    "owners_are_valid",
    "owners_equal",
    "group_owner_shares",
    "replace_owner",
    "find_owner",
    "AgeOf",
    "EvaluationMethod",
    "Ownership",
    "LifeInsuranceClause",
    # Family & patrimoine
    "LifeEvent",
    "Adult",
    "Child",
    "Person",
    "Household",
    "Asset",
    "Patrimoine",
    # Succession
    "DeathEvent",
    "heir_shares",
    "transfer_ownership",
    "transfer_life_insurance",
    # Configuration
    "FiscalModel",
    "RetirementModel",
    "ModelCFG",
]
