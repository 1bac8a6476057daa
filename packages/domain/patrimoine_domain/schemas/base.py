"""Base classes and type system for household wealth domain models.

This module provides the foundational types and base classes used throughout
the pension and succession schema system.
"""

from decimal import Decimal
from typing import Annotated
from pydantic import BaseModel, Field, ConfigDict

# =============================================================================
# Base Models
# =============================================================================

class DomainModel(BaseModel):
    """Base class for all domain models.

    Provides common configuration for all Pydantic models in the domain layer:
    - Validation on assignment for runtime safety
    - Support for Decimal and date types
    - Enum value serialization
    """

    model_config = ConfigDict(
        frozen=False,  # Ownership is rewritten in place by transfers
        validate_assignment=True,
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )


class ParameterModel(DomainModel):
    """Base class for regulatory parameter sets (grids, rates, allowances).

    Parameter sets are loaded once and shared read-only between simulation runs,
    so they are frozen: any attempt to assign a field raises a ValidationError.
    """

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Type Aliases - Numeric
# =============================================================================

MoneyAmount = Annotated[
    Decimal,
    Field(ge=0, description="Currency amount in euros (non-negative)")
]

Amount = Annotated[
    Decimal,
    Field(description="Signed currency amount in euros")
]

PercentRate = Annotated[
    Decimal,
    Field(description="Rate expressed in percent (e.g. 8.3 for 8.3%)")
]

OwnedFraction = Annotated[
    Decimal,
    Field(ge=0, description="Share of a right expressed in percent (0 to 100)")
]

UnitFraction = Annotated[
    Decimal,
    Field(ge=0, le=1, description="Fraction as decimal (0.0 to 1.0)")
]

Coefficient = Annotated[
    Decimal,
    Field(ge=0, description="Multiplicative coefficient (e.g. 0.95 for a 5% reduction)")
]

QuarterCount = Annotated[
    int,
    Field(ge=0, description="Number of insurance quarters (3-month periods)")
]

PointCount = Annotated[
    int,
    Field(ge=0, description="Number of complementary-regime points")
]

Year = Annotated[
    int,
    Field(ge=1800, le=2300, description="Calendar year")
]

Age = Annotated[
    int,
    Field(ge=0, le=150, description="Age in whole years")
]


# =============================================================================
# Names
# =============================================================================

PersonName = Annotated[
    str,
    Field(min_length=1, description="Display name identifying a household member")
]


# =============================================================================
# Conventions
# =============================================================================
#
# Percentages:
#   - Owner fractions and regulatory rates are in percent: 50 means 50%
#   - Inheritance shares and demembrement fractions are unit fractions: 0.5 means 50%
#
# Dates:
#   - A situation recorded "as of" a year is taken at Dec 31 of that year
#   - Quarter counts are rounded up for shortfalls and down for accruals
#
# =============================================================================
