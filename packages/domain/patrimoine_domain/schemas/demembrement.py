"""Fiscal valuation of usufruct and bare ownership (barème de l'article 669 CGI).

The usufruct of a dismembered asset is valued as a fraction of the full value that
depends on the usufructuary's age. Bare ownership is worth the remainder.
"""

import logging
from decimal import Decimal
from typing import List
from pydantic import Field, field_validator

from .base import ParameterModel, MoneyAmount, UnitFraction
from .errors import GridSliceNotFound, OutOfBounds
from .rate_grid import check_ascending, last_at_or_below

logger = logging.getLogger(__name__)


class DemembrementSlice(ParameterModel):
    """Usufruct fraction applicable from a given usufructuary age."""

    floor_age: int = Field(ge=0, description="Age from which the slice applies (inclusive)")

    usufruct_fraction: UnitFraction = Field(
        description="Value of the usufruct as a fraction of full ownership"
    )

    @property
    def bare_fraction(self) -> Decimal:
        return 1 - self.usufruct_fraction


class DemembrementSplit(ParameterModel):
    """Value of a dismembered asset split between usufruct and bare ownership."""

    usufruct_value: Decimal
    bare_value: Decimal

    @property
    def total(self) -> Decimal:
        return self.usufruct_value + self.bare_value


def _default_slices() -> List[DemembrementSlice]:
    floors = [0, 21, 31, 41, 51, 61, 71, 81, 91]
    return [
        DemembrementSlice(floor_age=floor, usufruct_fraction=Decimal(9 - idx) / 10)
        for idx, floor in enumerate(floors)
    ]


class Demembrement(ParameterModel):
    """Age grid of usufruct fractions.

    Example:
        Demembrement().split(Decimal("100"), 60)  # usufruct 50, bare 50
        Demembrement().split(Decimal("100"), 20)  # usufruct 90, bare 10
    """

    grid: List[DemembrementSlice] = Field(
        default_factory=_default_slices,
        description="Slices in strictly ascending floor_age order"
    )

    @field_validator("grid")
    @classmethod
    def validate_grid(cls, v: List[DemembrementSlice]) -> List[DemembrementSlice]:
        """Floors must be strictly ascending."""
        check_ascending([s.floor_age for s in v], "demembrement grid")
        return v

    def slice_for_age(self, age: int) -> DemembrementSlice:
        """Last slice whose floor_age <= age."""
        found = last_at_or_below(self.grid, lambda s: s.floor_age, age)
        if found is None:
            logger.warning("no demembrement slice for age %s", age)
            raise GridSliceNotFound(f"no demembrement slice for age {age}")
        return found

    def split(self, total_value: MoneyAmount, usufructuary_age: int) -> DemembrementSplit:
        """Split total_value between usufruct and bare ownership.

        Args:
            total_value: Full-ownership value of the asset
            usufructuary_age: Age of the usufructuary in the valuation year

        Returns:
            DemembrementSplit whose components add up exactly to total_value

        Raises:
            OutOfBounds: If usufructuary_age is not positive
            GridSliceNotFound: If no slice covers the age
        """
        if usufructuary_age <= 0:
            raise OutOfBounds(f"usufructuary age must be positive, got {usufructuary_age}")
        grid_slice = self.slice_for_age(usufructuary_age)
        usufruct_value = total_value * grid_slice.usufruct_fraction
        return DemembrementSplit(
            usufruct_value=usufruct_value,
            bare_value=total_value - usufruct_value,
        )

    def usufruct_fraction(self, usufructuary_age: int) -> Decimal:
        return self.split(Decimal("1"), usufructuary_age).usufruct_value
