"""Progressive rate grids (barèmes).

A RateGrid is an ordered list of slices, each giving the marginal rate that applies
from its floor upward. The tax due on an amount x located in slice i is computed
in closed form as:

    tax(x) = x * rate_i - cumulative_discount_i

where cumulative_discount_i corrects for the lower rates applied to the part of x
that sits in the slices below. The same primitive evaluates inheritance duties,
life-insurance duties and any other bracketed computation.

Boundary rule:
    The slice containing x is the LAST slice whose floor <= x. An amount strictly
    below the first floor has no slice.
"""

import logging
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar
from pydantic import Field, field_validator

from .base import ParameterModel
from .errors import GridSliceNotFound

logger = logging.getLogger(__name__)

T = TypeVar("T")


def last_at_or_below(entries: Sequence[T], key: Callable[[T], object], value) -> Optional[T]:
    """Return the last entry whose key is <= value, or None.

    Entries are expected in ascending key order. This is the lookup rule shared by
    every grid of the package (rate grids, age grids, birth-year grids).
    """
    found: Optional[T] = None
    for entry in entries:
        if key(entry) <= value:
            found = entry
        else:
            break
    return found


def check_ascending(values: Sequence, label: str) -> None:
    """Raise ValueError unless values are strictly ascending."""
    for previous, current in zip(values, values[1:]):
        if current <= previous:
            raise ValueError(f"{label} not ascending: {current} after {previous}")


# =============================================================================
# Rate Slice
# =============================================================================

class RateSlice(ParameterModel):
    """One bracket of a progressive grid.

    Example:
        RateSlice(floor=8072, rate=0.10) means 10% applies to the part above 8,072€.
    """

    floor: Decimal = Field(
        description="Lower bound of the slice (inclusive)"
    )

    rate: Decimal = Field(
        description="Marginal rate applicable inside the slice, as decimal (0.10 = 10%)"
    )

    cumulative_discount: Decimal = Field(
        default=Decimal("0"),
        description="Derived at grid initialization: x * rate - cumulative_discount = tax(x)"
    )


def initialize_slices(slices: Sequence[RateSlice]) -> List[RateSlice]:
    """Check slice ordering and derive the cumulative discount of every slice.

    disc_0 = floor_0 * rate_0
    disc_i = disc_{i-1} + floor_i * (rate_i - rate_{i-1})

    Args:
        slices: Slices in ascending floor order

    Returns:
        New slices with cumulative_discount filled in

    Raises:
        ValueError: If a floor is negative or floors are not strictly ascending
    """
    initialized: List[RateSlice] = []
    for idx, rate_slice in enumerate(slices):
        if rate_slice.floor < 0:
            raise ValueError(f"negative floor in rate grid: {rate_slice.floor}")
        if idx == 0:
            discount = rate_slice.floor * rate_slice.rate
        else:
            previous = initialized[idx - 1]
            if rate_slice.floor <= previous.floor:
                raise ValueError(
                    f"slices not ascending in rate grid: {rate_slice.floor} after {previous.floor}"
                )
            discount = previous.cumulative_discount + rate_slice.floor * (rate_slice.rate - previous.rate)
        initialized.append(rate_slice.model_copy(update={"cumulative_discount": discount}))
    return initialized


# =============================================================================
# Rate Grid
# =============================================================================

class RateGrid(ParameterModel):
    """Progressive grid with precomputed cumulative discounts.

    The discounts are derived when the grid is built, so a RateGrid is always
    ready to evaluate and never changes afterwards.

    Example:
        grid = RateGrid.from_thresholds([(0, "0.05"), (8072, "0.10"), (12109, "0.15")])
        grid.tax(Decimal("10000"))  # 8072 * 5% + (10000 - 8072) * 10% = 596.4
    """

    slices: List[RateSlice] = Field(
        default_factory=list,
        description="Slices in strictly ascending floor order"
    )

    @field_validator("slices")
    @classmethod
    def initialize(cls, v: List[RateSlice]) -> List[RateSlice]:
        """Validate ordering and derive cumulative discounts."""
        return initialize_slices(v)

    @classmethod
    def from_thresholds(cls, thresholds: Sequence[Tuple[object, object]]) -> "RateGrid":
        """Build a grid from (floor, rate) pairs."""
        return cls(slices=[
            RateSlice(floor=Decimal(str(floor)), rate=Decimal(str(rate)))
            for floor, rate in thresholds
        ])

    def slice_index(self, x: Decimal) -> Optional[int]:
        """Index of the last slice whose floor <= x, or None below the first floor."""
        found = last_at_or_below(list(enumerate(self.slices)), lambda entry: entry[1].floor, x)
        return None if found is None else found[0]

    def slice_containing(self, x: Decimal) -> Optional[RateSlice]:
        idx = self.slice_index(x)
        return None if idx is None else self.slices[idx]

    def rate(self, x: Decimal) -> Optional[Decimal]:
        """Marginal rate applicable to x, or None below the first floor."""
        rate_slice = self.slice_containing(x)
        return None if rate_slice is None else rate_slice.rate

    def tax(self, x: Decimal) -> Decimal:
        """Tax (or value) due on x: x * rate - cumulative_discount of its slice.

        Raises:
            GridSliceNotFound: If x is below the first floor (e.g. negative amount)
        """
        rate_slice = self.slice_containing(x)
        if rate_slice is None:
            logger.warning("no rate slice contains %s", x)
            raise GridSliceNotFound(f"no slice of the grid contains {x}")
        return x * rate_slice.rate - rate_slice.cumulative_discount
