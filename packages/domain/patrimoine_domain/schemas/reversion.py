"""Survivor's reversion pension."""

from decimal import Decimal
from pydantic import Field

from .base import ParameterModel, PercentRate


class PensionReversion(ParameterModel):
    """Reversion pension paid to the surviving spouse.

    The survivor receives a percentage of the sum of both spouses' pensions
    (their own pension is replaced by the reversion amount).
    """

    reversion_rate: PercentRate = Field(
        default=Decimal("70"),
        ge=0,
        le=100,
        description="Percent of the couple's combined pensions paid to the survivor"
    )

    def reversion_pension(self, decedent_pension: Decimal, spouse_pension: Decimal) -> Decimal:
        return (decedent_pension + spouse_pension) * self.reversion_rate / 100
