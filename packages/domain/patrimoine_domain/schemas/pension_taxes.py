"""Social levies on pensions and taxable share of a pension.

Levy rates are in percent. The general regime bears CSG + CRDS + the additional
solidarity contribution (CASA); complementary points-regime pensions also bear
the health insurance contribution.
"""

from decimal import Decimal
from pydantic import Field, model_validator

from .base import ParameterModel, PercentRate, MoneyAmount
from .errors import OutOfBounds


class PensionTaxes(ParameterModel):
    """Social levies and income-tax rebate applicable to retirement pensions.

    Example:
        taxes = PensionTaxes()
        taxes.total_general_regime        # 9.1 %
        taxes.net_general_regime(100)     # 90.9
        taxes.net_points_regime(100)      # 89.9
    """

    rebate: PercentRate = Field(
        default=Decimal("10.0"),
        description="Income-tax rebate on pensions, percent of the taxable base"
    )

    min_rebate: MoneyAmount = Field(
        default=Decimal("393"),
        description="Minimum rebate per taxpayer"
    )

    max_rebate: MoneyAmount = Field(
        default=Decimal("3850"),
        description="Maximum rebate per tax household"
    )

    csg_deductible: PercentRate = Field(
        default=Decimal("5.9"),
        description="Part of the CSG deductible from taxable income"
    )

    crds: PercentRate = Field(default=Decimal("0.5"), description="CRDS rate")

    csg: PercentRate = Field(default=Decimal("8.3"), description="CSG rate")

    additional_contribution: PercentRate = Field(
        default=Decimal("0.3"),
        description="Additional solidarity contribution (CASA)"
    )

    health_insurance: PercentRate = Field(
        default=Decimal("1.0"),
        description="Health insurance contribution on complementary pensions"
    )

    @model_validator(mode='after')
    def validate_rebate_bounds(self):
        """Minimum rebate cannot exceed maximum rebate."""
        if self.min_rebate > self.max_rebate:
            raise ValueError("min_rebate must not exceed max_rebate")
        return self

    @property
    def total_general_regime(self) -> Decimal:
        return self.crds + self.csg + self.additional_contribution

    @property
    def total_points_regime(self) -> Decimal:
        return self.crds + self.csg + self.additional_contribution + self.health_insurance

    def net_general_regime(self, gross: Decimal) -> Decimal:
        """Net general-regime pension; a negative gross yields 0."""
        if gross < 0:
            return Decimal("0")
        return gross * (1 - self.total_general_regime / 100)

    def net_points_regime(self, gross: Decimal) -> Decimal:
        """Net complementary-regime pension; a negative gross yields 0."""
        if gross < 0:
            return Decimal("0")
        return gross * (1 - self.total_points_regime / 100)

    def social_taxes_general_regime(self, gross: Decimal) -> Decimal:
        if gross < 0:
            return Decimal("0")
        return gross * self.total_general_regime / 100

    def social_taxes_points_regime(self, gross: Decimal) -> Decimal:
        if gross < 0:
            return Decimal("0")
        return gross * self.total_points_regime / 100

    def csg_non_deductible(self, gross: Decimal) -> Decimal:
        """CSG that is not deductible from taxable income."""
        if gross < 0:
            return Decimal("0")
        return gross * (self.csg - self.csg_deductible) / 100

    def taxable(self, gross: Decimal, net: Decimal) -> Decimal:
        """Part of a pension subject to income tax.

        base = net + non-deductible CSG, then the rebate (clamped between
        min_rebate and max_rebate) is subtracted, never going below zero.

        Args:
            gross: Gross pension
            net: Net pension (after social levies)

        Returns:
            Taxable amount (0 for a negative gross)

        Raises:
            OutOfBounds: If net is negative
        """
        if gross < 0:
            return Decimal("0")
        if net < 0:
            raise OutOfBounds(f"net pension must be non-negative, got {net}")
        base = net + self.csg_non_deductible(gross)
        rebate = min(max(base * self.rebate / 100, self.min_rebate), self.max_rebate)
        return max(Decimal("0"), base - rebate)
