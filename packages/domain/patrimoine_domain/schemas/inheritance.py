"""Inheritance sharing options and transmission duties.

When both a spouse and children survive, the spouse chooses one of the statutory
options (FiscalOption) which fixes, for each heir, the fraction of usufruct and
bare ownership received from the decedent's estate. Duties are then evaluated on
the value received with a progressive RateGrid.
"""

from decimal import Decimal
from enum import Enum
from typing import Tuple, Union
from pydantic import Field

from .base import ParameterModel, MoneyAmount, UnitFraction
from .demembrement import Demembrement
from .rate_grid import RateGrid


# =============================================================================
# Fiscal Option
# =============================================================================

class RightShares(ParameterModel):
    """Fractions of usufruct and bare ownership received by one heir."""

    usufruct: UnitFraction
    bare: UnitFraction


class InheritanceSharing(ParameterModel):
    """Shares received by ONE child and by the spouse."""

    for_child: RightShares
    for_spouse: RightShares


class FiscalOption(str, Enum):
    """Statutory option chosen by the surviving spouse.

    - full_usufruct: the spouse takes the whole usufruct, children share the bare ownership
    - disposable_quota: the spouse takes full ownership of the disposable quota 1/(n+1)
    - quarter_bare_plus_three_quarter_usufruct: the spouse takes 1/4 in full ownership
      and 3/4 in usufruct, children share the remaining 3/4 bare ownership
    """

    FULL_USUFRUCT = "full_usufruct"
    DISPOSABLE_QUOTA = "disposable_quota"
    QUARTER_BARE_PLUS_THREE_QUARTER_USUFRUCT = "quarter_bare_plus_three_quarter_usufruct"

    def shares(self, n_children: int) -> InheritanceSharing:
        """Usufruct and bare fractions for one child and for the spouse.

        Args:
            n_children: Number of surviving children

        Returns:
            InheritanceSharing. Without children the spouse takes everything.
        """
        if n_children <= 0:
            return InheritanceSharing(
                for_child=RightShares(usufruct=Decimal("0"), bare=Decimal("0")),
                for_spouse=RightShares(usufruct=Decimal("1"), bare=Decimal("1")),
            )
        n = Decimal(n_children)

        if self is FiscalOption.FULL_USUFRUCT:
            return InheritanceSharing(
                for_child=RightShares(usufruct=Decimal("0"), bare=1 / n),
                for_spouse=RightShares(usufruct=Decimal("1"), bare=Decimal("0")),
            )

        if self is FiscalOption.DISPOSABLE_QUOTA:
            spouse = 1 / (n + 1)
            child = (1 - spouse) / n
            return InheritanceSharing(
                for_child=RightShares(usufruct=child, bare=child),
                for_spouse=RightShares(usufruct=spouse, bare=spouse),
            )

        return InheritanceSharing(
            for_child=RightShares(usufruct=Decimal("0"), bare=Decimal("0.75") / n),
            for_spouse=RightShares(usufruct=Decimal("1"), bare=Decimal("0.25")),
        )

    def shared_values(
        self,
        n_children: int,
        spouse_age: int,
        demembrement: Demembrement,
    ) -> Tuple[Decimal, Decimal]:
        """Fraction of the estate's VALUE received by one child and by the spouse.

        Usufruct is valued with the demembrement grid at the spouse's age.

        Returns:
            Tuple (for_child, for_spouse)

        Example:
            FULL_USUFRUCT, 2 children, spouse aged 65:
            spouse 0.4 (usufruct value), each child 0.3
        """
        if n_children <= 0:
            return Decimal("0"), Decimal("1")
        n = Decimal(n_children)

        if self is FiscalOption.DISPOSABLE_QUOTA:
            spouse = 1 / (n + 1)
            return (1 - spouse) / n, spouse

        usufruct_value = demembrement.usufruct_fraction(spouse_age)
        if self is FiscalOption.FULL_USUFRUCT:
            return (1 - usufruct_value) / n, usufruct_value

        spouse = Decimal("0.25") + Decimal("0.75") * usufruct_value
        return (1 - spouse) / n, spouse


def as_fiscal_option(option: Union[FiscalOption, str]) -> FiscalOption:
    """Coerce a stored option value (models keep enum values) back to the enum."""
    return FiscalOption(option)


# =============================================================================
# Duties
# =============================================================================

class TaxedAmount(ParameterModel):
    """Amount received by an heir, net of duties, with the duty paid."""

    net: Decimal
    tax: Decimal


def _direct_line_grid() -> RateGrid:
    return RateGrid.from_thresholds([
        (0, "0.05"),
        (8072, "0.10"),
        (12109, "0.15"),
        (15932, "0.20"),
        (552324, "0.30"),
        (902838, "0.40"),
        (1805677, "0.45"),
    ])


def _life_insurance_grid() -> RateGrid:
    return RateGrid.from_thresholds([
        (0, "0"),
        (152500, "0.20"),
        (852500, "0.3125"),
    ])


class InheritanceDuties(ParameterModel):
    """Direct-line inheritance duties and spouse donation duties.

    Example:
        duties = InheritanceDuties()
        duties.heritage_of_child(Decimal("100000"))   # tax 0 (within allowance)
        duties.heritage_of_child(Decimal("110000"))   # tax on 10,000 above allowance
    """

    grid: RateGrid = Field(
        default_factory=_direct_line_grid,
        description="Progressive grid applied in direct line (and between spouses for donations)"
    )

    child_allowance: MoneyAmount = Field(
        default=Decimal("100000"),
        description="Allowance per child in direct line"
    )

    spouse_donation_allowance: MoneyAmount = Field(
        default=Decimal("80724"),
        description="Allowance on donations between spouses"
    )

    def child_share(self, n_children: int) -> Decimal:
        """Fraction of the estate received by one child when children inherit alone."""
        if n_children <= 0:
            return Decimal("0")
        return 1 / Decimal(n_children)

    def heritage_of_child(self, share: MoneyAmount) -> TaxedAmount:
        taxable = max(Decimal("0"), share - self.child_allowance)
        tax = self.grid.tax(taxable)
        return TaxedAmount(net=share - tax, tax=tax)

    def donation_to_spouse(self, donation: MoneyAmount) -> TaxedAmount:
        taxable = max(Decimal("0"), donation - self.spouse_donation_allowance)
        tax = self.grid.tax(taxable)
        return TaxedAmount(net=donation - tax, tax=tax)

    def heritage_to_spouse(self, share: MoneyAmount) -> TaxedAmount:
        """The surviving spouse is exempt from inheritance duties."""
        return TaxedAmount(net=share, tax=Decimal("0"))


class LifeInsuranceDuties(ParameterModel):
    """Duties on capital transmitted by a life-insurance clause."""

    grid: RateGrid = Field(
        default_factory=_life_insurance_grid,
        description="Progressive grid applied to each beneficiary's share"
    )

    def heritage_of_child(self, share: MoneyAmount) -> TaxedAmount:
        tax = self.grid.tax(share)
        return TaxedAmount(net=share - tax, tax=tax)

    def heritage_to_spouse(self, share: MoneyAmount) -> TaxedAmount:
        return TaxedAmount(net=share, tax=Decimal("0"))
