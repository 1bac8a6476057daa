"""Ownership of an asset: full ownership, or usufruct + bare ownership.

An Ownership is either not dismembered (only full_owners is used) or dismembered
(usufruct_owners and bare_owners are used). The ages of the usufructuaries are
needed to value a dismembered asset; they are provided by an explicit `age_of`
lookup argument.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional
from pydantic import Field

from .base import DomainModel
from .demembrement import Demembrement, DemembrementSplit
from .errors import InvalidOwnership, NotDismembered
from .owners import Owner, find_owner, group_owner_shares, owners_are_valid, owners_equal

logger = logging.getLogger(__name__)

AgeOf = Callable[[str, int], int]
"""Age of a named person at the end of a given year."""


class EvaluationMethod(str, Enum):
    """Purpose of a valuation, which decides how dismembered rights are valued."""

    IFI = "ifi"
    ISF = "isf"
    LEGAL_SUCCESSION = "legal_succession"
    LIFE_INSURANCE_SUCCESSION = "life_insurance_succession"
    PATRIMOINE = "patrimoine"


class Ownership(DomainModel):
    """Owners of an asset.

    Example:
        ownership = Ownership(full_owners=[Owner(name="Lionel", fraction=100)])
        ownership.dismember()
        ownership.usufruct_owners  # [Owner(name="Lionel", fraction=100)]
    """

    full_owners: List[Owner] = Field(default_factory=list)

    bare_owners: List[Owner] = Field(default_factory=list)

    usufruct_owners: List[Owner] = Field(default_factory=list)

    is_dismembered: bool = Field(default=False)

    # =========================================================================
    # Validity
    # =========================================================================

    @property
    def is_valid(self) -> bool:
        if self.is_dismembered:
            return (
                len(self.bare_owners) > 0 and owners_are_valid(self.bare_owners)
                and len(self.usufruct_owners) > 0 and owners_are_valid(self.usufruct_owners)
            )
        return len(self.full_owners) > 0 and owners_are_valid(self.full_owners)

    def check_valid(self, context: str) -> None:
        """Raise InvalidOwnership if the share-sum invariant is broken."""
        if not self.is_valid:
            logger.error("invalid ownership %s: %r", context, self)
            raise InvalidOwnership(f"invalid ownership {context}")

    # =========================================================================
    # Structure
    # =========================================================================

    def dismember(self) -> None:
        """Split full ownership: every full owner keeps its share in both rights."""
        self.usufruct_owners = [owner.model_copy() for owner in self.full_owners]
        self.bare_owners = [owner.model_copy() for owner in self.full_owners]
        self.full_owners = []
        self.is_dismembered = True

    def group_shares(self) -> None:
        """Fold duplicate owners and drop null shares.

        A dismembered Ownership whose usufruct and bare owners are the same people
        with the same shares collapses back to full ownership.
        """
        if self.is_dismembered:
            usufruct = group_owner_shares(self.usufruct_owners)
            bare = group_owner_shares(self.bare_owners)
            if usufruct and owners_equal(usufruct, bare):
                self.full_owners = bare
                self.usufruct_owners = []
                self.bare_owners = []
                self.is_dismembered = False
            else:
                self.usufruct_owners = usufruct
                self.bare_owners = bare
                self.full_owners = []
        else:
            self.full_owners = group_owner_shares(self.full_owners)
            self.usufruct_owners = []
            self.bare_owners = []

    # =========================================================================
    # Predicates
    # =========================================================================

    def is_a_full_owner(self, name: str) -> bool:
        return not self.is_dismembered and find_owner(self.full_owners, name) is not None

    def is_an_usufruct_owner(self, name: str) -> bool:
        return self.is_dismembered and find_owner(self.usufruct_owners, name) is not None

    def is_a_bare_owner(self, name: str) -> bool:
        return self.is_dismembered and find_owner(self.bare_owners, name) is not None

    def holds_a_right(self, name: str) -> bool:
        return self.is_a_full_owner(name) or self.is_an_usufruct_owner(name) or self.is_a_bare_owner(name)

    def receives_revenues(self, name: str) -> bool:
        """Full owners and usufructuaries receive the revenues of the asset."""
        return self.is_a_full_owner(name) or self.is_an_usufruct_owner(name)

    # =========================================================================
    # Valuation
    # =========================================================================

    def demembrement(
        self,
        total_value: Decimal,
        year: int,
        age_of: AgeOf,
        demembrement: Optional[Demembrement] = None,
    ) -> DemembrementSplit:
        """Value of the usufruct and of the bare ownership of the whole asset.

        Each usufructuary's share is valued at its own age.

        Raises:
            NotDismembered: If the Ownership is not dismembered
            InvalidOwnership: If the Ownership is invalid
        """
        if not self.is_dismembered:
            raise NotDismembered("cannot split the value of an ownership which is not dismembered")
        self.check_valid("while computing its demembrement")
        grid = demembrement or Demembrement()

        usufruct_value = Decimal("0")
        bare_value = Decimal("0")
        for usufructuary in self.usufruct_owners:
            split = grid.split(
                usufructuary.owned_value(total_value),
                age_of(usufructuary.name, year),
            )
            usufruct_value += split.usufruct_value
            bare_value += split.bare_value
        return DemembrementSplit(usufruct_value=usufruct_value, bare_value=bare_value)

    def owned_value(
        self,
        owner_name: str,
        total_value: Decimal,
        year: int,
        method: EvaluationMethod,
        age_of: Optional[AgeOf] = None,
        demembrement: Optional[Demembrement] = None,
    ) -> Decimal:
        """Value of the rights held by owner_name.

        Args:
            owner_name: Person whose share is valued
            total_value: Full-ownership value of the asset
            year: Year of the valuation (for ages)
            method: Purpose of the valuation
            age_of: Age lookup, required for a dismembered asset unless IFI/ISF
            demembrement: Usufruct grid (default grid when omitted)

        Returns:
            Owned value (0 if owner_name holds no right)
        """
        if not self.is_dismembered:
            owner = find_owner(self.full_owners, owner_name)
            return Decimal("0") if owner is None else owner.owned_value(total_value)

        method = EvaluationMethod(method)
        if method in (EvaluationMethod.IFI, EvaluationMethod.ISF):
            # wealth taxes are due by the usufructuary on the full value
            owner = find_owner(self.usufruct_owners, owner_name)
            return Decimal("0") if owner is None else owner.owned_value(total_value)

        if age_of is None:
            raise ValueError("an age lookup is required to value a dismembered asset")
        grid = demembrement or Demembrement()

        value = Decimal("0")
        bare_owner = find_owner(self.bare_owners, owner_name)
        if bare_owner is not None:
            split = self.demembrement(total_value, year, age_of, grid)
            value += bare_owner.owned_value(split.bare_value)
        usufructuary = find_owner(self.usufruct_owners, owner_name)
        if usufructuary is not None:
            value += grid.split(
                usufructuary.owned_value(total_value),
                age_of(owner_name, year),
            ).usufruct_value
        return value
