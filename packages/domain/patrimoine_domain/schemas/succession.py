"""Transfer of the decedent's rights to the heirs.

Heir rule for the decedent's share of an ordinary asset:
    - spouse and children: shares of the spouse's FiscalOption, right by right
    - spouse only: everything to the spouse
    - children only: equal parts
    - nobody: no change

Decision table on the decedent's rights:
    1. sole full owner                 -> heir rule (life insurance: clause)
    2. one of several full owners      -> decedent's fraction by the same rule,
                                          co-owners keep theirs
    3. usufructuary and bare owner     -> both rights by the heir rule; children
                                          alone: bare part to them, usufruct absorbed
    4. usufructuary only               -> usufruct absorbed by the bare-owning
                                          children (else spouse, else bare owners)
    5. bare owner only                 -> bare part by the heir rule
    6. no right                        -> no change

Transfers never modify their input: they return a new Ownership, grouped and
validated before and after the transfer.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
from pydantic import Field

from .base import DomainModel, PersonName, Year
from .errors import InvalidOwnership
from .inheritance import FiscalOption, as_fiscal_option
from .life_insurance import LifeInsuranceClause
from .owners import Owner, find_owner, sum_of_fractions
from .ownership import Ownership

if TYPE_CHECKING:
    from .family import Household
    from .patrimoine import Patrimoine

logger = logging.getLogger(__name__)

# (heir name, unit fraction of the decedent's share)
HeirShares = List[Tuple[str, Decimal]]


# =============================================================================
# Heir rule
# =============================================================================

def heir_shares(
    spouse: Optional[str],
    children: Sequence[str],
    fiscal_option: Optional[FiscalOption],
) -> Optional[Tuple[HeirShares, HeirShares]]:
    """Shares of usufruct and of bare ownership received by each heir.

    Returns:
        Tuple (usufruct shares, bare shares), or None without any heir

    Raises:
        ValueError: If spouse and children survive and no fiscal option is given
    """
    if spouse and children:
        if fiscal_option is None:
            raise ValueError("a fiscal option is required when both spouse and children survive")
        sharing = as_fiscal_option(fiscal_option).shares(len(children))
        usufruct = [(spouse, sharing.for_spouse.usufruct)]
        usufruct.extend((child, sharing.for_child.usufruct) for child in children)
        bare = [(spouse, sharing.for_spouse.bare)]
        bare.extend((child, sharing.for_child.bare) for child in children)
        return usufruct, bare

    if spouse:
        return [(spouse, Decimal("1"))], [(spouse, Decimal("1"))]

    if children:
        share = 1 / Decimal(len(children))
        equal = [(child, share) for child in children]
        return equal, list(equal)

    return None


def _hand_over(owners: List[Owner], decedent: str, shares: HeirShares) -> List[Owner]:
    """Remove the decedent and distribute its fraction according to shares."""
    if find_owner(owners, decedent) is None:
        return owners
    leaving = sum_of_fractions([owner for owner in owners if owner.name == decedent])
    remaining = [owner for owner in owners if owner.name != decedent]
    remaining.extend(
        Owner(name=name, fraction=leaving * share)
        for name, share in shares
        if share > 0
    )
    return remaining


def _absorb_usufruct(ownership: Ownership, decedent: str, weights: Dict[str, Decimal]) -> None:
    """Pass the decedent's usufruct to receivers in proportion to their weights."""
    leaving = find_owner(ownership.usufruct_owners, decedent)
    total = sum(weights.values(), Decimal("0"))
    if leaving is None or total <= 0:
        return
    usufruct = [owner for owner in ownership.usufruct_owners if owner.name != decedent]
    usufruct.extend(
        Owner(name=name, fraction=leaving.fraction * weight / total)
        for name, weight in weights.items()
        if weight > 0
    )
    ownership.usufruct_owners = usufruct


def _usufruct_receivers(
    ownership: Ownership,
    decedent: str,
    spouse: Optional[str],
    children: Sequence[str],
) -> Dict[str, Decimal]:
    """Bare-owning children, else the spouse, else every bare owner."""
    weights = _bare_owners_weights(ownership, decedent)
    bare_children = {name: weight for name, weight in weights.items() if name in children}
    if bare_children:
        return bare_children
    if spouse:
        return {spouse: Decimal("1")}
    return weights


def _bare_owners_weights(ownership: Ownership, decedent: str) -> Dict[str, Decimal]:
    """Bare fraction held by each other bare owner (duplicates folded)."""
    weights: Dict[str, Decimal] = {}
    for owner in ownership.bare_owners:
        if owner.name != decedent:
            weights[owner.name] = weights.get(owner.name, Decimal("0")) + owner.fraction
    return weights


# =============================================================================
# Transfers
# =============================================================================

def _transfer_full_ownership(ownership: Ownership, decedent: str, shares) -> None:
    """Rules 1 and 2: the decedent holds a share of full ownership."""
    if shares is None:
        return
    usufruct_shares, bare_shares = shares
    ownership.dismember()
    ownership.usufruct_owners = _hand_over(ownership.usufruct_owners, decedent, usufruct_shares)
    ownership.bare_owners = _hand_over(ownership.bare_owners, decedent, bare_shares)


def _transfer_bare_ownership(ownership: Ownership, decedent: str, shares) -> None:
    """Rule 5: usufruct holders are untouched."""
    if shares is None:
        return
    ownership.bare_owners = _hand_over(ownership.bare_owners, decedent, shares[1])


def _transfer_dismembered(
    ownership: Ownership,
    decedent: str,
    spouse: Optional[str],
    children: Sequence[str],
    fiscal_option: Optional[FiscalOption],
) -> None:
    """Rules 3 to 5: the asset is dismembered."""
    is_usufructuary = ownership.is_an_usufruct_owner(decedent)
    is_bare_owner = ownership.is_a_bare_owner(decedent)

    if is_usufructuary and is_bare_owner:
        shares = heir_shares(spouse, children, fiscal_option)
        if shares is None:
            return
        if children and not spouse:
            ownership.bare_owners = _hand_over(ownership.bare_owners, decedent, shares[1])
            _absorb_usufruct(
                ownership, decedent, _usufruct_receivers(ownership, decedent, spouse, children)
            )
        else:
            ownership.usufruct_owners = _hand_over(ownership.usufruct_owners, decedent, shares[0])
            ownership.bare_owners = _hand_over(ownership.bare_owners, decedent, shares[1])
        return

    if is_usufructuary:
        _absorb_usufruct(
            ownership, decedent, _usufruct_receivers(ownership, decedent, spouse, children)
        )
        return

    _transfer_bare_ownership(ownership, decedent, heir_shares(spouse, children, fiscal_option))


def _finalize(ownership: Ownership) -> Ownership:
    ownership.group_shares()
    ownership.check_valid("after transfer")
    return ownership


def transfer_ownership(
    ownership: Ownership,
    decedent: str,
    spouse: Optional[str] = None,
    children: Optional[Sequence[str]] = None,
    fiscal_option: Optional[FiscalOption] = None,
) -> Ownership:
    """Transfer the decedent's rights in an ordinary asset to the heirs.

    Args:
        ownership: Ownership before the death (not modified)
        decedent: Name of the deceased owner
        spouse: Surviving spouse, if any
        children: Surviving children
        fiscal_option: Option of the spouse, required with spouse and children

    Returns:
        New, grouped Ownership

    Raises:
        InvalidOwnership: If the ownership is invalid before or after the transfer
        ValueError: If spouse and children survive and no fiscal option is given

    Example:
        ownership = Ownership(full_owners=[Owner(name="Lionel", fraction=100)])
        transfer_ownership(ownership, "Lionel", children=["Pierre", "Julia"])
        # full owners: Pierre 50%, Julia 50%
    """
    result = ownership.model_copy(deep=True)
    result.group_shares()
    result.check_valid("before transfer")
    children = list(children or [])

    if result.holds_a_right(decedent):
        logger.debug("transferring rights of %s", decedent)
        if result.is_dismembered:
            _transfer_dismembered(result, decedent, spouse, children, fiscal_option)
        else:
            _transfer_full_ownership(
                result, decedent, heir_shares(spouse, children, fiscal_option)
            )

    return _finalize(result)


def transfer_life_insurance(
    ownership: Ownership,
    decedent: str,
    clause: LifeInsuranceClause,
    spouse: Optional[str] = None,
    children: Optional[Sequence[str]] = None,
    fiscal_option: Optional[FiscalOption] = None,
) -> Ownership:
    """Transfer the capital of a life-insurance contract on the death of its owner.

    The decedent's full-ownership share goes to the clause beneficiaries. When the
    capital is already dismembered, the bare owners absorb the decedent's usufruct
    and a bare share follows the ordinary heir rule.

    Raises:
        InvalidOwnership: If the ownership is invalid before or after the transfer
        ValueError: If the clause is invalid
    """
    if not clause.is_valid:
        raise ValueError("invalid life insurance clause")
    result = ownership.model_copy(deep=True)
    result.group_shares()
    result.check_valid("before transfer")
    children = list(children or [])

    if not result.holds_a_right(decedent):
        return _finalize(result)

    if not result.is_dismembered:
        leaving = find_owner(result.full_owners, decedent)
        if clause.is_dismembered:
            n_bare = Decimal(len(clause.bare_recipients))
            result.dismember()
            result.usufruct_owners = _hand_over(
                result.usufruct_owners, decedent, [(clause.usufruct_recipient, Decimal("1"))]
            )
            result.bare_owners = _hand_over(
                result.bare_owners, decedent, [(name, 1 / n_bare) for name in clause.bare_recipients]
            )
        else:
            n_full = Decimal(len(clause.full_recipients))
            result.full_owners = _hand_over(
                result.full_owners, decedent, [(name, 1 / n_full) for name in clause.full_recipients]
            )
        logger.debug("life insurance share %s of %s paid to beneficiaries", leaving.fraction, decedent)
        return _finalize(result)

    if result.is_a_bare_owner(decedent):
        _transfer_bare_ownership(result, decedent, heir_shares(spouse, children, fiscal_option))
    if result.is_an_usufruct_owner(decedent):
        _absorb_usufruct(result, decedent, _bare_owners_weights(result, decedent))
    return _finalize(result)


# =============================================================================
# Death Event
# =============================================================================

class DeathEvent(DomainModel):
    """Death of a household member during a year, applied to a Patrimoine.

    Example:
        event = DeathEvent.from_household(household, "Lionel", 2040)
        transfers = event.apply(patrimoine)   # {asset name: new Ownership}
    """

    decedent: PersonName = Field(description="Name of the deceased member")

    year: Year = Field(description="Year of death")

    spouse: Optional[str] = Field(default=None, description="Surviving spouse")

    children: List[str] = Field(default_factory=list, description="Surviving children")

    fiscal_option: Optional[FiscalOption] = Field(
        default=None,
        description="Option of the surviving spouse"
    )

    @classmethod
    def from_household(
        cls,
        household: 'Household',
        decedent: str,
        year: int,
        fiscal_option: Optional[FiscalOption] = None,
    ) -> "DeathEvent":
        """Derive the surviving spouse and children at the end of year.

        Without an explicit option, the spouse's own fiscal_option is used.
        """
        spouse = household.surviving_spouse(decedent, year)
        if fiscal_option is None and spouse is not None:
            fiscal_option = household.member(spouse).fiscal_option
        return cls(
            decedent=decedent,
            year=year,
            spouse=spouse,
            children=household.surviving_children(year),
            fiscal_option=fiscal_option,
        )

    def transfer(self, ownership: Ownership, clause: Optional[LifeInsuranceClause] = None) -> Ownership:
        if clause is not None:
            return transfer_life_insurance(
                ownership, self.decedent, clause, self.spouse, self.children, self.fiscal_option
            )
        return transfer_ownership(
            ownership, self.decedent, self.spouse, self.children, self.fiscal_option
        )

    def apply(self, patrimoine: 'Patrimoine') -> Dict[str, Ownership]:
        """Rewrite in place every asset in which the decedent held a right.

        Returns:
            New Ownership of each transformed asset, by asset name
        """
        transfers: Dict[str, Ownership] = {}
        for asset in patrimoine.assets:
            if not asset.ownership.holds_a_right(self.decedent):
                continue
            clause = asset.clause if asset.is_life_insurance else None
            try:
                new_ownership = self.transfer(asset.ownership, clause)
            except InvalidOwnership:
                logger.error("succession of %s failed on asset %s", self.decedent, asset.name)
                raise
            asset.ownership = new_ownership
            transfers[asset.name] = new_ownership
        return transfers
