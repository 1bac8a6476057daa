"""Owners of one right (full, usufruct or bare ownership) of an asset.

An owner list is a plain List[Owner]; the functions below implement its rules.
Fractions are in percent and a non-empty list must sum to 100.
"""

from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from pydantic import Field

from .base import DomainModel, OwnedFraction, PersonName
from .errors import NoNewOwners, OwnerDoesNotExist

FRACTION_TOLERANCE = Decimal("0.0001")

# Below this, a share left over by proportional redistribution counts as zero
ZERO_FRACTION = Decimal("1e-12")


class Owner(DomainModel):
    """Share of a right held by one person.

    Example:
        Owner(name="Lionel", fraction=50)  # holds 50% of the right
    """

    name: PersonName = Field(description="Name of the household member")

    fraction: OwnedFraction = Field(
        default=Decimal("0"),
        description="Share of the right in percent (0 to 100)"
    )

    def owned_value(self, total_value: Decimal) -> Decimal:
        return total_value * self.fraction / 100


Owners = List[Owner]


def sum_of_fractions(owners: Sequence[Owner]) -> Decimal:
    return sum((owner.fraction for owner in owners), Decimal("0"))


def percentage_ok(owners: Sequence[Owner]) -> bool:
    """True if the fractions sum to 100 within FRACTION_TOLERANCE."""
    return abs(sum_of_fractions(owners) - 100) <= FRACTION_TOLERANCE


def owners_are_valid(owners: Sequence[Owner]) -> bool:
    """An empty list is valid; otherwise names are unique, shares positive and sum to 100."""
    if not owners:
        return True
    names = [owner.name for owner in owners]
    if not all(names) or len(set(names)) != len(names):
        return False
    return all(owner.fraction > 0 for owner in owners) and percentage_ok(owners)


def find_owner(owners: Sequence[Owner], name: str) -> Optional[Owner]:
    for owner in owners:
        if owner.name == name:
            return owner
    return None


def owners_equal(lhs: Sequence[Owner], rhs: Sequence[Owner]) -> bool:
    """Order-independent comparison with FRACTION_TOLERANCE on fractions."""
    for owner in lhs:
        found = find_owner(rhs, owner.name)
        if found is None or abs(found.fraction - owner.fraction) > FRACTION_TOLERANCE:
            return False
    for owner in rhs:
        found = find_owner(lhs, owner.name)
        if found is None or abs(found.fraction - owner.fraction) > FRACTION_TOLERANCE:
            return False
    return True


def group_owner_shares(owners: Sequence[Owner]) -> List[Owner]:
    """Fold the shares held by a same name and drop null shares.

    Names keep the order of their first appearance.
    """
    totals: Dict[str, Decimal] = {}
    for owner in owners:
        totals[owner.name] = totals.get(owner.name, Decimal("0")) + owner.fraction
    return [
        Owner(name=name, fraction=fraction)
        for name, fraction in totals.items()
        if fraction > ZERO_FRACTION
    ]


def replace_owner(owners: Sequence[Owner], name: str, new_owner_names: Sequence[str]) -> List[Owner]:
    """Hand the share of `name` over to new owners in equal parts.

    Args:
        owners: Current owners
        name: Owner leaving the list
        new_owner_names: Names receiving the share in equal parts

    Returns:
        New grouped owner list

    Raises:
        NoNewOwners: If new_owner_names is empty
        OwnerDoesNotExist: If name is not an owner
    """
    if not new_owner_names:
        raise NoNewOwners(f"no new owner to replace {name}")
    leaving = find_owner(owners, name)
    if leaving is None:
        raise OwnerDoesNotExist(f"{name} is not an owner")

    share = leaving.fraction / len(new_owner_names)
    remaining = [owner.model_copy() for owner in owners if owner.name != name]
    remaining.extend(Owner(name=new_name, fraction=share) for new_name in new_owner_names)
    return group_owner_shares(remaining)
