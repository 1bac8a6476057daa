"""Beneficiary clause of a life-insurance contract."""

from typing import List
from pydantic import Field

from .base import DomainModel


class LifeInsuranceClause(DomainModel):
    """Beneficiaries of the capital on the death of the insured.

    A plain clause names full-ownership beneficiaries who share the capital in equal
    parts. A dismembered clause gives the usufruct to one beneficiary and the bare
    ownership to several beneficiaries in equal parts.

    Example:
        LifeInsuranceClause(full_recipients=["Lionel", "Pierre"])
        LifeInsuranceClause(
            is_dismembered=True,
            usufruct_recipient="Lionel",
            bare_recipients=["Pierre", "Julia"],
        )
    """

    is_dismembered: bool = Field(default=False)

    full_recipients: List[str] = Field(default_factory=list)

    usufruct_recipient: str = Field(default="")

    bare_recipients: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        if self.is_dismembered:
            return bool(self.usufruct_recipient) and len(self.bare_recipients) > 0
        return len(self.full_recipients) > 0
