"""Assets of the household and their ownership."""

from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING
from pydantic import Field, model_validator

from .base import DomainModel, MoneyAmount
from .demembrement import Demembrement
from .life_insurance import LifeInsuranceClause
from .ownership import AgeOf, EvaluationMethod, Ownership

# Avoid circular import for type hints
if TYPE_CHECKING:
    from .succession import DeathEvent


class Asset(DomainModel):
    """An owned asset: real estate, financial investment or life-insurance contract.

    Example:
        Asset(
            name="Appartement",
            value=300000,
            ownership=Ownership(full_owners=[Owner(name="Lionel", fraction=100)]),
        )
    """

    name: str = Field(min_length=1, description="Unique asset name")

    value: MoneyAmount = Field(description="Full-ownership value")

    ownership: Ownership = Field(default_factory=Ownership)

    is_life_insurance: bool = Field(default=False)

    clause: Optional[LifeInsuranceClause] = Field(
        default=None,
        description="Beneficiary clause, required for life insurance"
    )

    @model_validator(mode='after')
    def validate_clause(self):
        """Life insurance needs a valid clause; other assets have none."""
        if self.is_life_insurance:
            if self.clause is None or not self.clause.is_valid:
                raise ValueError(f"life insurance {self.name} requires a valid clause")
        elif self.clause is not None:
            raise ValueError(f"asset {self.name} is not a life insurance and cannot have a clause")
        return self

    def owned_value(
        self,
        owner_name: str,
        year: int,
        method: EvaluationMethod,
        age_of: Optional[AgeOf] = None,
        demembrement: Optional[Demembrement] = None,
    ) -> Decimal:
        return self.ownership.owned_value(
            owner_name, self.value, year, method, age_of, demembrement
        )


class Patrimoine(DomainModel):
    """All assets of the household.

    Example:
        patrimoine = Patrimoine(assets=[apartment, contract])
        patrimoine.owned_value("Lionel", 2030, EvaluationMethod.PATRIMOINE, household.age_of)
    """

    assets: List[Asset] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_unique_names(self):
        names = [asset.name for asset in self.assets]
        if len(names) != len(set(names)):
            raise ValueError("Asset names must be unique")
        return self

    @property
    def total_value(self) -> Decimal:
        return sum((asset.value for asset in self.assets), Decimal("0"))

    def asset(self, name: str) -> Asset:
        for asset in self.assets:
            if asset.name == name:
                return asset
        raise ValueError(f"no asset named {name}")

    def assets_held_by(self, name: str) -> List[Asset]:
        """Assets in which name holds any right."""
        return [asset for asset in self.assets if asset.ownership.holds_a_right(name)]

    def owned_value(
        self,
        owner_name: str,
        year: int,
        method: EvaluationMethod,
        age_of: Optional[AgeOf] = None,
        demembrement: Optional[Demembrement] = None,
    ) -> Decimal:
        """Sum of the values owned by owner_name.

        LEGAL_SUCCESSION leaves life insurance out of the estate, and
        LIFE_INSURANCE_SUCCESSION only counts life insurance.
        """
        method = EvaluationMethod(method)
        total = Decimal("0")
        for asset in self.assets:
            if method == EvaluationMethod.LEGAL_SUCCESSION and asset.is_life_insurance:
                continue
            if method == EvaluationMethod.LIFE_INSURANCE_SUCCESSION and not asset.is_life_insurance:
                continue
            total += asset.owned_value(owner_name, year, method, age_of, demembrement)
        return total

    def after_death(self, event: 'DeathEvent') -> 'Patrimoine':
        """Copy of the patrimoine once the death event is applied."""
        transformed = self.model_copy(deep=True)
        event.apply(transformed)
        return transformed
