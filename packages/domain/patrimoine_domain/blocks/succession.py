"""Succession computation block.

Applies a death event to the patrimoine and evaluates what each heir receives.

Output DataFrames:
- succession_transfers: Rights before and after the death, per asset and owner
- succession_by_heir: Value received, duties and net amount per heir
"""

import logging
from decimal import Decimal
from typing import Dict, List, Tuple
import pandas as pd

from .base import Block, BlockContext
from ..schemas import (
    DeathEvent,
    EvaluationMethod,
    Household,
    ModelCFG,
    Ownership,
    Patrimoine,
    find_owner,
)

logger = logging.getLogger(__name__)

TRANSFER_COLUMNS = ["asset", "owner", "right", "fraction_before", "fraction_after"]

HEIR_COLUMNS = [
    "heir",
    "relation",
    "legal_value",
    "life_insurance_value",
    "legal_duty",
    "life_insurance_duty",
    "total_duty",
    "net",
]

RIGHTS = ("full", "usufruct", "bare")


def _owners_of(ownership: Ownership, right: str):
    return {
        "full": ownership.full_owners,
        "usufruct": ownership.usufruct_owners,
        "bare": ownership.bare_owners,
    }[right]


class SuccessionBlock(Block):
    """Applies a DeathEvent and computes the inheritance of each heir.

    Inputs (from context):
        - household: Household (ages of the usufructuaries)
        - patrimoine: Patrimoine before the death (left untouched)
        - death_event: DeathEvent
        - model_cfg: ModelCFG

    Outputs (to context):
        - patrimoine_after_succession: Patrimoine after the transfers

        - succession_transfers: DataFrame with columns:
            * asset: Asset name
            * owner: Owner name
            * right: "full", "usufruct" or "bare"
            * fraction_before: Percent held before the death
            * fraction_after: Percent held after the death

        - succession_by_heir: DataFrame with columns:
            * heir: Heir name
            * relation: "spouse" or "child"
            * legal_value: Value received from ordinary assets
            * life_insurance_value: Value received from life insurance
            * legal_duty: Inheritance duties (spouse exempt)
            * life_insurance_duty: Life-insurance duties (spouse exempt)
            * total_duty: Sum of duties
            * net: Value received net of duties

    Example:
        context = BlockContext()
        context.set("household", household)
        context.set("patrimoine", patrimoine)
        context.set("death_event", DeathEvent.from_household(household, "Lionel", 2040))
        context.set("model_cfg", ModelCFG())

        SuccessionBlock().execute(context)
        context.get("succession_by_heir")
    """

    def __init__(
        self,
        household_key: str = "household",
        patrimoine_key: str = "patrimoine",
        death_event_key: str = "death_event",
        model_cfg_key: str = "model_cfg",
    ):
        self.household_key = household_key
        self.patrimoine_key = patrimoine_key
        self.death_event_key = death_event_key
        self.model_cfg_key = model_cfg_key

    def inputs(self) -> List[str]:
        return [self.household_key, self.patrimoine_key, self.death_event_key, self.model_cfg_key]

    def outputs(self) -> List[str]:
        return ["patrimoine_after_succession", "succession_transfers", "succession_by_heir"]

    def execute(self, context: BlockContext) -> None:
        household: Household = context.get(self.household_key)
        before: Patrimoine = context.get(self.patrimoine_key)
        event: DeathEvent = context.get(self.death_event_key)
        cfg: ModelCFG = context.get(self.model_cfg_key)

        after = before.after_death(event)
        touched = [asset.name for asset in before.assets_held_by(event.decedent)]
        logger.debug("death of %s touches assets %s", event.decedent, touched)

        context.set("patrimoine_after_succession", after)
        context.set("succession_transfers", self._compute_transfers(before, after, touched))
        context.set("succession_by_heir", self._compute_by_heir(before, after, event, household, cfg))

    def _compute_transfers(
        self, before: Patrimoine, after: Patrimoine, touched: List[str]
    ) -> pd.DataFrame:
        """One row per (asset, owner, right) of the assets held by the decedent."""
        rows = []
        for name in touched:
            old = before.asset(name).ownership
            new = after.asset(name).ownership
            for right in RIGHTS:
                old_owners = _owners_of(old, right)
                new_owners = _owners_of(new, right)
                names = [owner.name for owner in old_owners]
                names += [owner.name for owner in new_owners if owner.name not in names]
                for owner_name in names:
                    old_owner = find_owner(old_owners, owner_name)
                    new_owner = find_owner(new_owners, owner_name)
                    rows.append({
                        "asset": name,
                        "owner": owner_name,
                        "right": right,
                        "fraction_before": float(old_owner.fraction) if old_owner else 0.0,
                        "fraction_after": float(new_owner.fraction) if new_owner else 0.0,
                    })
        return pd.DataFrame(rows, columns=TRANSFER_COLUMNS)

    def _received(
        self,
        heir: str,
        before: Patrimoine,
        after: Patrimoine,
        event: DeathEvent,
        household: Household,
        cfg: ModelCFG,
    ) -> Tuple[Decimal, Decimal]:
        """Value received by heir from ordinary assets and from life insurance."""
        received: Dict[EvaluationMethod, Decimal] = {}
        for method in (EvaluationMethod.LEGAL_SUCCESSION, EvaluationMethod.LIFE_INSURANCE_SUCCESSION):
            values = [
                patrimoine.owned_value(
                    heir, event.year, method, household.age_of, cfg.fiscal.demembrement
                )
                for patrimoine in (before, after)
            ]
            received[method] = max(Decimal("0"), values[1] - values[0])
        return (
            received[EvaluationMethod.LEGAL_SUCCESSION],
            received[EvaluationMethod.LIFE_INSURANCE_SUCCESSION],
        )

    def _compute_by_heir(
        self,
        before: Patrimoine,
        after: Patrimoine,
        event: DeathEvent,
        household: Household,
        cfg: ModelCFG,
    ) -> pd.DataFrame:
        heirs = ([(event.spouse, "spouse")] if event.spouse else [])
        heirs += [(child, "child") for child in event.children]

        rows = []
        for heir, relation in heirs:
            legal_value, life_value = self._received(heir, before, after, event, household, cfg)
            if relation == "spouse":
                legal = cfg.fiscal.inheritance.heritage_to_spouse(legal_value)
                life = cfg.fiscal.life_insurance.heritage_to_spouse(life_value)
            else:
                legal = cfg.fiscal.inheritance.heritage_of_child(legal_value)
                life = cfg.fiscal.life_insurance.heritage_of_child(life_value)
            rows.append({
                "heir": heir,
                "relation": relation,
                "legal_value": float(legal_value),
                "life_insurance_value": float(life_value),
                "legal_duty": float(legal.tax),
                "life_insurance_duty": float(life.tax),
                "total_duty": float(legal.tax + life.tax),
                "net": float(legal.net + life.net),
            })
        return pd.DataFrame(rows, columns=HEIR_COLUMNS)
