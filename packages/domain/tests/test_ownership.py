"""Tests for Ownership structure, predicates and valuation."""

import pytest
from decimal import Decimal

from patrimoine_domain.schemas import (
    Demembrement,
    EvaluationMethod,
    InvalidOwnership,
    NotDismembered,
    Owner,
    Ownership,
)

AGES = {"Lionel": 65, "Julia": 25, "Pierre": 30, "Marie": 28}


def age_of(name: str, year: int) -> int:
    return AGES[name]


def full(**fractions) -> Ownership:
    return Ownership(full_owners=[
        Owner(name=name, fraction=Decimal(str(f))) for name, f in fractions.items()
    ])


def dismembered(usufruct: dict, bare: dict) -> Ownership:
    return Ownership(
        is_dismembered=True,
        usufruct_owners=[Owner(name=n, fraction=Decimal(str(f))) for n, f in usufruct.items()],
        bare_owners=[Owner(name=n, fraction=Decimal(str(f))) for n, f in bare.items()],
    )


# =============================================================================
# Validity & Structure
# =============================================================================

class TestStructure:

    def test_full_ownership_validity(self):
        assert full(Lionel=100).is_valid
        assert not full(Lionel=60).is_valid
        assert not Ownership().is_valid

    def test_dismembered_validity(self):
        assert dismembered({"Lionel": 100}, {"Pierre": 50, "Marie": 50}).is_valid
        assert not dismembered({"Lionel": 100}, {}).is_valid
        assert not dismembered({"Lionel": 90}, {"Pierre": 100}).is_valid

    def test_raw_lists_are_invalid_until_grouped(self):
        ownership = Ownership(full_owners=[
            Owner(name="Lionel", fraction=Decimal("50")),
            Owner(name="Lionel", fraction=Decimal("50")),
            Owner(name="Julia", fraction=Decimal("0")),
        ])
        assert not ownership.is_valid
        ownership.group_shares()
        assert ownership.is_valid

    def test_check_valid(self):
        full(Lionel=100).check_valid("after test")
        with pytest.raises(InvalidOwnership, match="after transfer"):
            full(Lionel=40).check_valid("after transfer")

    def test_dismember(self):
        ownership = full(Lionel=60, Julia=40)
        ownership.dismember()
        assert ownership.is_dismembered
        assert ownership.full_owners == []
        assert [o.name for o in ownership.usufruct_owners] == ["Lionel", "Julia"]
        assert [o.name for o in ownership.bare_owners] == ["Lionel", "Julia"]
        assert ownership.is_valid

    @pytest.mark.parametrize("ownership", [
        full(Lionel=60, Julia=40),
        dismembered({"Lionel": 100}, {"Pierre": 50, "Marie": 50}),
        dismembered({"Lionel": 50, "Julia": 50}, {"Lionel": 50, "Julia": 50}),
        Ownership(
            is_dismembered=True,
            usufruct_owners=[
                Owner(name="Lionel", fraction=Decimal("30")),
                Owner(name="Lionel", fraction=Decimal("70")),
            ],
            bare_owners=[
                Owner(name="Pierre", fraction=Decimal("100")),
                Owner(name="Marie", fraction=Decimal("0")),
            ],
        ),
    ])
    def test_group_is_idempotent(self, ownership):
        ownership.group_shares()
        once = ownership.model_copy(deep=True)
        ownership.group_shares()
        assert ownership.is_dismembered == once.is_dismembered
        for right in ["full_owners", "usufruct_owners", "bare_owners"]:
            assert [(o.name, o.fraction) for o in getattr(ownership, right)] == [
                (o.name, o.fraction) for o in getattr(once, right)
            ]

    def test_dismember_then_group_collapses(self):
        ownership = full(Lionel=60, Julia=40)
        ownership.dismember()
        ownership.group_shares()
        assert not ownership.is_dismembered
        assert [(o.name, o.fraction) for o in ownership.full_owners] == [
            ("Lionel", Decimal("60")), ("Julia", Decimal("40"))
        ]
        assert ownership.usufruct_owners == []
        assert ownership.bare_owners == []

    def test_group_keeps_distinct_rights(self):
        ownership = dismembered({"Lionel": 100}, {"Pierre": 50, "Marie": 50})
        ownership.bare_owners.append(Owner(name="Julia", fraction=Decimal("0")))
        ownership.group_shares()
        assert ownership.is_dismembered
        assert [o.name for o in ownership.bare_owners] == ["Pierre", "Marie"]

    def test_group_folds_full_owners(self):
        ownership = Ownership(full_owners=[
            Owner(name="Pierre", fraction=Decimal("25")),
            Owner(name="Marie", fraction=Decimal("50")),
            Owner(name="Pierre", fraction=Decimal("25")),
        ])
        ownership.group_shares()
        assert [(o.name, o.fraction) for o in ownership.full_owners] == [
            ("Pierre", Decimal("50")), ("Marie", Decimal("50"))
        ]


# =============================================================================
# Predicates
# =============================================================================

class TestPredicates:

    def test_full_owner(self):
        ownership = full(Lionel=100)
        assert ownership.is_a_full_owner("Lionel")
        assert not ownership.is_an_usufruct_owner("Lionel")
        assert ownership.holds_a_right("Lionel")
        assert ownership.receives_revenues("Lionel")
        assert not ownership.holds_a_right("Pierre")

    def test_dismembered_rights(self):
        ownership = dismembered({"Lionel": 100}, {"Pierre": 100})
        assert ownership.is_an_usufruct_owner("Lionel")
        assert not ownership.is_a_full_owner("Lionel")
        assert ownership.receives_revenues("Lionel")
        assert ownership.is_a_bare_owner("Pierre")
        assert ownership.holds_a_right("Pierre")
        assert not ownership.receives_revenues("Pierre")


# =============================================================================
# Valuation
# =============================================================================

class TestValuation:

    def test_demembrement_single_usufructuary(self):
        ownership = dismembered({"Lionel": 100}, {"Pierre": 50, "Marie": 50})
        split = ownership.demembrement(Decimal("100000"), 2030, age_of)
        assert split.usufruct_value == Decimal("40000")
        assert split.bare_value == Decimal("60000")

    def test_demembrement_values_each_usufructuary_at_its_age(self):
        ownership = dismembered({"Lionel": 50, "Julia": 50}, {"Pierre": 100})
        split = ownership.demembrement(Decimal("100000"), 2030, age_of)
        assert split.usufruct_value == Decimal("60000")
        assert split.bare_value == Decimal("40000")
        assert split.total == Decimal("100000")

    def test_demembrement_requires_dismembered(self):
        with pytest.raises(NotDismembered):
            full(Lionel=100).demembrement(Decimal("100"), 2030, age_of)

    def test_demembrement_requires_valid(self):
        with pytest.raises(InvalidOwnership):
            dismembered({"Lionel": 50}, {"Pierre": 100}).demembrement(Decimal("100"), 2030, age_of)

    def test_full_ownership_value(self):
        ownership = full(Lionel=60, Julia=40)
        value = ownership.owned_value("Lionel", Decimal("1000"), 2030, EvaluationMethod.PATRIMOINE)
        assert value == Decimal("600")
        assert ownership.owned_value("Pierre", Decimal("1000"), 2030, EvaluationMethod.PATRIMOINE) == 0

    @pytest.mark.parametrize("method", [EvaluationMethod.IFI, EvaluationMethod.ISF, "ifi"])
    def test_wealth_tax_usufructuary_holds_full_value(self, method):
        ownership = dismembered({"Lionel": 100}, {"Pierre": 100})
        assert ownership.owned_value("Lionel", Decimal("100000"), 2030, method) == Decimal("100000")
        assert ownership.owned_value("Pierre", Decimal("100000"), 2030, method) == 0

    def test_succession_values(self):
        ownership = dismembered({"Lionel": 100}, {"Pierre": 50, "Marie": 50})
        method = EvaluationMethod.LEGAL_SUCCESSION
        assert ownership.owned_value("Lionel", Decimal("100000"), 2030, method, age_of) == Decimal("40000")
        assert ownership.owned_value("Pierre", Decimal("100000"), 2030, method, age_of) == Decimal("30000")
        assert ownership.owned_value("Julia", Decimal("100000"), 2030, method, age_of) == 0

    def test_usufructuary_also_bare_owner(self):
        ownership = dismembered({"Lionel": 100}, {"Lionel": 50, "Pierre": 50})
        value = ownership.owned_value(
            "Lionel", Decimal("100000"), 2030, EvaluationMethod.PATRIMOINE, age_of
        )
        assert value == Decimal("70000")

    def test_custom_grid(self):
        grid = Demembrement(grid=[{"floor_age": 0, "usufruct_fraction": "0.5"}])
        ownership = dismembered({"Lionel": 100}, {"Pierre": 100})
        value = ownership.owned_value(
            "Pierre", Decimal("100000"), 2030, EvaluationMethod.PATRIMOINE, age_of, grid
        )
        assert value == Decimal("50000")

    def test_age_lookup_required(self):
        ownership = dismembered({"Lionel": 100}, {"Pierre": 100})
        with pytest.raises(ValueError, match="age lookup"):
            ownership.owned_value("Pierre", Decimal("100"), 2030, EvaluationMethod.LEGAL_SUCCESSION)
