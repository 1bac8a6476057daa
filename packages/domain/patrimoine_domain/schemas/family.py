"""Household members.

A household member is either an Adult or a Child, discriminated by `kind`:

    Person = Annotated[Union[Adult, Child], Field(discriminator="kind")]

Both expose `year_of(event)`, returning None for an event that does not exist
for their role. The Household answers the age and survival queries needed by the
pension and succession engines.
"""

from datetime import date
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from pydantic import Field, model_validator

from .base import DomainModel, PersonName
from .general_regime import GeneralRegimeSituation
from .inheritance import FiscalOption
from .points_regime import PointsRegimeSituation


class LifeEvent(str, Enum):
    """Events of a member's life located in a given year."""

    BIRTH = "birth"
    DEATH = "death"
    RETIREMENT = "retirement"
    PENSION_LIQUIDATION = "pension_liquidation"
    POINTS_PENSION_LIQUIDATION = "points_pension_liquidation"
    UNEMPLOYMENT_END = "unemployment_end"
    UNIVERSITY = "university"
    INDEPENDENCE = "independence"


# =============================================================================
# Person Base
# =============================================================================

class PersonBase(DomainModel):
    """Fields shared by adults and children."""

    name: PersonName = Field(description="Unique name within the household")

    birth_date: date = Field(description="Date of birth")

    age_of_death: Optional[int] = Field(
        default=None,
        ge=0,
        description="Age at which the person dies (None: alive over the whole simulation)"
    )

    @property
    def year_of_death(self) -> Optional[int]:
        if self.age_of_death is None:
            return None
        return self.birth_date.year + self.age_of_death

    def age(self, year: int) -> int:
        """Age at the end of year."""
        return year - self.birth_date.year

    def is_alive(self, year: int) -> bool:
        """True if alive at the end of year (a person is not alive in the year of death)."""
        return self.year_of_death is None or year < self.year_of_death

    def is_deceased_during(self, year: int) -> bool:
        return self.year_of_death == year

    def _common_year_of(self, event: LifeEvent) -> Optional[int]:
        if event == LifeEvent.BIRTH:
            return self.birth_date.year
        if event == LifeEvent.DEATH:
            return self.year_of_death
        return None


# =============================================================================
# Adult
# =============================================================================

class Adult(PersonBase):
    """Adult member: career, retirement and spouse's fiscal option.

    Example:
        Adult(
            name="Lionel",
            birth_date=date(1964, 9, 22),
            date_of_retirement=date(2025, 12, 31),
            date_of_pension_liquid=date(2026, 9, 22),
            general_regime_situation=GeneralRegimeSituation(
                as_of_year=2019, acquired_quarters=135, average_annual_wage=36000
            ),
        )
    """

    kind: Literal["adult"] = "adult"

    date_of_retirement: Optional[date] = Field(
        default=None,
        description="End of professional activity"
    )

    date_of_end_of_unemployment_alloc: Optional[date] = Field(
        default=None,
        description="End of unemployment allowances after activity, if any"
    )

    date_of_pension_liquid: Optional[date] = Field(
        default=None,
        description="Claim date of the general-regime pension"
    )

    date_of_points_pension_liquid: Optional[date] = Field(
        default=None,
        description="Claim date of the complementary pension (defaults to date_of_pension_liquid)"
    )

    general_regime_situation: Optional[GeneralRegimeSituation] = None

    points_regime_situation: Optional[PointsRegimeSituation] = None

    nb_of_children_born: int = Field(default=0, ge=0)

    fiscal_option: FiscalOption = Field(
        default=FiscalOption.FULL_USUFRUCT,
        description="Option taken as surviving spouse"
    )

    @model_validator(mode='after')
    def validate_dates(self):
        """Pension cannot be claimed before the end of activity."""
        if (
            self.date_of_retirement is not None
            and self.date_of_pension_liquid is not None
            and self.date_of_pension_liquid < self.date_of_retirement
        ):
            raise ValueError("date_of_pension_liquid must not be before date_of_retirement")
        return self

    @property
    def points_liquidation_date(self) -> Optional[date]:
        return self.date_of_points_pension_liquid or self.date_of_pension_liquid

    def year_of(self, event: LifeEvent) -> Optional[int]:
        event = LifeEvent(event)
        dated = {
            LifeEvent.RETIREMENT: self.date_of_retirement,
            LifeEvent.PENSION_LIQUIDATION: self.date_of_pension_liquid,
            LifeEvent.POINTS_PENSION_LIQUIDATION: self.points_liquidation_date,
            LifeEvent.UNEMPLOYMENT_END: self.date_of_end_of_unemployment_alloc,
        }
        if event in dated:
            return None if dated[event] is None else dated[event].year
        return self._common_year_of(event)

    def is_retired(self, year: int) -> bool:
        return self.date_of_retirement is not None and year >= self.date_of_retirement.year


# =============================================================================
# Child
# =============================================================================

class Child(PersonBase):
    """Child member: dependent until independence."""

    kind: Literal["child"] = "child"

    age_of_university: int = Field(default=18, ge=0)

    age_of_independence: int = Field(default=24, ge=0)

    def year_of(self, event: LifeEvent) -> Optional[int]:
        event = LifeEvent(event)
        if event == LifeEvent.UNIVERSITY:
            return self.birth_date.year + self.age_of_university
        if event == LifeEvent.INDEPENDENCE:
            return self.birth_date.year + self.age_of_independence
        return self._common_year_of(event)

    def is_dependent(self, year: int) -> bool:
        """Alive at the end of year and not yet financially independent."""
        return self.is_alive(year) and year < self.birth_date.year + self.age_of_independence


Person = Annotated[Union[Adult, Child], Field(discriminator="kind")]


# =============================================================================
# Household
# =============================================================================

class Household(DomainModel):
    """Members of the household.

    Example:
        household = Household(members=[lionel, vanessa, pierre])
        household.age_of("Pierre", 2030)
        household.surviving_spouse("Lionel", 2040)   # "Vanessa"
    """

    members: List[Person] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_unique_names(self):
        """Member names identify owners, so they must be unique."""
        names = [member.name for member in self.members]
        if len(names) != len(set(names)):
            raise ValueError("Household member names must be unique")
        return self

    @property
    def adults(self) -> List[Adult]:
        return [member for member in self.members if isinstance(member, Adult)]

    @property
    def children(self) -> List[Child]:
        return [member for member in self.members if isinstance(member, Child)]

    def member(self, name: str) -> Union[Adult, Child]:
        for member in self.members:
            if member.name == name:
                return member
        raise ValueError(f"{name} is not a member of the household")

    def age_of(self, name: str, year: int) -> int:
        """Age of a member at the end of year."""
        return self.member(name).age(year)

    def is_alive(self, name: str, year: int) -> bool:
        return self.member(name).is_alive(year)

    def deceased_adults(self, year: int) -> List[Adult]:
        """Adults dying during year, eldest first."""
        deceased = [adult for adult in self.adults if adult.is_deceased_during(year)]
        return sorted(deceased, key=lambda adult: adult.birth_date)

    def surviving_spouse(self, decedent: str, year: int) -> Optional[str]:
        """The other adult, if alive at the end of year."""
        for adult in self.adults:
            if adult.name != decedent and adult.is_alive(year):
                return adult.name
        return None

    def surviving_children(self, year: int) -> List[str]:
        return [child.name for child in self.children if child.is_alive(year)]

    def dependent_children_count(self, year: int) -> int:
        return sum(1 for child in self.children if child.is_dependent(year))

    def total_children_count(self) -> int:
        return len(self.children)
