"""
Per-table identity backbones.

Every column that derives from the row's person (PNR, birth date, age,
gender, parents, spouse, contacts) reads the same backbone, built once per
table on first use. Pool calls run on the calling thread in row order, so a
seeded run draws identities deterministically.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from .base import RuleContext, random_dates

AGE_SPAN = 100

# (max age inclusive, probability of having a spouse)
SPOUSE_PROBABILITY = (
    (17, 0.0),
    (25, 0.1),
    (35, 0.5),
    (60, 0.7),
)
SENIOR_SPOUSE_PROBABILITY = 0.6


@dataclass
class RowIdentities:
    person_ids: List[str]
    birth_dates: List[date]

    def ages(self, year: int) -> List[int]:
        return [year - born.year for born in self.birth_dates]


def population_rows(ctx: RuleContext) -> RowIdentities:
    """Mint one new person per row, born within the last AGE_SPAN years."""

    def build() -> RowIdentities:
        persons = ctx.identity.persons
        birth_dates = random_dates(ctx.rng, ctx.rows, ctx.year - AGE_SPAN, ctx.year + 1)
        person_ids = [persons.get_or_create_for_birth_date(born) for born in birth_dates]
        return RowIdentities(person_ids, birth_dates)

    return ctx.cached("population_rows", build)


def referenced_persons(ctx: RuleContext) -> List[str]:
    """Person ids for registers that refer to already-synthesized persons."""

    def build() -> List[str]:
        persons = ctx.identity.persons
        person_ids = []
        for _ in range(ctx.rows):
            pnr = persons.pick_random()
            if pnr is None:
                born = random_dates(ctx.rng, 1, ctx.year - AGE_SPAN, ctx.year + 1)[0]
                pnr = persons.get_or_create_for_birth_date(born)
            person_ids.append(pnr)
        return person_ids

    return ctx.cached("referenced_persons", build)


def spouse_probability(age: int) -> float:
    for max_age, probability in SPOUSE_PROBABILITY:
        if age <= max_age:
            return probability
    return SENIOR_SPOUSE_PROBABILITY


def spouses(ctx: RuleContext) -> List[Optional[str]]:
    """A freshly minted spouse (born within +/-5 years) or None per population row."""

    def build() -> List[Optional[str]]:
        rows = population_rows(ctx)
        persons = ctx.identity.persons
        result: List[Optional[str]] = []
        for age in rows.ages(ctx.year):
            if ctx.rng.random() < spouse_probability(age):
                spouse_year = ctx.year - age - int(ctx.rng.integers(-5, 6))
                born = date(spouse_year, int(ctx.rng.integers(1, 13)), int(ctx.rng.integers(1, 29)))
                result.append(persons.get_or_create_for_birth_date(born))
            else:
                result.append(None)
        return result

    return ctx.cached("spouses", build)


def row_contacts(ctx: RuleContext, person_ids: List[str]) -> List[str]:
    """One contact id per row, reused for persons that already have contacts."""
    contacts = ctx.identity.contacts
    return [contacts.get_or_create(pnr, ctx.year) for pnr in person_ids]


def existing_contacts(ctx: RuleContext) -> List[str]:
    """Arbitrary previously created contacts; fails on an empty contact pool."""
    contacts = ctx.identity.contacts
    return [contacts.pick_any_existing() for _ in range(ctx.rows)]


def unlinked_contacts(ctx: RuleContext) -> List[str]:
    contacts = ctx.identity.contacts
    return [contacts.mint_unlinked() for _ in range(ctx.rows)]
