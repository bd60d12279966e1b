"""
Cross-register identity pools.

The orchestrator owns one IdentityContext per run and passes it into every
column generation call, so PNRs and RECNUMs stay consistent across the
registers written in that run.
"""

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from .codec import Gender, encode_person_id, gender_from_person_id
from .contact_pool import ContactPool, ContactRecord
from .person_pool import (
    DEFAULT_BIRTHS_PER_YEAR,
    DEFAULT_MAX_PARENT_AGE,
    DEFAULT_MIN_PARENT_AGE,
    PersonPool,
    PersonRecord,
)


@dataclass
class IdentityContext:
    persons: PersonPool
    contacts: ContactPool

    @classmethod
    def create(
        cls,
        seed: Optional[int] = None,
        min_parent_age: int = DEFAULT_MIN_PARENT_AGE,
        max_parent_age: int = DEFAULT_MAX_PARENT_AGE,
        births_per_year: Tuple[int, int] = DEFAULT_BIRTHS_PER_YEAR,
    ) -> "IdentityContext":
        rng = random.Random(seed)
        return cls(
            persons=PersonPool(
                random.Random(rng.getrandbits(64)),
                min_parent_age=min_parent_age,
                max_parent_age=max_parent_age,
                births_per_year=births_per_year,
            ),
            contacts=ContactPool(random.Random(rng.getrandbits(64))),
        )

    def reset(self) -> None:
        self.persons.reset()
        self.contacts.reset()


__all__ = [
    "ContactPool",
    "ContactRecord",
    "Gender",
    "IdentityContext",
    "PersonPool",
    "PersonRecord",
    "encode_person_id",
    "gender_from_person_id",
]
