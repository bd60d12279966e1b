"""
In-memory registry of synthetic persons.

Birth cohorts are generated a whole calendar year at a time so children can
be linked to parents drawn from the adult age window. Every public method
takes the pool lock for its full duration; row generators running on worker
threads serialize here.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date
from threading import RLock
from typing import Dict, List, Optional, Set, Tuple

from .codec import Gender, encode_person_id, random_date_in_year

DEFAULT_MIN_PARENT_AGE = 18
DEFAULT_MAX_PARENT_AGE = 50
DEFAULT_BIRTHS_PER_YEAR = (55000, 65000)


@dataclass
class PersonRecord:
    id: str
    birth_date: date
    gender: Gender
    mother_id: Optional[str] = None
    father_id: Optional[str] = None

    def age_in(self, year: int) -> int:
        return year - self.birth_date.year


class PersonPool:
    """
    Registry of synthesized persons keyed by PNR.

    Example:
        pool = PersonPool(random.Random(7), births_per_year=(500, 600))
        pnr = pool.get_or_create_for_birth_date(date(2020, 3, 15))
        mother, father = pool.resolve_parents(pnr)
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        min_parent_age: int = DEFAULT_MIN_PARENT_AGE,
        max_parent_age: int = DEFAULT_MAX_PARENT_AGE,
        births_per_year: Tuple[int, int] = DEFAULT_BIRTHS_PER_YEAR,
    ):
        if min_parent_age < 0 or max_parent_age < min_parent_age:
            raise ValueError(
                f"Invalid parent age window: [{min_parent_age}, {max_parent_age}]"
            )
        low, high = births_per_year
        if low < 0 or high < low:
            raise ValueError(f"Invalid births_per_year range: {births_per_year}")

        self.min_parent_age = min_parent_age
        self.max_parent_age = max_parent_age
        self.births_per_year = (low, high)
        self._rng = rng or random.Random()
        self._lock = RLock()
        self._persons: Dict[str, PersonRecord] = {}
        self._ids: List[str] = []
        self._by_cohort: Dict[Tuple[Gender, int], List[str]] = {}
        self._years: Set[int] = set()

    # ===== Internal (caller holds the lock) =====

    def _add_person_locked(
        self,
        birth_date: date,
        gender: Gender,
        mother_id: Optional[str] = None,
        father_id: Optional[str] = None,
    ) -> str:
        pnr = encode_person_id(birth_date, gender, self._rng)
        previous = self._persons.get(pnr)
        # Colliding ids overwrite the earlier record; the pool does not de-duplicate.
        self._persons[pnr] = PersonRecord(pnr, birth_date, gender, mother_id, father_id)
        if previous is None:
            self._ids.append(pnr)
        else:
            # The cohort index must follow the record that now owns the id
            self._by_cohort[(previous.gender, previous.birth_date.year)].remove(pnr)
        self._by_cohort.setdefault((gender, birth_date.year), []).append(pnr)
        return pnr

    def _add_random_person_locked(
        self,
        birth_year: int,
        gender: Optional[Gender] = None,
        mother_id: Optional[str] = None,
        father_id: Optional[str] = None,
    ) -> str:
        birth_date = random_date_in_year(birth_year, self._rng)
        return self._add_person_locked(
            birth_date, gender or Gender.random(self._rng), mother_id, father_id
        )

    def _parent_birth_year_locked(self, year: int) -> int:
        return year - self._rng.randint(self.min_parent_age, self.max_parent_age)

    def _pick_adult_locked(self, gender: Gender, year: int) -> Optional[str]:
        """Uniform choice among current persons of `gender` whose age in `year` is in the window."""
        buckets = [
            self._by_cohort.get((gender, birth_year), [])
            for birth_year in range(year - self.max_parent_age, year - self.min_parent_age + 1)
        ]
        total = sum(len(bucket) for bucket in buckets)
        if total == 0:
            return None
        index = self._rng.randrange(total)
        for bucket in buckets:
            if index < len(bucket):
                return bucket[index]
            index -= len(bucket)
        return None

    def _ensure_year_locked(self, year: int) -> None:
        if year in self._years:
            return

        births = self._rng.randint(*self.births_per_year)

        # Parents first, two per expected birth, with no links of their own
        for _ in range(births * 2):
            self._add_random_person_locked(self._parent_birth_year_locked(year))

        # Eligibility is evaluated against the pool as it is at each assignment
        for _ in range(births):
            mother_id = self._pick_adult_locked(Gender.FEMALE, year)
            father_id = self._pick_adult_locked(Gender.MALE, year)
            self._add_random_person_locked(year, mother_id=mother_id, father_id=father_id)

        self._years.add(year)

    # ===== Public API =====

    def ensure_year_generated(self, year: int) -> None:
        """Generate the birth cohort for `year` once; later calls are no-ops."""
        with self._lock:
            self._ensure_year_locked(year)

    def get_or_create_for_birth_date(self, birth_date: date) -> str:
        """
        Mint a new person born on `birth_date` and return the PNR.

        The cohort for the birth year is generated first. Despite the name this
        always creates a fresh person: callers such as spouse synthesis rely on
        getting a new identifier on every call.
        """
        with self._lock:
            self._ensure_year_locked(birth_date.year)
            return self._add_person_locked(birth_date, Gender.random(self._rng))

    def resolve_parents(self, person_id: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Return (mother_id, father_id), creating any missing parent once.

        Unknown ids return (None, None).
        """
        with self._lock:
            record = self._persons.get(person_id)
            if record is None:
                return None, None

            child_year = record.birth_date.year
            if record.mother_id is None:
                record.mother_id = self._add_random_person_locked(
                    self._parent_birth_year_locked(child_year), Gender.FEMALE
                )
            if record.father_id is None:
                record.father_id = self._add_random_person_locked(
                    self._parent_birth_year_locked(child_year), Gender.MALE
                )
            return record.mother_id, record.father_id

    def pick_random(self) -> Optional[str]:
        """Return an arbitrary existing PNR, or None for an empty pool."""
        with self._lock:
            if not self._ids:
                return None
            return self._rng.choice(self._ids)

    def get(self, person_id: str) -> Optional[PersonRecord]:
        with self._lock:
            return self._persons.get(person_id)

    def born_in(self, year: int) -> List[PersonRecord]:
        """All persons with a birth date in `year`."""
        with self._lock:
            return [
                self._persons[pnr]
                for gender in Gender
                for pnr in self._by_cohort.get((gender, year), [])
            ]

    @property
    def generated_years(self) -> Set[int]:
        with self._lock:
            return set(self._years)

    def reset(self) -> None:
        with self._lock:
            self._persons.clear()
            self._ids.clear()
            self._by_cohort.clear()
            self._years.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._persons)

    def __contains__(self, person_id: object) -> bool:
        with self._lock:
            return person_id in self._persons
