"""
Identifier codec for synthetic register identifiers.

Person identifiers (PNR) follow the Danish CPR layout ``DDMMYY-SXXX``:
birth day, month and two-digit year, a hyphen, one century-coded digit
and a three-digit suffix whose parity carries the gender. Contact
identifiers (RECNUM) are zero-padded sequence numbers.
"""

import random
from datetime import date
from enum import Enum

CONTACT_ID_WIDTH = 20

# Parity is a coin flip per draw; 64 misses in a row has probability 2**-64.
MAX_PARITY_DRAWS = 64


class Gender(str, Enum):
    """Register gender codes (KOEN): M = mand, K = kvinde."""

    MALE = "M"
    FEMALE = "K"

    @classmethod
    def random(cls, rng: random.Random) -> "Gender":
        return cls.MALE if rng.random() < 0.5 else cls.FEMALE


def _entropy_digit(year: int, rng: random.Random) -> int:
    """Draw the 7th digit from the range reserved for the birth century."""
    century = year // 100
    if century == 18:
        return rng.randrange(5, 8)
    if century == 19:
        if year < 1937:
            return rng.randrange(0, 4)
        return rng.randrange(4, 10)
    if century == 20:
        return rng.randrange(0, 4)
    return rng.randrange(4, 10)


def _parity_suffix(gender: Gender, rng: random.Random) -> int:
    want_odd = gender == Gender.MALE
    for _ in range(MAX_PARITY_DRAWS):
        digits = rng.randrange(0, 999)
        if (digits % 2 == 1) == want_odd:
            return digits
    raise RuntimeError(f"Could not draw a {gender.name.lower()} suffix in {MAX_PARITY_DRAWS} tries")


def encode_person_id(birth_date: date, gender: Gender, rng: random.Random) -> str:
    """
    Build a PNR for a birth date and gender.

    Args:
        birth_date: Date of birth; day, month and year-of-century are embedded
        gender: Encoded as suffix parity (odd = male, even = female)
        rng: Random source for the entropy digit and suffix

    Returns:
        11-character identifier, e.g. ``"150320-0417"``
    """
    gender = Gender(gender)
    seventh = _entropy_digit(birth_date.year, rng)
    suffix = _parity_suffix(gender, rng)
    return (
        f"{birth_date.day:02d}{birth_date.month:02d}{birth_date.year % 100:02d}"
        f"-{seventh}{suffix:03d}"
    )


def gender_from_person_id(person_id: str) -> Gender:
    """Read the gender back from the parity of the last digit."""
    if not person_id or not person_id[-1].isdigit():
        raise ValueError(f"Invalid person id: '{person_id}'")
    return Gender.MALE if int(person_id[-1]) % 2 == 1 else Gender.FEMALE


def format_contact_id(number: int) -> str:
    return f"{number:0{CONTACT_ID_WIDTH}d}"


def random_date_in_year(year: int, rng: random.Random) -> date:
    # Days 1-28 exist in every month of every year
    return date(year, rng.randint(1, 12), rng.randint(1, 28))


class ContactSequence:
    """Monotonic RECNUM allocator. Numbers are never reused or recycled."""

    def __init__(self, start: int = 1):
        if start < 1:
            raise ValueError(f"start must be >= 1, got {start}")
        self._next = start

    @property
    def peek(self) -> int:
        return self._next

    def next_contact_id(self) -> str:
        contact_id = format_contact_id(self._next)
        self._next += 1
        return contact_id
