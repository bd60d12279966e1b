"""
In-memory registry of hospital contact identifiers (RECNUM).

A person keeps the contacts minted for them, so registers that reference a
contact for the same person reuse one of those ids instead of minting.
Person ids are not checked against the person pool.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date
from threading import RLock
from typing import Dict, List, Optional

from .codec import ContactSequence, random_date_in_year


@dataclass(frozen=True)
class ContactRecord:
    id: str
    person_id: str
    contact_date: date


class ContactPool:
    """Contact id registry with a person -> contacts secondary index."""

    def __init__(self, rng: Optional[random.Random] = None, start: int = 1):
        self._rng = rng or random.Random()
        self._lock = RLock()
        self._sequence = ContactSequence(start)
        self._start = start
        self._contacts: Dict[str, ContactRecord] = {}
        self._contact_ids: List[str] = []
        self._by_person: Dict[str, List[str]] = {}

    def _add_contact_locked(self, person_id: str, year: int) -> str:
        contact_id = self._sequence.next_contact_id()
        record = ContactRecord(contact_id, person_id, random_date_in_year(year, self._rng))
        self._contacts[contact_id] = record
        self._contact_ids.append(contact_id)
        self._by_person.setdefault(person_id, []).append(contact_id)
        return contact_id

    def get_or_create(self, person_id: str, year: int) -> str:
        """
        Return a contact id for `person_id`.

        Any existing contact of the person is reused, whatever year it was
        created for. Otherwise a new contact dated within `year` is minted.
        """
        with self._lock:
            existing = self._by_person.get(person_id)
            if existing:
                return self._rng.choice(existing)
            return self._add_contact_locked(person_id, year)

    def mint_unlinked(self) -> str:
        """Allocate a sequence number that belongs to no person and no contact record."""
        with self._lock:
            return self._sequence.next_contact_id()

    def pick_any_existing(self) -> str:
        """
        Return an arbitrary contact id previously created by get_or_create.

        Raises:
            RuntimeError: If no contact exists yet. The owning register (or the
                column keyed on persons) must be generated first.
        """
        with self._lock:
            if not self._contact_ids:
                raise RuntimeError(
                    "Contact pool is empty: generate a register that creates contacts "
                    "(e.g. lpr_adm or lpr3_kontakter) before registers that reference them"
                )
            return self._rng.choice(self._contact_ids)

    def contacts_for(self, person_id: str) -> List[str]:
        with self._lock:
            return list(self._by_person.get(person_id, []))

    def get(self, contact_id: str) -> Optional[ContactRecord]:
        with self._lock:
            return self._contacts.get(contact_id)

    def reset(self) -> None:
        with self._lock:
            self._sequence = ContactSequence(self._start)
            self._contacts.clear()
            self._contact_ids.clear()
            self._by_person.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._contacts)
