"""
Tests for cdef_core.identity.contact_pool.ContactPool.
"""

import os
import random
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cdef_core.identity import ContactPool


@pytest.fixture
def pool():
    return ContactPool(random.Random(3))


class TestGetOrCreate:
    def test_first_call_mints_dated_contact(self, pool):
        contact_id = pool.get_or_create("010190-4001", 2015)
        record = pool.get(contact_id)
        assert record.person_id == "010190-4001"
        assert record.contact_date.year == 2015
        assert 1 <= record.contact_date.day <= 28
        assert len(pool) == 1

    def test_reuses_existing_contact_across_years(self, pool):
        first = pool.get_or_create("010190-4001", 2015)
        for year in (2015, 2016, 1999):
            assert pool.get_or_create("010190-4001", year) == first
        assert len(pool) == 1

    def test_returns_one_of_the_persons_contacts(self, pool):
        person = "010190-4001"
        pool.get_or_create(person, 2000)
        # Give the person a second contact by minting under the lock-held helper
        with pool._lock:
            pool._add_contact_locked(person, 2001)
        owned = set(pool.contacts_for(person))
        assert len(owned) == 2
        for _ in range(50):
            assert pool.get_or_create(person, 2010) in owned

    def test_different_persons_get_different_contacts(self, pool):
        a = pool.get_or_create("010190-4001", 2015)
        b = pool.get_or_create("020290-4002", 2015)
        assert a != b


class TestSequence:
    def test_ids_strictly_increasing_and_unique(self, pool):
        ids = []
        for i in range(100):
            ids.append(pool.get_or_create(f"person-{i}", 2000))
            ids.append(pool.mint_unlinked())
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_unlinked_ids_have_no_record(self, pool):
        contact_id = pool.mint_unlinked()
        assert pool.get(contact_id) is None
        assert len(pool) == 0

    def test_reset_restarts_sequence(self, pool):
        first = pool.mint_unlinked()
        pool.get_or_create("p", 2000)
        pool.reset()
        assert len(pool) == 0
        assert pool.mint_unlinked() == first


class TestPickAnyExisting:
    def test_empty_pool_is_contract_violation(self, pool):
        with pytest.raises(RuntimeError, match="Contact pool is empty"):
            pool.pick_any_existing()

    def test_unlinked_ids_do_not_count(self, pool):
        pool.mint_unlinked()
        with pytest.raises(RuntimeError):
            pool.pick_any_existing()

    def test_returns_existing_contact(self, pool):
        created = {pool.get_or_create(f"p{i}", 2000) for i in range(10)}
        for _ in range(50):
            assert pool.pick_any_existing() in created


def test_concurrent_get_or_create_never_duplicates_ids():
    pool = ContactPool(random.Random(1))

    with ThreadPoolExecutor(max_workers=8) as executor:
        ids = list(executor.map(lambda i: pool.get_or_create(f"p{i % 50}", 2020), range(500)))

    assert len(pool) == 50
    for i in range(50):
        assert len(pool.contacts_for(f"p{i}")) == 1
    assert set(ids) == {pool.contacts_for(f"p{i}")[0] for i in range(50)}
