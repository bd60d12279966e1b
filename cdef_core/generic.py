"""
Generic typed columns.

Columns with no register rule but a declared type get plausible values.
Text-like values come from Faker (da_DK) pools built once per seed; rows
then index into the pools with numpy, so chunks can be generated in
parallel without sharing a Faker instance.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Optional

import numpy as np
from faker import Faker

from .registers.base import ColumnRule, RuleContext, random_dates

FAKER_LOCALE = "da_DK"
POOL_SIZE = 2000


@dataclass
class FakerPools:
    words: np.ndarray
    names: np.ndarray
    addresses: np.ndarray
    sentences: np.ndarray


@lru_cache(maxsize=8)
def build_pools(seed: Optional[int] = None, size: int = POOL_SIZE) -> FakerPools:
    fake = Faker(FAKER_LOCALE)
    if seed is not None:
        fake.seed_instance(seed)

    words = np.array([fake.word() for _ in range(size)], dtype=object)
    names = np.array([fake.name() for _ in range(size)], dtype=object)
    # single line addresses
    addresses = np.array(
        [fake.address().replace("\n", ", ") for _ in range(size)], dtype=object
    )
    sentences = np.array([fake.sentence() for _ in range(size)], dtype=object)
    return FakerPools(words, names, addresses, sentences)


def _pool_rule(attr: str) -> ColumnRule:
    def rule(ctx: RuleContext):
        pools = build_pools(ctx.seed)
        values = getattr(pools, attr)
        return ctx.parallel(lambda rng, n: values[rng.integers(0, len(values), size=n)])

    return rule


def _int_rule(ctx: RuleContext):
    return ctx.parallel(lambda rng, n: rng.integers(0, 1_000_000, size=n, dtype=np.int64))


def _float_rule(ctx: RuleContext):
    return ctx.parallel(lambda rng, n: rng.uniform(0.0, 1000.0, size=n))


def _bool_rule(ctx: RuleContext):
    return ctx.parallel(lambda rng, n: rng.random(n) < 0.5)


def _date_rule(ctx: RuleContext):
    return ctx.parallel(
        lambda rng, n: [d.isoformat() for d in random_dates(rng, n, 1950, ctx.year + 1)]
    )


GENERIC_TYPES: Dict[str, Callable[[RuleContext], object]] = {
    "string": _pool_rule("words"),
    "int": _int_rule,
    "integer": _int_rule,
    "float": _float_rule,
    "date": _date_rule,
    "bool": _bool_rule,
    "boolean": _bool_rule,
    "name": _pool_rule("names"),
    "address": _pool_rule("addresses"),
    "text": _pool_rule("sentences"),
}


def get_generic_rule(type_name: Optional[str]) -> Optional[ColumnRule]:
    if not type_name:
        return None
    return GENERIC_TYPES.get(type_name.lower())
