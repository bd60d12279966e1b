"""
Table synthesis: one pyarrow Table per (register, year).

Columns are generated in schema order through the register rule table,
falling back to generic typed generators. Identity-bearing columns go
through the shared IdentityContext on the calling thread; plain value
columns fan out over a thread pool.
"""

import logging
import zlib
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
import pyarrow as pa

from .generic import get_generic_rule
from .identity import IdentityContext
from .registers import RuleContext, get_rule
from .schema_manager import ColumnDef, RegisterSchema

logger = logging.getLogger(__name__)


def table_rng(seed: Optional[int], register: str, year: int) -> np.random.Generator:
    """Per-table generator; seeded runs give the same table regardless of register order."""
    if seed is None:
        return np.random.default_rng()
    return np.random.default_rng([seed, year, zlib.crc32(register.encode("utf-8"))])


def to_arrow(values) -> pa.Array:
    if isinstance(values, pa.Array):
        return values
    return pa.array(values)


class ColumnSynthesizer:
    """
    Builds register tables against a shared identity context.

    Example:
        identity = IdentityContext.create(seed=7, births_per_year=(200, 300))
        synth = ColumnSynthesizer(identity, workers=4, seed=7)
        table = synth.synthesize(schema_manager.load("bef"), year=2020, rows=1000)
    """

    def __init__(self, identity: IdentityContext, workers: int = 1, seed: Optional[int] = None):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.identity = identity
        self.workers = workers
        self.seed = seed

    def resolve_rule(self, ruleset: str, column: ColumnDef):
        """
        Find the generator for a column.

        Raises:
            ValueError: If neither a register rule nor a generic type applies
        """
        rule = get_rule(ruleset, column.name)
        if rule is None:
            rule = get_generic_rule(column.type)
        if rule is None:
            raise ValueError(
                f"Unsupported column '{column.name}' for register ruleset '{ruleset}'"
                + (f" (type '{column.type}')" if column.type else "")
            )
        return rule

    def synthesize(self, schema: RegisterSchema, year: int, rows: int) -> pa.Table:
        if rows < 0:
            raise ValueError(f"rows must be >= 0, got {rows}")

        ruleset = schema.ruleset
        # Fail before touching the pools if any column is unsupported
        rules = [(col, self.resolve_rule(ruleset, col)) for col in schema.columns]

        rng = table_rng(self.seed, schema.register, year)
        cache: dict = {}
        arrays = []
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            for col, rule in rules:
                ctx = RuleContext(
                    register=schema.register,
                    ruleset=ruleset,
                    year=year,
                    rows=rows,
                    column=col.name,
                    identity=self.identity,
                    rng=rng,
                    workers=self.workers,
                    executor=executor,
                    seed=self.seed,
                    cache=cache,
                )
                values = rule(ctx)
                if len(values) != rows:
                    raise RuntimeError(
                        f"Rule for column '{col.name}' produced {len(values)} values, expected {rows}"
                    )
                arrays.append(to_arrow(values))
                logger.debug(
                    f"Generated column {col.name}",
                    extra={"register": schema.register, "year": year, "column": col.name},
                )

        return pa.Table.from_arrays(arrays, names=schema.column_names)
