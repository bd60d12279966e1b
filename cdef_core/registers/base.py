"""
Column rule infrastructure.

Rules are looked up by (ruleset, column name). A rule receives a RuleContext
and returns one value per row (numpy array or list). Value rules that do not
touch the identity pools are split into per-worker chunks, each chunk with
its own numpy Generator.
"""

from concurrent.futures import Executor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..identity import IdentityContext
from ..mappings import mapping_codes

Values = Union[np.ndarray, List[Any]]
ChunkFn = Callable[[np.random.Generator, int], Values]


@dataclass
class RuleContext:
    """Everything a column rule needs for one (register, year, column)."""

    register: str
    ruleset: str
    year: int
    rows: int
    column: str
    identity: IdentityContext
    rng: np.random.Generator
    workers: int = 1
    executor: Optional[Executor] = None
    seed: Optional[int] = None
    # Shared across the columns of one table (identity backbone, spouses, ...)
    cache: Dict[str, Any] = field(default_factory=dict)

    def parallel(self, chunk_fn: ChunkFn) -> Values:
        """Generate `rows` values in per-worker chunks and concatenate them."""
        sizes = split_rows(self.rows, self.workers)
        seeds = self.rng.integers(0, 2**32, size=len(sizes))
        rngs = [np.random.default_rng(int(seed)) for seed in seeds]
        if self.executor is None or len(sizes) == 1:
            parts = [chunk_fn(chunk_rng, n) for chunk_rng, n in zip(rngs, sizes)]
        else:
            parts = list(self.executor.map(chunk_fn, rngs, sizes))
        return concat_values(parts)

    def cached(self, key: str, build: Callable[[], Any]) -> Any:
        if key not in self.cache:
            self.cache[key] = build()
        return self.cache[key]


ColumnRule = Callable[[RuleContext], Values]

RULES: Dict[Tuple[str, str], ColumnRule] = {}


def register_rule(rulesets: Union[str, Iterable[str]], *columns: str):
    """Decorator registering a rule for one or more columns of one or more rulesets."""
    if isinstance(rulesets, str):
        rulesets = [rulesets]
    rulesets = list(rulesets)

    def decorator(fn: ColumnRule) -> ColumnRule:
        for ruleset in rulesets:
            for column in columns:
                RULES[(ruleset, column)] = fn
        return fn

    return decorator


def define_rules(
    rulesets: Union[str, Iterable[str]], table: Dict[Tuple[str, ...], ColumnRule]
) -> None:
    """Register a table of {(column, ...): rule} entries."""
    for columns, rule in table.items():
        register_rule(rulesets, *columns)(rule)


def get_rule(ruleset: str, column: str) -> Optional[ColumnRule]:
    return RULES.get((ruleset, column))


# ===== Chunking helpers =====


def split_rows(rows: int, workers: int) -> List[int]:
    """Split `rows` into at most `workers` near-equal non-empty chunks."""
    workers = max(1, int(workers))
    if rows <= 0:
        return [0]
    chunks = min(workers, rows)
    base, extra = divmod(rows, chunks)
    return [base + (1 if i < extra else 0) for i in range(chunks)]


def concat_values(parts: Sequence[Values]) -> Values:
    if parts and all(isinstance(part, np.ndarray) for part in parts):
        return np.concatenate(parts)
    out: List[Any] = []
    for part in parts:
        out.extend(part.tolist() if isinstance(part, np.ndarray) else part)
    return out


# ===== Value rule builders =====


def choice(values: Sequence[Any]) -> ColumnRule:
    """Uniform choice from a fixed list of values."""
    pool = np.array(list(values), dtype=object)

    def rule(ctx: RuleContext) -> Values:
        return ctx.parallel(lambda rng, n: pool[rng.integers(0, len(pool), size=n)])

    return rule


def integers(low: int, high: int, dtype=np.int32) -> ColumnRule:
    """Uniform integers in [low, high)."""

    def rule(ctx: RuleContext) -> Values:
        return ctx.parallel(lambda rng, n: rng.integers(low, high, size=n).astype(dtype))

    return rule


def padded(low: int, high: int, width: int) -> ColumnRule:
    """Uniform integers in [low, high) rendered as zero-padded strings."""

    def rule(ctx: RuleContext) -> Values:
        return ctx.parallel(
            lambda rng, n: [f"{v:0{width}d}" for v in rng.integers(low, high, size=n).tolist()]
        )

    return rule


def uniform(low: float, high: float) -> ColumnRule:
    def rule(ctx: RuleContext) -> Values:
        return ctx.parallel(lambda rng, n: rng.uniform(low, high, size=n))

    return rule


def flag(probability: float, true_value: Any = "1", false_value: Any = "0") -> ColumnRule:
    def rule(ctx: RuleContext) -> Values:
        return ctx.parallel(
            lambda rng, n: [true_value if hit else false_value for hit in rng.random(n) < probability]
        )

    return rule


MONTH_ABBR = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")


def format_date(value: date, fmt: str) -> str:
    """Format a date; 'sas' renders the 05MAR2015 style used by LPR3 extracts."""
    if fmt == "sas":
        return f"{value.day:02d}{MONTH_ABBR[value.month - 1]}{value.year:04d}"
    return value.strftime(fmt)


def random_dates(rng: np.random.Generator, n: int, low_year: int, high_year: int) -> List[date]:
    """Dates with year in [low_year, high_year), month 1-12 and day 1-28."""
    years = rng.integers(low_year, high_year, size=n).tolist()
    months = rng.integers(1, 13, size=n).tolist()
    days = rng.integers(1, 29, size=n).tolist()
    return [date(y, m, d) for y, m, d in zip(years, months, days)]


def dates(low_year: int, high_year: int, fmt: str = "%Y-%m-%d") -> ColumnRule:
    def rule(ctx: RuleContext) -> Values:
        return ctx.parallel(
            lambda rng, n: [format_date(d, fmt) for d in random_dates(rng, n, low_year, high_year)]
        )

    return rule


def times() -> ColumnRule:
    """HH:MM:SS strings."""

    def rule(ctx: RuleContext) -> Values:
        def chunk(rng: np.random.Generator, n: int) -> List[str]:
            hours = rng.integers(0, 24, size=n).tolist()
            minutes = rng.integers(0, 60, size=n).tolist()
            seconds = rng.integers(0, 60, size=n).tolist()
            return [f"{h:02d}:{m:02d}:{s:02d}" for h, m, s in zip(hours, minutes, seconds)]

        return ctx.parallel(chunk)

    return rule


def mapping_choice(name: str) -> ColumnRule:
    """Uniform choice among the codes of a mapping table."""

    def rule(ctx: RuleContext) -> Values:
        codes = mapping_codes(name)
        if all(isinstance(code, int) for code in codes):
            pool = np.array(codes, dtype=np.int32)
        else:
            pool = np.array(codes, dtype=object)
        return ctx.parallel(lambda rng, n: pool[rng.integers(0, len(pool), size=n)])

    return rule
