"""
Generation runner.

Iterates registers x years against one IdentityContext so person and
contact identifiers stay consistent across every table written in a run.
Registers are processed in the order given: registers that reference
contacts (lpr_diag, lpr_bes, lpr3_diagnoser) must come after the register
that creates them (lpr_adm, lpr3_kontakter).
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pyarrow as pa

from . import io
from .identity import IdentityContext
from .identity.person_pool import (
    DEFAULT_BIRTHS_PER_YEAR,
    DEFAULT_MAX_PARENT_AGE,
    DEFAULT_MIN_PARENT_AGE,
)
from .logger_utils import get_logger
from .schema_manager import SchemaManager
from .synthesizer import ColumnSynthesizer

LAYOUTS = ("single", "partitioned")

# Registers published as December snapshots (<year>12.parquet)
MONTHLY_SNAPSHOT_REGISTERS = frozenset({"bef"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunConfig:
    """Configuration for a generation run."""

    registers: List[str] = field(default_factory=list)
    years: Tuple[int, int] = (2000, 2000)
    rows: int = 1000
    workers: int = 1
    output: str = "output"
    layout: str = "single"
    seed: Optional[int] = None
    schema_dir: Optional[str] = None
    min_parent_age: int = DEFAULT_MIN_PARENT_AGE
    max_parent_age: int = DEFAULT_MAX_PARENT_AGE
    births_per_year: Tuple[int, int] = DEFAULT_BIRTHS_PER_YEAR

    def __post_init__(self):
        if not self.registers:
            raise ValueError("At least one register is required")
        start, end = self.years
        if start > end:
            raise ValueError(f"Invalid year range: {start}-{end}")
        if self.rows < 1:
            raise ValueError(f"rows must be >= 1, got {self.rows}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        layout = str(self.layout or "").lower()
        if layout not in LAYOUTS:
            raise ValueError(f"Invalid layout: {self.layout}")
        self.layout = layout
        if self.min_parent_age < 0 or self.max_parent_age < self.min_parent_age:
            raise ValueError(
                f"Invalid parent age window: [{self.min_parent_age}, {self.max_parent_age}]"
            )

    @property
    def year_list(self) -> List[int]:
        return list(range(self.years[0], self.years[1] + 1))

    @property
    def chunk_size(self) -> int:
        return max(1, self.rows // self.workers)


@dataclass
class UnitMetric:
    """One written (register, year) table."""

    register: str
    year: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    rows: int = 0
    files: List[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.ended_at:
            return (self.ended_at - self.started_at).total_seconds()
        return 0.0


@dataclass
class RunResult:
    """Result of a generation run."""

    run_id: str
    status: str
    units: List[UnitMetric] = field(default_factory=list)
    rows_written: int = 0
    files: List[str] = field(default_factory=list)
    persons: int = 0
    contacts: int = 0
    duration_seconds: float = 0.0
    error: Optional[str] = None


def single_file_path(output: str, register: str, year: int) -> Path:
    name = f"{year}12.parquet" if register in MONTHLY_SNAPSHOT_REGISTERS else f"{year}.parquet"
    return Path(output) / register / name


def partition_base_dir(output: str, register: str, year: int) -> Path:
    return Path(output) / register / str(year)


class GenerationRunner:
    """
    Runs register generation for a RunConfig.

    Example:
        runner = GenerationRunner(RunConfig(registers=["bef"], years=(2020, 2021), rows=500))
        result = runner.run()
        print(result.status, result.files)
    """

    def __init__(
        self,
        config: RunConfig,
        identity: Optional[IdentityContext] = None,
        schema_manager: Optional[SchemaManager] = None,
    ):
        self.config = config
        self.identity = identity or IdentityContext.create(
            seed=config.seed,
            min_parent_age=config.min_parent_age,
            max_parent_age=config.max_parent_age,
            births_per_year=config.births_per_year,
        )
        self.schema_manager = schema_manager or SchemaManager(config.schema_dir)
        self.synthesizer = ColumnSynthesizer(
            self.identity, workers=config.workers, seed=config.seed
        )
        self.run_id: Optional[str] = None
        self._units: List[UnitMetric] = []
        self.logger = get_logger("GenerationRunner")

    def run(self) -> RunResult:
        """Generate every register for every year; any failure aborts the run."""
        config = self.config
        self.run_id = f"run_{uuid.uuid4().hex[:12]}"
        self._units = []
        start_time = _now()

        self.logger.info(
            f"Starting generation of {len(config.registers)} registers for "
            f"{config.years[0]}-{config.years[1]}",
            extra={"run_id": self.run_id, "event": "run_start", "rows": config.rows},
        )

        try:
            # Load every schema up front so a missing one fails before writing anything
            schemas = {register: self.schema_manager.load(register) for register in config.registers}

            for register in config.registers:
                for year in config.year_list:
                    self._generate_unit(schemas[register], year)

            return self._complete_run(start_time, status="SUCCESS")

        except Exception as e:
            self.logger.error(
                f"Generation run failed: {e}",
                exc_info=True,
                extra={"run_id": self.run_id, "event": "run_failed", "error": str(e)},
            )
            return self._complete_run(start_time, status="FAILED", error=str(e))

    def _generate_unit(self, schema, year: int) -> UnitMetric:
        config = self.config
        metric = UnitMetric(register=schema.register, year=year, started_at=_now())
        self._units.append(metric)
        self.logger.info(
            f"Generating {schema.register} {year}",
            extra={
                "run_id": self.run_id,
                "event": "unit_start",
                "register": schema.register,
                "year": year,
            },
        )

        table = self.synthesizer.synthesize(schema, year, config.rows)
        if config.layout == "partitioned":
            paths = io.write_partitioned(
                table,
                partition_base_dir(config.output, schema.register, year),
                config.chunk_size,
            )
        else:
            paths = [io.write_single(table, single_file_path(config.output, schema.register, year))]

        metric.ended_at = _now()
        metric.rows = table.num_rows
        metric.files = [str(p) for p in paths]
        self.logger.info(
            f"Finished {schema.register} {year}",
            extra={
                "run_id": self.run_id,
                "event": "unit_complete",
                "register": schema.register,
                "year": year,
                "row_count": metric.rows,
                "files": len(paths),
                "duration_seconds": metric.duration_seconds,
            },
        )
        return metric

    def _complete_run(
        self, start_time: datetime, status: str = "SUCCESS", error: Optional[str] = None
    ) -> RunResult:
        duration = (_now() - start_time).total_seconds()
        persons = len(self.identity.persons)
        contacts = len(self.identity.contacts)
        files = [f for unit in self._units for f in unit.files]
        rows_written = sum(unit.rows for unit in self._units)

        self.logger.info(
            f"Run finished with status: {status}",
            extra={
                "run_id": self.run_id,
                "event": "run_complete",
                "status": status,
                "duration_seconds": duration,
                "row_count": rows_written,
                "files": len(files),
                "persons": persons,
                "contacts": contacts,
                "error": error,
            },
        )

        return RunResult(
            run_id=self.run_id,
            status=status,
            units=list(self._units),
            rows_written=rows_written,
            files=files,
            persons=persons,
            contacts=contacts,
            duration_seconds=duration,
            error=error,
        )


# ===== Read mode =====


@dataclass
class InspectResult:
    """What was found in (and optionally re-written from) an input dataset."""

    input_path: str
    num_rows: int
    schema: pa.Schema
    summary: List[Dict[str, Any]] = field(default_factory=list)
    files: List[str] = field(default_factory=list)


def run_inspect(
    input_path: str,
    output: Optional[str] = None,
    layout: str = "single",
    rows: Optional[int] = None,
    workers: int = 1,
) -> InspectResult:
    """
    Read an existing dataset, summarize it and optionally re-write it.

    With the partitioned layout the chunk size is rows // workers, where
    rows defaults to the input's row count.

    Raises:
        ValueError: If the input path is unusable or the layout is unknown
    """
    logger = get_logger("run_inspect")
    if layout not in LAYOUTS:
        raise ValueError(f"Invalid layout: {layout}")
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    table = io.read_input(input_path)
    logger.info(
        f"Read {table.num_rows} rows from {input_path}",
        extra={"event": "input_read", "row_count": table.num_rows},
    )
    result = InspectResult(
        input_path=str(input_path),
        num_rows=table.num_rows,
        schema=table.schema,
        summary=io.summarize(table),
    )

    if output:
        if layout == "partitioned":
            chunk_size = max(1, (rows or table.num_rows) // workers)
            paths = io.write_partitioned(table, output, chunk_size)
        else:
            paths = [io.write_single(table, output)]
        result.files = [str(p) for p in paths]

    return result
