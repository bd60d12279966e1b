"""
Parquet dataset IO.

Single-file datasets are written as one Parquet file. Partitioned datasets
are written as numbered part files under a `dataset=<id>` directory:

    <base_dir>/dataset=0/part-00000.parquet
    <base_dir>/dataset=0/part-00001.parquet
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Union

import duckdb
import pyarrow as pa
import pyarrow.parquet as pq

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def ensure_dir(path: PathLike) -> None:
    os.makedirs(path, exist_ok=True)


def dataset_dir(base_dir: PathLike, dataset_id: str = "0") -> Path:
    return Path(base_dir) / f"dataset={dataset_id}"


def part_file_name(index: int) -> str:
    return f"part-{index:05d}.parquet"


def write_single(table: pa.Table, path: PathLike) -> Path:
    """Write a table to one Parquet file, creating parent directories."""
    path = Path(path)
    ensure_dir(path.parent)
    pq.write_table(table, path)
    logger.info(
        f"Wrote {table.num_rows} rows to {path}",
        extra={"row_count": table.num_rows, "files": 1},
    )
    return path


def cleanup_dataset_files(directory: PathLike) -> int:
    """Delete Parquet files directly inside `directory`; returns how many were removed."""
    directory = Path(directory)
    if not directory.is_dir():
        return 0
    removed = 0
    for entry in directory.iterdir():
        if entry.is_file() and entry.suffix == ".parquet":
            entry.unlink()
            removed += 1
    return removed


def write_partitioned(
    table: pa.Table, base_dir: PathLike, chunk_size: int, dataset_id: str = "0"
) -> List[Path]:
    """
    Write a table as `chunk_size`-row part files.

    Existing part files for the dataset are removed first so a rerun leaves
    exactly the parts of the latest write.

    Raises:
        ValueError: If chunk_size is less than 1
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

    out_dir = dataset_dir(base_dir, dataset_id)
    ensure_dir(out_dir)
    removed = cleanup_dataset_files(out_dir)
    if removed:
        logger.debug(f"Removed {removed} stale part files from {out_dir}")

    paths = []
    for part, offset in enumerate(range(0, table.num_rows, chunk_size)):
        path = out_dir / part_file_name(part)
        pq.write_table(table.slice(offset, chunk_size), path)
        paths.append(path)

    logger.info(
        f"Wrote {table.num_rows} rows in {len(paths)} parts to {out_dir}",
        extra={"row_count": table.num_rows, "files": len(paths)},
    )
    return paths


def read_single(path: PathLike) -> pa.Table:
    return pq.read_table(path)


def read_partitioned(base_dir: PathLike) -> pa.Table:
    """
    Read every Parquet file under `base_dir` (recursively, in path order).

    Raises:
        ValueError: If no Parquet files are found
    """
    files = sorted(Path(base_dir).rglob("*.parquet"))
    if not files:
        raise ValueError(f"No parquet files found under {base_dir}")
    # Tables are read file by file so hive-style directory names do not become columns
    return pa.concat_tables([pq.read_table(f) for f in files])


def read_input(path: PathLike) -> pa.Table:
    """
    Read a Parquet file or a directory of Parquet files.

    Raises:
        ValueError: If the path is neither a file nor a directory
    """
    path = Path(path)
    if path.is_dir():
        return read_partitioned(path)
    if path.is_file():
        return read_single(path)
    raise ValueError(f"Input path is neither a file nor a directory: {path}")


def summarize(table: pa.Table) -> List[Dict[str, Any]]:
    """Per-column statistics from DuckDB's SUMMARIZE."""
    conn = duckdb.connect(":memory:")
    try:
        conn.register("input_table", table)
        cursor = conn.execute("SUMMARIZE input_table")
        names = [d[0] for d in cursor.description]
        return [dict(zip(names, row)) for row in cursor.fetchall()]
    finally:
        conn.close()
