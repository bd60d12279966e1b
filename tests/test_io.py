"""
Tests for cdef_core.io: single-file and partitioned Parquet datasets.
"""

import os
import sys

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cdef_core import io


def make_table(rows: int) -> pa.Table:
    return pa.table(
        {
            "PNR": [f"{i:06d}-{i % 10000:04d}" for i in range(rows)],
            "ALDER": pa.array([i % 100 for i in range(rows)], type=pa.int32()),
        }
    )


# ============================================================
# Partitioned writes
# ============================================================


class TestWritePartitioned:
    def test_chunks_into_numbered_parts(self, tmp_path):
        paths = io.write_partitioned(make_table(10_000), tmp_path, 2_500)
        part_dir = tmp_path / "dataset=0"
        assert sorted(p.name for p in part_dir.iterdir()) == [
            "part-00000.parquet",
            "part-00001.parquet",
            "part-00002.parquet",
            "part-00003.parquet",
        ]
        assert [pq.read_metadata(str(p)).num_rows for p in paths] == [2_500] * 4

    def test_rerun_replaces_previous_parts(self, tmp_path):
        io.write_partitioned(make_table(10_000), tmp_path, 2_500)
        io.write_partitioned(make_table(10_000), tmp_path, 2_500)
        assert len(list((tmp_path / "dataset=0").glob("*.parquet"))) == 4

    def test_rerun_with_fewer_parts_purges_stale_files(self, tmp_path):
        io.write_partitioned(make_table(10_000), tmp_path, 1_000)
        io.write_partitioned(make_table(10_000), tmp_path, 5_000)
        assert len(list((tmp_path / "dataset=0").glob("*.parquet"))) == 2

    def test_uneven_last_part(self, tmp_path):
        paths = io.write_partitioned(make_table(10), tmp_path, 4)
        assert [pq.read_metadata(str(p)).num_rows for p in paths] == [4, 4, 2]

    def test_dataset_id(self, tmp_path):
        io.write_partitioned(make_table(5), tmp_path, 5, dataset_id="7")
        assert (tmp_path / "dataset=7" / "part-00000.parquet").exists()

    def test_invalid_chunk_size(self, tmp_path):
        with pytest.raises(ValueError, match="chunk_size"):
            io.write_partitioned(make_table(5), tmp_path, 0)

    def test_cleanup_leaves_other_files(self, tmp_path):
        part_dir = tmp_path / "dataset=0"
        part_dir.mkdir()
        (part_dir / "old.parquet").write_bytes(b"")
        (part_dir / "notes.txt").write_text("keep")
        assert io.cleanup_dataset_files(part_dir) == 1
        assert (part_dir / "notes.txt").exists()

    def test_cleanup_missing_dir(self, tmp_path):
        assert io.cleanup_dataset_files(tmp_path / "nope") == 0


# ============================================================
# Single files and reading
# ============================================================


class TestReadWrite:
    def test_write_single_creates_parents(self, tmp_path):
        path = io.write_single(make_table(3), tmp_path / "bef" / "202012.parquet")
        assert path.exists()
        assert io.read_single(path).num_rows == 3

    def test_read_partitioned_concatenates_in_order(self, tmp_path):
        table = make_table(10)
        io.write_partitioned(table, tmp_path, 3)
        result = io.read_partitioned(tmp_path)
        assert result.column_names == ["PNR", "ALDER"]
        assert result.column("PNR").to_pylist() == table.column("PNR").to_pylist()

    def test_read_partitioned_empty(self, tmp_path):
        with pytest.raises(ValueError, match="No parquet files"):
            io.read_partitioned(tmp_path)

    def test_read_input_dispatch(self, tmp_path):
        single = io.write_single(make_table(4), tmp_path / "one.parquet")
        io.write_partitioned(make_table(6), tmp_path / "many", 2)
        assert io.read_input(single).num_rows == 4
        assert io.read_input(tmp_path / "many").num_rows == 6

    def test_read_input_missing(self, tmp_path):
        with pytest.raises(ValueError, match="neither a file nor a directory"):
            io.read_input(tmp_path / "missing.parquet")


def test_summarize_reports_each_column():
    summary = io.summarize(make_table(50))
    names = [row["column_name"] for row in summary]
    assert names == ["PNR", "ALDER"]
    alder = summary[1]
    assert str(alder["min"]) == "0"
    assert str(alder["max"]) == "49"
