"""
End-to-end tests for GenerationRunner and the inspect mode.
"""

import os
import sys
from pathlib import Path

import pyarrow.parquet as pq
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cdef_core.runner import (
    GenerationRunner,
    RunConfig,
    partition_base_dir,
    run_inspect,
    single_file_path,
)

SMALL_COHORT = (5, 10)


def small_config(tmp_path, **overrides) -> RunConfig:
    settings = {
        "registers": ["bef"],
        "years": (2000, 2001),
        "rows": 40,
        "workers": 2,
        "output": str(tmp_path / "out"),
        "seed": 7,
        "births_per_year": SMALL_COHORT,
    }
    settings.update(overrides)
    return RunConfig(**settings)


# ============================================================
# RunConfig
# ============================================================


class TestRunConfig:
    def test_layout_normalized(self, tmp_path):
        assert small_config(tmp_path, layout="PARTITIONED").layout == "partitioned"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"registers": []},
            {"years": (2002, 2000)},
            {"rows": 0},
            {"workers": 0},
            {"layout": "sharded"},
            {"min_parent_age": 40, "max_parent_age": 30},
        ],
    )
    def test_invalid(self, tmp_path, overrides):
        with pytest.raises(ValueError):
            small_config(tmp_path, **overrides)

    def test_year_list_and_chunk_size(self, tmp_path):
        config = small_config(tmp_path, years=(2000, 2003), rows=10, workers=3)
        assert config.year_list == [2000, 2001, 2002, 2003]
        assert config.chunk_size == 3


def test_output_paths():
    assert single_file_path("out", "bef", 2020) == Path("out/bef/202012.parquet")
    assert single_file_path("out", "akm", 2020) == Path("out/akm/2020.parquet")
    assert partition_base_dir("out", "akm", 2020) == Path("out/akm/2020")


# ============================================================
# Generation
# ============================================================


class TestGenerationRunner:
    def test_single_layout(self, tmp_path):
        config = small_config(tmp_path, registers=["bef", "akm"])
        result = GenerationRunner(config).run()

        assert result.status == "SUCCESS"
        assert result.error is None
        assert len(result.units) == 4
        assert result.rows_written == 160
        out = tmp_path / "out"
        for name in ("bef/200012.parquet", "bef/200112.parquet", "akm/2000.parquet", "akm/2001.parquet"):
            assert (out / name).exists()
        assert pq.read_table(out / "bef" / "200012.parquet").num_rows == 40
        assert result.persons > 0

    def test_partitioned_layout(self, tmp_path):
        config = small_config(tmp_path, registers=["akm"], years=(2010, 2010), layout="partitioned")
        result = GenerationRunner(config).run()

        assert result.status == "SUCCESS"
        part_dir = tmp_path / "out" / "akm" / "2010" / "dataset=0"
        parts = sorted(p.name for p in part_dir.glob("*.parquet"))
        assert parts == ["part-00000.parquet", "part-00001.parquet"]
        assert len(result.files) == 2

    def test_pnrs_consistent_across_registers(self, tmp_path):
        config = small_config(tmp_path, registers=["bef", "lpr_adm", "lpr_diag"], years=(2005, 2005))
        runner = GenerationRunner(config)
        result = runner.run()
        assert result.status == "SUCCESS"

        out = tmp_path / "out"
        adm = pq.read_table(out / "lpr_adm" / "2005.parquet").to_pydict()
        diag = pq.read_table(out / "lpr_diag" / "2005.parquet").to_pydict()
        assert all(pnr in runner.identity.persons for pnr in adm["PNR"])
        assert set(diag["RECNUM"]) <= set(adm["RECNUM"])
        assert result.contacts == len(set(adm["RECNUM"]))

    def test_contact_consumer_before_owner_fails(self, tmp_path):
        config = small_config(tmp_path, registers=["lpr_diag", "lpr_adm"])
        result = GenerationRunner(config).run()
        assert result.status == "FAILED"
        assert "Contact pool is empty" in result.error
        assert not (tmp_path / "out" / "lpr_adm").exists()

    def test_missing_schema_fails_before_writing(self, tmp_path):
        config = small_config(tmp_path, registers=["bef", "nosuch"])
        result = GenerationRunner(config).run()
        assert result.status == "FAILED"
        assert "nosuch" in result.error
        assert result.units == []
        assert not (tmp_path / "out").exists()

    def test_failure_is_logged(self, tmp_path, caplog):
        config = small_config(tmp_path, registers=["nosuch"])
        with caplog.at_level("ERROR"):
            GenerationRunner(config).run()
        assert any("Generation run failed" in r.getMessage() for r in caplog.records)


# ============================================================
# Inspect mode
# ============================================================


class TestRunInspect:
    @pytest.fixture
    def dataset(self, tmp_path):
        config = small_config(tmp_path, registers=["akm"], years=(2000, 2000), rows=20)
        GenerationRunner(config).run()
        return tmp_path / "out" / "akm" / "2000.parquet"

    def test_reports_schema_and_summary(self, dataset):
        result = run_inspect(str(dataset))
        assert result.num_rows == 20
        assert "PNR" in result.schema.names
        assert [row["column_name"] for row in result.summary] == result.schema.names
        assert result.files == []

    def test_repartition(self, dataset, tmp_path):
        result = run_inspect(
            str(dataset), output=str(tmp_path / "repart"), layout="partitioned", workers=4
        )
        assert len(result.files) == 4
        assert run_inspect(str(tmp_path / "repart")).num_rows == 20

    def test_rewrite_single(self, dataset, tmp_path):
        target = tmp_path / "copy.parquet"
        result = run_inspect(str(dataset), output=str(target))
        assert result.files == [str(target)]
        assert pq.read_table(target).num_rows == 20

    def test_bad_input(self, tmp_path):
        with pytest.raises(ValueError):
            run_inspect(str(tmp_path / "missing"))
