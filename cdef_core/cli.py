"""
Command-line interface for the CDEF register data generator.

Generates synthetic Danish register extracts (BEF, AKM, IDAN, IND, UDDF,
LPR2, LPR3) as Parquet, or inspects and re-partitions existing datasets.
"""

import argparse
import os
import sys
from typing import Optional

from cdef_core.logger_utils import configure_logging


def main(args: Optional[list] = None) -> int:
    """Main CLI entry point."""
    # Configure logging (defaults to text, JSON if CDEF_JSON_LOGS=1)
    configure_logging()

    parser = argparse.ArgumentParser(
        prog="cdef",
        description="CDEF synthetic register data generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Population plus hospital admissions and diagnoses, 2000-2002
    cdef generate --registers bef lpr_adm lpr_diag --years 2000-2002 --rows 10000 --output ./out

    # Partitioned output on 4 threads
    cdef generate --registers akm --years 2015 --rows 100000 --threads 4 --layout partitioned

    # Inspect an existing dataset and re-partition it
    cdef inspect --input ./out/akm/2015 --output ./repart --layout partitioned --threads 4

    # Validate configuration
    cdef config validate --file=config.yaml
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # === cdef version ===
    subparsers.add_parser("version", help="Show version info")

    # === cdef generate ===
    gen_parser = subparsers.add_parser("generate", help="Generate register datasets")
    gen_parser.add_argument(
        "--registers", "-r", nargs="+", help="Registers to generate, in dependency order"
    )
    gen_parser.add_argument("--years", "-y", help="Year range START-END or a single YEAR")
    gen_parser.add_argument("--rows", "-n", type=int, help="Rows per register and year")
    gen_parser.add_argument("--threads", "-t", type=int, help="Worker threads")
    gen_parser.add_argument("--output", "-o", help="Output directory")
    gen_parser.add_argument("--layout", choices=["single", "partitioned"], help="Output layout")
    gen_parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    gen_parser.add_argument("--config", help="YAML configuration file")
    gen_parser.add_argument("--schema-dir", help="Directory with <register>.json schemas")
    gen_parser.add_argument("--min-parent-age", type=int, help="Youngest parent age at birth")
    gen_parser.add_argument("--max-parent-age", type=int, help="Oldest parent age at birth")
    gen_parser.add_argument(
        "--births-per-year", help="Cohort size range LOW-HIGH (default: 55000-65000)"
    )
    gen_parser.add_argument(
        "--input", "-i", help="Read an existing dataset instead of generating (inspect mode)"
    )

    # === cdef inspect ===
    inspect_parser = subparsers.add_parser("inspect", help="Inspect or re-partition a dataset")
    inspect_parser.add_argument("--input", "-i", help="Parquet file or directory")
    inspect_parser.add_argument("--output", "-o", help="Re-write the dataset here")
    inspect_parser.add_argument(
        "--layout", choices=["single", "partitioned"], default="single", help="Output layout"
    )
    inspect_parser.add_argument("--rows", "-n", type=int, help="Rows used to size partitions")
    inspect_parser.add_argument("--threads", "-t", type=int, default=1, help="Worker threads")

    # === cdef config ===
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_cmd")

    validate_parser = config_subparsers.add_parser("validate", help="Validate config file")
    validate_parser.add_argument("--file", "-f", required=True, help="YAML config file")

    # Parse arguments
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 0

    if parsed_args.command == "version":
        from cdef_core import __version__

        print(f"cdef-data-generator v{__version__}")
        return 0

    if parsed_args.command == "config":
        return handle_config(parsed_args)

    if parsed_args.command == "generate":
        return handle_generate(parsed_args)

    if parsed_args.command == "inspect":
        return handle_inspect(parsed_args)

    return 0


def handle_config(args) -> int:
    """Handle config subcommands."""
    from cdef_core.config import load_config

    if args.config_cmd == "validate":
        try:
            load_config(args.file)
            print(f"✅ Configuration valid: {args.file}")
            return 0
        except (FileNotFoundError, ValueError) as e:
            print(f"❌ Configuration invalid: {e}")
            return 1

    return 0


def handle_generate(args) -> int:
    """Handle generate command."""
    from cdef_core.config import build_run_config, load_config, resolve_input_path
    from cdef_core.runner import GenerationRunner

    input_path = resolve_input_path(args.input, os.environ)
    if input_path:
        return _inspect(
            input_path,
            output=args.output,
            layout=args.layout or "single",
            rows=args.rows,
            threads=args.threads or 1,
        )

    try:
        file_config = load_config(args.config) if args.config else None
        config = build_run_config(
            {
                "registers": args.registers,
                "years": args.years,
                "rows": args.rows,
                "threads": args.threads,
                "output": args.output,
                "layout": args.layout,
                "seed": args.seed,
                "schema_dir": args.schema_dir,
                "min_parent_age": args.min_parent_age,
                "max_parent_age": args.max_parent_age,
                "births_per_year": args.births_per_year,
            },
            file_config,
            os.environ,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    result = GenerationRunner(config).run()

    # Print summary
    print(f"\n{'=' * 60}")
    print(f"  Generation Complete - {result.status}")
    print(f"{'=' * 60}")
    print(f"  Run ID:          {result.run_id}")
    print(f"  Tables:          {len(result.units):,}")
    print(f"  Rows:            {result.rows_written:,}")
    print(f"  Files:           {len(result.files):,}")
    print(f"  Persons:         {result.persons:,}")
    print(f"  Contacts:        {result.contacts:,}")
    print(f"  Duration:        {result.duration_seconds:.1f}s")
    if result.error:
        print(f"  Error:           {result.error}")
    print(f"{'=' * 60}\n")

    return 0 if result.status == "SUCCESS" else 1


def handle_inspect(args) -> int:
    """Handle inspect command."""
    from cdef_core.config import resolve_input_path

    input_path = resolve_input_path(args.input, os.environ)
    if not input_path:
        print("Error: no input given (use --input or CDEF_INPUT_PATH)")
        return 1
    return _inspect(input_path, args.output, args.layout, args.rows, args.threads)


def _inspect(
    input_path: str, output: Optional[str], layout: str, rows: Optional[int], threads: int
) -> int:
    from cdef_core.runner import run_inspect

    try:
        result = run_inspect(input_path, output=output, layout=layout, rows=rows, workers=threads)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"\nDataset: {result.input_path}")
    print(f"Rows:    {result.num_rows:,}")
    print("Schema:")
    for schema_field in result.schema:
        print(f"  {schema_field.name}: {schema_field.type}")
    print("Summary:")
    for stats in result.summary:
        print(
            f"  {stats.get('column_name')}: type={stats.get('column_type')} "
            f"min={stats.get('min')} max={stats.get('max')} "
            f"unique~{stats.get('approx_unique')} null%={stats.get('null_percentage')}"
        )
    if result.files:
        print(f"Wrote {len(result.files)} file(s) to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
