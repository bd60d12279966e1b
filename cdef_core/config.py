"""
Configuration loading for generation runs.

Settings come from four places, highest precedence first: command line
arguments, a YAML config file, CDEF_* environment variables, built-in
defaults. A config file looks like:

    registers: [bef, akm, lpr_adm, lpr_diag]
    years: 2000-2002
    rows: 10000
    threads: 4
    output: ./output
    layout: partitioned
    seed: 42
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .identity.person_pool import DEFAULT_MAX_PARENT_AGE, DEFAULT_MIN_PARENT_AGE
from .runner import LAYOUTS, RunConfig

# Config key -> environment variable
ENV_VARS = {
    "registers": "CDEF_REGISTERS",
    "years": "CDEF_YEARS",
    "rows": "CDEF_NUM_ROWS",
    "threads": "CDEF_THREADS",
    "output": "CDEF_OUTPUT_PATH",
    "schema_dir": "CDEF_SCHEMA_DIR",
}
INPUT_ENV_VAR = "CDEF_INPUT_PATH"

DEFAULTS: Dict[str, Any] = {
    "rows": 1000,
    "threads": 1,
    "output": "output",
    "layout": "single",
}

KNOWN_KEYS = frozenset(
    {
        "registers",
        "years",
        "rows",
        "threads",
        "output",
        "layout",
        "seed",
        "schema_dir",
        "min_parent_age",
        "max_parent_age",
        "births_per_year",
    }
)

_YEAR_RANGE_RE = re.compile(r"^\s*(\d{4})\s*(?:-\s*(\d{4})\s*)?$")
_COUNT_RANGE_RE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


def parse_year_range(value: Any) -> Tuple[int, int]:
    """
    Parse "START-END" or a single "YEAR" into an inclusive (start, end) pair.

    Raises:
        ValueError: If the value is malformed or START > END
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid year range: '{value}'")
    if isinstance(value, int):
        return value, value
    if isinstance(value, (list, tuple)) and len(value) == 2:
        start, end = (validate_integer(v, "year") for v in value)
    else:
        match = _YEAR_RANGE_RE.match(str(value))
        if not match:
            raise ValueError(f"Invalid year range: '{value}'. Expected START-END or YEAR")
        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) else start
    if start > end:
        raise ValueError(f"Invalid year range: start {start} is after end {end}")
    return start, end


def parse_registers(value: Any) -> List[str]:
    """Accept a list or a comma/space separated string of register names."""
    if isinstance(value, (list, tuple)):
        value = ",".join(str(v) for v in value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid registers: '{value}'")
    names = re.split(r"[,\s]+", value)
    names = [n.strip().lower() for n in names if n and n.strip()]
    if not names:
        raise ValueError("At least one register must be given")
    return names


def parse_count_range(value: Any, name: str = "range") -> Tuple[int, int]:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        low, high = (validate_integer(v, name) for v in value)
    else:
        match = _COUNT_RANGE_RE.match(str(value))
        if not match:
            raise ValueError(f"Invalid {name}: '{value}'. Expected LOW-HIGH")
        low, high = int(match.group(1)), int(match.group(2))
    if low < 0 or high < low:
        raise ValueError(f"Invalid {name}: [{low}, {high}]")
    return low, high


def validate_integer(value, name: str = "value") -> int:
    """
    Coerce a value to int.

    Raises:
        ValueError: If value cannot be converted
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid integer for {name}: '{value}'")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: '{value}'")


def validate_positive_int(value, name: str = "value") -> int:
    result = validate_integer(value, name)
    if result < 1:
        raise ValueError(f"{name} must be >= 1, got {result}")
    return result


def load_config(path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    validate_config(config)
    return config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure.

    Raises:
        ValueError: If configuration is invalid
    """
    if not config:
        raise ValueError("Configuration cannot be empty")
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a mapping")

    unknown = sorted(set(config) - KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    if "registers" in config:
        parse_registers(config["registers"])
    if "years" in config:
        parse_year_range(config["years"])
    for key in ("rows", "threads"):
        if key in config:
            validate_positive_int(config[key], key)
    if "seed" in config and config["seed"] is not None:
        validate_integer(config["seed"], "seed")
    if "layout" in config and config["layout"] not in LAYOUTS:
        raise ValueError(f"Invalid layout '{config['layout']}'. Expected one of {LAYOUTS}")
    if "births_per_year" in config:
        parse_count_range(config["births_per_year"], "births_per_year")

    # Absent bounds take the same defaults RunConfig fills in
    min_age = validate_integer(
        config.get("min_parent_age", DEFAULT_MIN_PARENT_AGE), "min_parent_age"
    )
    max_age = validate_integer(
        config.get("max_parent_age", DEFAULT_MAX_PARENT_AGE), "max_parent_age"
    )
    if max_age < min_age:
        raise ValueError(
            f"max_parent_age ({max_age}) must not be less than min_parent_age ({min_age})"
        )

    return True


def env_config(environ: Mapping[str, str]) -> Dict[str, str]:
    """Settings taken from CDEF_* environment variables (empty values ignored)."""
    config = {}
    for key, var in ENV_VARS.items():
        value = environ.get(var)
        if value:
            config[key] = value
    return config


def resolve_input_path(cli_value: Optional[str], environ: Mapping[str, str]) -> Optional[str]:
    return cli_value or environ.get(INPUT_ENV_VAR) or None


def build_run_config(
    cli_args: Optional[Dict[str, Any]] = None,
    file_config: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfig:
    """
    Merge settings into a validated RunConfig.

    Precedence: CLI > config file > environment > defaults. CLI values of
    None count as "not given".

    Raises:
        ValueError: If a required setting is missing or any value is invalid
    """
    layers = [
        {k: v for k, v in (cli_args or {}).items() if v is not None},
        file_config or {},
        env_config(environ or {}),
        DEFAULTS,
    ]

    def pick(key: str) -> Any:
        for layer in layers:
            if key in layer:
                return layer[key]
        return None

    registers = pick("registers")
    if registers is None:
        raise ValueError(f"No registers given (use --registers or {ENV_VARS['registers']})")
    years = pick("years")
    if years is None:
        raise ValueError(f"No years given (use --years or {ENV_VARS['years']})")

    kwargs: Dict[str, Any] = {
        "registers": parse_registers(registers),
        "years": parse_year_range(years),
        "rows": validate_positive_int(pick("rows"), "rows"),
        "workers": validate_positive_int(pick("threads"), "threads"),
        "output": str(pick("output")),
        "layout": pick("layout"),
    }

    seed = pick("seed")
    if seed is not None:
        kwargs["seed"] = validate_integer(seed, "seed")
    if pick("schema_dir"):
        kwargs["schema_dir"] = str(pick("schema_dir"))
    for key in ("min_parent_age", "max_parent_age"):
        if pick(key) is not None:
            kwargs[key] = validate_integer(pick(key), key)
    if pick("births_per_year") is not None:
        kwargs["births_per_year"] = parse_count_range(pick("births_per_year"), "births_per_year")

    return RunConfig(**kwargs)
