"""
Code -> label lookup tables used by register column rules.

Tables are JSON objects shipped in cdef_core/data/mappings and loaded
once per process.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

MAPPINGS_DIR = Path(__file__).parent / "data" / "mappings"

# Tables whose codes are integers; the rest keep string codes
INTEGER_KEYED = frozenset(
    {
        "fm_mark",
        "hustype",
        "plads",
        "reg",
        "statsb",
        "socio13",
        "jobkat",
        "tilknyt",
        "pre_socio",
        "beskst13",
    }
)

# Stillingskoder (IDAN STILL)
STILL_CODES: List[str] = [
    "01", "02", "03", "04", "05", "11", "12", "13", "14", "19", "20", "31",
    "32", "33", "34", "35", "36", "37", "40", "41", "42", "43", "45", "46",
    "47", "48", "49", "50", "51", "52", "55", "71", "72", "73", "74", "75",
    "76", "77", "90", "91", "92", "93", "94", "95", "96", "97", "98",
]  # fmt: skip


@lru_cache(maxsize=None)
def load_mapping(name: str) -> Dict:
    """
    Load a mapping table by name (file stem).

    Raises:
        FileNotFoundError: If no table with that name is bundled
        ValueError: If the file is not a JSON object
    """
    path = MAPPINGS_DIR / f"{name}.json"
    if not path.exists():
        raise FileNotFoundError(f"Mapping table '{name}' not found at path: {path}")

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Mapping table '{name}' must be a JSON object")

    if name in INTEGER_KEYED:
        return {int(code): label for code, label in raw.items()}
    return dict(raw)


def mapping_codes(name: str) -> list:
    """Codes of a mapping table in file order."""
    return list(load_mapping(name).keys())


def available_mappings() -> List[str]:
    return sorted(p.stem for p in MAPPINGS_DIR.glob("*.json"))
