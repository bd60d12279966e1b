"""
Register schema loading.

A schema is a JSON document with an ordered list of columns:

    {"register": "bef", "columns": [{"name": "PNR"}, {"name": "KOEN"}]}

A column may carry a "type" so a generic generator can be used when no
register rule matches its name.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

BUNDLED_SCHEMA_DIR = Path(__file__).parent / "data" / "schemas"

KNOWN_RULESETS = (
    "bef",
    "akm",
    "idan",
    "ind",
    "uddf",
    "lpr_adm",
    "lpr_diag",
    "lpr_bes",
    "lpr3_kontakter",
    "lpr3_diagnoser",
)

# Marker column -> ruleset, checked in order for schemas with an unknown name
MARKER_COLUMNS = (
    ("SOCIO13", "akm"),
    ("JOBKAT", "idan"),
    ("BESKST13", "ind"),
    ("HFAUDD", "uddf"),
    ("DW_EK_FORLOEB", "lpr3_kontakter"),
    ("C_ADIAG", "lpr_adm"),
)

DEFAULT_RULESET = "bef"


@dataclass
class ColumnDef:
    name: str
    type: Optional[str] = None


@dataclass
class RegisterSchema:
    register: str
    columns: List[ColumnDef] = field(default_factory=list)
    path: Optional[Path] = None

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]

    @property
    def ruleset(self) -> str:
        return infer_ruleset(self.register, self.column_names)


def infer_ruleset(register: str, column_names: List[str]) -> str:
    """Pick the rule table: a known register name wins, then marker columns, then bef."""
    if register in KNOWN_RULESETS:
        return register
    names = set(column_names)
    for marker, ruleset in MARKER_COLUMNS:
        if marker in names:
            return ruleset
    return DEFAULT_RULESET


def parse_schema(register: str, raw: dict, path: Optional[Path] = None) -> RegisterSchema:
    """
    Build a RegisterSchema from a decoded schema document.

    Raises:
        ValueError: If the document has no column list or a column has no name
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("columns"), list):
        raise ValueError(f"Schema for register '{register}' must have a 'columns' list")

    columns = []
    for i, col in enumerate(raw["columns"]):
        if not isinstance(col, dict):
            raise ValueError(f"Schema for register '{register}': column {i} must be an object")
        name = col.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Schema for register '{register}': column {i} missing 'name'")
        col_type = col.get("type")
        columns.append(ColumnDef(name=name, type=str(col_type).lower() if col_type else None))

    return RegisterSchema(register=register, columns=columns, path=path)


class SchemaManager:
    """Locates and loads register schemas from a schema directory."""

    def __init__(self, schema_dir: Optional[str] = None):
        self.schema_dir = Path(schema_dir) if schema_dir else BUNDLED_SCHEMA_DIR

    def schema_path(self, register: str) -> Path:
        return self.schema_dir / f"{register}.json"

    def load(self, register: str) -> RegisterSchema:
        """
        Load the schema for a register.

        Raises:
            FileNotFoundError: If no schema document exists for the register
            ValueError: If the document is not valid JSON or malformed
        """
        path = self.schema_path(register)
        if not path.exists():
            raise FileNotFoundError(
                f"Schema file for register '{register}' not found at path: {path}"
            )

        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to load JSON for register '{register}': {e}") from e

        return parse_schema(register, raw, path)

    def available(self) -> List[str]:
        if not self.schema_dir.is_dir():
            return []
        return sorted(
            os.path.splitext(name)[0]
            for name in os.listdir(self.schema_dir)
            if name.endswith(".json")
        )
