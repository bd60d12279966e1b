"""Labour market registers: AKM, IDAN, IND and the UDDF education register."""

from typing import List

from ..mappings import STILL_CODES
from .base import (
    RuleContext,
    choice,
    dates,
    define_rules,
    integers,
    mapping_choice,
    padded,
    register_rule,
    uniform,
)
from .identities import referenced_persons

PERSON_REGISTERS = ("akm", "idan", "ind", "uddf")


@register_rule(PERSON_REGISTERS, "PNR")
def pnr(ctx: RuleContext) -> List[str]:
    return list(referenced_persons(ctx))


define_rules(PERSON_REGISTERS, {("CPRTJEK", "CPRTYPE"): choice(["V", "U"])})

define_rules(
    "akm",
    {
        ("SOCIO", "SOCIO02", "SOCIO13"): mapping_choice("socio13"),
        ("CPRTYPE",): choice(["A", "B", "C", "D", "E", "F"]),
        ("VERSION",): padded(2000, 2023, 4),
        ("SENR",): padded(100000, 999999, 6),
    },
)

define_rules(
    "idan",
    {
        ("ARBGNR", "ARBNR", "CVRNR", "LBNR"): padded(10000000, 99999999, 8),
        ("JOBKAT",): mapping_choice("jobkat"),
        ("JOBLON",): uniform(15000.0, 100000.0),
        ("STILL",): choice(STILL_CODES),
        ("TILKNYT",): mapping_choice("tilknyt"),
    },
)

define_rules(
    "ind",
    {
        ("BESKST13",): mapping_choice("beskst13"),
        ("LOENMV_13",): uniform(0.0, 1_000_000.0),
        ("PERINDKIALT_13",): uniform(0.0, 2_000_000.0),
        ("PRE_SOCIO",): mapping_choice("pre_socio"),
        ("VERSION",): padded(2000, 2023, 4),
    },
)

define_rules(
    "uddf",
    {
        # ISCED level
        ("HFAUDD",): padded(1, 10, 1),
        ("HF_KILDE",): choice(["A", "B", "C", "D", "E"]),
        ("HF_VFRA", "HF_VTIL"): dates(1900, 2023, "%Y%m%d"),
        ("INSTNR",): integers(1, 100),
        ("VERSION",): padded(2000, 2023, 4),
    },
)
