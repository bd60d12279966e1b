"""Landspatientregisteret (LPR2): LPR_ADM admissions, LPR_DIAG diagnoses, LPR_BES visits."""

import string
from typing import List

import numpy as np

from ..mappings import mapping_codes
from .base import (
    RuleContext,
    choice,
    dates,
    define_rules,
    integers,
    padded,
    register_rule,
)
from .identities import existing_contacts, referenced_persons, row_contacts

SCD_SHARE = 0.1


def random_diagnoses(rng: np.random.Generator, n: int) -> List[str]:
    """ICD-10 style codes; one in ten is drawn from the severe chronic disease table."""
    scd = mapping_codes("scd")
    letters = rng.integers(0, 26, size=n).tolist()
    numbers = rng.integers(0, 100, size=n).tolist()
    use_scd = (rng.random(n) < SCD_SHARE).tolist()
    picks = rng.integers(0, len(scd), size=n).tolist()
    return [
        scd[pick] if from_scd else f"{string.ascii_uppercase[letter]}{number:02d}"
        for letter, number, from_scd, pick in zip(letters, numbers, use_scd, picks)
    ]


def diagnosis():
    def rule(ctx: RuleContext) -> List[str]:
        return ctx.parallel(random_diagnoses)

    return rule


@register_rule("lpr_adm", "PNR")
def adm_pnr(ctx: RuleContext) -> List[str]:
    return list(referenced_persons(ctx))


@register_rule("lpr_adm", "RECNUM")
def adm_recnum(ctx: RuleContext) -> List[str]:
    return row_contacts(ctx, referenced_persons(ctx))


@register_rule(("lpr_diag", "lpr_bes"), "RECNUM")
def linked_recnum(ctx: RuleContext) -> List[str]:
    return existing_contacts(ctx)


define_rules(
    ("lpr_adm", "lpr_diag", "lpr_bes"),
    {
        ("LEVERANCEDATO",): dates(2000, 2023),
        ("VERSION",): padded(2000, 2023, 4),
    },
)

define_rules(
    "lpr_diag",
    {
        ("C_DIAG", "C_TILDIAG"): diagnosis(),
        ("C_DIAGTYPE",): choice(["A", "B", "H", "M", "G"]),
    },
)

define_rules("lpr_bes", {("D_AMBDTO",): dates(2000, 2023)})

define_rules(
    "lpr_adm",
    {
        ("C_ADIAG",): diagnosis(),
        ("C_AFD", "C_HAFD", "K_AFD", "C_HSGH", "C_SGH"): padded(1000, 9999, 4),
        ("C_HENM", "C_INDM", "C_KONTAARS", "C_UDM"): choice(["A", "B", "C", "D", "E"]),
        ("C_KOM",): padded(100, 999, 3),
        ("C_PATTYPE",): choice(["0", "1", "2", "3"]),
        ("C_SPEC",): padded(1, 100, 3),
        ("CPRTJEK", "CPRTYPE"): choice(["V", "U"]),
        ("D_HENDTO", "D_INDDTO", "D_UDDTO"): dates(2000, 2023),
        ("V_ALDDG",): integers(0, 36500),
        ("V_ALDER", "V_SENGDAGE"): integers(0, 100),
        ("V_INDMINUT",): integers(0, 60),
        ("V_INDTIME", "V_UDTIME"): integers(0, 24),
    },
)
