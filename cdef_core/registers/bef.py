"""BEF (befolkningen) population register rules."""

from typing import List, Optional

from ..identity import gender_from_person_id
from ..mappings import load_mapping
from .base import (
    RuleContext,
    choice,
    dates,
    define_rules,
    integers,
    mapping_choice,
    padded,
    register_rule,
)
from .identities import population_rows, spouses

BEF = "bef"


@register_rule(BEF, "PNR")
def pnr(ctx: RuleContext) -> List[str]:
    return list(population_rows(ctx).person_ids)


@register_rule(BEF, "FOED_DAG")
def foed_dag(ctx: RuleContext) -> List[str]:
    return [born.strftime("%Y-%m-%d") for born in population_rows(ctx).birth_dates]


@register_rule(BEF, "ALDER")
def alder(ctx: RuleContext) -> List[int]:
    return population_rows(ctx).ages(ctx.year)


@register_rule(BEF, "KOEN")
def koen(ctx: RuleContext) -> List[str]:
    return [gender_from_person_id(p).value for p in population_rows(ctx).person_ids]


@register_rule(BEF, "MOR_ID", "FAR_ID")
def parent_ids(ctx: RuleContext) -> List[Optional[str]]:
    def build():
        persons = ctx.identity.persons
        return [persons.resolve_parents(p) for p in population_rows(ctx).person_ids]

    parents = ctx.cached("parents", build)
    index = 0 if ctx.column == "MOR_ID" else 1
    return [pair[index] for pair in parents]


@register_rule(BEF, "AEGTE_ID", "E_FAELLE_ID")
def spouse_ids(ctx: RuleContext) -> List[Optional[str]]:
    return list(spouses(ctx))


@register_rule(BEF, "CIVST")
def civst(ctx: RuleContext) -> List[str]:
    """Marital status label consistent with age and the spouse column."""
    rows = population_rows(ctx)
    married = spouses(ctx)
    codes = []
    for age, spouse in zip(rows.ages(ctx.year), married):
        if spouse is not None:
            codes.append("G")
        elif age < 18:
            codes.append("U")
        elif age <= 24:
            codes.append("U" if ctx.rng.random() < 0.8 else "F")
        else:
            codes.append(str(ctx.rng.choice(["U", "F", "E"])))
    labels = load_mapping("civst")
    return [labels.get(code, code) for code in codes]


define_rules(
    BEF,
    {
        ("FAMILIE_ID",): padded(100000000, 999999999, 10),
        ("ANTBOERNF", "ANTBOERNH", "ANTPERSF", "ANTPERSH"): integers(0, 100),
        ("BOP_VFRA",): dates(1900, 2023),
        ("CPRTJEK", "CPRTYPE"): integers(0, 2),
        ("FAMILIE_TYPE",): integers(1, 10),
        ("FM_MARK",): mapping_choice("fm_mark"),
        ("HUSTYPE",): mapping_choice("hustype"),
        ("PLADS",): mapping_choice("plads"),
        ("REG",): mapping_choice("reg"),
        ("STATSB",): mapping_choice("statsb"),
        ("IE_TYPE",): choice(["I", "E"]),
        ("KOM",): integers(101, 851),
        ("OPR_LAND",): padded(1, 999, 3),
        ("VERSION",): padded(2000, 2023, 4),
    },
)
