"""LPR3: contacts (kontakter) and their diagnoses (diagnoser)."""

from typing import List

from .base import RuleContext, choice, dates, define_rules, flag, padded, register_rule, times
from .identities import existing_contacts, referenced_persons, row_contacts, unlinked_contacts
from .lpr2 import diagnosis

KONTAKTER = "lpr3_kontakter"
DIAGNOSER = "lpr3_diagnoser"

ALCA_CODES = ["ALCA00", "ALCA10", "ALCA20", "ALCA30", "ALCA40"]


@register_rule(KONTAKTER, "CPR")
def cpr(ctx: RuleContext) -> List[str]:
    return list(referenced_persons(ctx))


@register_rule(KONTAKTER, "DW_EK_KONTAKT")
def kontakt_id(ctx: RuleContext) -> List[str]:
    return row_contacts(ctx, referenced_persons(ctx))


@register_rule(KONTAKTER, "DW_EK_FORLOEB")
def forloeb_id(ctx: RuleContext) -> List[str]:
    return unlinked_contacts(ctx)


@register_rule(DIAGNOSER, "DW_EK_KONTAKT")
def diagnose_kontakt_id(ctx: RuleContext) -> List[str]:
    return existing_contacts(ctx)


define_rules(
    KONTAKTER,
    {
        ("SORENHED_IND", "SORENHED_HEN", "SORENHED_ANS"): padded(100000, 999999, 6),
        (
            "dato_start",
            "dato_slut",
            "dato_behandling_start",
            "dato_indberetning",
        ): dates(2000, 2023, "sas"),
        ("tidspunkt_start", "tidspunkt_slut", "tidspunkt_behandling_start"): times(),
        ("aktionsdiagnose",): diagnosis(),
        ("kontaktaarsag", "kontakttype", "henvisningsaarsag", "henvisningsmaade"): choice(
            ALCA_CODES
        ),
        ("prioritet",): choice(["ATA1", "ATA2", "ATA3"]),
        ("lprindberetningssytem",): choice(["PAS", "OPUS", "COSMIC", "EPJ", "MidtEPJ"]),
    },
)

define_rules(
    DIAGNOSER,
    {
        ("diagnosekode", "diagnosekode_parent"): diagnosis(),
        ("diagnosetype", "diagnosetype_parent"): choice(["A", "B", "H", "M", "G"]),
        ("senere_afkraeftet",): flag(0.1),
        ("lprindberetningssystem",): choice(["LPR3", "OPUS", "COSMIC", "EPJ", "MidtEPJ"]),
    },
)
