"""
Register column rules.

Importing this package registers every rule module into RULES.
"""

from . import bef, employment, lpr2, lpr3  # noqa: F401
from .base import RULES, RuleContext, get_rule, register_rule

__all__ = ["RULES", "RuleContext", "get_rule", "register_rule"]
