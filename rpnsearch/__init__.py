"""
rpnsearch: stochastic search for postfix arithmetic approximations.

This package generates random reverse-Polish expressions over small integers
and the operators + * / √, evaluates them, and reports the ones whose value
lies within a chosen precision of a target number.
"""

from .core import Operator, Number, Atom, Stack, ParseError, parse, evaluate, format_number
from .verify import is_valid, check_balance
from .generate import generate, random_operator, random_whole_number
from .improve import improve, climb
from .search import SearchMatch, iter_matches, search

__version__ = "0.1.0"
__all__ = [
    "Operator", "Number", "Atom", "Stack", "ParseError", "parse", "evaluate", "format_number",
    "is_valid", "check_balance", "generate", "random_operator", "random_whole_number",
    "improve", "climb", "SearchMatch", "iter_matches", "search"
]
