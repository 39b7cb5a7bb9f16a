"""
rpnsearch Structural Verification

This module checks that a sequence of atoms is a well-formed postfix
expression, i.e. that evaluating it never runs out of operands and leaves
exactly one value behind.
"""

from typing import Iterable, List, Tuple
from .core import Atom, Number, Operator, render_atom


def valence(atom: Atom) -> int:
    """
    Net change in operand stack depth caused by an atom.

    Numbers push one value (+1), binary operators consume two and push one
    (-1), SQRT consumes one and pushes one (0).
    """
    if isinstance(atom, Number):
        return 1
    if isinstance(atom, Operator):
        return 1 - atom.arity
    raise TypeError(f"Unknown atom: {atom!r}")


def is_valid(expression: Iterable[Atom]) -> bool:
    """
    Check whether atoms form a well-formed postfix expression.

    Single left-to-right scan over a running depth counter. The expression
    is invalid as soon as the depth drops to zero or below, and valid iff
    exactly one value remains at the end.

    Args:
        expression: A stack or any iterable of atoms

    Returns:
        True if the expression is well-formed
    """
    size = 0

    for atom in expression:
        size += valence(atom)
        if size <= 0:
            return False

    return size == 1


def check_balance(expression: Iterable[Atom]) -> Tuple[bool, List[str]]:
    """
    Check well-formedness and explain any failure.

    Args:
        expression: A stack or any iterable of atoms

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []
    size = 0

    for position, atom in enumerate(expression):
        size += valence(atom)
        if size <= 0:
            errors.append(f"Token {position} ({render_atom(atom)}) has too few operands")
            return False, errors

    if size == 0:
        errors.append("Expression is empty")
    elif size != 1:
        errors.append(f"Expression leaves {size} values on the stack, expected 1")

    return len(errors) == 0, errors
