"""
rpnsearch Local Improvement

Greedy hill climbing over the literals of an expression: nudge one number
up by one and keep the change if the value moves closer to the target.
"""

from typing import Optional, Tuple
import logging
from .core import Number, Stack, evaluate

logger = logging.getLogger(__name__)


def improve(expression: Stack, target: float, value: float,
            diff: float) -> Tuple[bool, float, float, Stack]:
    """
    Try a single increment of one literal that reduces the distance to target.

    Literals are tried left to right. The first increment whose new distance
    is strictly smaller than ``diff`` is kept in ``expression`` and returned
    immediately; increments that don't help are undone.

    Args:
        expression: The expression to improve, modified in place on success
        target: Value being approximated
        value: Current value of the expression
        diff: Current distance ``abs(target - value)``

    Returns:
        Tuple of (improved, new_value, new_diff, expression)
    """
    for i, atom in enumerate(list(expression)):
        if atom.is_operator():
            continue

        expression[i] = Number(atom.value + 1)

        new_value = evaluate(expression)
        new_diff = abs(target - new_value)

        if new_diff < diff:
            return True, new_value, new_diff, expression

        expression[i] = atom

    return False, value, diff, expression


def climb(expression: Stack, target: float,
          max_steps: Optional[int] = None) -> Tuple[float, float, int]:
    """
    Apply ``improve`` until no single increment helps.

    Args:
        expression: The expression to improve, modified in place
        target: Value being approximated
        max_steps: Upper bound on accepted improvements (unbounded if None)

    Returns:
        Tuple of (value, diff, steps) after the last accepted improvement
    """
    value = evaluate(expression)
    diff = abs(target - value)
    steps = 0

    while max_steps is None or steps < max_steps:
        improved, value, diff, expression = improve(expression, target, value, diff)
        if not improved:
            break
        steps += 1
        logger.debug(f"Step {steps}: {expression} = {value} (diff={diff:.6g})")

    return value, diff, steps
