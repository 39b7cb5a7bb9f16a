"""
rpnsearch Expression Generator

This module synthesizes random postfix expressions that are well-formed by
construction, so they never need to be checked before evaluation.
"""

from typing import List, Optional
import random
from .core import Atom, Number, Operator, Stack

BINARY_OPERATORS = (Operator.ADD, Operator.MUL, Operator.DIV)

_default_rng = random.Random()


def random_operator(rng: Optional[random.Random] = None) -> Operator:
    """
    Draw a binary operator uniformly.

    SQRT is never drawn here; it only enters an expression through the
    generator's unary branch.
    """
    if rng is None:
        rng = _default_rng
    return rng.choice(BINARY_OPERATORS)


def random_whole_number(min_number: int = 1, max_number: int = 10,
                        rng: Optional[random.Random] = None) -> Number:
    """
    Draw an integral number uniformly from [min_number, max_number).

    Raises:
        ValueError: If the range is empty
    """
    if rng is None:
        rng = _default_rng
    return Number(float(rng.randrange(min_number, max_number)))


def _generate_atoms(rng: random.Random, length: int, min_number: int, max_number: int,
                    sqrt_probability: float) -> List[Atom]:
    if length < 1:
        return []
    if length == 1:
        return [random_whole_number(min_number, max_number, rng)]
    if length == 2:
        return [random_whole_number(min_number, max_number, rng), Operator.SQRT]
    if length == 3:
        return [
            random_whole_number(min_number, max_number, rng),
            random_whole_number(min_number, max_number, rng),
            random_operator(rng),
        ]

    if rng.random() < sqrt_probability:
        atoms = _generate_atoms(rng, length - 1, min_number, max_number, sqrt_probability)
        atoms.append(Operator.SQRT)
        return atoms

    # Both halves use length // 2, so odd lengths come out one token short
    atoms = _generate_atoms(rng, length // 2, min_number, max_number, sqrt_probability)
    atoms.extend(_generate_atoms(rng, length // 2, min_number, max_number, sqrt_probability))
    atoms.append(random_operator(rng))
    return atoms


def generate(length: int, rng: Optional[random.Random] = None,
             min_number: int = 1, max_number: int = 10,
             sqrt_probability: float = 0.25) -> Stack:
    """
    Generate a random, well-formed postfix expression.

    Lengths up to 3 are built directly. Longer expressions either wrap a
    ``length - 1`` expression in SQRT (with probability ``sqrt_probability``)
    or join two ``length // 2`` expressions with a random binary operator.
    The result is therefore only approximately ``length`` tokens long.

    Args:
        length: Requested number of tokens
        rng: Random number generator (defaults to a module-level instance)
        min_number: Smallest literal (inclusive)
        max_number: Largest literal (exclusive)
        sqrt_probability: Chance of taking the unary branch for lengths above 3

    Returns:
        A well-formed expression, empty if ``length < 1``

    Raises:
        ValueError: If ``min_number >= max_number`` and a literal is needed
    """
    if rng is None:
        rng = _default_rng
    return Stack(_generate_atoms(rng, length, min_number, max_number, sqrt_probability))
