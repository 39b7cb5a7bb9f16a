"""
rpnsearch Core Expression Engine

This module implements the postfix expression model shared by every other
part of rpnsearch: the atom vocabulary (numbers and operators), the value
stack that holds an expression, the parser for postfix text and the
stack-machine evaluator.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union
import math


class Operator(Enum):
    """
    Operators understood by the expression engine.

    Each member's value is its display symbol. SQRT is unary; the others
    are binary.
    """
    ADD = "+"
    MUL = "*"
    DIV = "/"
    SQRT = "√"

    @property
    def arity(self) -> int:
        """Number of operands consumed by this operator."""
        return 1 if self is Operator.SQRT else 2

    def is_operator(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Number:
    """A numeric literal."""
    value: float

    def is_operator(self) -> bool:
        return False

    def __str__(self) -> str:
        return format_number(self.value)


Atom = Union[Number, Operator]

SYMBOLS: Dict[str, Operator] = {op.value: op for op in Operator}


class ParseError(ValueError):
    """Raised when a token is neither an operator symbol nor a number."""

    def __init__(self, token: str, reason: Optional[str] = None):
        self.token = token
        message = f"couldn't parse {token!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


def format_number(value: float) -> str:
    """
    Render a number the canonical way.

    Integral values print without a fractional part so that generated
    expressions read like ``3 4 +``; everything else uses the shortest
    round-trip representation.

    Args:
        value: The number to render

    Returns:
        A string that ``float()`` parses back to the same value
    """
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(float(value))


def render_atom(atom: Atom) -> str:
    if atom.is_operator():
        return atom.value
    return format_number(atom.value)


class Stack:
    """
    Ordered sequence of atoms representing a postfix expression.

    The front of the stack is the first token of the expression as written
    left to right. ``push``/``pop``/``peek`` work on the front, ``append``
    adds to the back so expressions can be built in reading order.
    """

    def __init__(self, atoms: Optional[Iterable[Atom]] = None):
        self._items = deque(atoms or ())

    def push(self, atom: Atom) -> None:
        """Prepend an atom."""
        self._items.appendleft(atom)

    def append(self, atom: Atom) -> None:
        """Add an atom after the last one."""
        self._items.append(atom)

    def pop(self) -> Atom:
        """
        Remove and return the front atom.

        Raises:
            IndexError: If the stack is empty
        """
        return self._items.popleft()

    def peek(self) -> Atom:
        """
        Return the front atom without removing it.

        Raises:
            IndexError: If the stack is empty
        """
        return self._items[0]

    def copy(self) -> 'Stack':
        """Return an independent stack holding the same atoms in the same order."""
        return Stack(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Atom]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Atom:
        return self._items[index]

    def __setitem__(self, index: int, atom: Atom) -> None:
        self._items[index] = atom

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stack):
            return NotImplemented
        return list(self._items) == list(other._items)

    def __str__(self) -> str:
        return ' '.join(render_atom(atom) for atom in self._items)

    def __repr__(self) -> str:
        return f"Stack({str(self)!r})"


def _parse_number(token: str) -> float:
    # float() tolerates whitespace, digit separators and non-ASCII digits, postfix text does not
    if not token or not token.isascii() or token.strip() != token or '_' in token:
        raise ParseError(token, "not a number")
    try:
        return float(token)
    except ValueError as e:
        raise ParseError(token, str(e)) from e


def parse(expression: str) -> Stack:
    """
    Parse space-separated postfix text into a stack.

    Tokens are separated by exactly one space. ``+``, ``*``, ``/`` and ``√``
    are operators; every other token must be a number. Structural
    well-formedness is not checked here, see ``rpnsearch.verify``.

    Args:
        expression: Postfix text such as ``"1 2 + 3 4 / *"``

    Returns:
        A stack whose front-to-back order matches the text's token order

    Raises:
        ParseError: If a token is neither an operator nor a number
    """
    stack = Stack()
    for token in expression.split(' '):
        operator = SYMBOLS.get(token)
        if operator is not None:
            stack.append(operator)
        else:
            stack.append(Number(_parse_number(token)))
    return stack


def _divide(y: float, x: float) -> float:
    """Floating-point division that returns inf/nan instead of raising."""
    if x != 0:
        return y / x
    if y == 0 or math.isnan(y):
        return math.nan
    return math.copysign(math.inf, y) * math.copysign(1.0, x)


def _sqrt(x: float) -> float:
    """Principal square root, nan for negative operands."""
    if x < 0:
        return math.nan
    return math.sqrt(x)


# Binary operations take (left, right)
OPERATIONS: Dict[Operator, Callable[..., float]] = {
    Operator.ADD: lambda y, x: y + x,
    Operator.MUL: lambda y, x: y * x,
    Operator.DIV: _divide,
    Operator.SQRT: _sqrt,
}


def evaluate(expression: Stack) -> float:
    """
    Evaluate a postfix expression.

    The expression is copied first, so the caller's stack is left intact.
    Division by zero and square roots of negative numbers produce inf/nan
    rather than errors.

    Args:
        expression: A well-formed postfix expression

    Returns:
        The value of the expression

    Raises:
        IndexError: If the expression is malformed and the operand stack underflows
    """
    remaining = expression.copy()
    values: List[float] = []

    while len(remaining) > 0:
        atom = remaining.pop()

        if isinstance(atom, Number):
            values.append(atom.value)
        elif isinstance(atom, Operator):
            if atom.arity == 2:
                x = values.pop()
                y = values.pop()
                values.append(OPERATIONS[atom](y, x))
            else:
                values.append(OPERATIONS[atom](values.pop()))
        else:
            raise TypeError(f"Unknown atom: {atom!r}")

    return values[-1]
