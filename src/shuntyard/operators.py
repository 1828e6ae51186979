"""Unary and binary operator definitions plus the default operator tables.

Binary precedence (lowest to highest):
  0. Addition/subtraction: + -
  1. Multiplication/division: * /
  2. Exponentiation: ^ (right-associative)

Unary operators always bind tighter than any binary operator, so ``-2^2``
evaluates as ``(-2)^2``.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ConfigDict


class Associativity(str, Enum):
    left = "left"
    right = "right"


class UnaryOperator(BaseModel):
    """A prefix operator such as negation."""

    model_config = ConfigDict(frozen=True)

    token: str
    function: Callable[[float], float]

    def apply(self, value: float) -> float:
        return float(self.function(value))


class BinaryOperator(BaseModel):
    """An infix operator with precedence and associativity."""

    model_config = ConfigDict(frozen=True)

    token: str
    precedence: int
    associativity: Associativity = Associativity.left
    function: Callable[[float, float], float]

    def apply(self, left: float, right: float) -> float:
        return float(self.function(left, right))

    def yields_to(self, precedence: int, associativity: Associativity) -> bool:
        """Whether this operator, sitting on the stack, must be applied first.

        Args:
            precedence: Precedence of the incoming operator.
            associativity: Associativity of the incoming operator.

        Returns:
            True when this operator binds tighter, or binds equally and the
            incoming operator is left-associative.
        """
        if self.precedence > precedence:
            return True
        return self.precedence == precedence and associativity == Associativity.left


def _divide(left: float, right: float) -> float:
    # IEEE semantics: x/0 is inf with the sign of x, 0/0 is nan.
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def default_binary_operators() -> list[BinaryOperator]:
    """Return a fresh list of the conventional arithmetic operators."""
    return [
        BinaryOperator(token="+", precedence=0, function=lambda a, b: a + b),
        BinaryOperator(token="-", precedence=0, function=lambda a, b: a - b),
        BinaryOperator(token="*", precedence=1, function=lambda a, b: a * b),
        BinaryOperator(token="/", precedence=1, function=_divide),
        BinaryOperator(
            token="^",
            precedence=2,
            associativity=Associativity.right,
            function=math.pow,
        ),
    ]


def default_unary_operators() -> list[UnaryOperator]:
    """Return a fresh list of unary plus and negation."""
    return [
        UnaryOperator(token="+", function=lambda v: v),
        UnaryOperator(token="-", function=lambda v: -v),
    ]
