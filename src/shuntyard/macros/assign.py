"""Assignment macros: ``name = expr`` and compound ``name += expr`` forms."""

from __future__ import annotations

from typing import TYPE_CHECKING, MutableMapping

from lark import Token

from shuntyard.engine import evaluate_tokens
from shuntyard.errors import DomainError, EmptyExpression, UndefinedVariable, UnexpectedToken
from shuntyard.macros.base import Macro, ParsedMacro
from shuntyard.tokenizer import skip_whitespace

if TYPE_CHECKING:
    from shuntyard.context import Context
    from shuntyard.tokenizer import TokenCursor


def _target_length(text: str, pos: int, ctx: Context) -> int:
    """Length of the assignment target at ``pos``; the name stops at any ``=``."""
    length = ctx.identifier_length(text, pos)
    cut = text.find("=", pos, pos + length)
    return length if cut < 0 else cut - pos


class AssignMacro(Macro):
    """Matches ``<identifier> <whitespace>* <op>=`` in operand position.

    The target name is part of the macro token, so it is never looked up
    as a variable. The right-hand side extends to the enclosing ``)``,
    ``,`` or end of input.

    Args:
        op: Binary operator token for compound assignment, e.g. ``"+"``
            for ``+=``. ``None`` for plain assignment.
    """

    def __init__(self, op: str | None = None) -> None:
        self.op = op
        self.token = f"{op or ''}="

    def match_input(self, text: str, pos: int, ctx: Context) -> int | None:
        length = _target_length(text, pos, ctx)
        if not length:
            return None
        end = skip_whitespace(text, pos + length)
        if not text.startswith(self.token, end):
            return None
        end += len(self.token)
        # "a == b" is a comparison, not an assignment
        if text.startswith("=", end):
            return None
        return end - pos

    def parse(self, lexeme: Token, cursor: TokenCursor, ctx: Context) -> AssignParsed:
        name = str(lexeme)[:_target_length(str(lexeme), 0, ctx)]
        operand = cursor.take_operand()
        if not operand:
            raise EmptyExpression(lexeme.end_pos)
        return AssignParsed(name, self.op, operand, lexeme.start_pos)


class AssignParsed(ParsedMacro):
    def __init__(self, name: str, op: str | None, operand: list[Token], position: int) -> None:
        self.name = name
        self.op = op
        self.operand = operand
        self.position = position

    def execute(
        self,
        left: float | None,
        variables: MutableMapping[str, float],
        ctx: Context,
        depth: int = 0,
    ) -> float:
        value = evaluate_tokens(self.operand, variables, ctx, depth + 1)
        if self.op is not None:
            if self.name not in variables:
                raise UndefinedVariable(self.name, self.position, sorted(variables))
            combine = ctx.binary_operators.get(self.op)
            if combine is None:
                raise UnexpectedToken(
                    f"{self.op}=",
                    f"No binary operator {self.op!r} for compound assignment",
                    self.position,
                )
            try:
                value = combine.apply(variables[self.name], value)
            except (ArithmeticError, ValueError) as exc:
                raise DomainError(f"{self.op}=", str(exc), self.position) from exc
        variables[self.name] = value
        return value

    def __repr__(self) -> str:
        return f"AssignParsed({self.name!r}, op={self.op!r}, operand={len(self.operand)} tokens)"
