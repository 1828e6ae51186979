"""Shunting-yard engine that parses and evaluates in a single pass.

Operators are applied as soon as the shunting-yard rules pop them off the
operator stack, so no postfix queue or tree is ever built. The engine keeps:

- a value stack of floats
- an operator stack of unary operators, binary operators and paren markers
  (a marker opened by a function call records where its arguments start)
- a flag saying whether the next token must be an operand or an operator

Macros re-enter :func:`evaluate_tokens` for their operands, bounded by
``ctx.max_macro_depth``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Iterable, MutableMapping

from lark import Token

from shuntyard.errors import (
    DomainError,
    EmptyExpression,
    ExcessOperands,
    MacroDepthExceeded,
    MismatchedParens,
    UndefinedVariable,
    UnexpectedToken,
)
from shuntyard.functions import Function
from shuntyard.logging.events import EventType, emit_info
from shuntyard.operators import Associativity
from shuntyard.tokenizer import COMMA, LPAR, MACRO, NAME, NUMBER, OPERATOR, RPAR, TokenCursor

if TYPE_CHECKING:
    from shuntyard.context import Context


_UNARY = "unary"
_BINARY = "binary"
_PAREN = "paren"


class _Call:
    """Pending function call opened by ``name(``."""

    __slots__ = ("function", "base", "position")

    def __init__(self, function: Function, base: int, position: int) -> None:
        self.function = function
        self.base = base
        self.position = position


def evaluate_tokens(
    tokens: Iterable[Token],
    variables: MutableMapping[str, float],
    ctx: Context,
    depth: int = 0,
) -> float:
    """Evaluate a token sequence to a single number.

    Args:
        tokens: Tokens from :func:`~shuntyard.tokenizer.tokenize`, a
            :class:`~shuntyard.tokenizer.TokenStream`, a list, or an
            existing :class:`~shuntyard.tokenizer.TokenCursor`.
        variables: Variable store; macros may write to it.
        ctx: Operators, functions and macros to resolve tokens against.
        depth: Macro nesting depth of this call.

    Returns:
        The value of the expression.

    Raises:
        EvalError: Any subclass, on the first problem encountered.
    """
    if depth > ctx.max_macro_depth:
        raise MacroDepthExceeded(ctx.max_macro_depth)
    cursor = tokens if isinstance(tokens, TokenCursor) else TokenCursor(tokens, ctx)
    return _Engine(variables, ctx, depth).run(cursor)


class _Engine:
    def __init__(self, variables: MutableMapping[str, float], ctx: Context, depth: int) -> None:
        self.variables = variables
        self.ctx = ctx
        self.depth = depth
        self.values: list[float] = []
        # (kind, payload, position); payload is an operator or a _Call/None for parens
        self.operators: list[tuple[str, Any, int]] = []
        self.expect_operand = True
        self.previous: Token | None = None
        self._handlers: dict[str, Callable[[Token, TokenCursor], None]] = {
            NUMBER: self._number,
            NAME: self._name,
            OPERATOR: self._operator,
            MACRO: self._macro,
            LPAR: self._open_paren,
            RPAR: self._close_paren,
            COMMA: self._comma,
        }

    def run(self, cursor: TokenCursor) -> float:
        for lexeme in cursor:
            handler = self._handlers.get(lexeme.type)
            if handler is None:
                raise UnexpectedToken(str(lexeme), f"Unknown token type {lexeme.type}", lexeme.start_pos)
            handler(lexeme, cursor)
            self.previous = cursor.last
        return self._finish()

    # ---------- operands ----------

    def _require_operand(self, lexeme: Token) -> None:
        if not self.expect_operand:
            raise UnexpectedToken(
                str(lexeme),
                f"Expected operator, found {str(lexeme)!r}",
                lexeme.start_pos,
            )

    def _number(self, lexeme: Token, cursor: TokenCursor) -> None:
        self._require_operand(lexeme)
        self.values.append(float(lexeme))
        self.expect_operand = False

    def _name(self, lexeme: Token, cursor: TokenCursor) -> None:
        self._require_operand(lexeme)
        name = str(lexeme)
        function = self.ctx.functions.get(name)
        if function is not None:
            nxt = cursor.peek()
            if nxt is None or nxt.type != LPAR:
                raise UnexpectedToken(
                    name,
                    f"Expected '(' after function {name!r}",
                    lexeme.start_pos,
                )
            cursor.next()
            call = _Call(function, len(self.values), lexeme.start_pos)
            self.operators.append((_PAREN, call, nxt.start_pos))
            return
        if name not in self.variables:
            raise UndefinedVariable(name, lexeme.start_pos, sorted(self.variables))
        self.values.append(float(self.variables[name]))
        self.expect_operand = False

    # ---------- operators ----------

    def _operator(self, lexeme: Token, cursor: TokenCursor) -> None:
        token = str(lexeme)
        if self.expect_operand:
            unary = self.ctx.unary_operators.get(token)
            if unary is None:
                raise UnexpectedToken(
                    token,
                    f"Expected expression, found operator {token!r}",
                    lexeme.start_pos,
                )
            self.operators.append((_UNARY, unary, lexeme.start_pos))
            return
        binary = self.ctx.binary_operators.get(token)
        if binary is None:
            raise UnexpectedToken(
                token,
                f"{token!r} is not a binary operator",
                lexeme.start_pos,
            )
        self._reduce(binary.precedence, binary.associativity)
        self.operators.append((_BINARY, binary, lexeme.start_pos))
        self.expect_operand = True

    def _macro(self, lexeme: Token, cursor: TokenCursor) -> None:
        macro = self.ctx.resolve_macro(str(lexeme))
        if macro is None:
            raise UnexpectedToken(str(lexeme), "Macro is not registered", lexeme.start_pos)
        if macro.infix:
            if self.expect_operand:
                raise UnexpectedToken(
                    str(lexeme),
                    f"Expected expression, found macro {macro.token!r}",
                    lexeme.start_pos,
                )
            self._reduce(macro.precedence, macro.associativity)
            left: float | None = self.values.pop()
        else:
            self._require_operand(lexeme)
            left = None
        parsed = macro.parse(lexeme, cursor, self.ctx)
        result = parsed.execute(left, self.variables, self.ctx, self.depth)
        emit_info(
            EventType.macro_applied,
            f"macro {macro.token!r} applied",
            {"macro": macro.token, "position": lexeme.start_pos, "depth": self.depth},
        )
        self.values.append(float(result))
        self.expect_operand = False

    def _reduce(self, precedence: int, associativity: Associativity) -> None:
        """Apply stacked operators that bind at least as tightly as the incoming one."""
        while self.operators:
            kind, op, position = self.operators[-1]
            if kind == _PAREN:
                break
            if kind == _BINARY and not op.yields_to(precedence, associativity):
                break
            self.operators.pop()
            self._apply(kind, op, position)

    def _apply(self, kind: str, op: Any, position: int) -> None:
        if kind == _UNARY:
            operand = self.values.pop()
            self.values.append(self._invoke(op.token, op.apply, (operand,), position))
        else:
            right = self.values.pop()
            left = self.values.pop()
            self.values.append(self._invoke(op.token, op.apply, (left, right), position))

    @staticmethod
    def _invoke(token: str, fn: Callable[..., float], args: tuple, position: int) -> float:
        try:
            return fn(*args)
        except (ArithmeticError, ValueError) as exc:
            raise DomainError(token, str(exc), position) from exc

    # ---------- grouping ----------

    def _open_paren(self, lexeme: Token, cursor: TokenCursor) -> None:
        self._require_operand(lexeme)
        self.operators.append((_PAREN, None, lexeme.start_pos))

    def _pop_to_paren(self) -> tuple[str, Any, int] | None:
        """Apply operators down to the nearest paren marker, leaving it in place."""
        while self.operators:
            kind, op, position = self.operators[-1]
            if kind == _PAREN:
                return self.operators[-1]
            self.operators.pop()
            self._apply(kind, op, position)
        return None

    def _has_open_paren(self) -> bool:
        return any(kind == _PAREN for kind, _, _ in self.operators)

    def _comma(self, lexeme: Token, cursor: TokenCursor) -> None:
        if self.expect_operand:
            raise UnexpectedToken(",", "Expected expression, found ','", lexeme.start_pos)
        marker = self._pop_to_paren()
        if marker is None or marker[1] is None:
            raise UnexpectedToken(",", "Comma outside a function call", lexeme.start_pos)
        self.expect_operand = True

    def _close_paren(self, lexeme: Token, cursor: TokenCursor) -> None:
        if self.expect_operand:
            just_opened = self.previous is not None and self.previous.type == LPAR
            if not just_opened:
                if not self._has_open_paren():
                    raise MismatchedParens("Unmatched ')'", lexeme.start_pos, ")")
                raise UnexpectedToken(")", "Expected expression, found ')'", lexeme.start_pos)
            _, call, _ = self.operators[-1]
            if call is None:
                raise UnexpectedToken(
                    ")",
                    "Empty parentheses outside a function call",
                    lexeme.start_pos,
                )
        elif self._pop_to_paren() is None:
            raise MismatchedParens("Unmatched ')'", lexeme.start_pos, ")")
        _, call, _ = self.operators.pop()
        if call is not None:
            args = self.values[call.base:]
            del self.values[call.base:]
            self.values.append(
                self._invoke(
                    call.function.token,
                    call.function.call,
                    (args, call.position),
                    call.position,
                )
            )
        self.expect_operand = False

    # ---------- end of input ----------

    def _finish(self) -> float:
        if self.previous is None:
            raise EmptyExpression(0)
        end = self.previous.end_pos
        if self.expect_operand:
            raise UnexpectedToken(None, "Unexpected end of input, expected expression", end)
        while self.operators:
            kind, op, position = self.operators.pop()
            if kind == _PAREN:
                raise MismatchedParens("Unclosed '('", position, "(")
            self._apply(kind, op, position)
        # the operand/operator states always leave exactly one value here
        if not self.values:
            raise EmptyExpression(end)
        if len(self.values) > 1:
            raise ExcessOperands(len(self.values), end)
        return self.values[0]
