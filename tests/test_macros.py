"""Tests for the macro protocol and the assignment macros."""

from __future__ import annotations

from typing import MutableMapping

import pytest
from lark import Token

from shuntyard import (
    Associativity,
    Context,
    EmptyExpression,
    Macro,
    MacroDepthExceeded,
    ParsedMacro,
    UndefinedVariable,
    UnexpectedToken,
    eval_str_with_vars_and_ctx,
)
from shuntyard.macros import AssignMacro
from shuntyard.tokenizer import NAME, TokenCursor


# ────────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────────


class _StoreParsed(ParsedMacro):
    def __init__(self, name: str) -> None:
        self.name = name

    def execute(
        self,
        left: float | None,
        variables: MutableMapping[str, float],
        ctx: Context,
        depth: int = 0,
    ) -> float:
        assert left is not None
        variables[self.name] = left
        return left


class StoreMacro(Macro):
    """``expr -> name`` stores the left operand under ``name``."""

    infix = True

    def __init__(self, precedence: int = -1) -> None:
        self.token = "->"
        self.precedence = precedence
        self.associativity = Associativity.left

    def parse(self, lexeme: Token, cursor: TokenCursor, ctx: Context) -> ParsedMacro:
        target = cursor.next()
        if target is None or target.type != NAME:
            raise UnexpectedToken(None if target is None else str(target), "Expected a name after '->'", lexeme.end_pos)
        return _StoreParsed(str(target))


def _run(expr: str, variables: dict[str, float] | None = None, ctx: Context | None = None) -> float:
    return eval_str_with_vars_and_ctx(
        expr,
        variables if variables is not None else {},
        ctx or Context.default_with_macros(),
    )


# ────────────────────────────────────────────────────────────────
# Assignment
# ────────────────────────────────────────────────────────────────


class TestAssign:
    def test_assign_literal(self) -> None:
        variables: dict[str, float] = {}
        assert _run("a = 10", variables) == 10.0
        assert variables == {"a": 10.0}

    def test_assign_expression(self) -> None:
        variables: dict[str, float] = {}
        assert _run("a = 22.0 + 20.0", variables) == 42.0
        assert variables["a"] == 42.0

    def test_store_persists_across_calls(self) -> None:
        variables: dict[str, float] = {}
        _run("a = 5", variables)
        assert _run("a * 2", variables) == 10.0

    def test_reassign_uses_old_value(self) -> None:
        variables = {"a": 3.0}
        assert _run("a = a * a", variables) == 9.0
        assert variables["a"] == 9.0

    def test_chained(self) -> None:
        variables: dict[str, float] = {}
        assert _run("a = b = 3", variables) == 3.0
        assert variables == {"a": 3.0, "b": 3.0}

    def test_inside_parens(self) -> None:
        variables: dict[str, float] = {}
        assert _run("(a = 3) + 1", variables) == 4.0
        assert variables["a"] == 3.0

    def test_right_hand_side_of_operator(self) -> None:
        variables: dict[str, float] = {}
        assert _run("1 + (b = 2) * 3", variables) == 7.0
        assert _run("1 + c = 2", variables) == 3.0
        assert variables == {"b": 2.0, "c": 2.0}

    def test_binary_before_assignment(self) -> None:
        """``a + b = c`` adds ``a`` to the assigned value."""
        variables = {"a": 1.0, "c": 4.0}
        assert _run("a + b = c", variables) == 5.0
        assert variables["b"] == 4.0

    def test_function_argument(self) -> None:
        variables: dict[str, float] = {}
        assert _run("max(a = 2, 5)", variables) == 5.0
        assert variables["a"] == 2.0

    def test_missing_right_hand_side(self) -> None:
        with pytest.raises(EmptyExpression):
            _run("a =")

    def test_number_is_not_a_target(self) -> None:
        with pytest.raises(UnexpectedToken):
            _run("1 = 2")

    def test_macros_absent_from_default_context(self) -> None:
        with pytest.raises(UndefinedVariable):
            eval_str_with_vars_and_ctx("a = 1", {}, Context.default())

    def test_compact_binary_before_target(self) -> None:
        variables = {"a": 1.0, "c": 4.0}
        assert _run("a+b = c", variables) == 5.0
        assert variables["b"] == 4.0

    def test_compact_product_with_assignment(self) -> None:
        variables: dict[str, float] = {}
        assert _run("2*x = 3", variables) == 6.0
        assert variables == {"x": 3.0}

    def test_unary_prefix_is_not_part_of_target(self) -> None:
        variables: dict[str, float] = {}
        assert _run("-x = 3", variables) == -3.0
        assert variables == {"x": 3.0}

    def test_no_rollback_on_failure(self) -> None:
        variables: dict[str, float] = {}
        with pytest.raises(UndefinedVariable):
            _run("(a = 5) + b", variables)
        assert variables == {"a": 5.0}


class TestCompoundAssign:
    @pytest.mark.parametrize(
        "expr, expected",
        [("a += 2", 7.0), ("a -= 1", 4.0), ("a *= 3", 15.0), ("a /= 2", 2.5), ("a+=2*3", 11.0)],
    )
    def test_forms(self, expr: str, expected: float) -> None:
        variables = {"a": 5.0}
        assert _run(expr, variables) == expected
        assert variables["a"] == expected

    def test_needs_existing_value(self) -> None:
        with pytest.raises(UndefinedVariable):
            _run("c += 1")

    def test_missing_operator(self) -> None:
        ctx = Context.empty()
        ctx.insert_macro(AssignMacro("%"))
        with pytest.raises(UnexpectedToken, match="compound assignment"):
            eval_str_with_vars_and_ctx("a %= 2", {"a": 1.0}, ctx)


class TestMatchInput:
    @pytest.mark.parametrize(
        "text, expected",
        [("a = 10", 3), ("a = b", 3), ("a =", 3), ("abc=1", 4), ("10 = ", None), ("a == b", None), ("a", None)],
    )
    def test_plain(self, text: str, expected: int | None) -> None:
        assert AssignMacro().match_input(text, 0, Context.default()) == expected

    def test_compound(self) -> None:
        ctx = Context.default()
        assert AssignMacro("+").match_input("x += 1", 0, ctx) == 4
        assert AssignMacro("+").match_input("x = 1", 0, ctx) is None
        assert AssignMacro().match_input("x += 1", 0, ctx) is None


# ────────────────────────────────────────────────────────────────
# Custom infix macro
# ────────────────────────────────────────────────────────────────


class TestInfixMacro:
    def _ctx(self, precedence: int = -1) -> Context:
        ctx = Context.default()
        ctx.insert_macro(StoreMacro(precedence))
        return ctx

    def test_pending_operators_applied_first(self) -> None:
        variables: dict[str, float] = {}
        assert _run("1 + 2 -> x", variables, self._ctx()) == 3.0
        assert variables == {"x": 3.0}

    def test_evaluation_continues_after_macro(self) -> None:
        variables: dict[str, float] = {}
        assert _run("2 * 3 -> y + 1", variables, self._ctx()) == 7.0
        assert variables == {"y": 6.0}

    def test_high_precedence_takes_nearest_operand(self) -> None:
        variables: dict[str, float] = {}
        assert _run("2 * 3 -> z", variables, self._ctx(precedence=5)) == 6.0
        assert variables == {"z": 3.0}

    def test_requires_left_operand(self) -> None:
        with pytest.raises(UnexpectedToken, match="found macro"):
            _run("-> x", {}, self._ctx())

    def test_parse_error_from_macro(self) -> None:
        with pytest.raises(UnexpectedToken, match="Expected a name"):
            _run("1 -> 2", {}, self._ctx())


class TestDepth:
    def test_limit(self) -> None:
        ctx = Context.default_with_macros()
        ctx.max_macro_depth = 1
        assert _run("a = 1", {}, ctx) == 1.0
        with pytest.raises(MacroDepthExceeded):
            _run("a = b = c = 1", {}, ctx)
