"""Tests for Context registries, token matching and construction from config."""

from __future__ import annotations

import pytest

from shuntyard import (
    AssignMacro,
    Associativity,
    BinaryOperator,
    Context,
    Function,
    UnaryOperator,
    eval_str_with_vars_and_ctx,
)
from shuntyard.context import DEFAULT_MAX_MACRO_DEPTH


# ────────────────────────────────────────────────────────────────
# Construction
# ────────────────────────────────────────────────────────────────


class TestConstructors:
    def test_empty(self) -> None:
        ctx = Context.empty()
        assert ctx.unary_operators == {}
        assert ctx.binary_operators == {}
        assert ctx.functions == {}
        assert ctx.macros == {}
        assert ctx.max_macro_depth == DEFAULT_MAX_MACRO_DEPTH

    def test_default(self) -> None:
        ctx = Context.default()
        assert set(ctx.binary_operators) == {"+", "-", "*", "/", "^"}
        assert set(ctx.unary_operators) == {"+", "-"}
        assert {"max", "sum", "sub", "prod"} <= set(ctx.functions)
        assert ctx.macros == {}

    def test_default_precedences(self) -> None:
        ops = Context.default().binary_operators
        assert ops["+"].precedence == ops["-"].precedence == 0
        assert ops["*"].precedence == ops["/"].precedence == 1
        assert ops["^"].precedence == 2
        assert ops["^"].associativity == Associativity.right
        assert ops["+"].associativity == Associativity.left

    def test_default_with_macros(self) -> None:
        ctx = Context.default_with_macros()
        assert set(ctx.macros) == {"=", "+=", "-=", "*=", "/="}
        assert set(ctx.binary_operators) == set(Context.default().binary_operators)

    def test_constructor_iterables(self) -> None:
        ctx = Context(
            [UnaryOperator(token="!", function=lambda v: -v)],
            [BinaryOperator(token="&", precedence=0, function=lambda a, b: a + b)],
            [Function(token="one", arity=0, function=lambda args: 1.0)],
            [AssignMacro()],
            max_macro_depth=3,
        )
        assert list(ctx.unary_operators) == ["!"]
        assert list(ctx.binary_operators) == ["&"]
        assert list(ctx.functions) == ["one"]
        assert list(ctx.macros) == ["="]
        assert ctx.max_macro_depth == 3

    def test_contexts_are_independent(self) -> None:
        first = Context.default()
        second = Context.default()
        first.insert_function(Function(token="two", arity=0, function=lambda args: 2.0))
        assert "two" not in second.functions

    def test_from_config(self) -> None:
        ctx = Context.from_config({"macros": True, "max_macro_depth": 5})
        assert "=" in ctx.macros
        assert ctx.max_macro_depth == 5
        assert Context.from_config({}).macros == {}


# ────────────────────────────────────────────────────────────────
# Registration
# ────────────────────────────────────────────────────────────────


class TestInsert:
    def test_dispatch_by_type(self) -> None:
        ctx = Context.empty()
        ctx.insert(UnaryOperator(token="~", function=lambda v: -v))
        ctx.insert(BinaryOperator(token="~", precedence=0, function=lambda a, b: a - b))
        ctx.insert(Function(token="f", function=lambda args: sum(args)))
        ctx.insert(AssignMacro("+"))
        assert "~" in ctx.unary_operators
        assert "~" in ctx.binary_operators
        assert "f" in ctx.functions
        assert "+=" in ctx.macros

    def test_same_token_replaces(self) -> None:
        ctx = Context.default()
        ctx.insert(BinaryOperator(token="+", precedence=0, function=lambda a, b: a - b))
        assert eval_str_with_vars_and_ctx("5 + 3", {}, ctx) == 2.0

    def test_rejects_unknown_type(self) -> None:
        with pytest.raises(TypeError):
            Context.empty().insert("+")  # type: ignore[arg-type]

    def test_insert_refreshes_operator_table(self) -> None:
        ctx = Context.default()
        assert "**" not in ctx.operator_tokens()
        ctx.insert_binary(
            BinaryOperator(token="**", precedence=2, associativity=Associativity.right, function=pow)
        )
        assert ctx.operator_tokens()[0] == "**"
        assert eval_str_with_vars_and_ctx("2 ** 3", {}, ctx) == 8.0


# ────────────────────────────────────────────────────────────────
# Matching
# ────────────────────────────────────────────────────────────────


class TestMatching:
    def test_operator_tokens_longest_first(self) -> None:
        ctx = Context.default()
        ctx.insert_unary(UnaryOperator(token="$$$", function=lambda v: v))
        tokens = ctx.operator_tokens()
        assert tokens[0] == "$$$"
        assert sorted(tokens[1:]) == ["*", "+", "-", "/", "^"]

    def test_match_operator(self) -> None:
        ctx = Context.default()
        assert ctx.match_operator("1 + 2", 2) == "+"
        assert ctx.match_operator("1 + 2", 0) is None

    def test_match_operator_prefers_longest(self) -> None:
        ctx = Context.default()
        ctx.insert_binary(BinaryOperator(token="--", precedence=0, function=lambda a, b: a))
        assert ctx.match_operator("a--b", 1) == "--"

    def test_match_macro(self) -> None:
        ctx = Context.default_with_macros()
        assert ctx.match_macro("a = 1", 0) == 3
        assert ctx.match_macro("a += 1", 0) == 4
        assert ctx.match_macro("a + 1", 0) is None

    def test_identifier_scanned_once_per_position(self, monkeypatch: pytest.MonkeyPatch) -> None:
        import shuntyard.context as context_module

        calls: list[int] = []
        real = context_module.match_identifier

        def counting(text: str, pos: int, ctx: Context) -> int:
            calls.append(pos)
            return real(text, pos, ctx)

        monkeypatch.setattr(context_module, "match_identifier", counting)
        ctx = Context.default_with_macros()
        assert ctx.match_macro("total += 1", 0) == 8
        assert calls == [0]
        assert ctx.identifier_length("total += 1", 0) == 5
        assert calls == [0]

    def test_identifier_cache_refreshed_by_operator_insert(self) -> None:
        ctx = Context.default()
        assert ctx.identifier_length("a%b", 0) == 3
        ctx.insert_binary(BinaryOperator(token="%", precedence=1, function=lambda a, b: a % b))
        assert ctx.identifier_length("a%b", 0) == 1

    def test_resolve_macro(self) -> None:
        ctx = Context.default_with_macros()
        assert ctx.resolve_macro("a =").token == "="
        assert ctx.resolve_macro("total *=").token == "*="
        assert ctx.resolve_macro("a") is None

    def test_repr(self) -> None:
        text = repr(Context.default_with_macros())
        assert "binary=['*', '+', '-', '/', '^']" in text
        assert "'='" in text


class TestSharing:
    def test_one_context_many_stores(self) -> None:
        ctx = Context.default_with_macros()
        first: dict[str, float] = {}
        second: dict[str, float] = {}
        eval_str_with_vars_and_ctx("x = 1", first, ctx)
        eval_str_with_vars_and_ctx("x = 2", second, ctx)
        assert first == {"x": 1.0}
        assert second == {"x": 2.0}
