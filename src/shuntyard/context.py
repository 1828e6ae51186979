"""Registries of operators, functions and macros used during evaluation.

Register items through the ``insert_*`` methods (or :meth:`Context.insert`)
so the merged operator table used by the tokenizer stays current. A context
is only read while an expression is being evaluated and can be shared by
any number of evaluation calls.
"""

from __future__ import annotations

from typing import Any, Iterable

from shuntyard.functions import Function, default_functions
from shuntyard.macros import Macro, default_macros
from shuntyard.operators import (
    BinaryOperator,
    UnaryOperator,
    default_binary_operators,
    default_unary_operators,
)
from shuntyard.tokenizer import match_identifier

DEFAULT_MAX_MACRO_DEPTH = 64


class Context:
    """Operator, function and macro tables keyed by token text.

    Attributes:
        unary_operators: Prefix operators.
        binary_operators: Infix operators with precedence/associativity.
        functions: Named functions called as ``name(args)``.
        macros: Macros, keyed by their ``token``.
        max_macro_depth: Maximum nesting of macro operands.
    """

    def __init__(
        self,
        unary_operators: Iterable[UnaryOperator] = (),
        binary_operators: Iterable[BinaryOperator] = (),
        functions: Iterable[Function] = (),
        macros: Iterable[Macro] = (),
        *,
        max_macro_depth: int = DEFAULT_MAX_MACRO_DEPTH,
    ) -> None:
        self.unary_operators: dict[str, UnaryOperator] = {}
        self.binary_operators: dict[str, BinaryOperator] = {}
        self.functions: dict[str, Function] = {}
        self.macros: dict[str, Macro] = {}
        self.max_macro_depth = max_macro_depth
        self._operator_tokens: list[str] | None = None
        self._macro_order: list[Macro] | None = None
        self._identifier_at: tuple[tuple[str, int], int] | None = None
        for item in (*unary_operators, *binary_operators, *functions, *macros):
            self.insert(item)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> Context:
        return cls()

    @classmethod
    def default(cls) -> Context:
        """Arithmetic operators ``+ - * / ^``, unary ``+ -`` and the built-in functions."""
        return cls(
            default_unary_operators(),
            default_binary_operators(),
            default_functions(),
        )

    @classmethod
    def default_with_macros(cls) -> Context:
        """:meth:`default` plus the assignment macros ``= += -= *= /=``."""
        ctx = cls.default()
        for macro in default_macros():
            ctx.insert_macro(macro)
        return ctx

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> Context:
        """Build a context from a loaded ``shuntyard.yaml`` configuration.

        Args:
            config: Mapping as returned by :func:`shuntyard.config.load_config`.

        Returns:
            A default context, with macros when ``config["macros"]`` is set.
        """
        ctx = cls.default_with_macros() if config.get("macros") else cls.default()
        ctx.max_macro_depth = int(config.get("max_macro_depth", DEFAULT_MAX_MACRO_DEPTH))
        return ctx

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def insert_unary(self, op: UnaryOperator) -> None:
        self.unary_operators[op.token] = op
        self._operator_tokens = None
        self._identifier_at = None

    def insert_binary(self, op: BinaryOperator) -> None:
        self.binary_operators[op.token] = op
        self._operator_tokens = None
        self._identifier_at = None

    def insert_function(self, function: Function) -> None:
        self.functions[function.token] = function

    def insert_macro(self, macro: Macro) -> None:
        self.macros[macro.token] = macro
        self._macro_order = None

    def insert(self, item: UnaryOperator | BinaryOperator | Function | Macro) -> None:
        """Register ``item`` in the table matching its type, replacing any entry with the same token.

        Raises:
            TypeError: If ``item`` is none of the supported types.
        """
        if isinstance(item, UnaryOperator):
            self.insert_unary(item)
        elif isinstance(item, BinaryOperator):
            self.insert_binary(item)
        elif isinstance(item, Function):
            self.insert_function(item)
        elif isinstance(item, Macro):
            self.insert_macro(item)
        else:
            raise TypeError(f"Cannot register {type(item).__name__} in a Context")

    # ------------------------------------------------------------------
    # Lookup used by the tokenizer and engine
    # ------------------------------------------------------------------

    def operator_tokens(self) -> list[str]:
        """All unary and binary operator tokens, longest first."""
        if self._operator_tokens is None:
            tokens = set(self.unary_operators) | set(self.binary_operators)
            self._operator_tokens = sorted(tokens, key=lambda t: (-len(t), t))
        return self._operator_tokens

    def _macros_longest_first(self) -> list[Macro]:
        if self._macro_order is None:
            self._macro_order = sorted(
                self.macros.values(), key=lambda m: (-len(m.token), m.token)
            )
        return self._macro_order

    def match_operator(self, text: str, pos: int) -> str | None:
        """The longest registered operator token starting at ``pos``."""
        for token in self.operator_tokens():
            if token and text.startswith(token, pos):
                return token
        return None

    def identifier_length(self, text: str, pos: int) -> int:
        """Length of the identifier at ``pos``.

        The result for the most recent position is kept, so every macro tried
        at one position shares a single scan.
        """
        key = (text, pos)
        if self._identifier_at is None or self._identifier_at[0] != key:
            self._identifier_at = (key, match_identifier(text, pos, self))
        return self._identifier_at[1]

    def match_macro(self, text: str, pos: int) -> int | None:
        """Length of the longest macro match at ``pos``, or ``None``."""
        best: int | None = None
        for macro in self._macros_longest_first():
            length = macro.match_input(text, pos, self)
            if length and (best is None or length > best):
                best = length
        return best

    def resolve_macro(self, lexeme: str) -> Macro | None:
        """The macro that matches the whole of ``lexeme``."""
        for macro in self._macros_longest_first():
            if macro.match_input(lexeme, 0, self) == len(lexeme):
                return macro
        return None

    def __repr__(self) -> str:
        return (
            f"Context(unary={sorted(self.unary_operators)}, "
            f"binary={sorted(self.binary_operators)}, "
            f"functions={sorted(self.functions)}, "
            f"macros={sorted(self.macros)})"
        )
