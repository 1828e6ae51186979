"""Lexer that turns an expression string into a lazy stream of tokens.

Tokens are :class:`lark.Token` instances. ``type`` is one of ``NUMBER``,
``NAME``, ``OPERATOR``, ``MACRO``, ``LPAR``, ``RPAR`` or ``COMMA``;
``start_pos`` is the character offset in the source.

At each position the lexer tries, in order:

1. punctuation ``(`` ``)`` ``,``
2. registered macros (each macro reports its own match length)
3. registered operators, longest token first
4. numeric literals: ``digits? ('.' digits?)?`` with at least one digit
5. identifiers: printable non-whitespace runs, cut where an operator begins

Identifiers are not classified here. Whether ``foo`` is a function or a
variable is decided by the engine.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, Iterator

from lark import Token

from shuntyard.errors import LexError
from shuntyard.operators import Associativity

if TYPE_CHECKING:
    from shuntyard.context import Context


NUMBER = "NUMBER"
NAME = "NAME"
OPERATOR = "OPERATOR"
MACRO = "MACRO"
LPAR = "LPAR"
RPAR = "RPAR"
COMMA = "COMMA"

_PUNCTUATION = {"(": LPAR, ")": RPAR, ",": COMMA}

_NUMBER_RE = re.compile(r"[0-9]*\.?[0-9]*")


def make_token(type_: str, text: str, pos: int) -> Token:
    """Build a single-line lark token spanning ``text`` at offset ``pos``."""
    return Token(
        type_,
        text,
        start_pos=pos,
        line=1,
        column=pos + 1,
        end_line=1,
        end_column=pos + len(text) + 1,
        end_pos=pos + len(text),
    )


def skip_whitespace(text: str, pos: int) -> int:
    """Return the first offset at or after ``pos`` that is not whitespace."""
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _is_name_char(ch: str) -> bool:
    return ch.isprintable() and not ch.isspace() and ch not in _PUNCTUATION


def match_number(text: str, pos: int = 0) -> int:
    """Length of the numeric literal starting at ``pos``, or 0.

    Raises:
        LexError: If the literal is followed by a second decimal point.
    """
    m = _NUMBER_RE.match(text, pos)
    literal = m.group(0)
    if not any(ch.isdigit() for ch in literal):
        return 0
    end = m.end()
    if end < len(text) and text[end] == ".":
        bad_end = end
        while bad_end < len(text) and (text[bad_end].isdigit() or text[bad_end] == "."):
            bad_end += 1
        raise LexError(
            text[pos:bad_end],
            pos,
            f"Malformed number literal {text[pos:bad_end]!r}",
        )
    return end - pos


def match_identifier(text: str, pos: int, ctx: Context) -> int:
    """Length of the identifier starting at ``pos``, or 0.

    The identifier ends at whitespace, punctuation, or the first offset where
    a registered operator token begins, so ``a-b`` lexes as three tokens.
    """
    if pos >= len(text):
        return 0
    first = text[pos]
    if first.isdigit() or first == "." or not _is_name_char(first):
        return 0
    if ctx.match_operator(text, pos) is not None:
        return 0
    end = pos + 1
    while end < len(text) and _is_name_char(text[end]):
        if ctx.match_operator(text, end) is not None:
            break
        end += 1
    return end - pos


def _next_token(text: str, pos: int, ctx: Context) -> Token:
    ch = text[pos]
    if ch in _PUNCTUATION:
        return make_token(_PUNCTUATION[ch], ch, pos)
    length = ctx.match_macro(text, pos)
    if length is not None:
        return make_token(MACRO, text[pos:pos + length], pos)
    op = ctx.match_operator(text, pos)
    if op is not None:
        return make_token(OPERATOR, op, pos)
    length = match_number(text, pos)
    if length:
        return make_token(NUMBER, text[pos:pos + length], pos)
    length = match_identifier(text, pos, ctx)
    if length:
        return make_token(NAME, text[pos:pos + length], pos)
    end = pos + 1
    while end < len(text) and not text[end].isspace():
        end += 1
    raise LexError(text[pos:end], pos)


def tokenize(text: str, ctx: Context) -> Iterator[Token]:
    """Lazily yield the tokens of ``text`` using the registries in ``ctx``.

    Args:
        text: The expression source.
        ctx: Context supplying operator and macro tokens.

    Yields:
        Tokens in source order.

    Raises:
        LexError: On input that matches nothing, raised when reached.
    """
    pos = skip_whitespace(text, 0)
    while pos < len(text):
        token = _next_token(text, pos, ctx)
        yield token
        pos = skip_whitespace(text, token.end_pos)


class TokenStream:
    """Restartable token sequence: each iteration re-lexes the source."""

    def __init__(self, text: str, ctx: Context) -> None:
        self.text = text
        self.ctx = ctx

    def __iter__(self) -> Iterator[Token]:
        return tokenize(self.text, self.ctx)

    def __repr__(self) -> str:
        return f"TokenStream({self.text!r})"


class TokenCursor:
    """Single-pass cursor with one token of lookahead.

    The engine drives evaluation through a cursor, and macros receive the
    same cursor to consume their right-hand operand.
    """

    def __init__(self, tokens: Iterable[Token], ctx: Context) -> None:
        self._tokens = iter(tokens)
        self._peeked: list[Token] = []
        self.ctx = ctx
        self.last: Token | None = None

    def peek(self) -> Token | None:
        if not self._peeked:
            nxt = next(self._tokens, None)
            if nxt is None:
                return None
            self._peeked.append(nxt)
        return self._peeked[0]

    def next(self) -> Token | None:
        tok = self.peek()
        if tok is not None:
            self._peeked.pop()
            self.last = tok
        return tok

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        tok = self.next()
        if tok is None:
            raise StopIteration
        return tok

    def take_operand(
        self,
        precedence: int | None = None,
        associativity: Associativity = Associativity.right,
    ) -> list[Token]:
        """Consume the tokens forming a right-hand operand.

        Collection stops before an unmatched ``)`` or ``,`` and at end of
        input. When ``precedence`` is given it also stops before a binary
        operator at nesting depth 0 that binds looser than ``precedence``
        (or equally, for a left-associative owner).

        Args:
            precedence: Binding strength of the operand's owner, or ``None``
                to take the whole enclosing sub-expression.
            associativity: Associativity of the owner.

        Returns:
            The consumed tokens, possibly empty.
        """
        collected: list[Token] = []
        depth = 0
        expect_operand = True
        while True:
            tok = self.peek()
            if tok is None:
                break
            kind = tok.type
            if kind == RPAR:
                if depth == 0:
                    break
                depth -= 1
                expect_operand = False
            elif kind == COMMA:
                if depth == 0:
                    break
                expect_operand = True
            elif kind == LPAR:
                depth += 1
                expect_operand = True
            elif kind == NUMBER:
                expect_operand = False
            elif kind == NAME:
                expect_operand = str(tok) in self.ctx.functions
            elif kind == MACRO:
                macro = self.ctx.resolve_macro(str(tok))
                if macro is not None and macro.infix and not expect_operand:
                    if depth == 0 and self._binds_looser(
                        macro.precedence, precedence, associativity
                    ):
                        break
                expect_operand = True
            elif kind == OPERATOR and not expect_operand:
                op = self.ctx.binary_operators.get(str(tok))
                if op is not None and depth == 0 and self._binds_looser(
                    op.precedence, precedence, associativity
                ):
                    break
                expect_operand = True
            collected.append(tok)
            self.next()
        return collected

    @staticmethod
    def _binds_looser(
        candidate: int,
        owner: int | None,
        associativity: Associativity,
    ) -> bool:
        if owner is None:
            return False
        if candidate < owner:
            return True
        return candidate == owner and associativity == Associativity.left
