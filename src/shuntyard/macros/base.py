"""Two-phase macro protocol.

A :class:`Macro` is matched by the tokenizer and then parsed: it pulls its
right-hand operand off the token cursor and returns a :class:`ParsedMacro`.
The parsed form is executed against the variable store to produce a value.
Parsing never sees the store and execution never sees the cursor.

Infix macros sit in operator position and behave like binary operators
with respect to the operator stack: pending operators that bind tighter
are applied first, then the left operand is popped and handed to
:meth:`ParsedMacro.execute`. Prefix macros sit in operand position and
receive ``left=None``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, MutableMapping

from lark import Token

from shuntyard.operators import Associativity

if TYPE_CHECKING:
    from shuntyard.context import Context
    from shuntyard.tokenizer import TokenCursor


class ParsedMacro(ABC):
    """Result of a macro's parse phase, ready to execute."""

    @abstractmethod
    def execute(
        self,
        left: float | None,
        variables: MutableMapping[str, float],
        ctx: Context,
        depth: int = 0,
    ) -> float:
        """Run the macro.

        Args:
            left: The popped left operand for infix macros, else ``None``.
            variables: The caller's variable store; may be mutated.
            ctx: The active context.
            depth: Current macro nesting depth, passed on when re-entering
                the engine.

        Returns:
            The value the engine pushes in place of the macro.
        """


class Macro(ABC):
    """A registered macro.

    Attributes:
        token: Registry key. Also the literal matched by the default
            :meth:`match_input`.
        precedence: Binding strength relative to binary operators.
        associativity: Tie-break against operators of equal precedence.
        infix: Whether the macro takes a left operand.
    """

    token: str
    precedence: int = -1
    associativity: Associativity = Associativity.right
    infix: bool = False

    def match_input(self, text: str, pos: int, ctx: Context) -> int | None:
        """Return the match length at ``pos``, or ``None`` if no match."""
        if text.startswith(self.token, pos):
            return len(self.token)
        return None

    @abstractmethod
    def parse(self, lexeme: Token, cursor: TokenCursor, ctx: Context) -> ParsedMacro:
        """Consume the right-hand operand from ``cursor``.

        Args:
            lexeme: The matched macro token.
            cursor: Cursor positioned just after ``lexeme``.
            ctx: The active context.

        Returns:
            The parsed form.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.token!r})"
