"""Error types for tokenizing, parsing and evaluating expressions."""

from __future__ import annotations


class EvalError(Exception):
    """Base class for all evaluation errors.

    Attributes:
        position: Character offset in the source expression, when known.
        detail: The message without the position suffix.
    """

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        self.detail = message
        full = message
        if position is not None:
            full += f" (at position {position})"
        super().__init__(full)

    def report(self, expr: str) -> str:
        """Render a caret diagnostic pointing at the failing position.

        Args:
            expr: The expression that failed to evaluate.

        Returns:
            A multi-line string: the expression, a caret line and the message.
        """
        width = max(len(getattr(self, "token", "") or ""), 1)
        lines = [f"| {expr}"]
        if self.position is not None:
            lines.append("| " + " " * self.position + "^" * width)
        lines.append(f"= {self.detail}")
        return "\n".join(lines)


class LexError(EvalError):
    """Malformed numeric literal or unrecognized character sequence.

    Attributes:
        token: The offending source text.
    """

    def __init__(self, token: str, position: int, message: str | None = None) -> None:
        self.token = token
        super().__init__(message or f"Unrecognized input {token!r}", position)


class UndefinedVariable(EvalError):
    """Identifier not present in the variable store.

    Attributes:
        name: The unresolved identifier.
        available: Names that were present in the store.
    """

    def __init__(
        self,
        name: str,
        position: int | None = None,
        available: list[str] | None = None,
    ) -> None:
        self.name = name
        self.token = name
        self.available = available or []
        msg = f"Undefined variable: {name!r}"
        if self.available:
            msg += f". Available: {self.available}"
        super().__init__(msg, position)


class MismatchedParens(EvalError):
    """Unbalanced grouping."""

    def __init__(self, message: str, position: int | None = None, token: str | None = None) -> None:
        self.token = token
        super().__init__(message, position)


class UnexpectedToken(EvalError):
    """Token not valid in the current parser state.

    Attributes:
        token: Text of the token, or ``None`` at end of input.
    """

    def __init__(self, token: str | None, message: str, position: int | None = None) -> None:
        self.token = token
        super().__init__(message, position)


class EmptyExpression(EvalError):
    """Nothing to evaluate."""

    def __init__(self, position: int | None = None) -> None:
        super().__init__("Empty expression", position)


class ExcessOperands(EvalError):
    """More than one value left once input is exhausted."""

    def __init__(self, count: int, position: int | None = None) -> None:
        self.count = count
        super().__init__(f"Expected a single result, found {count} operands", position)


class ArityMismatch(EvalError):
    """Function called with the wrong number of arguments.

    Attributes:
        func_name: The function token.
        expected: Declared arity.
        actual: Number of arguments supplied.
    """

    def __init__(
        self,
        func_name: str,
        expected: int,
        actual: int,
        position: int | None = None,
    ) -> None:
        self.func_name = func_name
        self.token = func_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Arity of function {func_name!r} mismatched: "
            f"expected {expected}, actual {actual}",
            position,
        )


class DomainError(EvalError):
    """A registered operator or function rejected its inputs."""

    def __init__(self, token: str, message: str, position: int | None = None) -> None:
        self.token = token
        super().__init__(f"{token!r} failed: {message}", position)


class MacroDepthExceeded(EvalError):
    """Macro operands nested deeper than the context allows."""

    def __init__(self, limit: int, position: int | None = None) -> None:
        self.limit = limit
        super().__init__(f"Macro nesting exceeds {limit} levels", position)

