"""Single-call entry points for evaluating expression strings.

Public API::

    from shuntyard import eval_str, eval_str_with_vars, eval_str_with_vars_and_ctx

A failed call leaves the variable store with whatever assignments macros
made before the failure; nothing is rolled back.
"""

from __future__ import annotations

import time
from typing import MutableMapping

from shuntyard.context import Context
from shuntyard.engine import evaluate_tokens
from shuntyard.errors import EvalError
from shuntyard.logging.events import EventType, emit_error, emit_info
from shuntyard.tokenizer import TokenStream


def eval_str(expr: str) -> float:
    """Evaluate ``expr`` with the default context and no variables."""
    return eval_str_with_vars_and_ctx(expr, {}, Context.default())


def eval_str_with_vars(expr: str, variables: MutableMapping[str, float]) -> float:
    """Evaluate ``expr`` with the default context against ``variables``."""
    return eval_str_with_vars_and_ctx(expr, variables, Context.default())


def eval_str_with_vars_and_ctx(
    expr: str,
    variables: MutableMapping[str, float],
    ctx: Context,
) -> float:
    """Evaluate ``expr`` against a caller-supplied store and context.

    Args:
        expr: Expression source, e.g. ``"a = 22 + 20"``.
        variables: Any mutable mapping of names to numbers; macros may write to it.
        ctx: Operators, functions and macros available to the expression.

    Returns:
        The numeric result.

    Raises:
        EvalError: Any subclass describing the first failure.
    """
    started = time.monotonic()
    try:
        result = evaluate_tokens(TokenStream(expr, ctx), variables, ctx)
    except EvalError as exc:
        emit_error(
            EventType.eval_failed,
            str(exc),
            {"expr": expr, "position": exc.position},
            error_code=type(exc).__name__,
        )
        raise
    emit_info(
        EventType.eval_completed,
        f"evaluated to {result!r}",
        {
            "expr": expr,
            "result": result,
            "duration_ms": round((time.monotonic() - started) * 1000, 3),
        },
    )
    return result
