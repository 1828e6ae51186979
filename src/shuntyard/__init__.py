"""shuntyard -- extensible shunting-yard expression evaluator.

Public API::

    from shuntyard import Context, eval_str, eval_str_with_vars, eval_str_with_vars_and_ctx
"""

__version__ = "0.3.0"

from shuntyard.context import Context
from shuntyard.errors import (
    ArityMismatch,
    DomainError,
    EmptyExpression,
    EvalError,
    ExcessOperands,
    LexError,
    MacroDepthExceeded,
    MismatchedParens,
    UndefinedVariable,
    UnexpectedToken,
)
from shuntyard.evaluator import eval_str, eval_str_with_vars, eval_str_with_vars_and_ctx
from shuntyard.functions import Function
from shuntyard.macros import AssignMacro, Macro, ParsedMacro
from shuntyard.operators import Associativity, BinaryOperator, UnaryOperator

__all__ = [
    "ArityMismatch",
    "AssignMacro",
    "Associativity",
    "BinaryOperator",
    "Context",
    "DomainError",
    "EmptyExpression",
    "EvalError",
    "ExcessOperands",
    "Function",
    "LexError",
    "Macro",
    "MacroDepthExceeded",
    "MismatchedParens",
    "ParsedMacro",
    "UnaryOperator",
    "UndefinedVariable",
    "UnexpectedToken",
    "eval_str",
    "eval_str_with_vars",
    "eval_str_with_vars_and_ctx",
]
