"""Function definitions and the built-in function table.

Built-ins are registered with :func:`builtin` into a module-level table and
copied into each new :class:`~shuntyard.context.Context`.
"""

from __future__ import annotations

import math
from typing import Callable

from pydantic import BaseModel, ConfigDict

from shuntyard.errors import ArityMismatch


class Function(BaseModel):
    """A named native function invoked as ``token(arg, ...)``.

    Attributes:
        token: The call name.
        arity: Required argument count, or ``None`` for variadic functions.
        function: Callable receiving the evaluated arguments as a list.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    arity: int | None = None
    function: Callable[[list[float]], float]

    def call(self, args: list[float], position: int | None = None) -> float:
        """Invoke the function after checking the argument count.

        Args:
            args: Evaluated arguments, left to right.
            position: Source offset of the call, used in error reports.

        Returns:
            The function result as a float.

        Raises:
            ArityMismatch: If a fixed-arity function gets the wrong count.
        """
        if self.arity is not None and len(args) != self.arity:
            raise ArityMismatch(self.token, self.arity, len(args), position)
        return float(self.function(args))


_BUILTINS: dict[str, Function] = {}


def builtin(name: str, arity: int | None = None) -> Callable:
    """Decorator that registers a built-in function by name.

    Args:
        name: The call name for this function.
        arity: Fixed argument count, or ``None`` for variadic.

    Returns:
        The original function, unmodified.
    """

    def decorator(fn: Callable) -> Callable:
        _BUILTINS[name] = Function(token=name, arity=arity, function=fn)
        return fn

    return decorator


def default_functions() -> list[Function]:
    """Return the registered built-ins in registration order."""
    return list(_BUILTINS.values())


@builtin("max", arity=2)
def fn_max(args: list[float]) -> float:
    return max(args[0], args[1])


@builtin("min", arity=2)
def fn_min(args: list[float]) -> float:
    return min(args[0], args[1])


@builtin("sub", arity=2)
def fn_sub(args: list[float]) -> float:
    return args[0] - args[1]


@builtin("sum")
def fn_sum(args: list[float]) -> float:
    """Sum of any number of arguments; ``sum()`` is 0."""
    return math.fsum(args)


@builtin("prod")
def fn_prod(args: list[float]) -> float:
    """Product of any number of arguments; ``prod()`` is 1."""
    return math.prod(args)


@builtin("avg")
def fn_avg(args: list[float]) -> float:
    if not args:
        raise ValueError("avg requires at least 1 argument")
    return math.fsum(args) / len(args)


@builtin("pow", arity=2)
def fn_pow(args: list[float]) -> float:
    return math.pow(args[0], args[1])


@builtin("sqrt", arity=1)
def fn_sqrt(args: list[float]) -> float:
    return math.sqrt(args[0])


@builtin("abs", arity=1)
def fn_abs(args: list[float]) -> float:
    return abs(args[0])


@builtin("exp", arity=1)
def fn_exp(args: list[float]) -> float:
    return math.exp(args[0])


@builtin("ln", arity=1)
def fn_ln(args: list[float]) -> float:
    return math.log(args[0])


@builtin("floor", arity=1)
def fn_floor(args: list[float]) -> float:
    return float(math.floor(args[0]))


@builtin("ceil", arity=1)
def fn_ceil(args: list[float]) -> float:
    return float(math.ceil(args[0]))


@builtin("round", arity=1)
def fn_round(args: list[float]) -> float:
    return float(round(args[0]))
