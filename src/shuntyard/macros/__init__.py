"""Macro protocol and the default macros.

Public API::

    from shuntyard.macros import Macro, ParsedMacro, AssignMacro, default_macros
"""

from shuntyard.macros.assign import AssignMacro, AssignParsed
from shuntyard.macros.base import Macro, ParsedMacro


def default_macros() -> list[Macro]:
    """Plain assignment plus the compound forms over the default operators."""
    return [AssignMacro(), AssignMacro("+"), AssignMacro("-"), AssignMacro("*"), AssignMacro("/")]


__all__ = [
    "AssignMacro",
    "AssignParsed",
    "Macro",
    "ParsedMacro",
    "default_macros",
]
