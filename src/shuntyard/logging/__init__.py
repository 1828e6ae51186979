"""Structured event logging for shuntyard.

Provides the event schema, a filesystem NDJSON sink, and emit helpers
that never raise.
"""

from shuntyard.logging.events import (
    CalcEvent,
    EventLevel,
    EventType,
    clear_log_dir,
    emit,
    emit_error,
    emit_info,
    set_log_dir,
)
from shuntyard.logging.sink import EventSink

__all__ = [
    "CalcEvent",
    "EventLevel",
    "EventSink",
    "EventType",
    "clear_log_dir",
    "emit",
    "emit_error",
    "emit_info",
    "set_log_dir",
]
