"""Structured pagination events.

Pagination components report what they did through an injected sink instead of
logging ad hoc. The sink never influences control flow: emitting an event must not
raise, and components behave identically whichever sink is plugged in.
"""

import logging
from typing import Any, Dict, List, Protocol, Tuple

logger = logging.getLogger(__name__)

# Events that indicate degraded output and are logged at WARNING by default.
WARNING_EVENTS = frozenset({"page_overflow", "measurement_failed", "comment_fallback"})


class PaginationEventSink(Protocol):
    """Receiver for structured pagination events."""

    def emit(self, event: str, **fields: Any) -> None:
        ...


class LoggingEventSink:
    """Default sink: writes every event to the standard logging system."""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def emit(self, event: str, **fields: Any) -> None:
        level = logging.WARNING if event in WARNING_EVENTS else logging.DEBUG
        if not self.log.isEnabledFor(level):
            return
        rendered = " ".join(f"{key}={value!r}" for key, value in fields.items())
        self.log.log(level, "%s %s", event, rendered, extra={"event": event, "fields": fields})


class NullEventSink:
    """Discards all events."""

    def emit(self, event: str, **fields: Any) -> None:
        return None


class RecordingEventSink:
    """Keeps events in memory, in emission order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append((event, dict(fields)))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def of_type(self, event: str) -> List[Dict[str, Any]]:
        return [fields for name, fields in self.events if name == event]
