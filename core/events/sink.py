"""
Escrow Event Bus — Event Sinks
================================
The narrow interface the rental engine emits through.

The engine calls `sink.emit(event)` exactly once per completed
transition, in commit order. How (and whether) the event travels
further is the sink's business. A sink that raises does not undo the
transition; the engine logs the failure and carries on.
"""

from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Deque, Optional, Protocol, Tuple

from core.events.dispatcher import DispatchReport, dispatch
from core.events.models import DomainEvent
from core.events.registry import SubscriberRegistry


class EventSink(Protocol):
    def emit(self, event: DomainEvent) -> None:
        ...  # pragma: no cover


class RecordingEventSink:
    """
    Keeps emitted events in emission order.

    max_events bounds the history: once full, the oldest event is
    dropped. None keeps everything (tests, short-lived wiring).
    """

    def __init__(self, max_events: Optional[int] = None) -> None:
        if max_events is not None and max_events <= 0:
            raise ValueError(f"max_events must be > 0 or None, got {max_events!r}.")
        self._events: Deque[DomainEvent] = deque(maxlen=max_events)
        self._lock = Lock()

    def emit(self, event: DomainEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> Tuple[DomainEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def of_type(self, event_type: str) -> Tuple[DomainEvent, ...]:
        return tuple(e for e in self.events if e.event_type == event_type)


class DispatchingEventSink(RecordingEventSink):
    """Records, then routes to subscribers. The same bound applies to dispatch reports."""

    def __init__(self, registry: SubscriberRegistry, max_events: Optional[int] = None) -> None:
        super().__init__(max_events)
        self._registry = registry
        self._reports: Deque[DispatchReport] = deque(maxlen=max_events)

    def emit(self, event: DomainEvent) -> None:
        super().emit(event)
        report = dispatch(event, self._registry)
        with self._lock:
            self._reports.append(report)

    @property
    def reports(self) -> Tuple[DispatchReport, ...]:
        with self._lock:
            return tuple(self._reports)
