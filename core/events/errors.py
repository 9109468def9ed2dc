"""
Escrow Event Bus — Errors
===========================
Raised when a subscription is refused.
Dispatch itself never raises: subscriber failures are reported, not thrown.
"""


class EventBusError(Exception):
    """Base error for Event Bus operations."""


class InvalidEventTypeFormat(EventBusError):
    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"Cannot subscribe to '{event_type}': expected at least "
            f"three non-empty dot-separated segments (engine.domain.action)."
        )


class UnknownEventType(EventBusError):
    """The registry was built for a fixed set of event types and this is not one."""

    def __init__(self, event_type: str, known: frozenset):
        self.event_type = event_type
        self.known = known
        super().__init__(
            f"'{event_type}' is never emitted here. Known types: {sorted(known)}"
        )


class DuplicateSubscriberError(EventBusError):
    def __init__(self, event_type: str, handler_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        super().__init__(
            f"'{handler_name}' is already listening to '{event_type}'."
        )


class SelfSubscriptionError(EventBusError):
    """An engine may only hear its own events with allow_self_subscription=True."""

    def __init__(self, engine: str, event_type: str):
        self.engine = engine
        self.event_type = event_type
        super().__init__(
            f"Engine '{engine}' owns '{event_type}' and cannot "
            f"subscribe to it without allow_self_subscription."
        )
