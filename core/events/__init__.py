"""
Escrow Event Bus — Public API
===============================
The store commits the transition. The bus tells the world.
"""

from core.events.dispatcher import DispatchReport, SubscriberFailure, dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
    UnknownEventType,
)
from core.events.models import DomainEvent
from core.events.registry import Subscription, SubscriberRegistry
from core.events.sink import DispatchingEventSink, EventSink, RecordingEventSink

__all__ = [
    "dispatch",
    "DispatchReport",
    "SubscriberFailure",
    "DomainEvent",
    "EventSink",
    "RecordingEventSink",
    "DispatchingEventSink",
    "Subscription",
    "SubscriberRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "UnknownEventType",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
]
