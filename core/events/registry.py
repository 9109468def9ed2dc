"""
Escrow Event Bus — Subscriber Registry
=========================================
Who hears which agreement events.

Audit trails and notification adapters subscribe here and get a
Subscription handle back; the emitting engine never knows who is
listening. A registry may be closed over the event types its engine
actually emits, so a typo in a subscription fails at wiring time
instead of silently never firing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
    UnknownEventType,
)

logger = logging.getLogger("escrow.events")


def _check_format(event_type) -> None:
    if not isinstance(event_type, str):
        raise InvalidEventTypeFormat(repr(event_type))
    segments = event_type.split(".")
    if len(segments) < 3 or not all(s.strip() for s in segments):
        raise InvalidEventTypeFormat(event_type)


@dataclass(frozen=True)
class Subscription:
    event_type: str
    handler: Callable
    subscriber_engine: str

    @property
    def handler_name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))


class SubscriberRegistry:
    """
    Subscriptions per event type, kept in subscription order.

    known_event_types: when given, only these types can be subscribed to.
    """

    def __init__(self, known_event_types: Optional[Iterable[str]] = None):
        self._known = frozenset(known_event_types) if known_event_types is not None else None
        self._by_type: Dict[str, List[Subscription]] = {}
        self._lock = Lock()

    def subscribe(self, event_type: str, handler: Callable, subscriber_engine: str,
                  *, allow_self_subscription: bool = False) -> Subscription:
        _check_format(event_type)
        if self._known is not None and event_type not in self._known:
            raise UnknownEventType(event_type, self._known)
        if not callable(handler):
            raise EventBusError(f"Handler must be callable, got {type(handler).__name__}.")

        owner = event_type.split(".", 1)[0]
        if owner == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        subscription = Subscription(event_type, handler, subscriber_engine)
        with self._lock:
            current = self._by_type.setdefault(event_type, [])
            if any(s.handler is handler for s in current):
                raise DuplicateSubscriberError(event_type, subscription.handler_name)
            current.append(subscription)

        logger.info(f"{subscriber_engine} subscribed {subscription.handler_name} to {event_type}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """False if the subscription was already gone."""
        with self._lock:
            current = self._by_type.get(subscription.event_type, [])
            if subscription not in current:
                return False
            current.remove(subscription)
        logger.info(
            f"{subscription.subscriber_engine} unsubscribed "
            f"{subscription.handler_name} from {subscription.event_type}"
        )
        return True

    def subscriptions_for(self, event_type: str) -> Tuple[Subscription, ...]:
        with self._lock:
            return tuple(self._by_type.get(event_type, ()))
