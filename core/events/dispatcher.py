"""
Escrow Event Bus — Dispatcher
===============================
Delivers an emitted event to its subscribers, in subscription order.

A failing subscriber is logged and reported in the DispatchReport;
it never stops delivery to the others and never reaches the caller.
By the time an event is dispatched the transition it describes is
already committed, so there is nothing to undo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from core.events.models import DomainEvent
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("escrow.events")


@dataclass(frozen=True)
class SubscriberFailure:
    subscriber_engine: str
    handler_name: str
    error_type: str
    error: str


@dataclass(frozen=True)
class DispatchReport:
    event_type: str
    event_id: str
    delivered: int
    failures: Tuple[SubscriberFailure, ...] = ()

    @property
    def failed(self) -> int:
        return len(self.failures)


def dispatch(event: DomainEvent, registry: SubscriberRegistry) -> DispatchReport:
    delivered = 0
    failures = []

    for subscription in registry.subscriptions_for(event.event_type):
        try:
            subscription.handler(event)
        except Exception as exc:
            failures.append(SubscriberFailure(
                subscriber_engine=subscription.subscriber_engine,
                handler_name=subscription.handler_name,
                error_type=type(exc).__name__,
                error=str(exc),
            ))
            logger.error(
                f"{subscription.handler_name} ({subscription.subscriber_engine}) "
                f"failed on {event.event_type} {event.event_id}: {exc}",
                exc_info=True,
            )
        else:
            delivered += 1

    report = DispatchReport(
        event_type=event.event_type,
        event_id=str(event.event_id),
        delivered=delivered,
        failures=tuple(failures),
    )
    if report.failed:
        logger.warning(f"{event.event_type} {event.event_id}: {delivered} delivered, {report.failed} failed")
    else:
        logger.debug(f"{event.event_type} {event.event_id}: {delivered} delivered")
    return report
