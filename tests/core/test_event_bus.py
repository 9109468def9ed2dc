"""
Escrow Event Bus — Tests
==========================
Subscriber registry, dispatch isolation, sinks, event envelope.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from core.events import (
    DispatchingEventSink,
    DomainEvent,
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    RecordingEventSink,
    SelfSubscriptionError,
    SubscriberFailure,
    SubscriberRegistry,
    Subscription,
    UnknownEventType,
    dispatch,
)

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)
PAID = "rental.rent.paid.v1"


def _event(event_type: str = PAID, **payload) -> DomainEvent:
    return DomainEvent(
        event_type=event_type,
        payload=payload or {"agreement_id": 1},
        source_engine=event_type.split(".")[0],
        occurred_at=NOW,
        correlation_id=uuid.uuid4(),
        command_id=uuid.uuid4(),
    )


class TestDomainEvent:
    def test_payload_is_read_only(self):
        event = _event(agreement_id=1, tenant="t")
        with pytest.raises(TypeError):
            event.payload["tenant"] = "someone"

    def test_payload_is_copied(self):
        payload = {"agreement_id": 1}
        event = _event(**payload)
        payload["agreement_id"] = 2
        assert event.payload["agreement_id"] == 1

    def test_source_engine_must_own_event_type(self):
        with pytest.raises(ValueError, match="not owned"):
            DomainEvent(
                event_type=PAID,
                payload={},
                source_engine="audit",
                occurred_at=NOW,
                correlation_id=uuid.uuid4(),
                command_id=uuid.uuid4(),
            )

    def test_event_type_format(self):
        with pytest.raises(ValueError, match="engine.domain.action"):
            _event(event_type="rental.paid")

    def test_to_dict(self):
        event = _event(agreement_id=3)
        data = event.to_dict()
        assert data["event_type"] == PAID
        assert data["payload"] == {"agreement_id": 3}
        assert data["occurred_at"] == NOW.isoformat()


class TestSubscriberRegistry:
    def test_subscribe_returns_handle(self):
        registry = SubscriberRegistry()

        def handler(event):
            pass

        subscription = registry.subscribe(PAID, handler, "audit")
        assert subscription == Subscription(PAID, handler, "audit")
        assert subscription.handler_name.endswith("handler")
        assert registry.subscriptions_for(PAID) == (subscription,)

    def test_unknown_type_has_no_subscriptions(self):
        assert SubscriberRegistry().subscriptions_for(PAID) == ()

    def test_unsubscribe(self):
        registry = SubscriberRegistry()
        subscription = registry.subscribe(PAID, lambda e: None, "audit")

        assert registry.unsubscribe(subscription) is True
        assert registry.subscriptions_for(PAID) == ()
        assert registry.unsubscribe(subscription) is False

    def test_duplicate_handler_rejected(self):
        registry = SubscriberRegistry()

        def handler(event):
            pass

        registry.subscribe(PAID, handler, "audit")
        with pytest.raises(DuplicateSubscriberError):
            registry.subscribe(PAID, handler, "audit")

    def test_self_subscription_blocked(self):
        registry = SubscriberRegistry()
        with pytest.raises(SelfSubscriptionError):
            registry.subscribe(PAID, lambda e: None, "rental")

    def test_self_subscription_allowed_explicitly(self):
        registry = SubscriberRegistry()
        registry.subscribe(PAID, lambda e: None, "rental", allow_self_subscription=True)
        assert len(registry.subscriptions_for(PAID)) == 1

    @pytest.mark.parametrize("bad_type", ["", "rental.paid", "rental..paid", None])
    def test_bad_event_type(self, bad_type):
        with pytest.raises(InvalidEventTypeFormat):
            SubscriberRegistry().subscribe(bad_type, lambda e: None, "audit")

    def test_handler_must_be_callable(self):
        with pytest.raises(EventBusError, match="callable"):
            SubscriberRegistry().subscribe(PAID, "not-callable", "audit")

    def test_closed_registry_rejects_unknown_types(self):
        registry = SubscriberRegistry(known_event_types=[PAID])
        registry.subscribe(PAID, lambda e: None, "audit")
        with pytest.raises(UnknownEventType, match="rental.rent.payed.v1"):
            registry.subscribe("rental.rent.payed.v1", lambda e: None, "audit")


class TestDispatch:
    def test_no_subscribers(self):
        report = dispatch(_event(), SubscriberRegistry())
        assert report.delivered == 0
        assert report.failures == ()

    def test_failing_subscriber_does_not_stop_others(self):
        registry = SubscriberRegistry()
        received = []

        def broken(event):
            raise RuntimeError("notification down")

        def audit(event):
            received.append(event.event_id)

        registry.subscribe(PAID, broken, "notify")
        registry.subscribe(PAID, audit, "audit")

        event = _event()
        report = dispatch(event, registry)

        assert received == [event.event_id]
        assert report.delivered == 1
        assert report.failed == 1
        (failure,) = report.failures
        assert failure == SubscriberFailure(
            subscriber_engine="notify",
            handler_name=failure.handler_name,
            error_type="RuntimeError",
            error="notification down",
        )
        assert report.event_id == str(event.event_id)


class TestSinks:
    def test_recording_sink_keeps_order(self):
        sink = RecordingEventSink()
        first = _event("rental.agreement.created.v1")
        second = _event(PAID)
        sink.emit(first)
        sink.emit(second)
        assert sink.events == (first, second)
        assert sink.of_type(PAID) == (second,)

    def test_bounded_sink_drops_oldest(self):
        sink = RecordingEventSink(max_events=2)
        events = [_event() for _ in range(3)]
        for event in events:
            sink.emit(event)
        assert sink.events == tuple(events[1:])

    def test_bound_must_be_positive(self):
        with pytest.raises(ValueError, match="max_events"):
            RecordingEventSink(max_events=0)

    def test_dispatching_sink_routes_and_records(self):
        registry = SubscriberRegistry()
        seen = []
        registry.subscribe(PAID, seen.append, "audit")
        sink = DispatchingEventSink(registry)

        event = _event()
        sink.emit(event)

        assert seen == [event]
        assert sink.events == (event,)
        assert sink.reports[0].delivered == 1

    def test_dispatching_sink_bounds_reports(self):
        sink = DispatchingEventSink(SubscriberRegistry(), max_events=1)
        sink.emit(_event())
        last = _event()
        sink.emit(last)
        assert sink.events == (last,)
        assert [r.event_id for r in sink.reports] == [str(last.event_id)]
