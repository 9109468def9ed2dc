"""
Escrow Event Bus — Domain Event Envelope
==========================================
The immutable record of a completed state transition.

An event is built only AFTER the transition it describes has been
committed to the store. It carries the exact payload fields
declared by the owning engine plus routing and causality metadata.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class DomainEvent:
    """
    Fields:
        event_type:     Namespaced type (e.g. 'rental.rent.paid.v1').
        payload:        Event-specific fields (read-only mapping).
        source_engine:  Engine that emitted the event.
        occurred_at:    When the transition completed.
        correlation_id: Story this event belongs to.
        command_id:     Command that caused this event.
        event_id:       Unique identifier.
    """

    event_type: str
    payload: Mapping[str, Any]
    source_engine: str
    occurred_at: datetime
    correlation_id: uuid.UUID
    command_id: uuid.UUID
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if not self.event_type or self.event_type.count(".") < 2:
            raise ValueError(
                f"event_type '{self.event_type}' must follow "
                f"engine.domain.action format."
            )
        if self.event_type.split(".")[0] != self.source_engine:
            raise ValueError(
                f"event_type '{self.event_type}' is not owned by "
                f"source_engine '{self.source_engine}'."
            )
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "source_engine": self.source_engine,
            "occurred_at": self.occurred_at.isoformat(),
            "correlation_id": str(self.correlation_id),
            "command_id": str(self.command_id),
            "payload": dict(self.payload),
        }
