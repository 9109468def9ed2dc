"""Rental Engine - event types and payload builders."""

from __future__ import annotations

from core.commands.base import Command
from core.events.registry import SubscriberRegistry
from engines.rental.models import Agreement

RENTAL_AGREEMENT_CREATED_V1 = "rental.agreement.created.v1"
RENTAL_RENT_PAID_V1 = "rental.rent.paid.v1"
RENTAL_AGREEMENT_TERMINATED_V1 = "rental.agreement.terminated.v1"

RENTAL_EVENT_TYPES = (
    RENTAL_AGREEMENT_CREATED_V1,
    RENTAL_RENT_PAID_V1,
    RENTAL_AGREEMENT_TERMINATED_V1,
)

COMMAND_TO_EVENT_TYPE = {
    "rental.agreement.create.request": RENTAL_AGREEMENT_CREATED_V1,
    "rental.rent.pay.request": RENTAL_RENT_PAID_V1,
    "rental.agreement.terminate.request": RENTAL_AGREEMENT_TERMINATED_V1,
}


def resolve_rental_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


# Payloads carry exactly the fields audit consumers rely on; routing
# metadata (ids, correlation) lives on the DomainEvent envelope.

def build_agreement_created_payload(command: Command, agreement: Agreement) -> dict:
    return {
        "agreement_id": agreement.agreement_id,
        "landlord": agreement.landlord,
        "tenant": agreement.tenant,
        "rent_amount": agreement.rent_amount,
        "security_deposit": agreement.security_deposit,
    }


def build_rent_paid_payload(command: Command, agreement: Agreement) -> dict:
    return {
        "agreement_id": agreement.agreement_id,
        "tenant": agreement.tenant,
        "amount_paid": command.payload["amount_paid"],
        "timestamp": command.issued_timestamp,
    }


def build_agreement_terminated_payload(command: Command, agreement: Agreement) -> dict:
    return {
        "agreement_id": agreement.agreement_id,
        "terminated_by": command.actor_id,
        "timestamp": command.issued_timestamp,
    }


PAYLOAD_BUILDERS = {
    RENTAL_AGREEMENT_CREATED_V1: build_agreement_created_payload,
    RENTAL_RENT_PAID_V1: build_rent_paid_payload,
    RENTAL_AGREEMENT_TERMINATED_V1: build_agreement_terminated_payload,
}


def rental_subscriber_registry() -> SubscriberRegistry:
    """Registry that only accepts subscriptions to events this engine emits."""
    return SubscriberRegistry(known_event_types=RENTAL_EVENT_TYPES)
