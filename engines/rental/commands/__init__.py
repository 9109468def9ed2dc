"""Rental Engine - request commands."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from core.commands.base import Command, derive_source_engine

RENTAL_AGREEMENT_CREATE_REQUEST = "rental.agreement.create.request"
RENTAL_RENT_PAY_REQUEST = "rental.rent.pay.request"
RENTAL_AGREEMENT_TERMINATE_REQUEST = "rental.agreement.terminate.request"

RENTAL_COMMAND_TYPES = frozenset({
    RENTAL_AGREEMENT_CREATE_REQUEST,
    RENTAL_RENT_PAY_REQUEST,
    RENTAL_AGREEMENT_TERMINATE_REQUEST,
})


def _cmd(command_type: str, payload: dict, *, actor_id, issued_at,
         command_id=None, correlation_id=None, actor_type="HUMAN") -> Command:
    return Command(
        command_id=command_id or uuid.uuid4(),
        command_type=command_type,
        actor_type=actor_type,
        actor_id=actor_id,
        payload=payload,
        issued_at=issued_at,
        correlation_id=correlation_id or uuid.uuid4(),
        source_engine=derive_source_engine(command_type),
    )


# Requests carry raw caller input. Term validation happens in policies so
# that every rejection surfaces as a typed RentalError, not a ValueError.

@dataclass(frozen=True)
class CreateAgreementRequest:
    tenant: Optional[str]
    rent_amount: Any
    security_deposit: Any
    duration_days: Any

    def to_command(self, *, actor_id: str, issued_at: datetime,
                   command_id=None, correlation_id=None,
                   actor_type: str = "HUMAN") -> Command:
        return _cmd(
            RENTAL_AGREEMENT_CREATE_REQUEST,
            {
                "tenant": self.tenant,
                "rent_amount": self.rent_amount,
                "security_deposit": self.security_deposit,
                "duration_days": self.duration_days,
            },
            actor_id=actor_id,
            issued_at=issued_at,
            command_id=command_id,
            correlation_id=correlation_id,
            actor_type=actor_type,
        )


@dataclass(frozen=True)
class PayRentRequest:
    agreement_id: Any
    amount_paid: Any

    def to_command(self, *, actor_id: str, issued_at: datetime,
                   command_id=None, correlation_id=None,
                   actor_type: str = "HUMAN") -> Command:
        return _cmd(
            RENTAL_RENT_PAY_REQUEST,
            {"agreement_id": self.agreement_id, "amount_paid": self.amount_paid},
            actor_id=actor_id,
            issued_at=issued_at,
            command_id=command_id,
            correlation_id=correlation_id,
            actor_type=actor_type,
        )


@dataclass(frozen=True)
class TerminateAgreementRequest:
    agreement_id: Any

    def to_command(self, *, actor_id: str, issued_at: datetime,
                   command_id=None, correlation_id=None,
                   actor_type: str = "HUMAN") -> Command:
        return _cmd(
            RENTAL_AGREEMENT_TERMINATE_REQUEST,
            {"agreement_id": self.agreement_id},
            actor_id=actor_id,
            issued_at=issued_at,
            command_id=command_id,
            correlation_id=correlation_id,
            actor_type=actor_type,
        )
