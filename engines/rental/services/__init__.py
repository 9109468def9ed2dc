"""Rental Engine - application service (agreement lifecycle engine)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from threading import RLock
from typing import Callable, Optional, Tuple

from core.commands.base import Command
from core.commands.rejection import RejectionReason
from core.events.models import DomainEvent
from core.events.sink import EventSink, RecordingEventSink
from core.time.clock import Clock, get_default_clock
from core.time.temporal import has_elapsed, to_timestamp
from core.transfer.ledger import TransferFailed, ValueTransfer
from engines.rental.commands import (
    RENTAL_AGREEMENT_CREATE_REQUEST,
    RENTAL_AGREEMENT_TERMINATE_REQUEST,
    RENTAL_RENT_PAY_REQUEST,
    CreateAgreementRequest,
    PayRentRequest,
    TerminateAgreementRequest,
)
from engines.rental.config import DEFAULT_RENTAL_CONFIG, RentalConfig
from engines.rental.errors import RentalError, raise_for_rejection
from engines.rental.events import PAYLOAD_BUILDERS, resolve_rental_event_type
from engines.rental.models import UNASSIGNED_ID, Agreement, AgreementState
from engines.rental.policies import (
    agreement_must_be_active_policy,
    agreement_must_exist_policy,
    agreement_must_not_be_expired_policy,
    caller_must_be_party_policy,
    caller_must_be_tenant_policy,
    payment_amount_must_match_policy,
    tenant_must_be_valid_policy,
    terms_must_be_positive_policy,
)
from engines.rental.store import AgreementStore, InMemoryAgreementStore

logger = logging.getLogger("escrow.rental")

CREATE_POLICIES = (
    tenant_must_be_valid_policy,
    terms_must_be_positive_policy,
)

# Order matters: it decides which error a caller sees when several apply.
PAY_POLICIES = (
    agreement_must_exist_policy,
    agreement_must_be_active_policy,
    caller_must_be_tenant_policy,
    agreement_must_not_be_expired_policy,
    payment_amount_must_match_policy,
)

TERMINATE_POLICIES = (
    agreement_must_exist_policy,
    agreement_must_be_active_policy,
    caller_must_be_party_policy,
)


@dataclass(frozen=True)
class RentalExecutionResult:
    event_type: str
    event: DomainEvent
    agreement: Agreement

    @property
    def agreement_id(self) -> int:
        return self.agreement.agreement_id


class RentalService:
    """
    Executes create / pay / terminate as indivisible steps:
    load, check policies, compute the new record, save, transfer, emit.

    One re-entrant lock covers every operation and query, so no caller
    observes a record between its precondition check and its commit.
    Save and transfer run inside one store.atomic() block with the
    transfer last: a failed save moves no value, and a failed transfer
    rolls the save back. Either way no event is emitted. Events go out
    only after the block commits; a raising sink is logged, not
    propagated.
    """

    def __init__(self, *, transfer: ValueTransfer,
                 store: AgreementStore | None = None,
                 event_sink: EventSink | None = None,
                 clock: Clock | None = None,
                 config: RentalConfig | None = None):
        self._transfer = transfer
        self._store = store if store is not None else InMemoryAgreementStore()
        self._config = config or DEFAULT_RENTAL_CONFIG
        if event_sink is None:
            event_sink = RecordingEventSink(max_events=self._config.event_history_limit)
        self._event_sink = event_sink
        self._clock = clock or get_default_clock()
        self._lock = RLock()
        self._handlers: dict[str, Callable[[Command], Agreement]] = {
            RENTAL_AGREEMENT_CREATE_REQUEST: self._create,
            RENTAL_RENT_PAY_REQUEST: self._pay,
            RENTAL_AGREEMENT_TERMINATE_REQUEST: self._terminate,
        }

    # ── Operations ────────────────────────────────────────────

    def create_agreement(self, caller: str, tenant: Optional[str], rent_amount: int,
                         security_deposit: int, duration_days: int) -> int:
        request = CreateAgreementRequest(
            tenant=tenant,
            rent_amount=rent_amount,
            security_deposit=security_deposit,
            duration_days=duration_days,
        )
        return self._execute_request(request, caller).agreement_id

    def pay_rent(self, caller: str, agreement_id: int, amount_paid: int) -> None:
        self._execute_request(
            PayRentRequest(agreement_id=agreement_id, amount_paid=amount_paid),
            caller,
        )

    def terminate_agreement(self, caller: str, agreement_id: int) -> None:
        self._execute_request(TerminateAgreementRequest(agreement_id=agreement_id), caller)

    # ── Queries ───────────────────────────────────────────────

    def get_agreement(self, agreement_id: int) -> Agreement:
        with self._lock:
            return self._store.get(agreement_id)

    def get_landlord_agreements(self, identity: str) -> Tuple[int, ...]:
        with self._lock:
            return self._store.list_by_landlord(identity)

    def get_tenant_agreements(self, identity: str) -> Tuple[int, ...]:
        with self._lock:
            return self._store.list_by_tenant(identity)

    def get_agreement_state(self, agreement_id: int) -> AgreementState:
        return self.get_agreement(agreement_id).state

    def is_rent_overdue(self, agreement_id: int) -> bool:
        """
        False for terminated agreements. Otherwise measured from
        last_rent_payment, which is 0 for a never-paid agreement:
        such an agreement reads as overdue against the epoch.
        """
        with self._lock:
            agreement = self._store.get(agreement_id)
            if not agreement.is_active:
                return False
            now = to_timestamp(self._clock.now_utc())
            return has_elapsed(
                agreement.last_rent_payment,
                self._config.overdue_window_seconds,
                now,
            )

    def escrow_balance(self) -> int:
        """Deposits currently held: paid, not yet refunded."""
        with self._lock:
            return self._store.total_held_deposits()

    @property
    def store(self) -> AgreementStore:
        return self._store

    @property
    def event_sink(self) -> EventSink:
        return self._event_sink

    # ── Execution ─────────────────────────────────────────────

    def _execute_request(self, request, caller: str) -> RentalExecutionResult:
        # Read the clock under the lock so issued_at follows commit order.
        with self._lock:
            command = request.to_command(actor_id=caller, issued_at=self._clock.now_utc())
            return self._execute_command(command)

    def _execute_command(self, command: Command) -> RentalExecutionResult:
        event_type = resolve_rental_event_type(command.command_type)
        handler = self._handlers.get(command.command_type)
        if event_type is None or handler is None:
            raise ValueError(f"Unsupported rental command type: {command.command_type}")

        with self._lock:
            with self._store.atomic():
                agreement = handler(command)
            payload = PAYLOAD_BUILDERS[event_type](command, agreement)
            event = DomainEvent(
                event_type=event_type,
                payload=payload,
                source_engine=command.source_engine,
                occurred_at=command.issued_at,
                correlation_id=command.correlation_id,
                command_id=command.command_id,
            )
            self._emit(event)

        logger.info(
            f"{event_type}: agreement {agreement.agreement_id} "
            f"by '{command.actor_id}' → {agreement.state.value}"
        )
        return RentalExecutionResult(event_type=event_type, event=event, agreement=agreement)

    def _emit(self, event: DomainEvent) -> None:
        try:
            self._event_sink.emit(event)
        except Exception as exc:
            logger.error(
                f"Event sink failed on {event.event_type} {event.event_id}; "
                f"the transition stands: {exc}",
                exc_info=True,
            )

    def _run_policies(self, command: Command, policies, **lookups) -> None:
        for policy in policies:
            rejection = policy(command, **lookups)
            if rejection is not None:
                self._reject(command, rejection)

    def _reject(self, command: Command, rejection: RejectionReason) -> None:
        logger.warning(
            f"Rejected {command.command_type} from '{command.actor_id}': "
            f"[{rejection.code}] {rejection.message}"
        )
        raise_for_rejection(rejection)

    def _find_agreement(self, agreement_id) -> Agreement | None:
        if not isinstance(agreement_id, int) or isinstance(agreement_id, bool):
            return None
        if not self._store.exists(agreement_id):
            return None
        return self._store.get(agreement_id)

    def _transfer_or_abort(self, to: str, amount: int, command: Command) -> None:
        try:
            moved = self._transfer.transfer(to, amount)
        except TransferFailed:
            logger.error(f"Transfer failed during {command.command_type} ({command.command_id})")
            raise
        except Exception as exc:
            logger.error(
                f"Transfer raised during {command.command_type} ({command.command_id}): {exc}",
                exc_info=True,
            )
            raise TransferFailed(to, amount, str(exc)) from exc

        if not moved:
            logger.error(f"Transfer refused during {command.command_type} ({command.command_id})")
            raise TransferFailed(to, amount, "transfer reported failure")

    # ── Transitions ───────────────────────────────────────────

    def _create(self, command: Command) -> Agreement:
        self._run_policies(command, CREATE_POLICIES)

        p = command.payload
        now = command.issued_timestamp
        record = Agreement(
            agreement_id=UNASSIGNED_ID,
            landlord=command.actor_id,
            tenant=p["tenant"],
            rent_amount=p["rent_amount"],
            security_deposit=p["security_deposit"],
            start_date=now,
            end_date=now + self._config.duration_seconds(p["duration_days"]),
        )
        agreement_id = self._store.create(record)
        return replace(record, agreement_id=agreement_id)

    def _pay(self, command: Command) -> Agreement:
        self._run_policies(command, PAY_POLICIES, agreement_lookup=self._find_agreement)

        current = self._store.get(command.payload["agreement_id"])
        updated = replace(
            current,
            deposit_paid=True,
            last_rent_payment=command.issued_timestamp,
        )
        self._store.save(updated)
        # Only rent goes to the landlord; a first payment's deposit stays in escrow.
        self._transfer_or_abort(current.landlord, current.rent_amount, command)
        return updated

    def _terminate(self, command: Command) -> Agreement:
        self._run_policies(command, TERMINATE_POLICIES, agreement_lookup=self._find_agreement)

        current = self._store.get(command.payload["agreement_id"])
        updated = replace(current, is_active=False)
        self._store.save(updated)
        if current.deposit_paid:
            self._transfer_or_abort(current.tenant, current.security_deposit, command)
        return updated


__all__ = [
    "RentalService",
    "RentalExecutionResult",
    "RentalError",
    "CREATE_POLICIES",
    "PAY_POLICIES",
    "TERMINATE_POLICIES",
]
