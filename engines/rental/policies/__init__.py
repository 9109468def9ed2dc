"""Rental Engine - precondition policies.

Each policy inspects a command (and, where relevant, the agreement it
targets) and returns a RejectionReason or None. Policies never mutate,
never transfer, never emit. Policies that need an agreement return None
when it is missing: existence is agreement_must_exist_policy's job.
"""

from __future__ import annotations

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.time.temporal import is_past


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


# ── Creation ──────────────────────────────────────────────────

def tenant_must_be_valid_policy(command: Command) -> RejectionReason | None:
    tenant = command.payload.get("tenant")
    if tenant is None or not isinstance(tenant, str) or not tenant.strip():
        return RejectionReason(
            code=ReasonCode.INVALID_TENANT,
            message="tenant must be a non-empty identity.",
            policy_name="tenant_must_be_valid_policy",
        )
    if tenant == command.actor_id:
        return RejectionReason(
            code=ReasonCode.INVALID_TENANT,
            message=f"Landlord '{command.actor_id}' cannot be their own tenant.",
            policy_name="tenant_must_be_valid_policy",
        )
    return None


def terms_must_be_positive_policy(command: Command) -> RejectionReason | None:
    for field_name in ("rent_amount", "security_deposit", "duration_days"):
        value = command.payload.get(field_name)
        if not _is_positive_int(value):
            return RejectionReason(
                code=ReasonCode.INVALID_TERMS,
                message=f"{field_name} must be integer > 0, got {value!r}.",
                policy_name="terms_must_be_positive_policy",
            )
    return None


# ── Existing agreements ───────────────────────────────────────

def agreement_must_exist_policy(command: Command, agreement_lookup) -> RejectionReason | None:
    agreement_id = command.payload.get("agreement_id")
    if agreement_lookup(agreement_id) is None:
        return RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message=f"Agreement {agreement_id!r} not found.",
            policy_name="agreement_must_exist_policy",
        )
    return None


def agreement_must_be_active_policy(command: Command, agreement_lookup) -> RejectionReason | None:
    agreement = agreement_lookup(command.payload.get("agreement_id"))
    if agreement is None:
        return None

    if not agreement.is_active:
        return RejectionReason(
            code=ReasonCode.AGREEMENT_INACTIVE,
            message=f"Agreement {agreement.agreement_id} is terminated.",
            policy_name="agreement_must_be_active_policy",
        )
    return None


def caller_must_be_tenant_policy(command: Command, agreement_lookup) -> RejectionReason | None:
    agreement = agreement_lookup(command.payload.get("agreement_id"))
    if agreement is None:
        return None

    if command.actor_id != agreement.tenant:
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=(
                f"Only the tenant may pay rent on agreement "
                f"{agreement.agreement_id}; caller is '{command.actor_id}'."
            ),
            policy_name="caller_must_be_tenant_policy",
        )
    return None


def caller_must_be_party_policy(command: Command, agreement_lookup) -> RejectionReason | None:
    agreement = agreement_lookup(command.payload.get("agreement_id"))
    if agreement is None:
        return None

    if command.actor_id not in (agreement.landlord, agreement.tenant):
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=(
                f"'{command.actor_id}' is not a party to agreement "
                f"{agreement.agreement_id}."
            ),
            policy_name="caller_must_be_party_policy",
        )
    return None


def agreement_must_not_be_expired_policy(command: Command, agreement_lookup) -> RejectionReason | None:
    agreement = agreement_lookup(command.payload.get("agreement_id"))
    if agreement is None:
        return None

    if is_past(agreement.end_date, command.issued_timestamp):
        return RejectionReason(
            code=ReasonCode.AGREEMENT_EXPIRED,
            message=f"Agreement {agreement.agreement_id} ended at {agreement.end_date}.",
            policy_name="agreement_must_not_be_expired_policy",
        )
    return None


def payment_amount_must_match_policy(command: Command, agreement_lookup) -> RejectionReason | None:
    """First payment is rent + deposit, every later one is rent. Exactly."""
    agreement = agreement_lookup(command.payload.get("agreement_id"))
    if agreement is None:
        return None

    amount_paid = command.payload.get("amount_paid")
    required = agreement.required_payment
    if isinstance(amount_paid, bool) or not isinstance(amount_paid, int) or amount_paid != required:
        return RejectionReason(
            code=ReasonCode.INCORRECT_AMOUNT,
            message=(
                f"Agreement {agreement.agreement_id} requires exactly {required}, "
                f"got {amount_paid!r}."
            ),
            policy_name="payment_amount_must_match_policy",
        )
    return None
