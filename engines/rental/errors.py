"""Rental Engine - typed precondition errors."""

from __future__ import annotations

from core.commands.rejection import ReasonCode, RejectionReason


class RentalError(Exception):
    """
    Base for every precondition failure of the rental engine.

    Carries the RejectionReason produced by the failing policy, so
    callers get the same code/message/policy triple that was logged.
    """

    code = "RENTAL_ERROR"

    def __init__(self, message: str, reason: RejectionReason | None = None):
        self.message = message
        self.reason = reason or RejectionReason(
            code=self.code,
            message=message,
            policy_name=type(self).__name__,
        )
        super().__init__(f"[{self.code}] {message}")


class AgreementNotFound(RentalError):
    code = ReasonCode.NOT_FOUND


class Unauthorized(RentalError):
    code = ReasonCode.UNAUTHORIZED


class InvalidTenant(RentalError):
    code = ReasonCode.INVALID_TENANT


class InvalidTerms(RentalError):
    code = ReasonCode.INVALID_TERMS


class AgreementInactive(RentalError):
    code = ReasonCode.AGREEMENT_INACTIVE


class AgreementExpired(RentalError):
    code = ReasonCode.AGREEMENT_EXPIRED


class IncorrectAmount(RentalError):
    code = ReasonCode.INCORRECT_AMOUNT


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        AgreementNotFound,
        Unauthorized,
        InvalidTenant,
        InvalidTerms,
        AgreementInactive,
        AgreementExpired,
        IncorrectAmount,
    )
}


def raise_for_rejection(reason: RejectionReason) -> None:
    """Raise the typed error matching reason.code (RentalError if unknown)."""
    error_cls = ERRORS_BY_CODE.get(reason.code, RentalError)
    raise error_cls(reason.message, reason=reason)
