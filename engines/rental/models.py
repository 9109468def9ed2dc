"""Rental Engine - agreement record and derived lifecycle state."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class AgreementState(Enum):
    ACTIVE_UNPAID_DEPOSIT = "ACTIVE_UNPAID_DEPOSIT"
    ACTIVE_DEPOSIT_PAID = "ACTIVE_DEPOSIT_PAID"
    TERMINATED = "TERMINATED"


# Placeholder id for a record not yet stored; the store assigns the real one.
UNASSIGNED_ID = 0


@dataclass
class Agreement:
    """
    One landlord/tenant rental agreement.

    Amounts are integer minor units. Timestamps are integer epoch
    seconds; last_rent_payment is 0 until the first accepted payment.

    Terms (parties, amounts, dates) never change after creation.
    Only is_active, deposit_paid and last_rent_payment move, and
    only forward.
    """

    agreement_id: int
    landlord: str
    tenant: str
    rent_amount: int
    security_deposit: int
    start_date: int
    end_date: int
    is_active: bool = True
    deposit_paid: bool = False
    last_rent_payment: int = 0

    @property
    def state(self) -> AgreementState:
        if not self.is_active:
            return AgreementState.TERMINATED
        if self.deposit_paid:
            return AgreementState.ACTIVE_DEPOSIT_PAID
        return AgreementState.ACTIVE_UNPAID_DEPOSIT

    @property
    def required_payment(self) -> int:
        """The one amount pay_rent accepts in the current state."""
        if self.deposit_paid:
            return self.rent_amount
        return self.rent_amount + self.security_deposit

    @property
    def held_deposit(self) -> int:
        """Deposit currently sitting in escrow for this agreement."""
        if self.is_active and self.deposit_paid:
            return self.security_deposit
        return 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["state"] = self.state.value
        return data
