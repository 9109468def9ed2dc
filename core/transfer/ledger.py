"""
Escrow Transfer Primitive — Value Transfer Contract
=====================================================
The one externally visible side effect of the rental engine:
moving value out of escrow to a landlord or tenant.

RULES (NON-NEGOTIABLE):
- Amounts are integer minor units (cents), NO floats
- A transfer either fully happens or does not happen
- Failure is reported (False or TransferFailed), never swallowed
- Payouts are append-only; nothing is ever rewritten

Settlement against a real payment rail is outside this package.
InMemoryTransferLedger is the reference implementation used by
tests and local wiring.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Dict, List, Protocol, Tuple

logger = logging.getLogger("escrow.transfer")


# ══════════════════════════════════════════════════════════════
# ERRORS
# ══════════════════════════════════════════════════════════════

class TransferFailed(Exception):
    """Value could not be moved. The calling operation must abort."""

    def __init__(self, to: str, amount: int, detail: str = ""):
        self.to = to
        self.amount = amount
        self.detail = detail
        message = f"Transfer of {amount} to '{to}' failed"
        super().__init__(f"{message}: {detail}" if detail else f"{message}.")


# ══════════════════════════════════════════════════════════════
# PROTOCOL
# ══════════════════════════════════════════════════════════════

class ValueTransfer(Protocol):
    """
    transfer(to, amount) -> bool

    True means the full amount moved. False (or raising) means
    nothing moved.
    """

    def transfer(self, to: str, amount: int) -> bool:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY LEDGER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Transfer:
    """Single completed payout."""
    to: str
    amount: int
    sequence: int

    def to_dict(self) -> dict:
        return {"to": self.to, "amount": self.amount, "sequence": self.sequence}


class InMemoryTransferLedger:
    """
    Append-only record of payouts, with per-identity received totals.

    Sequence numbers start at 1 and follow completion order.
    """

    def __init__(self) -> None:
        self._transfers: List[Transfer] = []
        self._balances: Dict[str, int] = {}
        self._lock = Lock()

    def transfer(self, to: str, amount: int) -> bool:
        if not to or not isinstance(to, str):
            raise TransferFailed(str(to), amount, "recipient must be a non-empty identity")
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise TransferFailed(to, amount, "amount must be a positive integer")

        with self._lock:
            record = Transfer(to=to, amount=amount, sequence=len(self._transfers) + 1)
            self._transfers.append(record)
            self._balances[to] = self._balances.get(to, 0) + amount

        logger.info(f"Transferred {amount} to '{to}' (seq {record.sequence})")
        return True

    def balance_of(self, identity: str) -> int:
        """Total value received by `identity`; 0 if never paid."""
        with self._lock:
            return self._balances.get(identity, 0)

    @property
    def transfers(self) -> Tuple[Transfer, ...]:
        with self._lock:
            return tuple(self._transfers)

    @property
    def total_transferred(self) -> int:
        with self._lock:
            return sum(t.amount for t in self._transfers)
