"""
Escrow Transfer Primitive — Public API
========================================
"""

from core.transfer.ledger import (
    InMemoryTransferLedger,
    Transfer,
    TransferFailed,
    ValueTransfer,
)

__all__ = [
    "InMemoryTransferLedger",
    "Transfer",
    "TransferFailed",
    "ValueTransfer",
]
