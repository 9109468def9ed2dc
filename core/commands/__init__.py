"""
Escrow Command Layer — Public API
====================================
Command envelope and structured rejection reasons.
"""

from core.commands.base import Command, VALID_ACTOR_TYPES, derive_source_engine
from core.commands.rejection import ReasonCode, RejectionReason

__all__ = [
    "Command",
    "VALID_ACTOR_TYPES",
    "derive_source_engine",
    "ReasonCode",
    "RejectionReason",
]
