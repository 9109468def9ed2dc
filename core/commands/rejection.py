"""
Escrow Command Layer — Rejection Model
=========================================
Structured rejection reasons for denied commands.

This is NOT an exception. It is an explanation structure
returned by precondition policies. Engines decide how to
surface it (the rental engine raises a typed error).

Every rejection must be:
- Deterministic (same input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (reason_code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for command rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'NOT_FOUND').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        """Serialize for logs and audit records."""
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Existence / authorization ─────────────────────────────
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"

    # ── Creation terms ────────────────────────────────────────
    INVALID_TENANT = "INVALID_TENANT"
    INVALID_TERMS = "INVALID_TERMS"

    # ── Lifecycle ─────────────────────────────────────────────
    AGREEMENT_INACTIVE = "AGREEMENT_INACTIVE"
    AGREEMENT_EXPIRED = "AGREEMENT_EXPIRED"

    # ── Payment ───────────────────────────────────────────────
    INCORRECT_AMOUNT = "INCORRECT_AMOUNT"
