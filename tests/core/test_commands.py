"""
Escrow Command Layer — Tests
==============================
Command envelope structure and rejection reasons.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from core.commands.base import Command, derive_source_engine
from core.commands.rejection import ReasonCode, RejectionReason

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _command(**overrides) -> Command:
    fields = dict(
        command_id=uuid.uuid4(),
        command_type="rental.rent.pay.request",
        actor_type="HUMAN",
        actor_id="tenant-1",
        payload={"agreement_id": 1, "amount_paid": 150},
        issued_at=NOW,
        correlation_id=uuid.uuid4(),
        source_engine="rental",
    )
    fields.update(overrides)
    return Command(**fields)


class TestCommandStructure:
    def test_valid_command(self):
        cmd = _command()
        assert cmd.actor_id == "tenant-1"
        assert cmd.issued_timestamp == int(NOW.timestamp())

    def test_frozen(self):
        cmd = _command()
        with pytest.raises(Exception):
            cmd.actor_id = "someone-else"

    def test_command_type_must_end_with_request(self):
        with pytest.raises(ValueError, match=".request"):
            _command(command_type="rental.rent.pay")

    def test_command_type_needs_four_segments(self):
        with pytest.raises(ValueError, match="minimum 4 segments"):
            _command(command_type="rental.pay.request")

    def test_namespace_must_match_source_engine(self):
        with pytest.raises(ValueError, match="does not match"):
            _command(source_engine="billing")

    def test_actor_id_required(self):
        with pytest.raises(ValueError, match="actor_id"):
            _command(actor_id="")

    def test_unknown_actor_type_rejected(self):
        with pytest.raises(ValueError, match="actor_type"):
            _command(actor_type="AI")

    def test_payload_must_be_dict(self):
        with pytest.raises(TypeError):
            _command(payload=[1, 2])

    def test_naive_issued_at_rejected(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            _command(issued_at=datetime(2026, 3, 1))

    def test_command_id_must_be_uuid(self):
        with pytest.raises(ValueError, match="command_id"):
            _command(command_id="not-a-uuid")

    def test_derive_source_engine(self):
        assert derive_source_engine("rental.agreement.create.request") == "rental"


class TestRejectionReason:
    def test_to_dict(self):
        reason = RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message="Agreement 9 not found.",
            policy_name="agreement_must_exist_policy",
        )
        assert reason.to_dict() == {
            "code": "NOT_FOUND",
            "message": "Agreement 9 not found.",
            "policy_name": "agreement_must_exist_policy",
        }

    @pytest.mark.parametrize("field_name", ["code", "message", "policy_name"])
    def test_fields_must_be_non_empty(self, field_name):
        fields = dict(code="X", message="m", policy_name="p")
        fields[field_name] = ""
        with pytest.raises(ValueError, match=field_name):
            RejectionReason(**fields)
