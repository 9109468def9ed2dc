from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.agreement_store.models import RentalAgreement
from core.agreement_store.repository import DbAgreementStore
from core.time.clock import FixedClock
from core.transfer import InMemoryTransferLedger, TransferFailed
from engines.rental.errors import AgreementNotFound
from engines.rental.models import Agreement, AgreementState, UNASSIGNED_ID
from engines.rental.services import RentalService

pytestmark = pytest.mark.django_db(transaction=True)

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)
DAY = 86400


def _record(landlord: str = "landlord-1", tenant: str = "tenant-1") -> Agreement:
    return Agreement(
        agreement_id=UNASSIGNED_ID,
        landlord=landlord,
        tenant=tenant,
        rent_amount=100,
        security_deposit=50,
        start_date=1_000,
        end_date=1_000 + 365 * DAY,
    )


def test_db_store_assigns_sequential_ids() -> None:
    store = DbAgreementStore()
    assert store.create(_record()) == 1
    assert store.create(_record()) == 2
    assert RentalAgreement.objects.count() == 2


def test_db_store_round_trips_record() -> None:
    store = DbAgreementStore()
    agreement_id = store.create(_record())

    loaded = store.get(agreement_id)

    assert loaded.agreement_id == agreement_id
    assert loaded.landlord == "landlord-1"
    assert loaded.tenant == "tenant-1"
    assert loaded.end_date == 1_000 + 365 * DAY
    assert loaded.state is AgreementState.ACTIVE_UNPAID_DEPOSIT
    assert loaded.last_rent_payment == 0


def test_db_store_missing_or_malformed_id_is_not_found() -> None:
    store = DbAgreementStore()
    for bad_id in (99, 0, -1, "1", None, True):
        assert store.exists(bad_id) is False
        with pytest.raises(AgreementNotFound):
            store.get(bad_id)


def test_db_store_save_updates_lifecycle_columns_only() -> None:
    store = DbAgreementStore()
    agreement_id = store.create(_record())
    record = store.get(agreement_id)
    record.deposit_paid = True
    record.last_rent_payment = 5_000
    record.rent_amount = 999

    store.save(record)

    loaded = store.get(agreement_id)
    assert loaded.deposit_paid is True
    assert loaded.last_rent_payment == 5_000
    assert loaded.rent_amount == 100


def test_db_store_save_never_creates() -> None:
    store = DbAgreementStore()
    record = _record()
    record.agreement_id = 42
    with pytest.raises(AgreementNotFound):
        store.save(record)
    assert RentalAgreement.objects.count() == 0


def test_db_store_indexes_by_party_in_creation_order() -> None:
    store = DbAgreementStore()
    first = store.create(_record("alice", "bob"))
    second = store.create(_record("carol", "bob"))
    third = store.create(_record("alice", "dave"))

    assert store.list_by_landlord("alice") == (first, third)
    assert store.list_by_tenant("bob") == (first, second)
    assert store.list_by_landlord("nobody") == ()


def test_db_store_total_held_deposits() -> None:
    store = DbAgreementStore()
    assert store.total_held_deposits() == 0

    paid_id = store.create(_record())
    store.create(_record())
    paid = store.get(paid_id)
    paid.deposit_paid = True
    store.save(paid)

    assert store.total_held_deposits() == 50


def test_rental_service_over_db_store_runs_full_lifecycle() -> None:
    ledger = InMemoryTransferLedger()
    clock = FixedClock(NOW)
    service = RentalService(transfer=ledger, store=DbAgreementStore(), clock=clock)

    agreement_id = service.create_agreement("landlord-1", "tenant-1", 100, 50, 365)
    service.pay_rent("tenant-1", agreement_id, 150)
    assert service.escrow_balance() == 50

    clock.advance_days(10)
    service.pay_rent("tenant-1", agreement_id, 100)
    service.terminate_agreement("tenant-1", agreement_id)

    row = RentalAgreement.objects.get(agreement_id=agreement_id)
    assert row.is_active is False
    assert row.deposit_paid is True
    assert row.last_rent_payment == int(NOW.timestamp()) + 10 * DAY
    assert ledger.balance_of("landlord-1") == 200
    assert ledger.balance_of("tenant-1") == 50
    assert service.escrow_balance() == 0


def test_rental_service_over_db_store_keeps_row_on_failed_transfer() -> None:
    class RefusingTransfer:
        def transfer(self, to: str, amount: int) -> bool:
            return False

    store = DbAgreementStore()
    service = RentalService(transfer=RefusingTransfer(), store=store, clock=FixedClock(NOW))
    agreement_id = service.create_agreement("landlord-1", "tenant-1", 100, 50, 365)

    with pytest.raises(TransferFailed):
        service.pay_rent("tenant-1", agreement_id, 150)

    row = RentalAgreement.objects.get(agreement_id=agreement_id)
    assert row.deposit_paid is False
    assert row.last_rent_payment == 0


def test_rental_service_over_db_store_rolls_back_refused_refund() -> None:
    class RefundRefusingTransfer(InMemoryTransferLedger):
        def transfer(self, to: str, amount: int) -> bool:
            if to == "tenant-1":
                return False
            return super().transfer(to, amount)

    service = RentalService(
        transfer=RefundRefusingTransfer(), store=DbAgreementStore(), clock=FixedClock(NOW),
    )
    agreement_id = service.create_agreement("landlord-1", "tenant-1", 100, 50, 365)
    service.pay_rent("tenant-1", agreement_id, 150)

    with pytest.raises(TransferFailed):
        service.terminate_agreement("landlord-1", agreement_id)

    row = RentalAgreement.objects.get(agreement_id=agreement_id)
    assert row.is_active is True
    assert service.escrow_balance() == 50


def test_db_store_create_retries_when_id_taken(monkeypatch) -> None:
    store = DbAgreementStore()
    first = store.create(_record())

    stale = iter([first])
    real_next_id = DbAgreementStore._next_id
    monkeypatch.setattr(
        DbAgreementStore, "_next_id", lambda self: next(stale, None) or real_next_id(self),
    )

    assert store.create(_record("landlord-2")) == first + 1
    assert store.list_by_landlord("landlord-2") == (first + 1,)


def test_db_store_get_inside_atomic_locks_row() -> None:
    store = DbAgreementStore()
    agreement_id = store.create(_record())

    with store.atomic():
        record = store.get(agreement_id)
        record.deposit_paid = True
        store.save(record)

    assert store.get(agreement_id).deposit_paid is True
