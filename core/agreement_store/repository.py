"""
Escrow Agreement Store - DB-backed Agreement Store
==================================================
Django ORM implementation of the rental engine's AgreementStore.

save() writes only the lifecycle columns (is_active, deposit_paid,
last_rent_payment); terms are fixed at insert time.

Inside atomic(), get() takes a row lock (SELECT ... FOR UPDATE where
the backend supports it), so services in separate processes sharing
one database serialize their checks on the same agreement. Id
allocation retries when another writer took the same max(id) + 1.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import Max, Sum

from core.agreement_store.models import RentalAgreement
from engines.rental.errors import AgreementNotFound
from engines.rental.models import Agreement

logger = logging.getLogger("escrow.store")

CREATE_ATTEMPTS = 5


def _to_record(row: RentalAgreement) -> Agreement:
    return Agreement(
        agreement_id=row.agreement_id,
        landlord=row.landlord,
        tenant=row.tenant,
        rent_amount=row.rent_amount,
        security_deposit=row.security_deposit,
        start_date=row.start_date,
        end_date=row.end_date,
        is_active=row.is_active,
        deposit_paid=row.deposit_paid,
        last_rent_payment=row.last_rent_payment,
    )


def _is_agreement_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class DbAgreementStore:
    def atomic(self):
        return transaction.atomic()

    def _next_id(self) -> int:
        last_id = RentalAgreement.objects.aggregate(last=Max("agreement_id"))["last"]
        return (last_id or 0) + 1

    def create(self, record: Agreement) -> int:
        for attempt in range(1, CREATE_ATTEMPTS + 1):
            agreement_id = self._next_id()
            try:
                with transaction.atomic():
                    RentalAgreement.objects.create(
                        agreement_id=agreement_id,
                        landlord=record.landlord,
                        tenant=record.tenant,
                        rent_amount=record.rent_amount,
                        security_deposit=record.security_deposit,
                        start_date=record.start_date,
                        end_date=record.end_date,
                        is_active=record.is_active,
                        deposit_paid=record.deposit_paid,
                        last_rent_payment=record.last_rent_payment,
                    )
            except IntegrityError:
                if attempt == CREATE_ATTEMPTS:
                    raise
                logger.warning(f"Agreement id {agreement_id} taken, retrying ({attempt}/{CREATE_ATTEMPTS})")
                continue
            logger.debug(f"Stored agreement {agreement_id}")
            return agreement_id

    def get(self, agreement_id: int) -> Agreement:
        row = None
        if _is_agreement_id(agreement_id):
            rows = RentalAgreement.objects.filter(agreement_id=agreement_id)
            if transaction.get_connection().in_atomic_block:
                rows = rows.select_for_update()
            row = rows.first()
        if row is None:
            raise AgreementNotFound(f"Agreement {agreement_id!r} not found.")
        return _to_record(row)

    def exists(self, agreement_id: int) -> bool:
        if not _is_agreement_id(agreement_id):
            return False
        return RentalAgreement.objects.filter(agreement_id=agreement_id).exists()

    def save(self, record: Agreement) -> None:
        with transaction.atomic():
            updated = RentalAgreement.objects.filter(
                agreement_id=record.agreement_id,
            ).update(
                is_active=record.is_active,
                deposit_paid=record.deposit_paid,
                last_rent_payment=record.last_rent_payment,
            )
        if updated == 0:
            raise AgreementNotFound(
                f"Agreement {record.agreement_id!r} not found; save() never creates."
            )

    def list_by_landlord(self, identity: str) -> tuple[int, ...]:
        return tuple(
            RentalAgreement.objects.filter(landlord=identity)
            .order_by("agreement_id")
            .values_list("agreement_id", flat=True)
        )

    def list_by_tenant(self, identity: str) -> tuple[int, ...]:
        return tuple(
            RentalAgreement.objects.filter(tenant=identity)
            .order_by("agreement_id")
            .values_list("agreement_id", flat=True)
        )

    def total_held_deposits(self) -> int:
        total = RentalAgreement.objects.filter(
            is_active=True,
            deposit_paid=True,
        ).aggregate(total=Sum("security_deposit"))["total"]
        return total or 0
