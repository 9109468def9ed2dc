"""Rental Engine - agreement store contract and in-memory implementation."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from threading import Lock
from typing import ContextManager, Dict, List, Optional, Protocol, Tuple

from engines.rental.errors import AgreementNotFound
from engines.rental.models import Agreement


class AgreementStore(Protocol):
    """
    Durable state surface of the rental engine: id -> Agreement,
    plus the landlord and tenant indexes.

    Ids are allocated by the store, sequentially from 1. Records are
    never removed or overwritten by create; save() persists a mutated
    copy back under its existing id.

    atomic() opens a unit of work: every create/save made inside it is
    undone if the block raises.
    """

    def atomic(self) -> ContextManager[None]: ...

    def create(self, record: Agreement) -> int: ...

    def get(self, agreement_id: int) -> Agreement: ...

    def exists(self, agreement_id: int) -> bool: ...

    def save(self, record: Agreement) -> None: ...

    def list_by_landlord(self, identity: str) -> Tuple[int, ...]: ...

    def list_by_tenant(self, identity: str) -> Tuple[int, ...]: ...

    def total_held_deposits(self) -> int: ...


class InMemoryAgreementStore:
    """
    Three dicts and a counter, guarded by one lock.

    get() hands out detached copies: the only way to change a stored
    record is save(). Inside atomic(), each write journals the prior
    value so a failed block can be rolled back. Ids handed out by a
    rolled-back create are not reused.
    """

    def __init__(self) -> None:
        self._records: Dict[int, Agreement] = {}
        self._by_landlord: Dict[str, List[int]] = {}
        self._by_tenant: Dict[str, List[int]] = {}
        self._last_id = 0
        self._lock = Lock()
        # (agreement_id, previous record or None for a create)
        self._undo: Optional[List[Tuple[int, Optional[Agreement]]]] = None

    @contextmanager
    def atomic(self):
        outermost = self._undo is None
        if outermost:
            self._undo = []
        try:
            yield
        except Exception:
            if outermost:
                self._rollback()
            raise
        finally:
            if outermost:
                self._undo = None

    def _rollback(self) -> None:
        with self._lock:
            for agreement_id, previous in reversed(self._undo):
                if previous is not None:
                    self._records[agreement_id] = previous
                    continue
                record = self._records.pop(agreement_id)
                self._by_landlord[record.landlord].remove(agreement_id)
                self._by_tenant[record.tenant].remove(agreement_id)

    def create(self, record: Agreement) -> int:
        with self._lock:
            self._last_id += 1
            agreement_id = self._last_id
            self._records[agreement_id] = replace(record, agreement_id=agreement_id)
            self._by_landlord.setdefault(record.landlord, []).append(agreement_id)
            self._by_tenant.setdefault(record.tenant, []).append(agreement_id)
            if self._undo is not None:
                self._undo.append((agreement_id, None))
        return agreement_id

    def get(self, agreement_id: int) -> Agreement:
        with self._lock:
            record = self._records.get(agreement_id)
            if record is None:
                raise AgreementNotFound(f"Agreement {agreement_id!r} not found.")
            return replace(record)

    def exists(self, agreement_id: int) -> bool:
        with self._lock:
            return agreement_id in self._records

    def save(self, record: Agreement) -> None:
        with self._lock:
            previous = self._records.get(record.agreement_id)
            if previous is None:
                raise AgreementNotFound(
                    f"Agreement {record.agreement_id!r} not found; save() never creates."
                )
            self._records[record.agreement_id] = replace(record)
            if self._undo is not None:
                self._undo.append((record.agreement_id, previous))

    def list_by_landlord(self, identity: str) -> Tuple[int, ...]:
        with self._lock:
            return tuple(self._by_landlord.get(identity, ()))

    def list_by_tenant(self, identity: str) -> Tuple[int, ...]:
        with self._lock:
            return tuple(self._by_tenant.get(identity, ()))

    def total_held_deposits(self) -> int:
        with self._lock:
            return sum(r.held_deposit for r in self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
