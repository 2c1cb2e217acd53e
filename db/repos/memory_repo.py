from __future__ import annotations

import sqlite3
import threading
from typing import Any, Dict, List, Optional

from exceptions import RecordNotFoundError
from models import PersonRecord


class InMemoryPeopleRepo:
    """Dict-backed store with the same contract as PeopleRepo.

    A non-null external_id is unique across rows; a duplicate raises
    sqlite3.IntegrityError exactly like the UNIQUE column does.
    """

    def __init__(self) -> None:
        self._rows: Dict[int, PersonRecord] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def _check_unique(self, external_id: Optional[str], record_id: Optional[int] = None) -> None:
        if external_id is None:
            return
        for row_id, row in self._rows.items():
            if row_id != record_id and row.external_id == str(external_id):
                raise sqlite3.IntegrityError(f"UNIQUE constraint failed: people.external_id ({external_id})")

    def insert(self, person: PersonRecord) -> int:
        with self._lock:
            self._check_unique(person.external_id)
            record_id = self._next_id
            self._next_id += 1
            self._rows[record_id] = person.model_copy(update={"id": record_id})
            return record_id

    def get_by_id(self, record_id: int) -> PersonRecord:
        with self._lock:
            row = self._rows.get(record_id)
        if row is None:
            raise RecordNotFoundError(record_id)
        return row.model_copy()

    def get_by_external_id(self, external_id: str) -> Optional[PersonRecord]:
        with self._lock:
            for row in self._rows.values():
                if row.external_id == str(external_id):
                    return row.model_copy()
        return None

    def upsert_by_external_id(self, person: PersonRecord) -> int:
        if not person.external_id:
            raise ValueError("upsert_by_external_id requires an external_id")
        with self._lock:
            existing = self.get_by_external_id(person.external_id)
            if existing is None:
                return self.insert(person.model_copy(update={"last_synced_at": None}))
            fields = person.model_dump(exclude={"id", "external_id", "last_synced_at"})
            self._rows[existing.id] = existing.model_copy(update=fields)
            return int(existing.id)

    def update_field(self, record_id: int, field: str, value: Any) -> None:
        if field == "id" or field not in PersonRecord.model_fields:
            raise ValueError(f"Unknown person field: {field}")
        with self._lock:
            row = self._rows.get(record_id)
            if row is None:
                raise RecordNotFoundError(record_id)
            if field == "external_id":
                self._check_unique(value, record_id)
            self._rows[record_id] = row.model_copy(update={field: value})

    def list_all(self) -> List[PersonRecord]:
        with self._lock:
            return [self._rows[k].model_copy() for k in sorted(self._rows)]
