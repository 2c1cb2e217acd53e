from __future__ import annotations

import sqlite3
import threading
from datetime import date, datetime
from typing import Any, List, Optional

from exceptions import RecordNotFoundError
from models import PersonRecord


# Columns a caller may write; id and created_at are store-owned
PERSON_COLUMNS = (
    "external_id",
    "first_name",
    "last_name",
    "email",
    "phone",
    "birth_date",
    "mailing_street",
    "mailing_city",
    "mailing_postal_code",
    "mailing_state",
    "mailing_country",
    "last_synced_at",
)

# Profile fields refreshed by an upsert; last_synced_at belongs to the push path
_UPSERT_COLUMNS = tuple(c for c in PERSON_COLUMNS if c not in ("external_id", "last_synced_at"))


def _to_db(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _row_to_person(row: sqlite3.Row) -> PersonRecord:
    data = {key: row[key] for key in row.keys() if key != "created_at"}
    return PersonRecord.model_validate(data)


class PeopleRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        # One statement at a time per connection; callouts share it across threads
        self._lock = threading.RLock()

    def insert(self, person: PersonRecord) -> int:
        """Insert a new person row as upstream logic would; returns the new id."""
        values = [_to_db(getattr(person, c)) for c in PERSON_COLUMNS]
        placeholders = ", ".join("?" for _ in PERSON_COLUMNS)
        sql = f"INSERT INTO people ({', '.join(PERSON_COLUMNS)}) VALUES ({placeholders})"
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(sql, values)
            self.conn.commit()
            return int(cur.lastrowid)

    def get_by_id(self, record_id: int) -> PersonRecord:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT * FROM people WHERE id = ?", (record_id,))
            row = cur.fetchone()
        if row is None:
            raise RecordNotFoundError(record_id)
        return _row_to_person(row)

    def get_by_external_id(self, external_id: str) -> Optional[PersonRecord]:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT * FROM people WHERE external_id = ?", (str(external_id),))
            row = cur.fetchone()
        return _row_to_person(row) if row is not None else None

    def upsert_by_external_id(self, person: PersonRecord) -> int:
        """Insert or update a person keyed by external_id; returns the row id.

        A single INSERT .. ON CONFLICT statement, so racing upserts for one
        external_id each land as a whole row write.
        """
        if not person.external_id:
            raise ValueError("upsert_by_external_id requires an external_id")
        insert_cols = ("external_id",) + _UPSERT_COLUMNS
        updates = ", ".join(f"{c} = excluded.{c}" for c in _UPSERT_COLUMNS)
        sql = (
            f"INSERT INTO people ({', '.join(insert_cols)}) "
            f"VALUES ({', '.join('?' for _ in insert_cols)}) "
            f"ON CONFLICT(external_id) DO UPDATE SET {updates};"
        )
        values = [_to_db(getattr(person, c)) for c in insert_cols]
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(sql, values)
            cur.execute("SELECT id FROM people WHERE external_id = ?", (person.external_id,))
            row = cur.fetchone()
            self.conn.commit()
        return int(row[0])

    def update_field(self, record_id: int, field: str, value: Any) -> None:
        """Partial update of one column on one row."""
        if field not in PERSON_COLUMNS:
            raise ValueError(f"Unknown person field: {field}")
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(f"UPDATE people SET {field} = ? WHERE id = ?;", (_to_db(value), record_id))
            self.conn.commit()
            if cur.rowcount == 0:
                raise RecordNotFoundError(record_id)

    def list_all(self) -> List[PersonRecord]:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT * FROM people ORDER BY id")
            rows = cur.fetchall()
        return [_row_to_person(r) for r in rows]
