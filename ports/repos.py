from __future__ import annotations

from typing import Any, Optional, Protocol

from models import PersonRecord


class PersonStorePort(Protocol):
    def get_by_external_id(self, external_id: str) -> Optional[PersonRecord]:
        ...

    def upsert_by_external_id(self, person: PersonRecord) -> int:
        ...

    def get_by_id(self, record_id: int) -> PersonRecord:
        ...

    def update_field(self, record_id: int, field: str, value: Any) -> None:
        ...
