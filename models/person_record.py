from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class PersonRecord(BaseModel):
    """App/DB record shape: used for persistence and internal flows."""

    id: int | None = None
    external_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    mailing_street: str | None = None
    mailing_city: str | None = None
    mailing_postal_code: str | None = None
    mailing_state: str | None = None
    mailing_country: str | None = None
    last_synced_at: datetime | None = None

    model_config = ConfigDict(extra="ignore")
