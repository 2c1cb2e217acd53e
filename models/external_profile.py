from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_scalar(value: Any) -> Any:
    """Render JSON scalars as strings; leave containers/null for validation to reject."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ExternalAddress(BaseModel):
    address: str
    city: str
    postal_code: str = Field(alias="postalCode")
    state: str
    country: str

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _to_str(cls, value: Any) -> Any:
        return _coerce_scalar(value)


class ExternalProfile(BaseModel):
    """Inbound wire shape of GET /users/{id}."""

    id: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    phone: str
    birth_date: date = Field(alias="birthDate")
    address: ExternalAddress

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("id", "first_name", "last_name", "email", "phone", mode="before")
    @classmethod
    def _to_str(cls, value: Any) -> Any:
        return _coerce_scalar(value)

    @field_validator("birth_date", mode="before")
    @classmethod
    def _parse_birth_date(cls, value: Any) -> date:
        # Only calendar dates; reject epoch numbers and datetimes
        if not isinstance(value, str):
            raise ValueError("birthDate must be a YYYY-MM-DD string")
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
