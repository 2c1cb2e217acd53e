from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OutboundPayload(BaseModel):
    """Outbound wire shape of POST /users/add; not a mirror of the inbound profile."""

    salesforce_id: str | None = Field(default=None, alias="salesforceId")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None
    phone: str | None = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)
