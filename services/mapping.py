from __future__ import annotations

import json
from typing import Any, Dict

from pydantic import ValidationError

from exceptions import MalformedPayloadError
from models import ExternalProfile, OutboundPayload, PersonRecord


def _decode(payload: Any) -> Any:
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError(f"Profile body is not UTF-8: {exc}") from exc
    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except ValueError as exc:
            raise MalformedPayloadError(f"Profile body is not valid JSON: {exc}") from exc
    return payload


def from_external_json(payload: Any) -> PersonRecord:
    """Map an external profile (decoded JSON or raw body) to a local PersonRecord.

    Raises MalformedPayloadError when the value is not an object, when the
    nested address object is missing, when a required field is absent, or when
    birthDate is not a YYYY-MM-DD date.
    """
    data = _decode(payload)
    if not isinstance(data, dict):
        raise MalformedPayloadError(
            f"Profile must be a JSON object, got {type(data).__name__}"
        )
    if not isinstance(data.get("address"), dict):
        raise MalformedPayloadError("Profile is missing the 'address' object")
    try:
        profile = ExternalProfile.model_validate(data)
    except ValidationError as exc:
        raise MalformedPayloadError(f"Profile does not match schema: {exc}") from exc

    return PersonRecord(
        external_id=profile.id,
        first_name=profile.first_name,
        last_name=profile.last_name,
        email=profile.email,
        phone=profile.phone,
        birth_date=profile.birth_date,
        mailing_street=profile.address.address,
        mailing_city=profile.address.city,
        mailing_postal_code=profile.address.postal_code,
        mailing_state=profile.address.state,
        mailing_country=profile.address.country,
    )


def to_outbound_json(person: PersonRecord) -> Dict[str, Any]:
    """Serialize the pushed subset of a person; absent values go out as null."""
    payload = OutboundPayload(
        salesforce_id=str(person.id) if person.id is not None else None,
        first_name=person.first_name,
        last_name=person.last_name,
        email=person.email,
        phone=person.phone,
    )
    return payload.model_dump(by_alias=True)
