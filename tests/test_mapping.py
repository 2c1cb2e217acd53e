from __future__ import annotations

import json
from datetime import date

import pytest

from exceptions import MalformedPayloadError
from models import PersonRecord
from services.mapping import from_external_json, to_outbound_json


def test_profile_maps_to_person_with_string_external_id(profile_payload):
    person = from_external_json(profile_payload)

    assert person.external_id == "1"
    assert person.first_name == "A"
    assert person.last_name == "B"
    assert person.email == "a@b.com"
    assert person.phone == "123"
    assert person.birth_date == date(2000, 1, 1)
    assert person.mailing_street == "X"
    assert person.mailing_city == "Y"
    assert person.mailing_postal_code == "1"
    assert person.mailing_state == "S"
    assert person.mailing_country == "C"
    assert person.id is None
    assert person.last_synced_at is None


def test_raw_json_body_is_decoded(profile_payload):
    person = from_external_json(json.dumps(profile_payload).encode("utf-8"))
    assert person.external_id == "1"


def test_numeric_scalars_coerce_to_strings(profile_payload):
    profile_payload["phone"] = 5551234
    profile_payload["address"]["postalCode"] = 90210
    profile_payload["id"] = 42.0

    person = from_external_json(profile_payload)

    assert person.phone == "5551234"
    assert person.mailing_postal_code == "90210"
    assert person.external_id == "42"


def test_extra_fields_are_ignored(profile_payload):
    profile_payload["age"] = 30
    profile_payload["address"]["coordinates"] = {"lat": 1.0, "lng": 2.0}
    assert from_external_json(profile_payload).first_name == "A"


def test_missing_address_is_malformed(profile_payload):
    del profile_payload["address"]
    with pytest.raises(MalformedPayloadError):
        from_external_json(profile_payload)


def test_address_must_be_an_object(profile_payload):
    profile_payload["address"] = "1 Main St"
    with pytest.raises(MalformedPayloadError):
        from_external_json(profile_payload)


@pytest.mark.parametrize("payload", [[], "[1, 2]", "null", 7, b"not json", b"\xff\xfe{}"])
def test_top_level_must_be_object(payload):
    with pytest.raises(MalformedPayloadError):
        from_external_json(payload)


@pytest.mark.parametrize("birth_date", ["01/02/2000", "2000-13-01", "yesterday", 946684800, None])
def test_unparseable_birth_date_is_malformed(profile_payload, birth_date):
    profile_payload["birthDate"] = birth_date
    with pytest.raises(MalformedPayloadError):
        from_external_json(profile_payload)


@pytest.mark.parametrize("key", ["id", "firstName", "lastName", "email", "phone", "birthDate"])
def test_missing_required_field_is_malformed(profile_payload, key):
    del profile_payload[key]
    with pytest.raises(MalformedPayloadError):
        from_external_json(profile_payload)


def test_missing_address_part_is_malformed(profile_payload):
    del profile_payload["address"]["city"]
    with pytest.raises(MalformedPayloadError):
        from_external_json(profile_payload)


def test_outbound_payload_shape():
    person = PersonRecord(
        id=17,
        external_id="250",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone="555",
        mailing_city="London",
    )

    assert to_outbound_json(person) == {
        "salesforceId": "17",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "555",
    }


def test_outbound_payload_sends_absent_fields_as_null():
    payload = to_outbound_json(PersonRecord(id=3, first_name="Solo"))
    assert payload["phone"] is None
    assert payload["email"] is None
    assert payload["lastName"] is None
    assert set(payload) == {"salesforceId", "firstName", "lastName", "email", "phone"}
