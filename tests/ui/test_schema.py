from __future__ import annotations

import pytest
from pydantic import ValidationError

from identirec.domain.resolution import ConsolidatedContact, IdentityFragment
from identirec.ui.schema import IdentifyRequest, IdentifyResponse


def test_request_accepts_camel_case_body() -> None:
    request = IdentifyRequest.model_validate({"email": "a@x.com", "phoneNumber": "111"})

    assert request.to_fragment() == IdentityFragment(email="a@x.com", phone_number="111")


def test_request_coerces_numeric_phone_number() -> None:
    request = IdentifyRequest.model_validate({"phoneNumber": 123456})

    assert request.phone_number == "123456"
    assert request.email is None


def test_request_treats_blank_fields_as_absent() -> None:
    request = IdentifyRequest.model_validate({"email": "  ", "phoneNumber": "111"})

    assert request.email is None


def test_request_ignores_unknown_fields() -> None:
    request = IdentifyRequest.model_validate({"email": "a@x.com", "name": "Doc"})

    assert request.email == "a@x.com"


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({}, "At least one of email or phoneNumber is required"),
        ({"email": None, "phoneNumber": None}, "At least one of email or phoneNumber is required"),
        ({"email": "doc.brown"}, "Invalid email format"),
        ({"email": "doc @x.com"}, "Invalid email format"),
        ({"phoneNumber": "+1 555"}, "Phone number must be numeric"),
        ({"phoneNumber": "\u0661\u0662\u0663"}, "Phone number must be numeric"),
    ],
)
def test_request_rejects_invalid_bodies(body: dict[str, object], message: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        IdentifyRequest.model_validate(body)

    assert message in str(excinfo.value)


def test_response_serializes_with_camel_case_envelope() -> None:
    view = ConsolidatedContact(
        primary_contact_id=1,
        emails=("george@x.com", "biff@x.com"),
        phone_numbers=("919191", "717171"),
        secondary_contact_ids=(27,),
    )

    payload = IdentifyResponse.from_view(view).model_dump(by_alias=True)

    assert payload == {
        "contact": {
            "primaryContactId": 1,
            "emails": ["george@x.com", "biff@x.com"],
            "phoneNumbers": ["919191", "717171"],
            "secondaryContactIds": [27],
        }
    }
