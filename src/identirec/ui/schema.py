"""Pydantic models describing the identify request and response payloads."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from identirec.domain.resolution import IdentityFragment

if TYPE_CHECKING:
    from identirec.domain.resolution import ConsolidatedContact

EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[0-9]+$")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class IdentifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IdentifyRequest(IdentifyBaseModel):
    email: str | None = None
    phone_number: str | None = Field(default=None, alias="phoneNumber")

    _normalize_email = field_validator("email", mode="before")(_blank_to_none)

    @field_validator("phone_number", mode="before")
    @classmethod
    def _coerce_phone_number(cls, value: object) -> object:
        # clients send phone numbers as JSON numbers too
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return _blank_to_none(value)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        if value is not None and not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email format")
        return value

    @field_validator("phone_number")
    @classmethod
    def _check_phone_number(cls, value: str | None) -> str | None:
        if value is not None and not PHONE_PATTERN.match(value):
            raise ValueError("Phone number must be numeric")
        return value

    @model_validator(mode="after")
    def _require_contact_info(self) -> Self:
        if self.email is None and self.phone_number is None:
            raise ValueError("At least one of email or phoneNumber is required")
        return self

    def to_fragment(self) -> IdentityFragment:
        return IdentityFragment(email=self.email, phone_number=self.phone_number)


class ContactPayload(IdentifyBaseModel):
    primary_contact_id: int = Field(alias="primaryContactId")
    emails: list[str]
    phone_numbers: list[str] = Field(alias="phoneNumbers")
    secondary_contact_ids: list[int] = Field(alias="secondaryContactIds")


class IdentifyResponse(IdentifyBaseModel):
    contact: ContactPayload

    @classmethod
    def from_view(cls, view: ConsolidatedContact) -> IdentifyResponse:
        return cls(
            contact=ContactPayload(
                primary_contact_id=view.primary_contact_id,
                emails=list(view.emails),
                phone_numbers=list(view.phone_numbers),
                secondary_contact_ids=list(view.secondary_contact_ids),
            )
        )

    def to_json(self, *, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)
