"""Identity fragments submitted for resolution."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidFragmentError


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(frozen=True, slots=True)
class IdentityFragment:
    """Partial identity: an email, a phone number, or both.

    Shape validation (email syntax, digits-only phone numbers) belongs to the
    request layer; here we only insist that something was supplied.
    """

    email: str | None = None
    phone_number: str | None = None

    def __post_init__(self) -> None:
        email = _blank_to_none(self.email)
        phone_number = _blank_to_none(self.phone_number)
        if email is None and phone_number is None:
            raise InvalidFragmentError("At least one of email or phone number is required")
        object.__setattr__(self, "email", email)
        object.__setattr__(self, "phone_number", phone_number)
