"""Cluster discovery, canonical selection and projection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import InvariantViolationError
from .view import ConsolidatedContact

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from identirec.domain.model import Contact

    from .fragment import IdentityFragment


def candidate_primary_ids(matches: Iterable[Contact]) -> set[int]:
    """Return the primaries the matched contacts belong to."""

    primary_ids: set[int] = set()
    for contact in matches:
        primary_id = contact.primary_id
        if primary_id is None:
            raise InvariantViolationError(
                f"Secondary contact {contact.id} has no linked primary",
                contact_id=contact.id,
            )
        primary_ids.add(primary_id)
    return primary_ids


def collect_primaries(primary_ids: Collection[int], rows: Iterable[Contact]) -> list[Contact]:
    """Pick the candidate primaries out of ``rows``, oldest first.

    Every candidate id must resolve to a live primary. A missing row means a
    dangling link; a secondary means a two-hop chain.
    """

    by_id = {row.id: row for row in rows if row.id in primary_ids}
    primaries: list[Contact] = []
    for primary_id in primary_ids:
        row = by_id.get(primary_id)
        if row is None:
            raise InvariantViolationError(
                f"Contacts link to missing or deleted primary {primary_id}",
                contact_id=primary_id,
            )
        if not row.is_primary:
            raise InvariantViolationError(
                f"Contacts link to secondary contact {primary_id}",
                contact_id=primary_id,
            )
        primaries.append(row)
    primaries.sort(key=lambda contact: contact.seniority)
    return primaries


def select_canonical(primaries: Iterable[Contact]) -> Contact:
    """The oldest primary wins; the smallest id breaks ties."""

    return min(primaries, key=lambda contact: contact.seniority)


def _unique(values: Iterable[str | None]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        if value is not None:
            seen.setdefault(value)
    return tuple(seen)


@dataclass(slots=True)
class Cluster:
    """A primary contact and the secondaries linked directly to it."""

    primary: Contact
    secondaries: list[Contact] = field(default_factory=list["Contact"])

    @classmethod
    def from_rows(cls, primary_id: int, rows: Iterable[Contact]) -> Cluster:
        primary: Contact | None = None
        secondaries: list[Contact] = []
        for row in rows:
            if row.id == primary_id:
                if not row.is_primary:
                    raise InvariantViolationError(
                        f"Cluster root {primary_id} is not a primary contact",
                        contact_id=primary_id,
                    )
                primary = row
            elif row.linked_id == primary_id:
                if row.is_primary:
                    raise InvariantViolationError(
                        f"Primary contact {row.id} carries linked id {primary_id}",
                        contact_id=row.id,
                    )
                secondaries.append(row)
        if primary is None:
            raise InvariantViolationError(
                f"Cluster {primary_id} has no primary contact",
                contact_id=primary_id,
            )
        secondaries.sort(key=lambda contact: contact.seniority)
        return cls(primary=primary, secondaries=secondaries)

    @property
    def members(self) -> list[Contact]:
        return [self.primary, *self.secondaries]

    @property
    def emails(self) -> tuple[str, ...]:
        return _unique(contact.email for contact in self.members)

    @property
    def phone_numbers(self) -> tuple[str, ...]:
        return _unique(contact.phone_number for contact in self.members)

    def is_novel(self, fragment: IdentityFragment) -> bool:
        """Whether ``fragment`` carries an email or phone number the cluster lacks."""

        known_emails = set(self.emails)
        known_phones = set(self.phone_numbers)
        new_email = fragment.email is not None and fragment.email not in known_emails
        new_phone = fragment.phone_number is not None and fragment.phone_number not in known_phones
        return new_email or new_phone

    def to_view(self) -> ConsolidatedContact:
        primary_id = self.primary.id
        if primary_id is None:
            raise InvariantViolationError("Cluster primary has not been persisted")
        secondary_ids = sorted(
            contact.id for contact in self.secondaries if contact.id is not None
        )
        return ConsolidatedContact(
            primary_contact_id=primary_id,
            emails=self.emails,
            phone_numbers=self.phone_numbers,
            secondary_contact_ids=tuple(secondary_ids),
        )
