"""Contact records and their primary/secondary linkage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from .enums import LinkPrecedence


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class Contact:
    """One observed (email, phone number) fragment.

    A primary contact stands for a whole identity cluster. A secondary contact
    points straight at its primary through ``linked_id``; links are always one
    hop.
    """

    id: int | None = None
    email: str | None = None
    phone_number: str | None = None
    link_precedence: LinkPrecedence = LinkPrecedence.PRIMARY
    linked_id: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def is_primary(self) -> bool:
        return self.link_precedence is LinkPrecedence.PRIMARY

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def primary_id(self) -> int | None:
        """Id of the primary this contact belongs to (its own id for primaries)."""
        return self.id if self.is_primary else self.linked_id

    @property
    def seniority(self) -> tuple[datetime, int]:
        """Sort key: oldest first, smallest id breaks ties."""
        return (self.created_at, self.id if self.id is not None else 0)
