"""Ports for persisting contacts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from identirec.domain.model import Contact, ContactMerge

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> TEntity: ...


@runtime_checkable
class ContactRepository(Repository[Contact], Protocol):
    """Persistence contract for contact rows.

    Every finder ignores soft-deleted rows and returns contacts oldest first.
    ``add`` flushes so that the returned contact carries its assigned id.
    """

    def find_by_email_or_phone(
        self,
        *,
        email: str | None,
        phone_number: str | None,
    ) -> Sequence[Contact]: ...

    def find_by_ids_or_linked_to(
        self,
        ids: Collection[int],
        *,
        lock: bool = False,
    ) -> Sequence[Contact]: ...

    def update(self, contact_id: int, **fields: object) -> Contact: ...

    def relink(self, *, from_linked_id: int, to_linked_id: int) -> int: ...

    def all_active(self) -> Sequence[Contact]: ...


@runtime_checkable
class ContactMergeRepository(Repository[ContactMerge], Protocol):
    """Append-only log of cluster merges."""

    def for_target(self, target_id: int) -> Sequence[ContactMerge]: ...
