"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import or_, select, update

from identirec.adapters.sqlalchemy.errors import translate_store_errors
from identirec.adapters.sqlalchemy.mappings import contact_merge_table, contact_table
from identirec.domain.model import Contact, ContactMerge, utcnow

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

_ORDER = (contact_table.c.created_at, contact_table.c.id)


class SqlAlchemyContactRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Contact) -> Contact:
        with translate_store_errors():
            self.session.add(entity)
            self.session.flush()
        return entity

    def find_by_email_or_phone(
        self,
        *,
        email: str | None,
        phone_number: str | None,
    ) -> Sequence[Contact]:
        criteria: list[ColumnElement[bool]] = []
        if email is not None:
            criteria.append(contact_table.c.email == email)
        if phone_number is not None:
            criteria.append(contact_table.c.phone_number == phone_number)
        if not criteria:
            return []
        return self._all(self._live().where(or_(*criteria)))

    def find_by_ids_or_linked_to(
        self,
        ids: Collection[int],
        *,
        lock: bool = False,
    ) -> Sequence[Contact]:
        if not ids:
            return []
        id_list = sorted(ids)
        stmt = self._live().where(
            or_(contact_table.c.id.in_(id_list), contact_table.c.linked_id.in_(id_list))
        )
        if lock:
            stmt = stmt.with_for_update()
        return self._all(stmt)

    def update(self, contact_id: int, **fields: object) -> Contact:
        with translate_store_errors():
            contact = self.session.get(Contact, contact_id)
            if contact is None:
                raise LookupError(f"Contact {contact_id} does not exist")
            for name, value in fields.items():
                if name in {"id", "created_at"} or not hasattr(contact, name):
                    raise AttributeError(f"Contact field {name!r} cannot be updated")
                setattr(contact, name, value)
            contact.updated_at = utcnow()
            self.session.flush()
        return contact

    def relink(self, *, from_linked_id: int, to_linked_id: int) -> int:
        stmt = (
            update(Contact)
            .where(contact_table.c.linked_id == from_linked_id)
            .where(contact_table.c.deleted_at.is_(None))
            .values(linked_id=to_linked_id, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        with translate_store_errors():
            result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount

    def all_active(self) -> Sequence[Contact]:
        return self._all(self._live())

    @staticmethod
    def _live() -> Select[tuple[Contact]]:
        return select(Contact).where(contact_table.c.deleted_at.is_(None)).order_by(*_ORDER)

    def _all(self, stmt: Select[tuple[Contact]]) -> Sequence[Contact]:
        with translate_store_errors():
            return self.session.execute(stmt).scalars().all()


class SqlAlchemyContactMergeRepository:
    """Append-only merge audit log."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ContactMerge) -> ContactMerge:
        with translate_store_errors():
            self.session.add(entity)
            self.session.flush()
        return entity

    def for_target(self, target_id: int) -> Sequence[ContactMerge]:
        stmt = (
            select(ContactMerge)
            .where(contact_merge_table.c.target_id == target_id)
            .order_by(contact_merge_table.c.id)
        )
        with translate_store_errors():
            return self.session.execute(stmt).scalars().all()
