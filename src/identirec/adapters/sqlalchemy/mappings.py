"""SQLAlchemy mapping metadata for the identirec domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    func,
    orm,
    text,
)
from sqlalchemy.orm import configure_mappers

from identirec.domain.model import Contact, ContactMerge, LinkPrecedence, MergeReason

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

contact_table = Table(
    "contact",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=True),
    Column("phone_number", String(32), nullable=True),
    Column(
        "link_precedence",
        Enum(LinkPrecedence, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    ),
    Column("linked_id", Integer, ForeignKey("contact.id"), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Column("deleted_at", UTCDateTime(), nullable=True),
    CheckConstraint(
        "email IS NOT NULL OR phone_number IS NOT NULL",
        name="contact_info_required",
    ),
    CheckConstraint(
        "(link_precedence = 'primary' AND linked_id IS NULL) OR "
        "(link_precedence = 'secondary' AND linked_id IS NOT NULL)",
        name="secondary_requires_linked_id",
    ),
    Index("ix_contact_email", "email"),
    Index("ix_contact_phone_number", "phone_number"),
    Index("ix_contact_linked_id", "linked_id"),
)

# one live row per (email, phone number) pair; NULLs compare equal here
contact_pair_index = Index(
    "uq_contact_email_phone_live",
    func.coalesce(contact_table.c.email, text("''")),
    func.coalesce(contact_table.c.phone_number, text("''")),
    unique=True,
    sqlite_where=text("deleted_at IS NULL"),
    postgresql_where=text("deleted_at IS NULL"),
)

contact_merge_table = Table(
    "contact_merge",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source_id", Integer, ForeignKey("contact.id"), nullable=False),
    Column("target_id", Integer, ForeignKey("contact.id"), nullable=False),
    Column(
        "reason",
        Enum(MergeReason, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    ),
    Column("relinked", Integer, nullable=False, default=0),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_contact_merge_target_id", "target_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Contact, contact_table)
    mapper_registry.map_imperatively(ContactMerge, contact_merge_table)

    configure_mappers()
    return mapper_registry
