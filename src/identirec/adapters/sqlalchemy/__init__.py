"""SQLAlchemy adapter package for identirec."""

from __future__ import annotations

from .mappings import contact_merge_table, contact_table, mapper_registry, start_mappers
from .repositories import SqlAlchemyContactMergeRepository, SqlAlchemyContactRepository
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configure_transactions,
    create_contact_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyContactMergeRepository",
    "SqlAlchemyContactRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "configure_transactions",
    "contact_merge_table",
    "contact_table",
    "create_contact_engine",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
