"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import ContactMergeRepository, ContactRepository, Repository
from .unit_of_work import (
    ContactRepositories,
    ContactUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ContactMergeRepository",
    "ContactRepositories",
    "ContactRepository",
    "ContactUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
