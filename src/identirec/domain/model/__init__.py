"""Public domain model surface."""

from __future__ import annotations

from identirec.domain.model.audit import ContactMerge
from identirec.domain.model.contact import Contact, utcnow
from identirec.domain.model.enums import LinkPrecedence, MergeReason

__all__ = [
    "Contact",
    "ContactMerge",
    "LinkPrecedence",
    "MergeReason",
    "utcnow",
]
