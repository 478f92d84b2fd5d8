"""Audit records for cluster merges."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .contact import utcnow
from .enums import MergeReason

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class ContactMerge:
    """Audit record for demoting a primary into another cluster."""

    id: int | None = None
    source_id: int
    target_id: int
    reason: MergeReason
    relinked: int = 0
    created_at: datetime = field(default_factory=utcnow)
