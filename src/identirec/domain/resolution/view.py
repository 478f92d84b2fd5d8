"""Consolidated identity returned to callers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConsolidatedContact:
    """Everything known about one identity cluster.

    ``emails`` and ``phone_numbers`` start with the primary's own values and
    continue in secondary creation order; ``secondary_contact_ids`` ascend.
    """

    primary_contact_id: int
    emails: tuple[str, ...]
    phone_numbers: tuple[str, ...]
    secondary_contact_ids: tuple[int, ...]
