"""Read-only consistency checks over stored clusters."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from identirec.domain.model import Contact


@dataclass(frozen=True, slots=True)
class ClusterViolation:
    contact_id: int | None
    message: str

    def __str__(self) -> str:
        return f"contact {self.contact_id}: {self.message}"


def audit_clusters(contacts: Iterable[Contact]) -> list[ClusterViolation]:
    """Return every invariant violation found among live ``contacts``."""

    live = {contact.id: contact for contact in contacts if not contact.is_deleted}
    violations: list[ClusterViolation] = []
    members: dict[int, list[Contact]] = defaultdict(list)

    for contact in live.values():
        if contact.email is None and contact.phone_number is None:
            violations.append(ClusterViolation(contact.id, "has neither email nor phone number"))
        if contact.is_primary:
            if contact.linked_id is not None:
                violations.append(ClusterViolation(contact.id, "primary carries a linked id"))
            if contact.id is not None:
                members[contact.id].append(contact)
            continue
        target = live.get(contact.linked_id) if contact.linked_id is not None else None
        if contact.linked_id is None:
            violations.append(ClusterViolation(contact.id, "secondary has no linked id"))
        elif target is None:
            violations.append(
                ClusterViolation(contact.id, f"links to missing contact {contact.linked_id}")
            )
        elif not target.is_primary:
            violations.append(
                ClusterViolation(contact.id, f"links to secondary contact {contact.linked_id}")
            )
        else:
            members[contact.linked_id].append(contact)

    owners_by_email: dict[str, set[int]] = defaultdict(set)
    owners_by_phone: dict[str, set[int]] = defaultdict(set)
    for primary_id, cluster in members.items():
        primary = live[primary_id]
        oldest = min(cluster, key=lambda contact: contact.seniority)
        if oldest is not primary:
            violations.append(
                ClusterViolation(primary_id, f"is younger than its secondary {oldest.id}")
            )
        for contact in cluster:
            if contact.email is not None:
                owners_by_email[contact.email].add(primary_id)
            if contact.phone_number is not None:
                owners_by_phone[contact.phone_number].add(primary_id)

    for label, owners in (("email", owners_by_email), ("phone number", owners_by_phone)):
        for value, primary_ids in owners.items():
            if len(primary_ids) > 1:
                clusters = ", ".join(str(primary_id) for primary_id in sorted(primary_ids))
                violations.append(
                    ClusterViolation(None, f"{label} {value!r} is shared by clusters {clusters}")
                )
    return violations
