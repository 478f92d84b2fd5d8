"""Single-transaction identity reconciliation.

``reconcile`` runs inside one unit of work: match the fragment against stored
contacts, fold every matched cluster into the oldest one, record the fragment
if it adds anything new, and project the resulting cluster. Retrying on
conflicts is the caller's concern (see ``IdentityResolver``).
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from identirec.domain.model import Contact, ContactMerge, LinkPrecedence, MergeReason

from .cluster import Cluster, candidate_primary_ids, collect_primaries, select_canonical
from .errors import InvariantViolationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from identirec.domain.ports import ContactRepositories

    from .fragment import IdentityFragment
    from .view import ConsolidatedContact

log = getLogger(__name__)


def reconcile(repositories: ContactRepositories, fragment: IdentityFragment) -> ConsolidatedContact:
    """Apply ``fragment`` to the store and return the consolidated identity."""

    contacts = repositories.contacts
    matches = contacts.find_by_email_or_phone(
        email=fragment.email,
        phone_number=fragment.phone_number,
    )
    log.debug("Fragment %s matched contacts %s", fragment, [match.id for match in matches])

    if not matches:
        created = contacts.add(
            Contact(
                email=fragment.email,
                phone_number=fragment.phone_number,
                link_precedence=LinkPrecedence.PRIMARY,
            )
        )
        log.info("Created primary contact %s", created.id)
        return Cluster(primary=created).to_view()

    primary_ids = candidate_primary_ids(matches)
    locked = contacts.find_by_ids_or_linked_to(primary_ids, lock=True)
    primaries = collect_primaries(primary_ids, locked)
    canonical = select_canonical(primaries)
    canonical_id = _persisted_id(canonical)

    # reasons are read off the matches before demotion rewrites their links
    reasons = {
        primary.id: _merge_reason(fragment, matches, primary)
        for primary in primaries
        if primary is not canonical
    }
    for primary in primaries:
        if primary is not canonical:
            _merge(repositories, canonical_id, primary, reasons[primary.id])

    cluster = Cluster.from_rows(canonical_id, contacts.find_by_ids_or_linked_to([canonical_id]))
    if cluster.is_novel(fragment):
        created = contacts.add(
            Contact(
                email=fragment.email,
                phone_number=fragment.phone_number,
                link_precedence=LinkPrecedence.SECONDARY,
                linked_id=canonical_id,
            )
        )
        log.info("Linked new secondary contact %s to primary %s", created.id, canonical_id)
        cluster = Cluster.from_rows(
            canonical_id, contacts.find_by_ids_or_linked_to([canonical_id])
        )
    else:
        log.debug("Fragment %s adds nothing to cluster %s", fragment, canonical_id)

    return cluster.to_view()


def _merge(
    repositories: ContactRepositories,
    canonical_id: int,
    primary: Contact,
    reason: MergeReason,
) -> None:
    """Demote ``primary`` under ``canonical_id`` and flatten its secondaries."""

    demoted_id = _persisted_id(primary)
    repositories.contacts.update(
        demoted_id,
        link_precedence=LinkPrecedence.SECONDARY,
        linked_id=canonical_id,
    )
    relinked = repositories.contacts.relink(from_linked_id=demoted_id, to_linked_id=canonical_id)
    repositories.merges.add(
        ContactMerge(
            source_id=demoted_id,
            target_id=canonical_id,
            reason=reason,
            relinked=relinked,
        )
    )
    log.info(
        "Merged cluster %s into %s (%s, relinked=%s)",
        demoted_id,
        canonical_id,
        reason,
        relinked,
    )


def _merge_reason(
    fragment: IdentityFragment,
    matches: Sequence[Contact],
    primary: Contact,
) -> MergeReason:
    """Which fragment field pulled ``primary``'s cluster into this resolution."""

    members = [match for match in matches if match.primary_id == primary.id]
    via_email = fragment.email is not None and any(m.email == fragment.email for m in members)
    via_phone = fragment.phone_number is not None and any(
        m.phone_number == fragment.phone_number for m in members
    )
    if via_email and via_phone:
        return MergeReason.SHARED_EMAIL_AND_PHONE
    if via_email:
        return MergeReason.SHARED_EMAIL
    return MergeReason.SHARED_PHONE


def _persisted_id(contact: Contact) -> int:
    if contact.id is None:
        raise InvariantViolationError("Contact has not been persisted")
    return contact.id
