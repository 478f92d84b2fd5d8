"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from identirec.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, configured_engine, startup
from identirec.config import get_resolver_config
from identirec.domain.resolution import IdentityFragment, IdentityResolver, audit_clusters

if TYPE_CHECKING:
    from collections.abc import Callable

    from identirec.config import ResolverConfig
    from identirec.domain.ports import ContactUnitOfWork
    from identirec.domain.resolution import ClusterViolation, ConsolidatedContact

type UnitOfWorkFactory = Callable[[], ContactUnitOfWork]

log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if configured_engine() is None:
        startup()
    return SqlAlchemyUnitOfWork


def build_resolver(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ResolverConfig | None = None,
) -> IdentityResolver:
    """Wire the resolver to the configured store and retry policy."""

    effective_config = config or get_resolver_config()
    return IdentityResolver(
        unit_of_work_factory=unit_of_work_factory or _default_unit_of_work_factory(),
        max_attempts=effective_config.max_attempts,
        backoff_seconds=effective_config.retry_backoff_seconds,
    )


def identify_contact(
    fragment: IdentityFragment,
    *,
    resolver: IdentityResolver | None = None,
) -> ConsolidatedContact:
    """Resolve one fragment against the contact store."""

    effective_resolver = resolver or build_resolver()
    view = effective_resolver.resolve(fragment)
    log.info(
        "Identified primary contact %s (%s secondaries)",
        view.primary_contact_id,
        len(view.secondary_contact_ids),
    )
    return view


def audit_contact_store(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ClusterViolation]:
    """Scan every live contact and report cluster invariant violations."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        contacts = uow.repositories.contacts.all_active()
        violations = audit_clusters(contacts)
    log.info("Audited %s contacts: %s violations", len(contacts), len(violations))
    return violations
