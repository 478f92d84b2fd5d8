"""Identity resolution: turn contact fragments into consolidated identities."""

from __future__ import annotations

from .audit import ClusterViolation, audit_clusters
from .cluster import Cluster, candidate_primary_ids, collect_primaries, select_canonical
from .errors import (
    ConflictError,
    InvalidFragmentError,
    InvariantViolationError,
    ResolutionError,
    StoreUnavailableError,
)
from .fragment import IdentityFragment
from .reconcile import reconcile
from .resolver import DEFAULT_BACKOFF_SECONDS, DEFAULT_MAX_ATTEMPTS, IdentityResolver
from .view import ConsolidatedContact

__all__ = [
    "DEFAULT_BACKOFF_SECONDS",
    "DEFAULT_MAX_ATTEMPTS",
    "Cluster",
    "ClusterViolation",
    "ConflictError",
    "ConsolidatedContact",
    "IdentityFragment",
    "IdentityResolver",
    "InvalidFragmentError",
    "InvariantViolationError",
    "ResolutionError",
    "StoreUnavailableError",
    "audit_clusters",
    "candidate_primary_ids",
    "collect_primaries",
    "reconcile",
    "select_canonical",
]
