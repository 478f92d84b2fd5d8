"""Translate SQLAlchemy/DBAPI failures into resolution errors."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Final

from sqlalchemy.exc import DBAPIError, IntegrityError

from identirec.domain.resolution import (
    ConflictError,
    InvariantViolationError,
    StoreUnavailableError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES: Final[frozenset[str]] = frozenset({"40001", "40P01"})
UNIQUE_VIOLATION_SQLSTATE: Final[str] = "23505"
SQLITE_LOCKED_MESSAGES: Final[tuple[str, ...]] = ("database is locked", "database table is locked")


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return str(code) if code is not None else None


def is_unique_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


def is_retryable(exc: DBAPIError) -> bool:
    if _sqlstate(exc) in RETRYABLE_SQLSTATES:
        return True
    message = str(exc.orig).lower()
    return any(fragment in message for fragment in SQLITE_LOCKED_MESSAGES)


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Re-raise database errors as ``ConflictError``/``StoreUnavailableError``.

    Unique violations and serialization failures mean another transaction won
    a race and are retryable. Other integrity errors mean a write broke a
    schema invariant.
    """

    try:
        yield
    except IntegrityError as exc:
        if is_unique_violation(exc):
            raise ConflictError(f"Concurrent write on the same contact key: {exc.orig}") from exc
        raise InvariantViolationError(f"Contact write violates a constraint: {exc.orig}") from exc
    except DBAPIError as exc:
        if is_retryable(exc):
            raise ConflictError(f"Transaction conflict: {exc.orig}") from exc
        raise StoreUnavailableError(f"Contact store failure: {exc.orig}") from exc
