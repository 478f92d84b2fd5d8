"""Application service resolving identity fragments with conflict retries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from .errors import ConflictError, InvalidFragmentError, StoreUnavailableError
from .fragment import IdentityFragment
from .reconcile import reconcile

if TYPE_CHECKING:
    from collections.abc import Callable

    from identirec.domain.ports import ContactUnitOfWork

    from .view import ConsolidatedContact

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.05

log = logging.getLogger(__name__)


@dataclass(slots=True)
class IdentityResolver:
    """Resolve fragments into consolidated identities, one transaction per attempt.

    An attempt that loses a race (``ConflictError``) is rolled back and the
    whole resolution starts over on a fresh unit of work. After
    ``max_attempts`` losses the store is reported unavailable.
    """

    unit_of_work_factory: Callable[[], ContactUnitOfWork]
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be non-negative")

    def resolve(self, fragment: IdentityFragment) -> ConsolidatedContact:
        if not isinstance(fragment, IdentityFragment):
            raise InvalidFragmentError(f"Expected an IdentityFragment, got {type(fragment)!r}")

        try:
            for attempt in self._retrying():
                with attempt, self.unit_of_work_factory() as uow:
                    view = reconcile(uow.repositories, fragment)
                    uow.commit()
        except RetryError as exc:
            raise StoreUnavailableError(
                f"Could not resolve {fragment} after {self.max_attempts} attempts"
            ) from exc.last_attempt.exception()
        return view

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            retry=retry_if_exception_type(ConflictError),
            before_sleep=before_sleep_log(log, logging.WARNING),
            sleep=self.sleep,
        )

    def identify(
        self,
        *,
        email: str | None = None,
        phone_number: str | None = None,
    ) -> ConsolidatedContact:
        """Convenience wrapper building the fragment from keyword arguments."""

        return self.resolve(IdentityFragment(email=email, phone_number=phone_number))
