"""Conflict-retry settings for the identity resolver."""

from __future__ import annotations

from dataclasses import dataclass

from identirec.domain.resolution import DEFAULT_BACKOFF_SECONDS, DEFAULT_MAX_ATTEMPTS

from .env import optional_env_var
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_backoff_seconds: float = DEFAULT_BACKOFF_SECONDS


def get_resolver_config() -> ResolverConfig:
    max_attempts = optional_env_var("IDENTIREC_MAX_ATTEMPTS", int, DEFAULT_MAX_ATTEMPTS)
    backoff = optional_env_var("IDENTIREC_RETRY_BACKOFF_SECONDS", float, DEFAULT_BACKOFF_SECONDS)
    if max_attempts < 1:
        raise ConfigurationError("IDENTIREC_MAX_ATTEMPTS must be at least 1")
    if backoff < 0:
        raise ConfigurationError("IDENTIREC_RETRY_BACKOFF_SECONDS must be non-negative")
    return ResolverConfig(max_attempts=max_attempts, retry_backoff_seconds=backoff)
