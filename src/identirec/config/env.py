"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable


def optional_env_var[T](name: str, parse: Callable[[str], T], default: T) -> T:
    """Parse an optional environment variable, falling back to ``default`` when unset/blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return parse(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from exc
