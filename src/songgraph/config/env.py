"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import InvalidConfigurationError


def optional_env_var(name: str) -> str | None:
    """Return the stripped value of ``name`` or ``None`` when unset or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def int_env_var(name: str, default: int, *, minimum: int = 1) -> int:
    """Return an integer environment variable, falling back to ``default``."""

    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise InvalidConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def list_env_var(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Return a comma separated environment variable as a tuple of non-blank items."""

    raw = optional_env_var(name)
    if raw is None:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    if not items:
        raise InvalidConfigurationError(f"{name} must list at least one value")
    return items
