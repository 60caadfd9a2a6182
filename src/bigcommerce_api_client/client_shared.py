"""Shared helpers for client/auth bootstrap."""

from __future__ import annotations

from typing import Protocol

from .core.errors import BigCommerceConfigurationError


class ValidatableConfig(Protocol):
    def validate(self) -> None: ...


def validate_config(config: ValidatableConfig) -> None:
    try:
        config.validate()
    except ValueError as exc:
        raise BigCommerceConfigurationError(str(exc)) from exc


__all__ = [
    "ValidatableConfig",
    "validate_config",
]
