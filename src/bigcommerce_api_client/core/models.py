"""Core request/outcome models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Literal

ApiVersion = Literal["v2", "v3"]
Method = Literal["GET", "POST", "PUT", "DELETE"]

API_VERSIONS: tuple[str, ...] = ("v2", "v3")
METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE")


@dataclass(slots=True, frozen=True)
class RequestDescriptor:
    endpoint: str
    method: Method = "GET"
    body: Any = None
    version: ApiVersion = "v3"
    query: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            raise ValueError(f"unsupported method: {self.method}")
        if self.version not in API_VERSIONS:
            raise ValueError(f"unsupported API version: {self.version}")
        normalized: dict[str, str] = {}
        for key, value in dict(self.query or {}).items():
            if not isinstance(key, str):
                raise TypeError("query keys must be str")
            normalized[key] = str(value)
        object.__setattr__(self, "query", MappingProxyType(normalized))

    def with_query(self, updates: Mapping[str, str]) -> "RequestDescriptor":
        return replace(self, query={**self.query, **updates})


@dataclass(slots=True, frozen=True)
class SettledOutcome:
    """Result of one request run by the concurrency executor."""

    descriptor: RequestDescriptor
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = [
    "ApiVersion",
    "Method",
    "API_VERSIONS",
    "METHODS",
    "RequestDescriptor",
    "SettledOutcome",
]
