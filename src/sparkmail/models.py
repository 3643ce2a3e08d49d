"""Canonical data shapes shared across sparkmail modules.

**Configuration** -- :class:`SparkPostOptions` is a frozen Pydantic v2 model
holding everything needed to address and authenticate against the API. It
is built once per client through one of two constructors and replaced, never
mutated, when options change:

* :meth:`SparkPostOptions.from_api_key` -- the bare API-key shorthand.
* :meth:`SparkPostOptions.from_options` -- a full option mapping.

Both converge on the same validated model; validation failures surface as
:class:`~sparkmail.exceptions.ConfigurationError`.

**Diagnostics** -- :class:`DebugContext` is the snapshot of the original
call parameters that is attached to every outcome when ``debug`` is on.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sparkmail.exceptions import ConfigurationError

DEFAULT_HOST = "api.sparkpost.com"
DEFAULT_PROTOCOL = "https"
DEFAULT_PORT = 443
DEFAULT_VERSION = "v1"


class SparkPostOptions(BaseModel):
    """Connection and dispatch options for a :class:`~sparkmail.client.SparkPost` client.

    The ``async`` option is exposed as the ``async_`` attribute because
    ``async`` is a reserved word; mappings may use either spelling.

    Example::

        SparkPostOptions.from_options({"key": "abc123", "async": False, "retries": 2})
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    host: str = Field(default=DEFAULT_HOST, description="API host name")
    protocol: str = Field(default=DEFAULT_PROTOCOL, description="URL scheme: https or http")
    port: Optional[int] = Field(
        default=DEFAULT_PORT, description="Port appended to the host; omitted when falsy"
    )
    key: str = Field(repr=False, description="API key sent as the Authorization header")
    version: str = Field(default=DEFAULT_VERSION, description="API version path segment")
    async_: bool = Field(default=True, alias="async", description="Dispatch asynchronously")
    debug: bool = Field(default=False, description="Attach call snapshots to outcomes")
    retries: int = Field(default=0, ge=0, description="Extra attempts on HTTP 5xx")

    @field_validator("key")
    @classmethod
    def _key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("You must provide an API key")
        return value

    @classmethod
    def from_api_key(cls, key: str) -> SparkPostOptions:
        """Build options from a bare API key, every other field defaulted."""
        return cls.from_options({"key": key})

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> SparkPostOptions:
        """Build options from a mapping, filling unspecified keys with defaults.

        Raises:
            ConfigurationError: If the key is missing or blank, or any value
                fails validation.
        """
        try:
            return cls.model_validate(_normalise_keys(options))
        except ValidationError as exc:
            raise ConfigurationError(_describe(exc)) from exc

    def merge(self, overrides: Mapping[str, Any]) -> SparkPostOptions:
        """Return a new instance with *overrides* replacing the matching keys.

        Keys absent from *overrides* keep their current value.
        """
        data = self.model_dump(by_alias=True)
        data.update(_normalise_keys(overrides))
        return SparkPostOptions.from_options(data)


def _normalise_keys(options: Mapping[str, Any]) -> dict[str, Any]:
    """Map the ``async_`` attribute spelling back onto its ``async`` alias."""
    data = dict(options)
    if "async_" in data:
        data["async"] = data.pop("async_")
    return data


def _describe(exc: ValidationError) -> str:
    """Flatten a Pydantic error into a one-line message."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "Invalid options: " + "; ".join(parts)


@dataclass(frozen=True)
class DebugContext:
    """Snapshot of the original call parameters, never sent over the wire."""

    method: str
    uri: str
    payload: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
