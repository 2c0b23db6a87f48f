"""
Client configuration.

The native constructor takes one JSON object. ``ClientConfig`` is a typed
way to build it; a plain mapping works just as well and is passed through
untouched. The bridge does not interpret any of the keys.

Keys understood by the native library::

    host / ip          Control-plane host (default 127.0.0.1)
    port               Control-plane port
    token              Auth token (required by the native library)
    tenantId / tenant  Tenant identifier (default "default")
    noNoise            Disable transport encryption
    connectTimeoutMs   Connect timeout in milliseconds
    requestTimeoutMs   Per-request timeout in milliseconds
    protocolVersion    Control protocol version

Environment (``ClientConfig.from_env``)::

    EVENTDBX_HOST, EVENTDBX_PORT, EVENTDBX_TOKEN,
    EVENTDBX_TENANT_ID, EVENTDBX_NO_NOISE
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from .exceptions import ValidationError

__all__ = ["ClientConfig"]

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})

# Python field name -> native config key
_KEYS = {
    "host": "host",
    "port": "port",
    "token": "token",
    "tenant_id": "tenantId",
    "no_noise": "noNoise",
    "connect_timeout_ms": "connectTimeoutMs",
    "request_timeout_ms": "requestTimeoutMs",
    "protocol_version": "protocolVersion",
}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean, got {raw!r}", details={"variable": name})


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValidationError(
            f"{name} must be an integer, got {raw!r}", details={"variable": name}
        ) from e


@dataclass
class ClientConfig:
    """
    Connection settings for ``Client``.

    Example:
        >>> config = ClientConfig(host="10.0.0.5", token="secret", tenant_id="acme")
        >>> config.to_dict()
        {'host': '10.0.0.5', 'token': 'secret', 'tenantId': 'acme'}
    """

    host: str | None = None
    port: int | None = None
    token: str | None = None
    tenant_id: str | None = None
    no_noise: bool | None = None
    connect_timeout_ms: int | None = None
    request_timeout_ms: int | None = None
    protocol_version: int | None = None

    def __post_init__(self) -> None:
        if self.port is not None and not 1 <= self.port <= 65535:
            raise ValidationError(
                f"port must be between 1 and 65535, got {self.port}",
                details={"field": "port"},
            )
        for name in ("connect_timeout_ms", "request_timeout_ms", "protocol_version"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError(
                    f"{name} must not be negative, got {value}", details={"field": name}
                )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> ClientConfig:
        """
        Build a config from ``EVENTDBX_*`` variables.

        Explicit keyword overrides win over the environment.

        Raises
        ------
            ValidationError: If a variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        if env.get("EVENTDBX_HOST"):
            values["host"] = env["EVENTDBX_HOST"]
        if env.get("EVENTDBX_PORT"):
            values["port"] = _parse_int("EVENTDBX_PORT", env["EVENTDBX_PORT"])
        if env.get("EVENTDBX_TOKEN"):
            values["token"] = env["EVENTDBX_TOKEN"]
        if env.get("EVENTDBX_TENANT_ID"):
            values["tenant_id"] = env["EVENTDBX_TENANT_ID"]
        if "EVENTDBX_NO_NOISE" in env:
            values["no_noise"] = _parse_bool("EVENTDBX_NO_NOISE", env["EVENTDBX_NO_NOISE"])
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Render the native config object, omitting unset fields."""
        return {
            _KEYS[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def __repr__(self) -> str:
        shown = {k: ("***" if k == "token" else v) for k, v in self.to_dict().items()}
        return f"ClientConfig({shown})"
