"""Configuration: frozen Config with explicit endpoint and token resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
import re
from typing import ClassVar

from dotenv import load_dotenv

from travis_v3._http import DEFAULT_USER_AGENT
from travis_v3.errors import ConfigurationError

load_dotenv()

TOKEN_ENV_VAR = "TRAVIS_TOKEN"
ENDPOINT_ENV_VAR = "TRAVIS_ENDPOINT"

_HOST_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?(?::\d{1,5})?$")


@dataclass(frozen=True)
class Endpoint:
    """API host environment.

    Example:
        Endpoint.ORG
        Endpoint.enterprise("travis.example.com")
    """

    host: str

    ORG: ClassVar[Endpoint]
    PRO: ClassVar[Endpoint]
    COM: ClassVar[Endpoint]

    def __post_init__(self) -> None:
        """Reject hosts that cannot form an https URL."""
        if not isinstance(self.host, str) or not _HOST_RE.match(self.host):
            raise ConfigurationError(
                f"Invalid endpoint host: {self.host!r}",
                hint="Pass a bare host name such as 'travis.example.com' (no scheme, no path).",
            )

    @classmethod
    def enterprise(cls, host: str) -> Endpoint:
        """Endpoint for a Travis CI Enterprise installation."""
        return cls(host=host)

    @classmethod
    def from_name(cls, name: str) -> Endpoint:
        """Resolve ``org``, ``pro``, ``com`` or a bare enterprise host."""
        known = {"org": cls.ORG, "pro": cls.PRO, "com": cls.COM}
        normalized = name.strip()
        return known.get(normalized.lower()) or cls.enterprise(normalized)


Endpoint.ORG = Endpoint("api.travis-ci.org")
Endpoint.PRO = Endpoint("api.travis-ci.com")
Endpoint.COM = Endpoint.PRO


def _default_endpoint() -> Endpoint:
    raw = os.environ.get(ENDPOINT_ENV_VAR)
    if raw and raw.strip():
        return Endpoint.from_name(raw)
    return Endpoint.ORG


@dataclass(frozen=True)
class Config:
    """Immutable configuration for a TravisClient.

    The API token is auto-resolved from ``TRAVIS_TOKEN`` and the endpoint
    from ``TRAVIS_ENDPOINT`` when not passed explicitly.

    Example:
        config = Config(endpoint=Endpoint.PRO)
        # token is read from TRAVIS_TOKEN
    """

    #: Auto-resolved from ``TRAVIS_TOKEN`` when *None*.
    token: str | None = None
    endpoint: Endpoint = field(default_factory=_default_endpoint)
    user_agent: str = DEFAULT_USER_AGENT
    timeout_s: float = 30.0

    def __post_init__(self) -> None:
        """Auto-resolve the token and validate configuration."""
        if not isinstance(self.endpoint, Endpoint):
            raise ConfigurationError(
                f"endpoint must be an Endpoint, got {type(self.endpoint).__name__}",
                hint="Use Endpoint.ORG, Endpoint.PRO or Endpoint.enterprise('host').",
            )

        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This is the per-request transport timeout in seconds.",
            )

        if not self.user_agent or not self.user_agent.strip():
            raise ConfigurationError(
                "user_agent must be a non-empty string",
                hint=f"Omit it to use the default {DEFAULT_USER_AGENT!r}.",
            )

        if self.token is None:
            object.__setattr__(self, "token", os.environ.get(TOKEN_ENV_VAR))

        if not self.token:
            raise ConfigurationError(
                "API token required",
                hint=f"Set {TOKEN_ENV_VAR} environment variable or pass token=...",
            )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(endpoint={self.endpoint.host!r}, "
            f"token={'[REDACTED]' if self.token else None}, "
            f"user_agent={self.user_agent!r}, timeout_s={self.timeout_s})"
        )

    __repr__ = __str__
