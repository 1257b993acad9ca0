# src/sharelink/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core concepts:
- The currently believed-best public address of the service
- The outcome of one attempt to publish a file
- Per-client rate window counters
- The request information the resolver may derive an origin from

Files that USE this module:
- sharelink.application.* (resolver, chain and health use these models)
- sharelink.adapters.* (adapters create and return these models)
- sharelink.shared.rate_limiter (RateWindowEntry)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from dataclasses import dataclass, field  # Decorators for creating data classes
from datetime import datetime, timezone  # Date/time utilities for timestamps
from enum import Enum  # Enumerations for strategy names
from typing import Mapping, Optional  # Type hints


class SourceStrategy(str, Enum):
    """Strategy that produced a resolved domain, in priority order."""
    REQUEST_ORIGIN = "request_origin"
    ENV_CONFIG = "env_config"
    LOCAL_TUNNEL = "local_tunnel"
    EXTERNAL_TUNNEL = "external_tunnel"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolvedDomain:
    """
    The currently believed-best public base address.

    Attributes:
        base_url: Absolute base URL without trailing slash
        is_production: True for addresses from request origin or configuration
        is_local: True only for the loopback fallback
        source: Strategy that produced this address
        discovered_at: When the address was verified (UTC)
    """
    base_url: str
    is_production: bool
    is_local: bool
    source: SourceStrategy
    discovered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> dict:
        return {
            "base_url": self.base_url,
            "is_production": self.is_production,
            "is_local": self.is_local,
            "source": self.source.value,
            "discovered_at": self.discovered_at.isoformat(),
        }


@dataclass(frozen=True)
class DistributionResult:
    """
    Outcome of one attempt to publish a file.

    A successful result always carries a URL and the name of the provider
    the URL belongs to.
    """
    success: bool
    url: Optional[str] = None
    provider_name: str = ""
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.success and not self.url:
            raise ValueError("A successful distribution result requires a URL")
        if self.success and not self.provider_name:
            raise ValueError("A successful distribution result requires a provider name")

    @classmethod
    def ok(cls, url: str, provider_name: str) -> DistributionResult:
        return cls(success=True, url=url, provider_name=provider_name)

    @classmethod
    def failed(cls, provider_name: str, error: str) -> DistributionResult:
        return cls(success=False, provider_name=provider_name, error=error)

    def to_json(self) -> dict:
        return {
            "success": self.success,
            "url": self.url,
            "provider": self.provider_name,
            "error": self.error,
        }


@dataclass
class RateWindowEntry:
    """
    Per-client counter for one fixed window (non-frozen, updated under a lock).

    Attributes:
        client_key: Network origin plus coarse client signature
        count: Requests seen in the current window
        window_reset_at: Epoch seconds at which the window closes
    """
    client_key: str
    count: int
    window_reset_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.window_reset_at


@dataclass(frozen=True)
class RequestContext:
    """
    Request information the resolver may derive a public origin from.

    Header values are untrusted; they are only ever used as probing candidates.
    """
    headers: Mapping[str, str] = field(default_factory=dict)
    scheme: str = "http"

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup returning the first comma-separated value."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted and value:
                return value.split(",")[0].strip()
        return None
