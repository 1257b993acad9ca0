# src/sharelink/domain/__init__.py
"""
Domain Layer - Pure Business Objects

This package contains domain models and errors.
No dependencies on infrastructure or external systems.
"""

from sharelink.domain.models import (
    DistributionResult,
    RateWindowEntry,
    RequestContext,
    ResolvedDomain,
    SourceStrategy,
)
from sharelink.domain.errors import (
    ConfigurationError,
    ProviderUploadError,
    ShareLinkError,
    TunnelDiscoveryError,
)

__all__ = [
    "ResolvedDomain",
    "SourceStrategy",
    "DistributionResult",
    "RateWindowEntry",
    "RequestContext",
    "ShareLinkError",
    "ConfigurationError",
    "ProviderUploadError",
    "TunnelDiscoveryError",
]
