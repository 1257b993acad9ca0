# src/sharelink/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains the services that orchestrate adapters:
domain resolution, file distribution, the shared fallback driver and
health reporting.
"""

from sharelink.application.distribution import DistributionChain
from sharelink.application.domain_resolver import DomainResolver, build_default_strategies
from sharelink.application.fallback import FallbackOutcome, first_success
from sharelink.application.health import HealthChecker, HealthStatus

__all__ = [
    "DistributionChain",
    "DomainResolver",
    "build_default_strategies",
    "FallbackOutcome",
    "first_success",
    "HealthChecker",
    "HealthStatus",
]
