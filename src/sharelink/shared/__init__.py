# src/sharelink/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Address validation and normalization
- Rate limiting
- Logging configuration
"""

from sharelink.shared.validators import (
    extract_host,
    force_https,
    is_loopback,
    looks_like_url,
    normalize_base_url,
    validate_filename,
)
from sharelink.shared.rate_limiter import (
    RATE_LIMITS,
    RateGovernor,
    RateLimitConfig,
    RateLimitDecision,
    RateLimiter,
)

__all__ = [
    "extract_host",
    "force_https",
    "is_loopback",
    "looks_like_url",
    "normalize_base_url",
    "validate_filename",
    "RATE_LIMITS",
    "RateGovernor",
    "RateLimitConfig",
    "RateLimitDecision",
    "RateLimiter",
]
