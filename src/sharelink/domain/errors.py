# src/sharelink/domain/errors.py
"""
Domain Errors - Resolution and Distribution Exceptions

This module defines the exceptions raised inside single strategy or provider
attempts. They are caught at the attempt boundary and turned into results;
only ConfigurationError is allowed to propagate to callers.
"""


class ShareLinkError(Exception):
    """Base exception for sharelink errors."""
    pass


class ConfigurationError(ShareLinkError):
    """Raised when the component is configured in an unusable way."""
    pass


class ProviderUploadError(ShareLinkError):
    """Raised when an external hosting provider rejects or fails an upload."""
    pass


class TunnelDiscoveryError(ShareLinkError):
    """Raised when a tunnel introspection or discovery endpoint gives no usable answer."""
    pass
