# src/sharelink/shared/validators.py
"""
Address Validation Utilities - URL and Host Checks

This module provides the small validation and normalization helpers shared by
the domain resolver, the tunnel discovery clients and the hosting providers:
loopback detection, bare-host normalization, secure-scheme forcing and
settings validation.

Files that USE this module:
- sharelink.config.settings (route path and port validators)
- sharelink.application.domain_resolver (loopback detection and normalization)
- sharelink.adapters.network.tunnels (secure scheme checks)
- sharelink.adapters.providers.base (URL normalization)
- sharelink.adapters.web.routes (file name validation)

Files that this module USES:
- None (pure utility functions)
"""
import ipaddress
import re
from typing import Optional
from urllib.parse import urlsplit

LOOPBACK_HOSTS = {"localhost", "0.0.0.0", "::", "::1"}

# Characters allowed in a served file name
SAFE_FILENAME = re.compile(r"^[A-Za-z0-9._-]+$")


def extract_host(address: str) -> str:
    """
    Extract the bare host name from an address.

    Accepts absolute URLs ("https://a.b:8080/x"), host:port pairs and bare hosts.

    Args:
        address: Address to inspect

    Returns:
        Lowercase host without port or brackets (empty string if none)
    """
    if not address:
        return ""
    value = address.strip()
    if "://" not in value:
        value = "//" + value
    try:
        host = urlsplit(value).hostname
    except ValueError:
        return ""
    return (host or "").lower()


def is_loopback(address: str) -> bool:
    """
    Check whether an address points at the local machine.

    Args:
        address: URL, host:port or bare host

    Returns:
        True for localhost names, loopback/unspecified IPs and empty hosts
    """
    host = extract_host(address)
    if not host:
        return True
    if host in LOOPBACK_HOSTS or host.endswith(".localhost"):
        return True
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    return ip.is_loopback or ip.is_unspecified


def normalize_base_url(value: str, default_scheme: str = "https") -> Optional[str]:
    """
    Turn a configured value into an absolute base URL.

    Bare hosts get the default scheme; trailing slashes are dropped.

    Args:
        value: Raw value (URL or bare host)
        default_scheme: Scheme to prefix when the value has none

    Returns:
        Absolute base URL, or None if the value carries no host
    """
    if not value or not value.strip():
        return None
    value = value.strip()
    if not value.lower().startswith(("http://", "https://")):
        value = f"{default_scheme}://{value}"
    if not extract_host(value):
        return None
    return value.rstrip("/")


def force_https(url: str) -> str:
    """Rewrite an http:// URL to https://, leaving anything else untouched."""
    url = url.strip()
    if url.lower().startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def looks_like_url(value: str) -> bool:
    """Check that a value is an absolute http(s) URL with a host."""
    if not value:
        return False
    value = value.strip()
    return value.lower().startswith(("http://", "https://")) and bool(extract_host(value))


def validate_route_path(path: str) -> bool:
    """
    Validate an application route path (e.g. "/api/health").

    Returns:
        True if path starts with "/" and is not just "/" or slash-terminated
    """
    return bool(path) and path.startswith("/") and len(path) > 1 and not path.endswith("/")


def validate_port(port: int) -> bool:
    """Validate a TCP port number."""
    return isinstance(port, int) and 0 < port < 65536


def validate_filename(filename: str) -> bool:
    """
    Validate a served file name.

    Only alphanumerics, dots, underscores and hyphens are accepted, and the
    name may not consist solely of dots.
    """
    return bool(filename) and bool(SAFE_FILENAME.match(filename)) and filename.strip(".") != ""
