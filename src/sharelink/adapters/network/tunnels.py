# src/sharelink/adapters/network/tunnels.py
"""
Tunnel Discovery Clients - Local Daemon and External Services

Finds public URLs published by tunnelling tools:
- LocalTunnelClient asks a tunnel daemon's introspection API on a small set of
  loopback ports for an active https tunnel
- ExternalTunnelClient asks external discovery endpoints for a published URL

Both raise TunnelDiscoveryError when nothing usable is found; the domain
resolver catches it and moves on to the next strategy.

Files that USE this module:
- sharelink.application.domain_resolver (LocalTunnelStrategy, ExternalTunnelStrategy)
- tests.test_tunnels (unit tests)

Files that this module USES:
- sharelink.config (ports, discovery URLs and timeouts)
- sharelink.domain.errors (TunnelDiscoveryError)
- sharelink.shared.validators (URL checks)
"""
import logging
from typing import Any, Iterable, List, Optional

import requests

from sharelink.config import settings
from sharelink.domain.errors import TunnelDiscoveryError
from sharelink.shared.validators import looks_like_url

log = logging.getLogger(__name__)

INTROSPECTION_PATH = "/api/tunnels"
URL_KEYS = ("url", "public_url")


def _get_json(url: str, timeout: float) -> Any:
    """
    GET a URL and decode its JSON body.

    Raises:
        TunnelDiscoveryError: On timeout, transport error, non-2xx or invalid JSON
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except requests.exceptions.Timeout:
        raise TunnelDiscoveryError(f"{url} timed out after {timeout}s")
    except requests.exceptions.RequestException as e:
        raise TunnelDiscoveryError(f"{url} request failed: {e}") from e
    except ValueError as e:
        raise TunnelDiscoveryError(f"{url} returned invalid JSON: {e}") from e


class LocalTunnelClient:
    """Reads active tunnels from a local tunnel daemon's introspection endpoint."""

    def __init__(self, ports: Optional[Iterable[int]] = None, timeout: Optional[float] = None):
        self.ports: List[int] = list(ports if ports is not None else settings.tunnel_inspect_ports)
        self.timeout = timeout or settings.tunnel_timeout_seconds

    @staticmethod
    def select_https_tunnel(data: Any) -> Optional[str]:
        """
        Pick the first secure tunnel from an introspection payload.

        Expects {"tunnels": [{"proto": "https", "public_url": "https://..."}, ...]}.
        """
        if not isinstance(data, dict):
            return None
        tunnels = data.get("tunnels") or []
        if not isinstance(tunnels, list):
            return None
        for tunnel in tunnels:
            if not isinstance(tunnel, dict):
                continue
            public_url = tunnel.get("public_url") or ""
            if tunnel.get("proto") == "https" and public_url.startswith("https://"):
                return public_url.rstrip("/")
        return None

    def discover(self) -> str:
        """
        Query each introspection port in turn for an https tunnel.

        Returns:
            Public https URL of the first tunnel found

        Raises:
            TunnelDiscoveryError: If no port reports an https tunnel
        """
        errors = []
        for port in self.ports:
            url = f"http://127.0.0.1:{port}{INTROSPECTION_PATH}"
            try:
                data = _get_json(url, self.timeout)
            except TunnelDiscoveryError as e:
                log.debug("Local tunnel daemon not answering on port %d: %s", port, e)
                errors.append(str(e))
                continue
            public_url = self.select_https_tunnel(data)
            if public_url:
                log.info("Local tunnel found on port %d: %s", port, public_url)
                return public_url
            errors.append(f"port {port}: no https tunnel")
        raise TunnelDiscoveryError("No local https tunnel found (" + "; ".join(errors) + ")")


class ExternalTunnelClient:
    """Asks external discovery endpoints for a published public URL."""

    def __init__(self, endpoints: Optional[Iterable[str]] = None, timeout: Optional[float] = None):
        self.endpoints: List[str] = list(endpoints if endpoints is not None else settings.tunnel_discovery_urls)
        self.timeout = timeout or settings.discovery_timeout_seconds

    @staticmethod
    def extract_url(data: Any) -> Optional[str]:
        """Return the value of the first accepted URL key, if it is an absolute URL."""
        if not isinstance(data, dict):
            return None
        for key in URL_KEYS:
            value = data.get(key)
            if isinstance(value, str) and looks_like_url(value):
                return value.strip().rstrip("/")
        return None

    def discover(self) -> str:
        """
        Query each discovery endpoint in turn.

        Returns:
            First published URL found

        Raises:
            TunnelDiscoveryError: If no endpoint publishes a URL
        """
        errors = []
        for endpoint in self.endpoints:
            try:
                data = _get_json(endpoint, self.timeout)
            except TunnelDiscoveryError as e:
                log.debug("Tunnel discovery endpoint failed: %s", e)
                errors.append(str(e))
                continue
            url = self.extract_url(data)
            if url:
                log.info("External tunnel published by %s: %s", endpoint, url)
                return url
            errors.append(f"{endpoint}: no URL field")
        raise TunnelDiscoveryError("No external tunnel found (" + "; ".join(errors) + ")")
