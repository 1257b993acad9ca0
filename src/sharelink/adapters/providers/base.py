# src/sharelink/adapters/providers/base.py
"""
Base Hosting Provider - Upload Contract and Response Normalization

This module defines the abstract base class for external file hosting
providers and the shared handling of their answers. Providers answer in one
of three shapes, all normalized here to a single https URL:
- a bare URL in the response body
- a JSON envelope with a URL field ("url" or "link")
- a JSON envelope with "status" and "data.url"

Files that USE this module:
- sharelink.adapters.providers.* (every provider extends HostingProvider)
- sharelink.application.distribution (iterates providers as attempts)
- tests.test_providers (unit tests)

Files that this module USES:
- sharelink.config (upload timeout)
- sharelink.domain.errors (ProviderUploadError)
- sharelink.domain.models (DistributionResult)
- sharelink.shared.validators (URL checks and https forcing)
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import requests

from sharelink.config import settings
from sharelink.domain.errors import ProviderUploadError
from sharelink.domain.models import DistributionResult
from sharelink.shared.validators import force_https, looks_like_url

log = logging.getLogger(__name__)

ENVELOPE_URL_KEYS = ("url", "link")


def extract_upload_url(resp: requests.Response) -> str:
    """
    Pull the public URL out of a provider response.

    Args:
        resp: Successful (2xx) provider response

    Returns:
        Public URL, forced to https

    Raises:
        ProviderUploadError: If no URL can be found or the provider reports failure
    """
    data: Any = None
    content_type = resp.headers.get("Content-Type", "") if resp.headers else ""
    text = (resp.text or "").strip()
    if "json" in content_type or text.startswith(("{", "[")):
        try:
            data = resp.json()
        except ValueError:
            data = None

    if isinstance(data, dict):
        status = data.get("status")
        nested = data.get("data")
        if status is not None and isinstance(nested, dict):
            if str(status).lower() not in ("success", "ok", "true"):
                raise ProviderUploadError(f"provider reported status {status!r}")
            url = nested.get("url")
        else:
            if data.get("success") is False:
                raise ProviderUploadError(f"provider reported failure: {data.get('message') or data}")
            url = next((data[k] for k in ENVELOPE_URL_KEYS if isinstance(data.get(k), str)), None)
        if not url or not looks_like_url(url):
            raise ProviderUploadError(f"no URL in provider response: {data}")
        return force_https(url)

    first_line = text.splitlines()[0].strip() if text else ""
    if not looks_like_url(first_line):
        raise ProviderUploadError(f"unexpected provider response: {text[:200]!r}")
    return force_https(first_line)


class HostingProvider(ABC):
    """External service that turns uploaded bytes into a public URL."""

    name: str = "provider"

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Upload timeout in seconds (defaults to settings.upload_timeout_seconds)
        """
        self.timeout = timeout or settings.upload_timeout_seconds

    @abstractmethod
    def _send(self, filename: str, payload: bytes) -> requests.Response:
        """Submit the file using this provider's upload contract."""
        raise NotImplementedError

    def upload(self, path: Path) -> str:
        """
        Upload a local file.

        Args:
            path: Local file to upload

        Returns:
            Public https URL of the uploaded file

        Raises:
            ProviderUploadError: On read failure, timeout, transport error, non-2xx or bad response
        """
        path = Path(path)
        try:
            payload = path.read_bytes()
        except OSError as e:
            raise ProviderUploadError(f"{self.name}: cannot read {path}: {e}") from e

        try:
            log.info("Uploading %s (%d bytes) to %s", path.name, len(payload), self.name)
            resp = self._send(path.name, payload)
            resp.raise_for_status()
        except requests.exceptions.Timeout:
            raise ProviderUploadError(f"{self.name}: upload timed out after {self.timeout}s")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise ProviderUploadError(f"{self.name}: upload rejected with HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderUploadError(f"{self.name}: upload request failed: {e}") from e

        try:
            return extract_upload_url(resp)
        except ProviderUploadError as e:
            raise ProviderUploadError(f"{self.name}: {e}") from e

    def attempt(self, path: Path) -> DistributionResult:
        """
        Upload and convert the outcome into a DistributionResult.

        Expected upload failures become failed results; anything else propagates
        to the fallback driver, which isolates it from the remaining providers.
        """
        try:
            url = self.upload(path)
        except ProviderUploadError as e:
            log.warning("%s upload failed: %s", self.name, e)
            return DistributionResult.failed(self.name, str(e))
        log.info("%s upload succeeded: %s", self.name, url)
        return DistributionResult.ok(url, self.name)
