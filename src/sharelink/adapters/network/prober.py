# src/sharelink/adapters/network/prober.py
"""
Reachability Prober - Bounded Liveness Checks

Checks whether a candidate base address (or one exact URL) answers with a
2xx status within a short timeout. Probing is speculative: every failure is
reported as False and nothing is ever raised to the caller. Retries are the
caller's business.

Files that USE this module:
- sharelink.application.domain_resolver (verifies every candidate)
- sharelink.application.distribution (verifies the own file route)
- tests.test_prober (unit tests)

Files that this module USES:
- sharelink.config (probe timeout and health path)
"""
import logging
from typing import Optional

import requests

from sharelink.config import settings

log = logging.getLogger(__name__)

USER_AGENT = "sharelink-probe/1.0"


class ReachabilityProber:
    """Issues GET requests against candidate addresses and reports reachability."""

    def __init__(self, health_path: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize prober.

        Args:
            health_path: Well-known liveness path (defaults to settings.health_path)
            timeout: Per-request timeout in seconds (defaults to settings.probe_timeout_seconds)
        """
        self.health_path = health_path or settings.health_path
        self.timeout = timeout or settings.probe_timeout_seconds

    def probe(self, base_url: str) -> bool:
        """
        Check that <base_url><health_path> answers with a 2xx status.

        Args:
            base_url: Candidate base address

        Returns:
            True if reachable, False on any failure
        """
        if not base_url:
            return False
        return self.probe_url(base_url.rstrip("/") + self.health_path)

    def probe_url(self, url: str) -> bool:
        """
        Check that one exact URL answers with a 2xx status.

        The body is streamed and discarded so probing a file does not download it.

        Args:
            url: URL to check

        Returns:
            True if reachable, False on any failure
        """
        try:
            resp = requests.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
                stream=True,
                allow_redirects=True,
            )
        except requests.exceptions.Timeout:
            log.info("Probe timed out after %ss: %s", self.timeout, url)
            return False
        except requests.exceptions.RequestException as e:
            log.info("Probe failed for %s: %s", url, e)
            return False
        except ValueError as e:
            # Malformed URLs surface as ValueError subclasses from urllib3
            log.info("Probe rejected malformed URL %r: %s", url, e)
            return False

        try:
            ok = 200 <= resp.status_code < 300
        finally:
            resp.close()

        if ok:
            log.debug("Probe succeeded (%d): %s", resp.status_code, url)
        else:
            log.info("Probe got non-2xx status %d: %s", resp.status_code, url)
        return ok
