# src/sharelink/application/distribution.py
"""
Distribution Chain - Publicly Fetchable URLs for Local Files

Turns a locally generated file (typically a PDF) into a URL that can be shared
in notifications. Attempts, in order:
1. The application's own file route under the resolved public domain
   (only when the domain is not local; the exact file URL is probed)
2. External hosting providers, strictly one after another
3. The own file route again as a last resort, even under a local domain
4. Terminal failure, which callers treat as "link unavailable"

Each attempt is isolated: an exception from one never prevents the next.
publish() keeps no state between calls and may run concurrently.

Files that USE this module:
- sharelink.adapters.web.routes (publish endpoint)
- sharelink.adapters.web.server (composition root builds the chain)
- tests.test_distribution (unit tests)

Files that this module USES:
- sharelink.adapters.network.prober (exact-URL probing)
- sharelink.adapters.providers (HostingProvider and default provider order)
- sharelink.application.domain_resolver (DomainResolver)
- sharelink.application.fallback (first_success driver)
- sharelink.domain.models (DistributionResult, RequestContext)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from sharelink.adapters.network.prober import ReachabilityProber
from sharelink.adapters.providers import HostingProvider, default_providers
from sharelink.application.domain_resolver import DomainResolver
from sharelink.application.fallback import first_success
from sharelink.domain.models import DistributionResult, RequestContext

log = logging.getLogger(__name__)

OWN_ROUTE = "own_route"
NO_PROVIDER = "none"


@dataclass(frozen=True)
class PublishRequest:
    """What every distribution attempt receives."""
    path: Path
    context: Optional[RequestContext] = None


class OwnRouteAttempt:
    """Serves the file through the application's own file route and verifies the exact URL."""

    def __init__(self, resolver: DomainResolver, prober: ReachabilityProber, require_public: bool):
        self.resolver = resolver
        self.prober = prober
        self.require_public = require_public
        self.name = OWN_ROUTE if require_public else f"{OWN_ROUTE}_last_resort"

    def attempt(self, request: PublishRequest) -> DistributionResult:
        domain = self.resolver.resolve_best_domain(request.context)
        if self.require_public and domain.is_local:
            return DistributionResult.failed(OWN_ROUTE, f"resolved domain {domain.base_url} is local")

        url = self.resolver.file_url(request.path.name, request.context)
        if self.prober.probe_url(url):
            return DistributionResult.ok(url, OWN_ROUTE)
        return DistributionResult.failed(OWN_ROUTE, f"{url} not reachable")


class ProviderAttempt:
    """Adapts a HostingProvider to the fallback driver."""

    def __init__(self, provider: HostingProvider):
        self.provider = provider
        self.name = provider.name

    def attempt(self, request: PublishRequest) -> DistributionResult:
        return self.provider.attempt(request.path)


class DistributionChain:
    """Publishes local files through the own route or external hosting providers."""

    def __init__(
        self,
        resolver: DomainResolver,
        providers: Optional[Sequence[HostingProvider]] = None,
        prober: Optional[ReachabilityProber] = None,
    ):
        """
        Initialize distribution chain.

        Args:
            resolver: Domain resolver (only its cache is shared between calls)
            providers: External providers in the order to try (defaults to default_providers())
            prober: Prober for own-route URLs (defaults to the resolver's prober)
        """
        self.resolver = resolver
        self.prober = prober or resolver.prober
        self.providers: List[HostingProvider] = list(providers if providers is not None else default_providers())

    def _attempts(self) -> list:
        return [
            OwnRouteAttempt(self.resolver, self.prober, require_public=True),
            *(ProviderAttempt(p) for p in self.providers),
            OwnRouteAttempt(self.resolver, self.prober, require_public=False),
        ]

    def publish(
        self, local_path: Union[str, Path], context: Optional[RequestContext] = None
    ) -> DistributionResult:
        """
        Obtain a publicly fetchable URL for a local file.

        Args:
            local_path: File to publish
            context: Inbound request information used for domain resolution, if any

        Returns:
            First successful DistributionResult, or a terminal failure result

        Raises:
            FileNotFoundError: If local_path is not an existing file
        """
        path = Path(local_path)
        if not path.is_file():
            raise FileNotFoundError(f"Cannot publish missing file: {path}")

        log.info("Publishing %s", path.name)
        outcome = first_success(
            self._attempts(),
            PublishRequest(path=path, context=context),
            is_success=lambda r: r.success,
            describe=lambda r: r.error or "failed",
            label="distribution",
        )
        if outcome.result is not None:
            log.info("Published %s via %s: %s", path.name, outcome.result.provider_name, outcome.result.url)
            return outcome.result

        error = "All distribution strategies failed: " + outcome.describe_failures()
        log.error("Could not publish %s. %s", path.name, error)
        return DistributionResult.failed(NO_PROVIDER, error)

    def publish_or_none(
        self, local_path: Union[str, Path], context: Optional[RequestContext] = None
    ) -> Optional[str]:
        """
        Return a shareable URL or None when no link is available.

        Notification workflows use this to proceed without a link instead of failing.
        """
        try:
            result = self.publish(local_path, context)
        except FileNotFoundError as e:
            log.error("Link unavailable: %s", e)
            return None
        return result.url if result.success else None
