# src/sharelink/application/domain_resolver.py
"""
Domain Resolver - Best Public Base Address for the Running Service

Produces the single best-known public base address by trying, in order:
1. The origin of the inbound request (Host / X-Forwarded-* headers)
2. Configured environment variables (plus the durable hint from a previous run)
3. A local tunnel daemon's introspection API
4. External tunnel discovery endpoints
5. The loopback fallback

Every candidate from 1-4 must pass a reachability probe. The first verified
result is cached for the life of the resolver; concurrent callers share one
in-flight resolution instead of each running the strategy chain.

Files that USE this module:
- sharelink.application.distribution (base address for the own file route)
- sharelink.application.health (current domain report)
- sharelink.adapters.web.server (composition root builds the resolver)
- scripts/check_domain.py (operator script)
- tests.test_domain_resolver (unit tests)

Files that this module USES:
- sharelink.adapters.network (ReachabilityProber, tunnel clients)
- sharelink.adapters.persistence.hint_store (HintStore, DomainHint)
- sharelink.application.fallback (first_success driver)
- sharelink.domain.models (ResolvedDomain, SourceStrategy, RequestContext)
- sharelink.shared.validators (loopback detection, normalization)
- sharelink.config (env variable names, fallback address, files route)
"""
from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Set
from urllib.parse import quote

from sharelink.adapters.network.prober import ReachabilityProber
from sharelink.adapters.network.tunnels import ExternalTunnelClient, LocalTunnelClient
from sharelink.adapters.persistence.hint_store import DomainHint, HintStore
from sharelink.application.fallback import first_success
from sharelink.config import settings
from sharelink.domain.models import RequestContext, ResolvedDomain, SourceStrategy
from sharelink.shared.validators import is_loopback, normalize_base_url

logger = logging.getLogger(__name__)

FORWARDED_PROTO_HEADERS = ("x-forwarded-proto", "x-forwarded-protocol")
HOST_HEADERS = ("x-forwarded-host", "host")
# Distinct request origins tried while on the fallback, until the next refresh
MAX_TRIED_ORIGINS = 256


class DomainStrategy(ABC):
    """
    One way of finding candidate base addresses.

    Subclasses only produce candidates; probing and result construction are
    shared here so every strategy verifies candidates the same way.
    """

    name: str = "strategy"
    source: SourceStrategy
    is_production: bool = False

    def __init__(self, prober: ReachabilityProber):
        self.prober = prober

    @abstractmethod
    def candidates(self, context: Optional[RequestContext]) -> Iterable[str]:
        """Yield candidate base addresses in preference order."""
        raise NotImplementedError

    def attempt(self, context: Optional[RequestContext]) -> Optional[ResolvedDomain]:
        """
        Probe each candidate and return the first reachable one.

        Returns:
            ResolvedDomain for the first reachable candidate, None if none is
        """
        for candidate in self.candidates(context):
            if self.prober.probe(candidate):
                logger.info("Domain candidate verified via %s: %s", self.name, candidate)
                return ResolvedDomain(
                    base_url=candidate,
                    is_production=self.is_production,
                    is_local=False,
                    source=self.source,
                )
            logger.info("Domain candidate from %s not reachable: %s", self.name, candidate)
        return None


class RequestOriginStrategy(DomainStrategy):
    """Derives scheme://host from the inbound request headers."""

    name = "request_origin"
    source = SourceStrategy.REQUEST_ORIGIN
    is_production = True

    @staticmethod
    def origin_of(context: Optional[RequestContext]) -> Optional[str]:
        """
        Build the origin a request claims to come in on.

        Returns:
            "scheme://host" or None when there is no usable non-loopback host
        """
        if context is None:
            return None
        host = next((context.header(h) for h in HOST_HEADERS if context.header(h)), None)
        if not host or is_loopback(host):
            return None
        proto = next((context.header(h) for h in FORWARDED_PROTO_HEADERS if context.header(h)), None)
        scheme = (proto or context.scheme or "http").lower()
        if scheme not in ("http", "https"):
            scheme = "http"
        return normalize_base_url(f"{scheme}://{host}")

    def candidates(self, context: Optional[RequestContext]) -> Iterator[str]:
        origin = self.origin_of(context)
        if origin:
            yield origin


class EnvConfigStrategy(DomainStrategy):
    """Reads configured addresses from environment variables, then the stored hint."""

    name = "env_config"
    source = SourceStrategy.ENV_CONFIG
    is_production = True

    def __init__(
        self,
        prober: ReachabilityProber,
        var_names: Optional[Sequence[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        hint_store: Optional[HintStore] = None,
    ):
        super().__init__(prober)
        self.var_names = list(var_names if var_names is not None else settings.domain_env_vars)
        self._environ = environ
        self.hint_store = hint_store

    def candidates(self, context: Optional[RequestContext]) -> Iterator[str]:
        environ = self._environ if self._environ is not None else os.environ
        seen: Set[str] = set()
        for var in self.var_names:
            value = environ.get(var)
            if not value:
                continue
            if is_loopback(value):
                logger.debug("Skipping loopback value of %s: %s", var, value)
                continue
            url = normalize_base_url(value)
            if url and url not in seen:
                seen.add(url)
                yield url

        if self.hint_store is None:
            return
        hint = self.hint_store.load()
        if hint and not is_loopback(hint.base_url):
            url = normalize_base_url(hint.base_url)
            if url and url not in seen:
                logger.debug("Trying stored domain hint from %s: %s", hint.source, url)
                yield url


class LocalTunnelStrategy(DomainStrategy):
    """Asks a local tunnel daemon for its active https tunnel."""

    name = "local_tunnel"
    source = SourceStrategy.LOCAL_TUNNEL

    def __init__(self, prober: ReachabilityProber, client: Optional[LocalTunnelClient] = None):
        super().__init__(prober)
        self.client = client or LocalTunnelClient()

    def candidates(self, context: Optional[RequestContext]) -> Iterator[str]:
        yield self.client.discover()


class ExternalTunnelStrategy(DomainStrategy):
    """Asks external discovery endpoints for a published tunnel URL."""

    name = "external_tunnel"
    source = SourceStrategy.EXTERNAL_TUNNEL

    def __init__(self, prober: ReachabilityProber, client: Optional[ExternalTunnelClient] = None):
        super().__init__(prober)
        self.client = client or ExternalTunnelClient()

    def candidates(self, context: Optional[RequestContext]) -> Iterator[str]:
        yield self.client.discover()


def build_default_strategies(
    prober: ReachabilityProber,
    hint_store: Optional[HintStore] = None,
) -> List[DomainStrategy]:
    """Create the standard strategy list in priority order."""
    return [
        RequestOriginStrategy(prober),
        EnvConfigStrategy(prober, hint_store=hint_store),
        LocalTunnelStrategy(prober),
        ExternalTunnelStrategy(prober),
    ]


class DomainResolver:
    """
    Owns the current ResolvedDomain for one serving process.

    The cache is populated lazily and guarded by a lock; a resolution in
    progress is itself shared, so concurrent first calls run the strategy
    chain once.
    """

    def __init__(
        self,
        prober: Optional[ReachabilityProber] = None,
        strategies: Optional[Sequence[DomainStrategy]] = None,
        hint_store: Optional[HintStore] = None,
        fallback_base_url: Optional[str] = None,
        files_route: Optional[str] = None,
        max_tried_origins: int = MAX_TRIED_ORIGINS,
    ):
        """
        Initialize resolver.

        Args:
            prober: Reachability prober shared by the default strategies
            strategies: Ordered strategies (defaults to build_default_strategies)
            hint_store: Durable mirror for verified non-local results
            fallback_base_url: Loopback address used when nothing verifies
            files_route: Route prefix of the own file-serving endpoint
            max_tried_origins: Upgrade attempts allowed from distinct request origins
        """
        self.prober = prober or ReachabilityProber()
        self.hint_store = hint_store
        self.strategies: List[DomainStrategy] = list(
            strategies if strategies is not None else build_default_strategies(self.prober, hint_store)
        )
        self.fallback_base_url = (fallback_base_url or settings.fallback_base_url).rstrip("/")
        self.files_route = files_route or settings.files_route
        self.max_tried_origins = max_tried_origins

        self._lock = threading.Lock()
        self._current: Optional[ResolvedDomain] = None
        self._inflight: Optional[Future] = None
        self._tried_origins: Set[str] = set()
        self._last_mirrored: Optional[str] = None

    def current(self) -> Optional[ResolvedDomain]:
        """Return the cached domain without resolving."""
        with self._lock:
            return self._current

    def resolve_best_domain(self, context: Optional[RequestContext] = None) -> ResolvedDomain:
        """
        Return the cached domain, resolving it on first use.

        Args:
            context: Inbound request information, if any

        Returns:
            The current ResolvedDomain (never None; worst case is the fallback)
        """
        cached = self.current()
        if cached is not None:
            if cached.source is SourceStrategy.FALLBACK and context is not None:
                return self._upgrade_from_request(cached, context)
            return cached
        return self._single_flight(context, use_cache=True)

    def refresh(self, context: Optional[RequestContext] = None) -> ResolvedDomain:
        """
        Drop the cached domain and run the full strategy sequence again.

        Args:
            context: Inbound request information, if any

        Returns:
            The newly resolved domain
        """
        logger.info("Refreshing domain resolution")
        with self._lock:
            self._current = None
            self._tried_origins.clear()
        return self._single_flight(context, use_cache=False)

    def file_url(self, filename: str, context: Optional[RequestContext] = None) -> str:
        """Build the own file-route URL for a file under the resolved base address."""
        domain = self.resolve_best_domain(context)
        return f"{domain.base_url}{self.files_route}/{quote(filename)}"

    def _single_flight(self, context: Optional[RequestContext], use_cache: bool) -> ResolvedDomain:
        with self._lock:
            if use_cache and self._current is not None:
                return self._current
            future = self._inflight
            leader = future is None
            if leader:
                future = Future()
                self._inflight = future

        if not leader:
            logger.debug("Joining in-flight domain resolution")
            return future.result()

        try:
            domain = self._run_strategies(context)
        except BaseException as e:
            with self._lock:
                self._inflight = None
            future.set_exception(e)
            raise

        with self._lock:
            self._current = domain
            self._inflight = None
        future.set_result(domain)
        self._mirror(domain)
        return domain

    def _run_strategies(self, context: Optional[RequestContext]) -> ResolvedDomain:
        origin = RequestOriginStrategy.origin_of(context)
        if origin:
            with self._lock:
                if len(self._tried_origins) < self.max_tried_origins:
                    self._tried_origins.add(origin)

        outcome = first_success(self.strategies, context, label="domain")
        if outcome.result is not None:
            logger.info(
                "Resolved domain %s via %s", outcome.result.base_url, outcome.result.source.value
            )
            return outcome.result

        logger.warning(
            "No public domain verified, using fallback %s (%s)",
            self.fallback_base_url,
            outcome.describe_failures() or "no candidates",
        )
        return ResolvedDomain(
            base_url=self.fallback_base_url,
            is_production=False,
            is_local=True,
            source=SourceStrategy.FALLBACK,
        )

    def _upgrade_from_request(self, cached: ResolvedDomain, context: RequestContext) -> ResolvedDomain:
        """
        Try a not-yet-seen request origin once while sitting on the fallback.

        Origins come from untrusted headers, so the number of distinct origins
        probed is capped until the next refresh.
        """
        origin = RequestOriginStrategy.origin_of(context)
        if not origin:
            return cached
        with self._lock:
            if origin in self._tried_origins:
                return self._current or cached
            if len(self._tried_origins) >= self.max_tried_origins:
                logger.debug("Origin upgrade cap (%d) reached, not probing %s", self.max_tried_origins, origin)
                return self._current or cached
            self._tried_origins.add(origin)

        request_strategies = [s for s in self.strategies if s.source is SourceStrategy.REQUEST_ORIGIN]
        outcome = first_success(request_strategies, context, label="domain-upgrade")
        if outcome.result is None:
            return cached

        with self._lock:
            # Only replace the fallback; a concurrent refresh may have found something better
            if self._current is None or self._current.source is SourceStrategy.FALLBACK:
                self._current = outcome.result
            upgraded = self._current
        logger.info("Upgraded fallback domain to %s", upgraded.base_url)
        self._mirror(upgraded)
        return upgraded

    def _mirror(self, domain: ResolvedDomain) -> None:
        """Write a verified non-local domain to the hint store; failures are only logged."""
        if self.hint_store is None or domain.source is SourceStrategy.FALLBACK or domain.is_local:
            return
        with self._lock:
            if domain.base_url == self._last_mirrored:
                return
            self._last_mirrored = domain.base_url
        try:
            self.hint_store.save(DomainHint(base_url=domain.base_url, source=domain.source.value))
        except RuntimeError as e:
            logger.warning("Could not mirror domain hint: %s", e)
            with self._lock:
                if self._last_mirrored == domain.base_url:
                    self._last_mirrored = None
