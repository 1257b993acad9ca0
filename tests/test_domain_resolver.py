# tests/test_domain_resolver.py
"""
Domain Resolver Tests - Unit Tests for Public Domain Resolution

This module tests the strategy order (request origin, configuration, local
tunnel, external tunnel, fallback), caching and refresh, single-flight
resolution under concurrent callers, and mirroring to the hint store.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- sharelink.application.domain_resolver (DomainResolver and strategies)
- sharelink.adapters.persistence.hint_store (HintStore, DomainHint)
- sharelink.domain.models (RequestContext, SourceStrategy)
- unittest.mock (Mock tunnel clients)
"""
import threading

import pytest
from unittest.mock import Mock

from sharelink.adapters.persistence.hint_store import DomainHint, HintStore
from sharelink.application.domain_resolver import (
    MAX_TRIED_ORIGINS,
    DomainResolver,
    EnvConfigStrategy,
    ExternalTunnelStrategy,
    LocalTunnelStrategy,
    RequestOriginStrategy,
)
from sharelink.domain.errors import TunnelDiscoveryError
from sharelink.domain.models import RequestContext, SourceStrategy

FALLBACK = "http://localhost:8000"
ORIGIN_CTX = RequestContext(headers={"Host": "app.example.com", "X-Forwarded-Proto": "https"})


class FakeProber:
    """Reports a fixed set of base addresses as reachable and records every probe."""

    def __init__(self, reachable=()):
        self.reachable = set(reachable)
        self.probed = []
        self._lock = threading.Lock()

    def probe(self, base_url):
        with self._lock:
            self.probed.append(base_url)
        return base_url in self.reachable

    def probe_url(self, url):
        return any(url.startswith(base + "/") for base in self.reachable)


def tunnel_client(url=None, error=None):
    client = Mock()
    if url is not None:
        client.discover.return_value = url
    else:
        client.discover.side_effect = error or TunnelDiscoveryError("nothing")
    return client


def make_resolver(prober, environ=None, local=None, external=None, hint_store=None):
    strategies = [
        RequestOriginStrategy(prober),
        EnvConfigStrategy(
            prober,
            var_names=["PUBLIC_BASE_URL", "VERCEL_URL"],
            environ=environ or {},
            hint_store=hint_store,
        ),
        LocalTunnelStrategy(prober, client=local or tunnel_client()),
        ExternalTunnelStrategy(prober, client=external or tunnel_client()),
    ]
    return DomainResolver(
        prober=prober,
        strategies=strategies,
        hint_store=hint_store,
        fallback_base_url=FALLBACK,
        files_route="/api/files",
    )


class TestRequestOrigin:
    def test_forwarded_host_and_proto(self):
        ctx = RequestContext(
            headers={"host": "internal:8000", "x-forwarded-host": "pub.example.com, proxy", "x-forwarded-proto": "https"}
        )
        assert RequestOriginStrategy.origin_of(ctx) == "https://pub.example.com"

    def test_scheme_falls_back_to_request_scheme(self):
        ctx = RequestContext(headers={"host": "pub.example.com"}, scheme="http")
        assert RequestOriginStrategy.origin_of(ctx) == "http://pub.example.com"

    def test_alternate_proto_header(self):
        ctx = RequestContext(headers={"host": "pub.example.com", "x-forwarded-protocol": "https"})
        assert RequestOriginStrategy.origin_of(ctx) == "https://pub.example.com"

    @pytest.mark.parametrize("host", ["localhost:8000", "127.0.0.1", "0.0.0.0:3000", "app.localhost"])
    def test_loopback_hosts_ignored(self, host):
        assert RequestOriginStrategy.origin_of(RequestContext(headers={"host": host})) is None

    def test_no_context(self):
        assert RequestOriginStrategy.origin_of(None) is None


class TestStrategyOrder:
    @pytest.mark.parametrize(
        "winner",
        [
            SourceStrategy.REQUEST_ORIGIN,
            SourceStrategy.ENV_CONFIG,
            SourceStrategy.LOCAL_TUNNEL,
            SourceStrategy.EXTERNAL_TUNNEL,
            SourceStrategy.FALLBACK,
        ],
    )
    def test_first_reachable_strategy_wins(self, winner):
        candidates = {
            SourceStrategy.REQUEST_ORIGIN: "https://app.example.com",
            SourceStrategy.ENV_CONFIG: "https://configured.example.com",
            SourceStrategy.LOCAL_TUNNEL: "https://abc.ngrok.io",
            SourceStrategy.EXTERNAL_TUNNEL: "https://abc.loca.lt",
        }
        order = list(candidates)
        reachable = set()
        if winner is not SourceStrategy.FALLBACK:
            # Only the winner and the strategies after it are reachable
            reachable = {candidates[s] for s in order[order.index(winner):]}
        prober = FakeProber(reachable)
        resolver = make_resolver(
            prober,
            environ={"PUBLIC_BASE_URL": "https://configured.example.com"},
            local=tunnel_client("https://abc.ngrok.io"),
            external=tunnel_client("https://abc.loca.lt"),
        )

        domain = resolver.resolve_best_domain(ORIGIN_CTX)

        assert domain.source is winner
        if winner is SourceStrategy.FALLBACK:
            assert domain.base_url == FALLBACK
            assert domain.is_local is True
            assert domain.is_production is False
            assert FALLBACK not in prober.probed
        else:
            assert domain.base_url == candidates[winner]
            assert domain.is_local is False
            assert domain.is_production is (winner in (SourceStrategy.REQUEST_ORIGIN, SourceStrategy.ENV_CONFIG))
            # Strategies after the winner were never consulted
            later = order[order.index(winner) + 1:]
            assert not any(candidates[s] in prober.probed for s in later)

    def test_env_values_normalized_and_loopback_skipped(self):
        prober = FakeProber({"https://myapp.vercel.app"})
        resolver = make_resolver(
            prober,
            environ={"PUBLIC_BASE_URL": "http://localhost:3000", "VERCEL_URL": "myapp.vercel.app/"},
        )

        domain = resolver.resolve_best_domain()

        assert domain.base_url == "https://myapp.vercel.app"
        assert domain.source is SourceStrategy.ENV_CONFIG
        assert "http://localhost:3000" not in prober.probed

    def test_unreachable_env_value_falls_through(self):
        prober = FakeProber({"https://abc.ngrok.io"})
        resolver = make_resolver(
            prober,
            environ={"PUBLIC_BASE_URL": "https://dead.example.com"},
            local=tunnel_client("https://abc.ngrok.io"),
        )
        assert resolver.resolve_best_domain().source is SourceStrategy.LOCAL_TUNNEL

    def test_strategy_exception_is_isolated(self):
        prober = FakeProber({"https://abc.loca.lt"})
        resolver = make_resolver(
            prober,
            local=tunnel_client(error=RuntimeError("daemon exploded")),
            external=tunnel_client("https://abc.loca.lt"),
        )
        assert resolver.resolve_best_domain().source is SourceStrategy.EXTERNAL_TUNNEL


class TestCaching:
    def test_resolution_is_cached(self):
        prober = FakeProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"})

        first = resolver.resolve_best_domain()
        probes = len(prober.probed)
        second = resolver.resolve_best_domain()

        assert second is first
        assert len(prober.probed) == probes

    def test_current_does_not_resolve(self):
        prober = FakeProber()
        resolver = make_resolver(prober)
        assert resolver.current() is None
        assert prober.probed == []

    def test_refresh_reruns_strategies(self):
        environ = {"PUBLIC_BASE_URL": "https://one.example.com"}
        prober = FakeProber({"https://one.example.com", "https://two.example.com"})
        resolver = make_resolver(prober, environ=environ)

        assert resolver.resolve_best_domain().base_url == "https://one.example.com"
        environ["PUBLIC_BASE_URL"] = "https://two.example.com"
        assert resolver.resolve_best_domain().base_url == "https://one.example.com"

        refreshed = resolver.refresh()
        assert refreshed.base_url == "https://two.example.com"
        assert resolver.current() is refreshed

    def test_file_url(self):
        prober = FakeProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"})
        assert resolver.file_url("my report.pdf") == "https://configured.example.com/api/files/my%20report.pdf"


class TestFallbackUpgrade:
    def test_fallback_upgraded_by_later_request_origin(self):
        prober = FakeProber({"https://app.example.com"})
        resolver = make_resolver(prober)

        assert resolver.resolve_best_domain().source is SourceStrategy.FALLBACK
        upgraded = resolver.resolve_best_domain(ORIGIN_CTX)

        assert upgraded.source is SourceStrategy.REQUEST_ORIGIN
        assert upgraded.base_url == "https://app.example.com"
        assert resolver.current() is upgraded

    def test_each_origin_tried_once(self):
        prober = FakeProber()
        resolver = make_resolver(prober)
        ctx = RequestContext(headers={"host": "unreachable.example.com"}, scheme="https")

        resolver.resolve_best_domain()
        resolver.resolve_best_domain(ctx)
        resolver.resolve_best_domain(ctx)

        assert prober.probed.count("https://unreachable.example.com") == 1

    def test_distinct_origins_capped_until_refresh(self):
        prober = FakeProber()
        resolver = make_resolver(prober)
        resolver.max_tried_origins = 3
        resolver.resolve_best_domain()

        for i in range(10):
            ctx = RequestContext(headers={"host": f"h{i}.example.com"}, scheme="https")
            assert resolver.resolve_best_domain(ctx).source is SourceStrategy.FALLBACK

        assert prober.probed == [f"https://h{i}.example.com" for i in range(3)]

        resolver.refresh()
        resolver.resolve_best_domain(RequestContext(headers={"host": "h9.example.com"}, scheme="https"))
        assert prober.probed[-1] == "https://h9.example.com"

    def test_default_origin_cap(self):
        assert make_resolver(FakeProber()).max_tried_origins == MAX_TRIED_ORIGINS


class TestSingleFlight:
    def test_concurrent_first_calls_share_one_resolution(self):
        gate = threading.Event()
        started = threading.Event()

        class SlowProber(FakeProber):
            def probe(self, base_url):
                started.set()
                gate.wait(5)
                return super().probe(base_url)

        prober = SlowProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"})

        results = []
        results_lock = threading.Lock()

        def worker():
            domain = resolver.resolve_best_domain()
            with results_lock:
                results.append(domain)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        assert started.wait(5)
        gate.set()
        for t in threads:
            t.join(5)

        assert len(results) == 8
        assert all(r is results[0] for r in results)
        assert prober.probed == ["https://configured.example.com"]

    def test_leader_failure_propagates_and_clears(self):
        prober = FakeProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"})
        resolver._run_strategies = Mock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            resolver.resolve_best_domain()
        assert resolver._inflight is None


class TestHintMirroring:
    def test_verified_domain_is_mirrored(self, tmp_path):
        store = HintStore(tmp_path / "hint.json")
        prober = FakeProber({"https://abc.ngrok.io"})
        resolver = make_resolver(prober, local=tunnel_client("https://abc.ngrok.io"), hint_store=store)

        resolver.resolve_best_domain()

        hint = store.load()
        assert hint.base_url == "https://abc.ngrok.io"
        assert hint.source == "local_tunnel"

    def test_fallback_is_not_mirrored(self, tmp_path):
        store = HintStore(tmp_path / "hint.json")
        resolver = make_resolver(FakeProber(), hint_store=store)

        assert resolver.resolve_best_domain().is_local
        assert store.load() is None

    def test_stored_hint_is_reprobed_candidate(self, tmp_path):
        store = HintStore(tmp_path / "hint.json")
        store.save(DomainHint(base_url="https://remembered.example.com", source="external_tunnel"))
        prober = FakeProber({"https://remembered.example.com"})
        resolver = make_resolver(prober, hint_store=store)

        domain = resolver.resolve_best_domain()

        assert domain.base_url == "https://remembered.example.com"
        assert domain.source is SourceStrategy.ENV_CONFIG
        assert "https://remembered.example.com" in prober.probed

    def test_unreachable_hint_is_not_trusted(self, tmp_path):
        store = HintStore(tmp_path / "hint.json")
        store.save(DomainHint(base_url="https://stale.example.com", source="local_tunnel"))
        resolver = make_resolver(FakeProber(), hint_store=store)

        assert resolver.resolve_best_domain().source is SourceStrategy.FALLBACK

    def test_mirror_failure_is_not_fatal(self):
        store = Mock()
        store.load.return_value = None
        store.save.side_effect = RuntimeError("read-only disk")
        prober = FakeProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"}, hint_store=store)

        assert resolver.resolve_best_domain().base_url == "https://configured.example.com"
        store.save.assert_called_once()

    def test_unwritable_hint_location_is_not_fatal(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = HintStore(blocker / "sub" / "hint.json")
        prober = FakeProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"}, hint_store=store)

        domain = resolver.resolve_best_domain()

        assert domain.base_url == "https://configured.example.com"
        assert resolver.current() is domain
        assert store.load() is None

    def test_failed_mirror_is_retried_on_next_resolution(self):
        store = Mock()
        store.load.return_value = None
        store.save.side_effect = [RuntimeError("read-only disk"), None]
        prober = FakeProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"}, hint_store=store)

        resolver.resolve_best_domain()
        resolver.refresh()

        assert store.save.call_count == 2

    def test_same_domain_mirrored_once(self):
        store = Mock()
        store.load.return_value = None
        prober = FakeProber({"https://configured.example.com"})
        resolver = make_resolver(prober, environ={"PUBLIC_BASE_URL": "https://configured.example.com"}, hint_store=store)

        resolver.resolve_best_domain()
        resolver.refresh()

        store.save.assert_called_once()
