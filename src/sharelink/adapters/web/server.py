# src/sharelink/adapters/web/server.py
"""
Web Server - FastAPI Composition Root

Builds the serving process's components once and hangs them on app.state:
prober, hint store, domain resolver, distribution chain and rate governor.
The lifespan starts and stops the rate limit sweep thread.

Files that USE this module:
- sharelink.app (main entry point)
- tests.test_web (integration tests)

Files that this module USES:
- sharelink.adapters.web.routes (handlers)
- sharelink.adapters.network.prober (ReachabilityProber)
- sharelink.adapters.persistence.hint_store (HintStore)
- sharelink.application.domain_resolver (DomainResolver)
- sharelink.application.distribution (DistributionChain)
- sharelink.shared.rate_limiter (RateGovernor)
- sharelink.config (Settings)
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from sharelink import __version__
from sharelink.adapters.network.prober import ReachabilityProber
from sharelink.adapters.persistence.hint_store import HintStore
from sharelink.adapters.providers import default_providers
from sharelink.adapters.web import routes
from sharelink.application.distribution import DistributionChain
from sharelink.application.domain_resolver import DomainResolver
from sharelink.config import Settings, settings as default_settings
from sharelink.shared.rate_limiter import RateGovernor

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Optional[Settings] = None,
    resolver: Optional[DomainResolver] = None,
    chain: Optional[DistributionChain] = None,
    governor: Optional[RateGovernor] = None,
) -> FastAPI:
    """
    Build the FastAPI application and its components.

    Args:
        app_settings: Settings to use (defaults to the global settings)
        resolver: Pre-built resolver (built from settings if omitted)
        chain: Pre-built distribution chain (built around the resolver if omitted)
        governor: Pre-built rate governor (standard policy table if omitted)

    Returns:
        Configured FastAPI application
    """
    cfg = app_settings or default_settings

    hint_store = HintStore(cfg.hint_file)
    if resolver is None:
        prober = ReachabilityProber(health_path=cfg.health_path, timeout=cfg.probe_timeout_seconds)
        resolver = DomainResolver(
            prober=prober,
            hint_store=hint_store,
            fallback_base_url=cfg.fallback_base_url,
            files_route=cfg.files_route,
        )
    if chain is None:
        chain = DistributionChain(resolver, providers=default_providers(timeout=cfg.upload_timeout_seconds))
    if governor is None:
        governor = RateGovernor(sweep_interval=cfg.rate_limit_sweep_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg.files_dir.mkdir(parents=True, exist_ok=True)
        governor.start_sweeper()
        logger.info("sharelink %s serving files from %s", __version__, cfg.files_dir)
        try:
            yield
        finally:
            governor.stop_sweeper()

    app = FastAPI(title="ShareLink", version=__version__, lifespan=lifespan)
    app.state.settings = cfg
    app.state.hint_store = hint_store
    app.state.resolver = resolver
    app.state.chain = chain
    app.state.governor = governor

    files_route = cfg.files_route
    app.add_api_route(cfg.health_path, routes.healthcheck, methods=["GET"])
    app.add_api_route(f"{cfg.health_path}/details", routes.health_details, methods=["GET"])
    app.add_api_route("/api/domain", routes.get_domain, methods=["GET"])
    app.add_api_route("/api/domain/refresh", routes.refresh_domain, methods=["POST"])
    # Registered before the {filename} route so "publish" is never taken as a file name
    app.add_api_route(f"{files_route}/publish", routes.publish_file, methods=["POST"])
    app.add_api_route(f"{files_route}/{{filename}}", routes.serve_file, methods=["GET"])
    app.add_api_route(f"{files_route}/{{filename}}/view", routes.view_file, methods=["GET"])
    return app
