#!/usr/bin/env python3
"""
Script to check which public domain the file server would hand out.

Runs the full domain resolution once (without an inbound request), prints the
result, a sample file URL and whether the base address answers a probe.
Exits with status 1 when only the local fallback is available.
"""

import logging
import sys

from sharelink.adapters.network.prober import ReachabilityProber
from sharelink.adapters.persistence.hint_store import HintStore
from sharelink.application.domain_resolver import DomainResolver
from sharelink.config import settings
from sharelink.shared.logging_conf import setup_logging


def main() -> int:
    """Resolve and report the best domain."""
    setup_logging(level=logging.WARNING)
    print("🔍 Checking domain configuration...")

    prober = ReachabilityProber()
    resolver = DomainResolver(prober=prober, hint_store=HintStore())
    domain = resolver.resolve_best_domain()

    print("\n📊 Domain Detection Results:")
    print("================================")
    print(f"Base URL:      {domain.base_url}")
    print(f"Source:        {domain.source.value}")
    print(f"Is Production: {domain.is_production}")
    print(f"Is Local:      {domain.is_local}")

    if domain.is_local:
        print("\n⚠️  WARNING: Using local fallback URL")
        print("   Shared file links will only open on this machine")
        print("   Set PUBLIC_BASE_URL or start a tunnel, e.g.:")
        print(f"   ngrok http {settings.app_port}")
    else:
        print("\n✅ Using public domain, shared links should work")

    print(f"\n📁 Test file URL: {resolver.file_url('test-file.pdf')}")

    print("\n🔍 Checking external accessibility...")
    reachable = prober.probe(domain.base_url)
    print(f"External accessibility: {'✅ Yes' if reachable else '❌ No'}")

    return 1 if domain.is_local else 0


if __name__ == "__main__":
    sys.exit(main())
