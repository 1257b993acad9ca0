# src/sharelink/adapters/network/__init__.py
"""
Network Adapters - Probing and Tunnel Discovery

This package contains the outbound HTTP clients used by domain resolution.
Every call carries a bounded timeout.
"""

from sharelink.adapters.network.prober import ReachabilityProber
from sharelink.adapters.network.tunnels import ExternalTunnelClient, LocalTunnelClient

__all__ = [
    "ReachabilityProber",
    "LocalTunnelClient",
    "ExternalTunnelClient",
]
