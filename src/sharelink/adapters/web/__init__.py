# src/sharelink/adapters/web/__init__.py
"""
Web Adapter - FastAPI Routes and Request Governing

This package exposes the HTTP surface: the health path reachability probes
target, the own file route, and the rate-limited domain and publish endpoints.
"""

from sharelink.adapters.web.governor import client_key_for, rate_limited
from sharelink.adapters.web.server import create_app

__all__ = [
    "create_app",
    "rate_limited",
    "client_key_for",
]
