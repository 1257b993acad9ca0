# src/sharelink/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Network (reachability probing, tunnel discovery)
- Providers (external file hosting)
- Persistence (durable domain hint)
- Web (FastAPI routes and rate-limit wrapper)
"""

__all__ = []
