# src/sharelink/adapters/persistence/__init__.py
"""
Persistence Adapters - Data Storage

This package contains adapters for persisting data:
- File-based storage of the last discovered public domain (JSON)
"""

from sharelink.adapters.persistence.hint_store import DomainHint, HintStore

__all__ = [
    "DomainHint",
    "HintStore",
]
