# src/sharelink/__init__.py
"""
ShareLink - Public Address Resolution and File Distribution

Finds the public base address the running web app can be reached at,
turns locally generated PDFs into publicly fetchable links through a
verified fallback chain, and governs per-client request rates for the
route layer of the voter-registration application.
"""

__version__ = "1.0.0"
