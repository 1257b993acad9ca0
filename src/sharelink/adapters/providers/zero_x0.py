# src/sharelink/adapters/providers/zero_x0.py
"""
0x0.st Hosting Provider

Multipart POST of the file field; the service answers with the bare URL of
the uploaded file in the response body.

Files that USE this module:
- sharelink.application.distribution (default provider order)
- tests.test_providers (unit tests)

Files that this module USES:
- sharelink.adapters.providers.base (HostingProvider)
"""
from typing import Optional

import requests

from sharelink.adapters.providers.base import HostingProvider


class ZeroX0Provider(HostingProvider):
    name = "0x0.st"

    def __init__(self, base_url: str = "https://0x0.st", timeout: Optional[float] = None):
        super().__init__(timeout)
        self.url = base_url

    def _send(self, filename: str, payload: bytes) -> requests.Response:
        return requests.post(
            self.url,
            files={"file": (filename, payload)},
            timeout=self.timeout,
            # 0x0.st rejects the default python-requests agent
            headers={"User-Agent": "sharelink/1.0"},
        )
