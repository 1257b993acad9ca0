# src/sharelink/adapters/providers/file_io.py
"""
file.io Hosting Provider

Multipart POST; the answer is a JSON envelope {"success": true, "link": "..."}.

Files that USE this module:
- sharelink.application.distribution (default provider order)
- tests.test_providers (unit tests)

Files that this module USES:
- sharelink.adapters.providers.base (HostingProvider)
"""
from typing import Optional

import requests

from sharelink.adapters.providers.base import HostingProvider


class FileIoProvider(HostingProvider):
    name = "file.io"

    def __init__(self, base_url: str = "https://file.io", timeout: Optional[float] = None):
        super().__init__(timeout)
        self.url = base_url

    def _send(self, filename: str, payload: bytes) -> requests.Response:
        return requests.post(self.url, files={"file": (filename, payload)}, timeout=self.timeout)
