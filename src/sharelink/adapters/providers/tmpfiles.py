# src/sharelink/adapters/providers/tmpfiles.py
"""
tmpfiles.org Hosting Provider

Multipart POST to the v1 upload API. The answer is a JSON envelope of the
form {"status": "success", "data": {"url": "http://tmpfiles.org/..."}}; the
URL comes back over plain http and is rewritten to https by the base class.

Files that USE this module:
- sharelink.application.distribution (default provider order)
- tests.test_providers (unit tests)

Files that this module USES:
- sharelink.adapters.providers.base (HostingProvider)
"""
from typing import Optional

import requests

from sharelink.adapters.providers.base import HostingProvider


class TmpFilesProvider(HostingProvider):
    name = "tmpfiles.org"

    def __init__(self, base_url: str = "https://tmpfiles.org/api/v1/upload", timeout: Optional[float] = None):
        super().__init__(timeout)
        self.url = base_url

    def _send(self, filename: str, payload: bytes) -> requests.Response:
        return requests.post(self.url, files={"file": (filename, payload)}, timeout=self.timeout)
