# src/sharelink/adapters/providers/transfer_sh.py
"""
transfer.sh Hosting Provider

Raw-body PUT to /<filename>; the service answers with the bare download URL.

Files that USE this module:
- sharelink.application.distribution (default provider order)
- tests.test_providers (unit tests)

Files that this module USES:
- sharelink.adapters.providers.base (HostingProvider)
"""
import mimetypes
from typing import Optional
from urllib.parse import quote

import requests

from sharelink.adapters.providers.base import HostingProvider


class TransferShProvider(HostingProvider):
    name = "transfer.sh"

    def __init__(self, base_url: str = "https://transfer.sh", timeout: Optional[float] = None):
        super().__init__(timeout)
        self.url = base_url.rstrip("/")

    def _send(self, filename: str, payload: bytes) -> requests.Response:
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return requests.put(
            f"{self.url}/{quote(filename)}",
            data=payload,
            headers={"Content-Type": content_type},
            timeout=self.timeout,
        )
