# src/sharelink/adapters/providers/__init__.py
"""
Provider Adapters - External File Hosting Clients

This package contains adapters for external hosting services.
All providers implement the HostingProvider contract.
"""

from sharelink.adapters.providers.base import HostingProvider, extract_upload_url
from sharelink.adapters.providers.file_io import FileIoProvider
from sharelink.adapters.providers.tmpfiles import TmpFilesProvider
from sharelink.adapters.providers.transfer_sh import TransferShProvider
from sharelink.adapters.providers.zero_x0 import ZeroX0Provider


def default_providers(timeout=None) -> list:
    """Providers in the order the distribution chain tries them."""
    return [
        ZeroX0Provider(timeout=timeout),
        TmpFilesProvider(timeout=timeout),
        FileIoProvider(timeout=timeout),
        TransferShProvider(timeout=timeout),
    ]


__all__ = [
    "HostingProvider",
    "extract_upload_url",
    "default_providers",
    "ZeroX0Provider",
    "TmpFilesProvider",
    "FileIoProvider",
    "TransferShProvider",
]
