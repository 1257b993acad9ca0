"""
Pytest configuration and fixtures for ShareLink tests.
"""

import os
import tempfile

import pytest

# Keep the global settings away from the working tree and from any real deployment
os.environ["FILES_DIR"] = tempfile.mkdtemp(prefix="sharelink_test_files_")
os.environ["HINT_FILE"] = os.path.join(tempfile.mkdtemp(prefix="sharelink_test_hint_"), "domain_hint.json")
for var in ("PUBLIC_BASE_URL", "VERCEL_URL", "RAILWAY_PUBLIC_DOMAIN", "LIGHTNING_CLOUDSPACE_HOST"):
    os.environ.pop(var, None)

from sharelink.config import Settings  # noqa: E402


@pytest.fixture
def app_settings(tmp_path):
    """Settings pointing at a per-test files directory and hint file."""
    return Settings(
        files_dir=tmp_path / "files",
        hint_file=tmp_path / "domain_hint.json",
        app_port=8000,
    )
