# src/sharelink/adapters/persistence/hint_store.py
"""
Hint Store - Durable Mirror of the Last Public Domain

This module persists the last discovered non-local base address and the
strategy that produced it as a JSON file. The stored value is only a hint for
the next process start: the resolver re-probes it like any other candidate and
never trusts it on its own.

Files that USE this module:
- sharelink.application.domain_resolver (reads the hint as a candidate, mirrors results)
- sharelink.application.health (reports hint store state)
- tests.test_hint_store (unit tests)

Files that this module USES:
- sharelink.config (settings for the hint file path)
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sharelink.config import settings

log = logging.getLogger(__name__)


@dataclass
class DomainHint:
    base_url: str
    source: str
    saved_at: Optional[datetime] = None  # UTC - set on save if not provided

    def to_json(self) -> dict:
        """
        Convert DomainHint to JSON-serializable dictionary.

        Returns:
            Dictionary with ISO-formatted timestamp
        """
        d = asdict(self)
        d["saved_at"] = (self.saved_at or datetime.now(timezone.utc)).isoformat()
        return d

    @staticmethod
    def from_json(data: dict) -> "DomainHint":
        """
        Create DomainHint from JSON dictionary.

        Raises:
            KeyError/ValueError/TypeError: If required fields are missing or invalid
        """
        base_url = data["base_url"]
        if not isinstance(base_url, str) or not base_url:
            raise ValueError("base_url must be a non-empty string")
        ts_raw = data.get("saved_at")
        # Accept both "...Z" and "+00:00"
        if isinstance(ts_raw, str):
            saved_at = datetime.fromisoformat(ts_raw.replace("Z", "+00:00")).astimezone(timezone.utc)
        else:
            saved_at = None
        return DomainHint(base_url=base_url, source=str(data.get("source", "unknown")), saved_at=saved_at)


class HintStore:
    """JSON-file store for the last discovered public domain."""

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize hint store.

        Args:
            path: JSON file location (defaults to settings.hint_file)
        """
        self.path = Path(path) if path is not None else settings.hint_file

    def load(self) -> Optional[DomainHint]:
        """
        Load the stored hint.

        Corrupt files are backed up to *.corrupt and removed; every failure
        results in None because the hint is advisory.

        Returns:
            DomainHint if the file exists and is valid, None otherwise
        """
        if not self.path.exists():
            return None

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            backup_path = self.path.with_suffix(".json.corrupt")
            try:
                shutil.copy2(self.path, backup_path)
                self.path.unlink()
                log.warning("Domain hint file corrupted, backed up to %s: %s", backup_path, e)
            except OSError as backup_error:
                log.error("Failed to back up corrupt domain hint file: %s", backup_error)
            return None
        except OSError as e:
            log.error("Failed to read domain hint file %s: %s", self.path, e)
            return None

        try:
            return DomainHint.from_json(data)
        except (KeyError, ValueError, TypeError) as e:
            log.warning("Domain hint file has unexpected schema, ignoring: %s", e)
            return None

    def save(self, hint: DomainHint) -> None:
        """
        Save the hint using an atomic write (temp file + rename).

        Args:
            hint: DomainHint to persist

        Raises:
            RuntimeError: If the file cannot be written
        """
        temp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(suffix=".json.tmp", dir=str(self.path.parent), text=True)
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(hint.to_json(), f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, str(self.path))
        except OSError as e:
            if temp_path is not None:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            raise RuntimeError(f"Failed to save domain hint file: {e}") from e
        log.info("Domain hint saved: %s (source=%s)", hint.base_url, hint.source)
