# src/sharelink/application/health.py
"""
Health Checker - Component Monitoring and Diagnostics

This module reports the state of the resolution and distribution engine:
the currently resolved domain, the durable hint store, the served files
directory and the rate limit tables. It never triggers a resolution itself;
a service that has not resolved its domain yet simply reports so.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from sharelink.adapters.persistence.hint_store import HintStore
from sharelink.application.domain_resolver import DomainResolver
from sharelink.shared.rate_limiter import RateGovernor

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    """Represents the health status of a component."""
    is_healthy: bool
    message: str
    last_check: datetime
    details: Optional[Dict[str, Any]] = None


class HealthChecker:
    """Centralized health checking for the engine's components."""

    def __init__(
        self,
        resolver: DomainResolver,
        governor: RateGovernor,
        files_dir: Path,
        hint_store: Optional[HintStore] = None,
    ):
        self.resolver = resolver
        self.governor = governor
        self.files_dir = Path(files_dir)
        self.hint_store = hint_store

    def check_domain(self) -> HealthStatus:
        """Report the cached domain; a local fallback counts as unhealthy."""
        domain = self.resolver.current()
        now = datetime.now(timezone.utc)
        if domain is None:
            return HealthStatus(
                is_healthy=True,
                message="Domain not resolved yet (first request pending)",
                last_check=now,
                details={"resolved": False},
            )
        if domain.is_local:
            return HealthStatus(
                is_healthy=False,
                message=f"Using local fallback {domain.base_url}; shared links will only work on this machine",
                last_check=now,
                details=domain.to_json(),
            )
        return HealthStatus(
            is_healthy=True,
            message=f"Public domain {domain.base_url} via {domain.source.value}",
            last_check=now,
            details=domain.to_json(),
        )

    def check_hint_store(self) -> HealthStatus:
        now = datetime.now(timezone.utc)
        if self.hint_store is None:
            return HealthStatus(True, "Hint store disabled", now, {"configured": False})
        try:
            hint = self.hint_store.load()
        except Exception as e:
            logger.error("Hint store health check failed: %s", e)
            return HealthStatus(False, f"Hint store error: {e}", now)
        if hint is None:
            return HealthStatus(True, "No domain hint stored yet", now, {"path": str(self.hint_store.path)})
        return HealthStatus(
            True,
            f"Hint: {hint.base_url} ({hint.source})",
            now,
            {
                "path": str(self.hint_store.path),
                "base_url": hint.base_url,
                "source": hint.source,
                "saved_at": hint.saved_at.isoformat() if hint.saved_at else None,
            },
        )

    def check_files_dir(self) -> HealthStatus:
        now = datetime.now(timezone.utc)
        if not self.files_dir.is_dir():
            return HealthStatus(False, f"Files directory missing: {self.files_dir}", now)
        if not os.access(self.files_dir, os.W_OK):
            return HealthStatus(False, f"Files directory not writable: {self.files_dir}", now)
        return HealthStatus(True, "Files directory ready", now, {"path": str(self.files_dir)})

    def check_rate_limits(self) -> HealthStatus:
        tracked = {name: limiter.tracked_clients() for name, limiter in self.governor.limiters.items()}
        return HealthStatus(
            True,
            f"Tracking {sum(tracked.values())} client window(s)",
            datetime.now(timezone.utc),
            {"tracked_clients": tracked},
        )

    def get_overall_health(self) -> Dict[str, Any]:
        """
        Get overall health status of all components.

        Returns degraded status if any component fails, even if others are healthy.
        """
        checks = {
            "domain": self.check_domain(),
            "hint_store": self.check_hint_store(),
            "files_dir": self.check_files_dir(),
            "rate_limits": self.check_rate_limits(),
        }

        healthy_checks = [name for name, check in checks.items() if check.is_healthy]
        failed_checks = [name for name, check in checks.items() if not check.is_healthy]
        overall_healthy = not failed_checks

        if overall_healthy:
            status_message = "All systems healthy"
        else:
            status_message = f"Degraded - {len(failed_checks)} component(s) failed: {', '.join(failed_checks)}"

        return {
            "overall_healthy": overall_healthy,
            "status": "healthy" if overall_healthy else "degraded",
            "message": status_message,
            "healthy_components": healthy_checks,
            "failed_components": failed_checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                name: {
                    "healthy": check.is_healthy,
                    "message": check.message,
                    "last_check": check.last_check.isoformat(),
                    "details": check.details,
                }
                for name, check in checks.items()
            },
        }
