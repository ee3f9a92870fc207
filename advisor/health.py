"""
Health check logic for deployment readiness.

Provides:
- /health/live: Liveness probe (proxy process is running)
- /health/ready: Readiness probe (proxy can serve questions)

Readiness only checks local configuration. The upstream AI service is
never called from a probe.
"""

import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from inference import ModelBackend


@dataclass
class HealthStatus:
    """Health status response."""

    status: str  # "healthy", "unhealthy"
    timestamp: str
    ready: bool
    uptime_seconds: float
    model: str
    message: str


class HealthChecker:
    """
    Health checker for proxy readiness.

    Invariant: Health checks do NOT call the upstream service and never
    reveal the credential, only whether one is present.
    """

    def __init__(self, start_time: Optional[float] = None):
        self.start_time = time.time() if start_time is None else start_time

    def _status(self, ready: bool, model: str, message: str) -> HealthStatus:
        return HealthStatus(
            status="healthy" if ready else "unhealthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            ready=ready,
            uptime_seconds=time.time() - self.start_time,
            model=model,
            message=message,
        )

    def check_live(self, backend: ModelBackend) -> HealthStatus:
        """Always healthy if this code runs."""
        return self._status(True, backend.model_name, "Proxy process is running")

    def check_ready(self, backend: ModelBackend) -> HealthStatus:
        """Ready when the selected backend holds its credential."""
        if backend.configured:
            return self._status(True, backend.model_name, "Upstream credential configured")
        return self._status(False, backend.model_name, "Server configuration incomplete")

    @staticmethod
    def to_dict(status: HealthStatus) -> Dict[str, Any]:
        """Convert HealthStatus to dict for JSON serialization."""
        return asdict(status)
