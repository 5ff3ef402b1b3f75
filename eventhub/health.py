"""Service health check."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from eventhub.store import Store


class HealthService:
    """Reports whether the service and its store are reachable."""

    def __init__(self, store: Store | None) -> None:
        self.store = store

    def check(self) -> tuple[HTTPStatus, dict[str, Any]]:
        """Return the status code and body of a health probe."""
        if self.store is None:
            return HTTPStatus.SERVICE_UNAVAILABLE, {
                "status": "unhealthy",
                "message": "Database connection error",
            }
        if not self.store.ping():
            return HTTPStatus.SERVICE_UNAVAILABLE, {
                "status": "unhealthy",
                "message": "Database ping failed",
            }
        return HTTPStatus.OK, {"status": "healthy", "message": "Service is running"}