from http import HTTPStatus

from eventhub.health import HealthService
from eventhub.store import Store


def test_healthy():
    status, body = HealthService(Store()).check()
    assert status == HTTPStatus.OK
    assert body == {"status": "healthy", "message": "Service is running"}


def test_ping_failure():
    status, body = HealthService(Store(online=False)).check()
    assert status == HTTPStatus.SERVICE_UNAVAILABLE
    assert body == {"status": "unhealthy", "message": "Database ping failed"}


def test_no_connection():
    status, body = HealthService(None).check()
    assert status == HTTPStatus.SERVICE_UNAVAILABLE
    assert body["message"] == "Database connection error"