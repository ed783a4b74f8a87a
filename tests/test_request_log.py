"""
Tests for the request log middleware and its debug endpoints
"""

import pytest
from fastapi.testclient import TestClient

from teller.api import create_app
from teller.api.request_log import RequestLog, RequestLogEntry
from teller.config import TellerConfig
from teller.storage import InMemoryDocumentStore
from teller.system import BankingSystem


def make_entry(path):
    return RequestLogEntry(
        method="GET", path=path, status_code=200, duration_ms=1.0,
        timestamp="2024-05-01T09:30:00+00:00"
    )


class TestRequestLog:
    """Test the ring buffer"""

    def test_keeps_most_recent_entries(self):
        log = RequestLog(size=3)
        for i in range(5):
            log.record(make_entry(f"/api/{i}"))

        assert len(log) == 3
        assert [e.path for e in log.entries()] == ["/api/2", "/api/3", "/api/4"]

    def test_clear(self):
        log = RequestLog()
        log.record(make_entry("/api/customers"))
        log.clear()
        assert log.entries() == []
        assert log.size == 50

    def test_rejects_empty_buffer(self):
        with pytest.raises(ValueError):
            RequestLog(size=0)


class TestRequestLogMiddleware:
    """Test recording through the API"""

    def _client(self, enabled):
        config = TellerConfig(
            storage_backend="memory", request_log_enabled=enabled, request_log_size=10
        )
        system = BankingSystem(storage=InMemoryDocumentStore(), config=config)
        return TestClient(create_app(system=system, config=config))

    def test_records_requests(self):
        with self._client(enabled=True) as client:
            client.get("/api/customers")
            client.get("/api/accounts/missing")

            r = client.get("/api/debug/requests")

        assert r.status_code == 200
        entries = r.json()["data"]
        assert [(e["method"], e["path"], e["status"]) for e in entries] == [
            ("GET", "/api/customers", 200),
            ("GET", "/api/accounts/missing", 404),
        ]
        assert all(e["durationMs"] >= 0 for e in entries)

    def test_clear_endpoint(self):
        with self._client(enabled=True) as client:
            client.get("/api/customers")
            assert client.delete("/api/debug/requests").status_code == 200
            assert client.get("/api/debug/requests").json()["data"] == []

    def test_disabled_by_default(self):
        with self._client(enabled=False) as client:
            r = client.get("/api/debug/requests")
        assert r.status_code == 404
