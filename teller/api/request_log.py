"""
Request log: a bounded, in-memory record of recent API calls.

A debugging aid for frontend work. It is installed as middleware only when
enabled in configuration and has no effect on ledger behaviour.
"""

from collections import deque
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Deque, List
import threading
import time

from fastapi import APIRouter, Request
from starlette.middleware.base import BaseHTTPMiddleware

from .schemas import envelope


DEBUG_PATH = "/debug/requests"


@dataclass
class RequestLogEntry:
    method: str
    path: str
    status_code: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "path": self.path,
            "status": self.status_code,
            "durationMs": self.duration_ms,
            "timestamp": self.timestamp
        }


class RequestLog:
    """Ring buffer of the most recent requests"""

    def __init__(self, size: int = 50):
        if size < 1:
            raise ValueError("Request log size must be at least 1")
        self._entries: Deque[RequestLogEntry] = deque(maxlen=size)
        self._lock = threading.Lock()

    @property
    def size(self) -> int:
        return self._entries.maxlen

    def record(self, entry: RequestLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> List[RequestLogEntry]:
        """Oldest first"""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Records method, path, status and latency of every request"""

    def __init__(self, app, request_log: RequestLog):
        super().__init__(app)
        self.request_log = request_log

    async def dispatch(self, request: Request, call_next):
        if request.url.path.endswith(DEBUG_PATH):
            return await call_next(request)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            self.request_log.record(RequestLogEntry(
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                timestamp=datetime.now(timezone.utc).isoformat()
            ))


router = APIRouter()


@router.get(DEBUG_PATH)
def get_request_log(request: Request):
    """Recent API calls, oldest first"""
    request_log: RequestLog = request.app.state.request_log
    return envelope([entry.to_dict() for entry in request_log.entries()])


@router.delete(DEBUG_PATH)
def clear_request_log(request: Request):
    """Forget recorded API calls"""
    request.app.state.request_log.clear()
    return envelope({"message": "Request log cleared"})
