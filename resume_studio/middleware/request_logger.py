"""
Request logging + in-process request metrics.

Metrics are exposed by GET /api/monitoring/metrics.
"""
import threading
import time
from collections import deque

from fastapi import Request
from loguru import logger

DURATION_SAMPLES = 1000


class RequestMetrics:
    """Counters for served requests; average duration over the last 1000."""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.total = 0
            self.by_method = {}
            self.by_status = {}
            self.durations = deque(maxlen=DURATION_SAMPLES)

    def record(self, method: str, status_code: int, duration_ms: float) -> None:
        with self._lock:
            self.total += 1
            self.by_method[method] = self.by_method.get(method, 0) + 1
            key = str(status_code)
            self.by_status[key] = self.by_status.get(key, 0) + 1
            self.durations.append(duration_ms)

    def snapshot(self) -> dict:
        with self._lock:
            avg = sum(self.durations) / len(self.durations) if self.durations else 0.0
            return {
                "total": self.total,
                "by_method": dict(self.by_method),
                "by_status": dict(self.by_status),
                "avg_duration_ms": round(avg, 2),
            }


request_metrics = RequestMetrics()


async def request_logger_middleware(request: Request, call_next):
    request_id = getattr(request.state, "request_id", "-")
    method = request.method
    path = request.url.path
    logger.debug(f"[{request_id}] --> {method} {path}")

    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - start) * 1000
        request_metrics.record(method, 500, duration_ms)
        logger.exception(f"[{request_id}] <-- {method} {path} 500 {duration_ms:.1f}ms")
        raise
    duration_ms = (time.perf_counter() - start) * 1000

    request_metrics.record(method, response.status_code, duration_ms)

    message = f"[{request_id}] <-- {method} {path} {response.status_code} {duration_ms:.1f}ms"
    if response.status_code >= 500:
        logger.error(message)
    elif response.status_code >= 400:
        logger.warning(message)
    else:
        logger.info(message)
    return response
