"""
Rate limiting - sliding window per client IP.

Each rule keeps, per IP, the timestamps of requests inside its window.
A request is rejected with 429 once any matching rule is full.

Rules:
- api:  every /api route, 1000 per 15 min
- auth: /api/auth, 5 per 15 min in production (200 per min otherwise);
        requests that succeed are not counted, so only failed logins burn attempts
- ai:   endpoints that call the AI provider, 100 per hour

Counters live in process memory (single instance deployment).
"""
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from fastapi import Request
from loguru import logger

from resume_studio.core.config import get_settings
from resume_studio.core.responses import error_response


@dataclass(frozen=True)
class RateLimitRule:
    name: str
    prefixes: Tuple[str, ...]
    max_requests: int
    window_seconds: int
    message: str
    skip_successful: bool = False

    def matches(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self.prefixes)


AI_PATHS = ("/api/job/analyze", "/api/job/match", "/api/resume/generate", "/api/resume/score")


def default_rules() -> List[RateLimitRule]:
    settings = get_settings()
    if settings.is_production:
        auth_max, auth_window = 5, 15 * 60
    else:
        auth_max, auth_window = 200, 60
    return [
        RateLimitRule("api", ("/api",), 1000, 15 * 60,
                      "Too many requests from this IP, please try again later."),
        RateLimitRule("auth", ("/api/auth",), auth_max, auth_window,
                      "Too many authentication attempts, please try again later.", skip_successful=True),
        RateLimitRule("ai", AI_PATHS, 100, 60 * 60,
                      "AI request limit reached, please try again later."),
    ]


class SlidingWindowRateLimiter:

    sweep_interval = 60

    def __init__(self, rules: List[RateLimitRule]):
        self.rules = rules
        self._hits: Dict[Tuple[str, str], deque] = {}
        self._lock = threading.Lock()
        self._last_sweep = time.monotonic()

    def _prune(self, key: Tuple[str, str], window_seconds: int, now: float) -> deque:
        """Drop hits outside the rule's window; empty windows are forgotten."""
        hits = self._hits.get(key)
        if hits is None:
            return deque()
        cutoff = now - window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
        return hits

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        windows = {rule.name: rule.window_seconds for rule in self.rules}
        for key in list(self._hits):
            self._prune(key, windows.get(key[0], 0), now)

    def hit(self, path: str, client: str) -> Tuple[Optional[RateLimitRule], List[Tuple[RateLimitRule, float]], dict]:
        """
        Count one request against every matching rule.

        Returns:
            (blocking rule or None, [(rule, timestamp)] recorded, header values)
        """
        now = time.monotonic()
        matching = [r for r in self.rules if r.matches(path)]
        recorded = []
        headers = {}
        with self._lock:
            self._sweep(now)
            windows = [(rule, self._prune((rule.name, client), rule.window_seconds, now)) for rule in matching]
            for rule, hits in windows:
                if len(hits) >= rule.max_requests:
                    reset = int(hits[0] + rule.window_seconds - now) + 1
                    return rule, [], self._headers(rule, 0, reset)
            for rule, hits in windows:
                hits = self._hits.setdefault((rule.name, client), hits)
                hits.append(now)
                recorded.append((rule, now))
                remaining = rule.max_requests - len(hits)
                reset = int(hits[0] + rule.window_seconds - now) + 1
                # Most specific (last matching) rule wins the headers
                headers = self._headers(rule, remaining, reset)
        return None, recorded, headers

    def undo(self, client: str, recorded: List[Tuple[RateLimitRule, float]]) -> None:
        """Forget hits for rules that skip successful requests."""
        with self._lock:
            for rule, ts in recorded:
                if not rule.skip_successful:
                    continue
                key = (rule.name, client)
                hits = self._hits.get(key)
                if hits and ts in hits:
                    hits.remove(ts)
                    if not hits:
                        del self._hits[key]

    def tracked_windows(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    @staticmethod
    def _headers(rule: RateLimitRule, remaining: int, reset: int) -> dict:
        return {
            "RateLimit-Limit": str(rule.max_requests),
            "RateLimit-Remaining": str(max(0, remaining)),
            "RateLimit-Reset": str(max(0, reset)),
        }


rate_limiter = SlidingWindowRateLimiter(default_rules())


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def rate_limit_middleware(request: Request, call_next):
    if request.method == "OPTIONS":
        return await call_next(request)

    ip = client_ip(request)
    blocked, recorded, headers = rate_limiter.hit(request.url.path, ip)
    if blocked:
        logger.warning(f"Rate limit '{blocked.name}' exceeded for {ip} on {request.url.path}")
        headers["Retry-After"] = headers["RateLimit-Reset"]
        return error_response(429, "RATE_LIMIT_EXCEEDED", blocked.message, request=request, headers=headers)

    response = await call_next(request)
    if response.status_code < 400:
        rate_limiter.undo(ip, recorded)
    for name, value in headers.items():
        response.headers[name] = value
    return response
