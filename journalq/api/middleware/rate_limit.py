"""Rate limiting middleware for the journal analysis API

Guards the analysis endpoints with the engine's sliding-window limiter
(10 requests per 60 seconds per client IP by default).

Security features:
- IP spoofing protection (X-Forwarded-For is trusted only behind Cloud Run,
  or in development)
- Malformed forwarded addresses fall back to the socket IP
"""

from __future__ import annotations

import ipaddress
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from journalq.infrastructure.rate_limiter import SlidingWindowRateLimiter
from journalq.infrastructure.settings import is_development
from journalq.observability.telemetry import log_event

GUARDED_PREFIX = "/api/analyze"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-IP admission control in front of the analysis pipeline.

    The limiter is read from app.state.engine at request time so the
    middleware and the engine share one set of windows. A limiter passed in
    explicitly takes precedence (tests).
    """

    def __init__(self, app: Any, limiter: SlidingWindowRateLimiter | None = None) -> None:
        super().__init__(app)
        self._limiter = limiter
        # Cloud Run sets this header - only trust X-Forwarded-For when present
        self._trusted_proxy_header = "X-Cloud-Trace-Context"

    def _is_valid_ip(self, ip_str: str) -> bool:
        try:
            ipaddress.ip_address(ip_str)
            return True
        except ValueError:
            return False

    def _forwarded_ip(self, request: Request) -> str | None:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            ip = forwarded.split(",")[0].strip()
            if self._is_valid_ip(ip):
                return ip
        return None

    def _get_client_ip(self, request: Request) -> str:
        """Client IP: first valid X-Forwarded-For entry when trusted, else the socket host."""
        if self._trusted_proxy_header in request.headers:
            ip = self._forwarded_ip(request)
            if ip:
                return ip

        # Development mode: allow X-Forwarded-For for testing behind local proxies
        if is_development():
            ip = self._forwarded_ip(request)
            if ip:
                return ip

        return request.client.host if request.client else "unknown"

    def _resolve_limiter(self, request: Request) -> SlidingWindowRateLimiter | None:
        if self._limiter is not None:
            return self._limiter
        engine = getattr(request.app.state, "engine", None)
        return engine.rate_limiter if engine is not None else None

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Check the caller's window before an analysis request runs."""
        if request.method != "POST" or not request.url.path.startswith(GUARDED_PREFIX):
            return await call_next(request)

        limiter = self._resolve_limiter(request)
        if limiter is None:
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        decision = limiter.admit(client_ip)

        if not decision.allowed:
            log_event(
                "api.rate_limit.request_exceeded",
                ip=client_ip,
                path=request.url.path,
                retry_after=decision.retry_after_seconds,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Rate limit exceeded",
                    "retry_after": decision.retry_after_seconds,
                },
                headers={"Retry-After": str(decision.retry_after_seconds)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response
