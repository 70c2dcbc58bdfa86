import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from vidtube import config

logger = logging.getLogger(__name__)

MAX_REQUESTS_PER_MINUTE = config.MAX_REQUESTS_PER_MINUTE
WINDOW_SECONDS = 60

# Paths served without counting
RATE_LIMIT_EXEMPT_PATHS = {
    "/api/v1/health",
}


@dataclass
class Window:
    started: float
    count: int = 0

    def expired(self, now: float) -> bool:
        return now - self.started >= WINDOW_SECONDS


# client ip -> current window; expired windows are swept at most once per WINDOW_SECONDS
rate_limit_data: Dict[str, Window] = {}
_lock = threading.Lock()
_next_sweep = 0.0


def hit(ip: str, now: Optional[float] = None) -> bool:
    """Count one request for ip. False once the window is used up."""
    now = time.time() if now is None else now
    with _lock:
        _sweep(now)
        window = rate_limit_data.get(ip)
        if window is None or window.expired(now):
            window = rate_limit_data[ip] = Window(started=now)
        if window.count >= MAX_REQUESTS_PER_MINUTE:
            return False
        window.count += 1
        return True


def _sweep(now: float):
    global _next_sweep
    if now < _next_sweep:
        return
    stale = [ip for ip, window in rate_limit_data.items() if window.expired(now)]
    for ip in stale:
        del rate_limit_data[ip]
    if stale:
        logger.debug(f"🧹 Dropped {len(stale)} expired rate limit windows")
    _next_sweep = now + WINDOW_SECONDS


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed one-minute window per client IP"""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in RATE_LIMIT_EXEMPT_PATHS:
            return await call_next(request)

        ip = request.client.host if request.client else "unknown"
        if not hit(ip):
            logger.warning(f"🚦 Rate limit exceeded for IP: {ip}")
            return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded. Try again later."})

        return await call_next(request)
