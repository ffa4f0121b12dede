import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@dataclass
class Window:
    started_at: float
    count: int = 0


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float


class RateLimiter:
    """Fixed-window request counter keyed by client address.

    A window opens on a client's first request and lasts ``window_seconds``;
    requests beyond ``max_requests`` inside it are refused until it expires.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Window] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        self._sweep(now)

        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            window = Window(started_at=now)
            self._windows[key] = window

        window.count += 1
        reset_after = max(0.0, window.started_at + self.window_seconds - now)
        return RateLimitDecision(
            allowed=window.count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - window.count),
            reset_after=reset_after,
        )

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.window_seconds:
            return
        expired = [k for k, w in self._windows.items() if now - w.started_at >= self.window_seconds]
        for k in expired:
            del self._windows[k]
        self._last_sweep = now


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: RateLimiter, path_prefix: str = "/api"):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix.rstrip("/") + "/"

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_key = request.client.host if request.client else "unknown"
        decision = self.limiter.hit(client_key)
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(math.ceil(decision.reset_after)),
        }

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {client_key} on {request.url.path}")
            headers["Retry-After"] = headers["RateLimit-Reset"]
            return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE}, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
