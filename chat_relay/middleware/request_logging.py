import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        client = request.client.host if request.client else "unknown"
        logger.info(f"[START] request_id={request_id} client={client} {request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.error(f"[ERROR] request_id={request_id} duration_ms={duration_ms} err={e!r}")
            raise

        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"[END]   request_id={request_id} status={response.status_code} duration_ms={duration_ms}"
        )

        response.headers["x-request-id"] = request_id
        return response
