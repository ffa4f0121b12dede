import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


def internal_error_response() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turns exceptions escaping the routes into a 500 JSON body.

    Installed inside the CORS middleware so the error still carries the
    Access-Control-* headers a browser needs to read it.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}", exc_info=e)
            return internal_error_response()
