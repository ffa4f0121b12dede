import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chat_relay.api.api import api_router
from chat_relay.core.config import Settings, load_settings
from chat_relay.core.cors import OriginPolicyMiddleware
from chat_relay.core.exceptions import ConfigurationError
from chat_relay.core.logging_config import setup_logging
from chat_relay.middleware.errors import UnhandledErrorMiddleware, internal_error_response
from chat_relay.middleware.rate_limit import RateLimiter, RateLimitMiddleware
from chat_relay.middleware.request_logging import RequestLoggingMiddleware
from chat_relay.schemas.chat import EMPTY_MESSAGE_ERROR
from chat_relay.services.openai_service import OpenAIService

logger = logging.getLogger(__name__)


def create_app(settings: Settings, chat_service: Optional[OpenAIService] = None) -> FastAPI:
    """Build the relay application.

    ``chat_service`` defaults to an OpenAIService configured from ``settings``;
    tests pass their own to avoid network calls.
    """
    service = chat_service or OpenAIService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"{settings.PROJECT_NAME} ready: model={service.model} "
            f"origins={settings.ALLOWED_ORIGINS} "
            f"rate_limit={settings.RATE_LIMIT_MAX_REQUESTS}/{settings.RATE_LIMIT_WINDOW_SECONDS}s"
        )
        yield
        await service.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.chat_service = service

    # Added innermost first: logging wraps CORS, CORS wraps the rate limiter and error handler
    app.add_middleware(UnhandledErrorMiddleware)
    app.state.rate_limiter = RateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter, path_prefix=settings.API_PREFIX)
    app.add_middleware(
        OriginPolicyMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": EMPTY_MESSAGE_ERROR})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return internal_error_response()


def run() -> None:
    settings, error = load_settings()
    if error:
        setup_logging()
        logger.critical(error)
        sys.exit(1)

    setup_logging(settings.LOG_LEVEL)
    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical(e.message)
        sys.exit(1)
    logger.info(f"Server is running on port {settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
