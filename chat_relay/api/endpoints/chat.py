import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from chat_relay.api.deps import get_chat_service
from chat_relay.core.exceptions import OpenAIException
from chat_relay.schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from chat_relay.services.openai_service import OpenAIService

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMITED_ERROR = "Rate limit exceeded for OpenAI API. Please try again later."
INVALID_KEY_ERROR = "Invalid OpenAI API key. Please contact the administrator."
BAD_REQUEST_ERROR = "Invalid request to OpenAI API. Please check your message."
GENERIC_ERROR = "Failed to fetch response from OpenAI."
RETRY_SUGGESTION = "Please try again later or contact support if the issue persists."

UPSTREAM_STATUS_ERRORS = {
    429: RATE_LIMITED_ERROR,
    401: INVALID_KEY_ERROR,
    400: BAD_REQUEST_ERROR,
}

REDACTED_HEADERS = {"authorization", "cookie", "x-api-key"}


def error_response_for(exc: OpenAIException) -> JSONResponse:
    """Translate an upstream failure into the status and body returned to the caller."""
    message = UPSTREAM_STATUS_ERRORS.get(exc.status_code)
    if message is not None:
        body = ErrorResponse(error=message)
        status_code = exc.status_code
    else:
        body = ErrorResponse(error=GENERIC_ERROR, details=exc.message, suggestion=RETRY_SUGGESTION)
        status_code = 500
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
               429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    payload: ChatRequest,
    request: Request,
    chat_service: OpenAIService = Depends(get_chat_service),
):
    logger.info(f"Received message from {request.headers.get('origin')}: {payload.message}")

    try:
        logger.info("Sending request to OpenAI...")
        reply = await chat_service.get_chat_response(payload.message)
    except OpenAIException as e:
        _log_failure(e, request, payload)
        return error_response_for(e)

    logger.info(f"OpenAI response: {reply}")
    return ChatResponse(reply=reply)


def _log_failure(error: OpenAIException, request: Request, payload: ChatRequest) -> None:
    if error.status_code == 401:
        logger.critical("OpenAI rejected the configured API key; check OPENAI_API_KEY")
    logger.error(f"OpenAI Error: {error.message}", exc_info=error)
    logger.error(f"Error Details: {error.details if error.details is not None else error!r}")
    headers = {
        key: ("<redacted>" if key.lower() in REDACTED_HEADERS else value)
        for key, value in request.headers.items()
    }
    logger.error(f"Request Headers: {headers}")
    logger.error(f"Request Body: {payload.model_dump()}")
