import re
from typing import Optional

from pydantic import BaseModel, StrictStr, field_validator

EMPTY_MESSAGE_ERROR = "Message is required and must be a non-empty string"

# Whitespace and line terminators removed by JavaScript's String.prototype.trim
_TRIM_CHARS = (
    "\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)
_EDGE_WHITESPACE = re.compile(f"\\A[{_TRIM_CHARS}]+|[{_TRIM_CHARS}]+\\Z")


def trim(text: str) -> str:
    return _EDGE_WHITESPACE.sub("", text)


class ChatRequest(BaseModel):
    message: StrictStr

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = trim(v)
        if not v:
            raise ValueError(EMPTY_MESSAGE_ERROR)
        return v


class ChatResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    suggestion: Optional[str] = None
