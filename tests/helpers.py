from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx

from chat_relay.core.config import Settings
from chat_relay.services.openai_service import OpenAIService

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def make_settings(**overrides) -> Settings:
    values = {"OPENAI_API_KEY": "sk-test", "_env_file": None}
    values.update(overrides)
    return Settings(**values)


def completion(*contents):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=c)) for c in contents]
    )


def make_service(reply="stub reply", error=None, system_prompt="SYSTEM") -> OpenAIService:
    """OpenAIService over a fake client whose ``create`` is an AsyncMock."""
    create = AsyncMock(return_value=completion(reply))
    if error is not None:
        create.side_effect = error
    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return OpenAIService(client=client, system_prompt=system_prompt)


def status_error(error_cls, status_code: int, message: str = "upstream said no"):
    request = httpx.Request("POST", OPENAI_URL)
    body = {"error": {"message": message}}
    response = httpx.Response(status_code, request=request, json=body)
    return error_cls(message, response=response, body=body)


def openai_request() -> httpx.Request:
    return httpx.Request("POST", OPENAI_URL)
