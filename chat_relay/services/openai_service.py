import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from chat_relay.core.config import Settings
from chat_relay.core.exceptions import OpenAIException
from chat_relay.prompts.crm import load_system_prompt

logger = logging.getLogger(__name__)


class OpenAIService:
    def __init__(
        self,
        client: Any,
        system_prompt: str,
        model: str = "gpt-3.5-turbo",
        max_tokens: int = 150,
        temperature: float = 0.7,
    ):
        self.client = client
        self.system_prompt = system_prompt
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIService":
        client = AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY.get_secret_value(),
            timeout=settings.OPENAI_TIMEOUT,
            # one upstream call per inbound request
            max_retries=0,
        )
        return cls(
            client=client,
            system_prompt=load_system_prompt(settings.SYSTEM_PROMPT_FILE),
            model=settings.OPENAI_MODEL,
            max_tokens=settings.OPENAI_MAX_TOKENS,
            temperature=settings.OPENAI_TEMPERATURE,
        )

    def build_messages(self, message: str) -> list[dict]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": message},
        ]

    async def get_chat_response(self, message: str) -> str:
        """Send ``message`` with the system prompt and return the first choice's text.

        Every failure is raised as OpenAIException carrying the provider's HTTP
        status when there is one.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(message),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.APIStatusError as e:
            raise OpenAIException(
                f"OpenAI API Error: {e.message}",
                status_code=e.status_code,
                details=_error_details(e),
            ) from e
        except openai.APIError as e:
            raise OpenAIException(f"OpenAI API Error: {e.message}", details=_error_details(e)) from e
        except Exception as e:
            raise OpenAIException(f"OpenAI API Error: {str(e)}") from e

        choices = getattr(response, "choices", None)
        if not choices:
            raise OpenAIException("OpenAI API Error: response contained no choices")

        reply = choices[0].message.content
        if reply is None:
            raise OpenAIException("OpenAI API Error: first choice has no message content")
        return reply

    async def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()


def _error_details(error: openai.APIError) -> Optional[Any]:
    return getattr(error, "body", None)
