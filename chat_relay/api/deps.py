from fastapi import Request

from chat_relay.services.openai_service import OpenAIService


def get_chat_service(request: Request) -> OpenAIService:
    return request.app.state.chat_service
