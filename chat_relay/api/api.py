from fastapi import APIRouter

from chat_relay.api.endpoints import chat, health

api_router = APIRouter()
api_router.include_router(chat.router, tags=["chat"])
api_router.include_router(health.router, tags=["health"])
