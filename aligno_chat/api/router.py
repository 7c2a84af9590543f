from fastapi import APIRouter

from aligno_chat.api.routers.ai_chat import router as ai_chat_router

api_router = APIRouter()
api_router.include_router(ai_chat_router)
