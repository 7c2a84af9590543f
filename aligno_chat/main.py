from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aligno_chat.api.router import api_router
from aligno_chat.api.routers.health import router as health_router
from aligno_chat.core.logging import configure_logging
from aligno_chat.core.settings import get_settings
from aligno_chat.dependency_injection import build_container
from aligno_chat.providers.base import ProviderClient

settings = get_settings()
configure_logging(settings.effective_log_level)
logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = ("authorization", "x-client-info", "apikey", "content-type")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("starting ai-chat relay", extra={"app_env": settings.app_env})
    container = build_container(settings)
    app.state.settings = settings
    app.state.container = container

    provider_client: ProviderClient | None = None
    if settings.ai_gateway_api_key:
        provider_client = container.resolve(ProviderClient)
        logger.info("ai gateway client initialized", extra={"model": settings.ai_chat_model})
    else:
        logger.warning("LOVABLE_API_KEY not set; ai-chat requests will fail")

    try:
        yield
    finally:
        if provider_client is not None:
            await provider_client.aclose()
        logger.info("ai-chat relay shutdown complete")


app = FastAPI(
    title="Aligno AI Chat Relay",
    version="0.1.0",
    docs_url="/docs" if settings.enable_swagger else None,
    redoc_url="/redoc" if settings.enable_swagger else None,
    openapi_url="/openapi.json" if settings.enable_swagger else None,
    lifespan=lifespan,
)

# Browser callers send a preflight before the bearer-authenticated POST.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=list(CORS_ALLOWED_HEADERS),
)

app.include_router(health_router)
app.include_router(api_router)
