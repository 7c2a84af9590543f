from collections.abc import AsyncIterator
import json
import logging
from typing import Any
import uuid

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from aligno_chat.api.dependencies.auth import get_required_auth_context
from aligno_chat.api.schemas.auth import UnifiedPrincipal
from aligno_chat.api.schemas.chat import AIChatErrorResponse, AIChatRequest
from aligno_chat.core.settings import Settings
from aligno_chat.dependency_injection import get_container
from aligno_chat.providers.base import ProviderClient, ProviderClientError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/functions/v1", tags=["ai-chat"])

RATE_LIMITED_ERROR = "Rate limits exceeded, please try again later."
PAYMENT_REQUIRED_ERROR = "Payment required, please add funds to your workspace."
GATEWAY_ERROR = "AI gateway error"
NOT_CONFIGURED_ERROR = "AI service not configured"


def build_upstream_payload(settings: Settings, payload: AIChatRequest) -> dict[str, Any]:
    messages = [{"role": "system", "content": settings.ai_chat_system_prompt}]
    messages.extend(message.model_dump() for message in payload.messages)
    return {"model": settings.ai_chat_model, "messages": messages, "stream": True}


def format_stream_error(exc: Exception) -> str:
    code = exc.status_code if isinstance(exc, ProviderClientError) else 502
    payload = {"error": {"message": "streaming error", "type": "provider_error", "code": code}}
    return f"data: {json.dumps(payload)}\n\n"


def _error_response(status_code: int, message: str, request_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=AIChatErrorResponse(error=message).model_dump(),
        headers={"x-request-id": request_id},
    )


async def _relay_stream(records: AsyncIterator[str], request_id: str) -> AsyncIterator[str]:
    try:
        async for record in records:
            yield record
    except Exception as exc:  # noqa: BLE001
        # Keep the event stream well-formed even if the upstream fails mid-stream.
        logger.warning(
            "ai chat upstream failed mid-stream",
            extra={"request_id": request_id, "error_type": type(exc).__name__},
        )
        yield format_stream_error(exc)
        yield "data: [DONE]\n\n"


@router.post(
    "/ai-chat",
    summary="Stream an assistant reply for the running conversation",
    description="Forwards the conversation to the AI gateway and relays its completion chunks as server-sent events.",
    responses={
        402: {"model": AIChatErrorResponse},
        429: {"model": AIChatErrorResponse},
        500: {"model": AIChatErrorResponse},
    },
)
async def ai_chat(
    payload: AIChatRequest,
    request: Request,
    auth_context: UnifiedPrincipal = Depends(get_required_auth_context),
    x_request_id: str | None = Header(default=None),
) -> Response:
    request_id = x_request_id or str(uuid.uuid4())
    container = get_container(request)
    settings = container.resolve(Settings)
    logger.info(
        "ai chat request",
        extra={"request_id": request_id, "user_id": auth_context.user_id, "message_count": len(payload.messages)},
    )

    if not settings.ai_gateway_api_key:
        logger.error("ai gateway api key is not configured", extra={"request_id": request_id})
        return _error_response(500, NOT_CONFIGURED_ERROR, request_id)

    provider_client = container.resolve(ProviderClient)
    try:
        records = await provider_client.open_chat_stream(build_upstream_payload(settings, payload))
    except ProviderClientError as exc:
        logger.warning(
            "ai gateway refused chat stream",
            extra={"request_id": request_id, "status_code": exc.status_code},
        )
        if exc.status_code == 429:
            return _error_response(429, RATE_LIMITED_ERROR, request_id)
        if exc.status_code == 402:
            return _error_response(402, PAYMENT_REQUIRED_ERROR, request_id)
        return _error_response(500, GATEWAY_ERROR, request_id)

    headers = {"x-request-id": request_id, "Cache-Control": "no-cache"}
    return StreamingResponse(_relay_stream(records, request_id), media_type="text/event-stream", headers=headers)
