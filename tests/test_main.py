import importlib

import httpx
import pytest


def _main_module(monkeypatch):
    monkeypatch.setenv("LOVABLE_API_KEY", "test")
    return importlib.import_module("aligno_chat.main")


def test_app_exposes_health_and_ai_chat_routes(monkeypatch) -> None:
    main = _main_module(monkeypatch)
    paths = {getattr(route, "path", None) for route in main.app.routes}

    assert "/healthz" in paths
    assert "/functions/v1/ai-chat" in paths


@pytest.mark.asyncio
async def test_ai_chat_answers_browser_preflight(monkeypatch) -> None:
    main = _main_module(monkeypatch)
    transport = httpx.ASGITransport(app=main.app)

    async with httpx.AsyncClient(transport=transport, base_url="http://relay.test") as client:
        response = await client.options(
            "/functions/v1/ai-chat",
            headers={
                "Origin": "https://app.example.test",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type, apikey, x-client-info",
            },
        )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in {"*", "https://app.example.test"}
    allowed_headers = response.headers["access-control-allow-headers"].lower()
    for header in main.CORS_ALLOWED_HEADERS:
        assert header in allowed_headers
