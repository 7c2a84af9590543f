"""Dependency injection container assembly utilities."""

from aligno_chat.dependency_injection.container import build_chat_client_container, build_container, get_container

__all__ = ["build_chat_client_container", "build_container", "get_container"]
