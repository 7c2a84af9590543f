from aligno_chat.api.schemas.auth import UnifiedPrincipal
from aligno_chat.api.schemas.chat import AIChatErrorResponse, AIChatRequest, ChatMessage

__all__ = ["AIChatErrorResponse", "AIChatRequest", "ChatMessage", "UnifiedPrincipal"]
