from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"] = Field(..., description="Author of the message")
    content: str = Field(..., description="Plain message text")


class AIChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Running conversation in chronological order; the last entry is the newest user turn",
    )


class AIChatErrorResponse(BaseModel):
    error: str = Field(..., description="User-facing error description")
