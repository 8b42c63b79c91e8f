from __future__ import annotations

from enum import Enum
from typing import List, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["user", "assistant", "system"]


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="'user', 'assistant' or 'system'")
    content: str = Field(..., min_length=1, description="Message text")


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Full transcript so far, oldest first (frontend-managed)",
    )


class ChatResponse(BaseModel):
    reply: str = Field(..., min_length=1)


class ReplyMode(str, Enum):
    LIVE = "live"
    SCRIPTED = "scripted"
    FALLBACK = "fallback"


class Reply(NamedTuple):
    text: str
    mode: ReplyMode
