from dialogue.core.script import resolve_reply
from dialogue.models import ChatMessage, ChatRequest, ChatResponse, Reply, ReplyMode

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Reply",
    "ReplyMode",
    "resolve_reply",
]
