from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

import httpx
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from config.settings import Settings
from dialogue.core.prompt import SYSTEM_PROMPT
from dialogue.models import ChatMessage


class LiveReplyError(RuntimeError):
    """The completion service answered without usable text."""


def build_chat_model(
    settings: Settings,
    http_async_client: Optional[httpx.AsyncClient] = None,
) -> BaseChatModel:
    if not settings.openai_api_key:
        raise RuntimeError(
            "OPENAI_API_KEY not set. Please configure it in environment or .env"
        )

    # Retries are left to the client; a failed call falls back to the script.
    return ChatOpenAI(
        model=settings.openai_model,
        api_key=SecretStr(settings.openai_api_key),
        temperature=settings.temperature,
        timeout=settings.request_timeout,
        max_retries=0,
        http_async_client=http_async_client,
    )


def to_lc_messages(history: Sequence[ChatMessage]) -> List[BaseMessage]:
    messages: List[BaseMessage] = []
    for item in history:
        if item.role == "user":
            messages.append(HumanMessage(content=item.content))
        elif item.role == "assistant":
            messages.append(AIMessage(content=item.content))
        else:
            messages.append(SystemMessage(content=item.content))
    return messages


def build_prompt(history: Sequence[ChatMessage]) -> List[BaseMessage]:
    return [SystemMessage(content=SYSTEM_PROMPT), *to_lc_messages(history)]


async def run_live_reply(
    model: BaseChatModel,
    history: Sequence[ChatMessage],
    timeout: float,
) -> str:
    result = await asyncio.wait_for(model.ainvoke(build_prompt(history)), timeout=timeout)

    content = getattr(result, "content", None)
    if not isinstance(content, str):
        raise LiveReplyError(f"Invalid response format from model: {type(content).__name__}")
    text = content.strip()
    if not text:
        raise LiveReplyError("Model returned an empty reply")
    return text
