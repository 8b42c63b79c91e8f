"""Reply backends.

The strategy is chosen once, when the app is built: a live model with the
script as its fallback, or the script alone. A live backend never lets an
upstream failure reach the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence

from langchain_core.language_models import BaseChatModel

from config.settings import OPENAI_REQUEST_TIMEOUT, Settings
from dialogue.agent import build_chat_model, run_live_reply
from dialogue.core.script import resolve_reply
from dialogue.models import ChatMessage, Reply, ReplyMode


logger = logging.getLogger(__name__)


class ReplyBackend(Protocol):
    name: str

    async def reply(self, messages: Sequence[ChatMessage]) -> Reply: ...


class ScriptedBackend:
    name = "scripted"

    async def reply(self, messages: Sequence[ChatMessage]) -> Reply:
        return Reply(resolve_reply(messages), ReplyMode.SCRIPTED)


def describe_failure(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "timeout"
    text = str(error).lower()
    if "timed out" in text or "timeout" in text:
        return "timeout"
    if "quota" in text or "billing" in text:
        return "quota"
    if "invalid_api_key" in text or "incorrect api key" in text:
        return "invalid_api_key"
    return "error"


class LiveBackend:
    name = "live"

    def __init__(
        self,
        model: BaseChatModel,
        timeout: float = OPENAI_REQUEST_TIMEOUT,
        model_name: Optional[str] = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self.model_name = model_name

    async def reply(self, messages: Sequence[ChatMessage]) -> Reply:
        try:
            text = await run_live_reply(self.model, messages, timeout=self.timeout)
        except Exception as exc:
            reason = describe_failure(exc)
            if reason == "timeout":
                logger.warning("Model %s timed out after %ss; using scripted reply", self.model_name, self.timeout)
            elif reason == "quota":
                logger.warning("Model %s quota exceeded, check billing/credits; using scripted reply", self.model_name)
            elif reason == "invalid_api_key":
                logger.warning("Model %s rejected the API key; using scripted reply", self.model_name)
            else:
                logger.warning(
                    "Model %s call failed (%s: %s); using scripted reply",
                    self.model_name,
                    type(exc).__name__,
                    exc,
                )
            return Reply(resolve_reply(messages), ReplyMode.FALLBACK)
        logger.info("Model %s replied", self.model_name)
        return Reply(text, ReplyMode.LIVE)


def build_backend(settings: Settings) -> ReplyBackend:
    if settings.live_enabled:
        return LiveBackend(
            build_chat_model(settings),
            timeout=settings.request_timeout,
            model_name=settings.openai_model,
        )
    return ScriptedBackend()
