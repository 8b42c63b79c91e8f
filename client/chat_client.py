from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from client.retry import RetryPolicy
from dialogue.models import ChatMessage, ChatRequest, ChatResponse


logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to send message"


class ChatServiceError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatClient:
    """HTTP client for the chat endpoint, retrying transient failures."""

    def __init__(
        self,
        base_url: str,
        retry: Optional[RetryPolicy] = None,
        timeout: float = 40.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self.retry = retry or RetryPolicy()

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ChatClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def send(self, messages: Sequence[ChatMessage]) -> str:
        payload = ChatRequest(messages=list(messages)).model_dump()
        return self.retry.call(lambda: self._post_chat(payload))

    def status(self) -> Dict[str, Any]:
        response = self._http.get("/api/status")
        self._raise_for_status(response)
        return response.json()

    def _post_chat(self, payload: Dict[str, Any]) -> str:
        response = self._http.post("/api/chat", json=payload)
        self._raise_for_status(response)
        try:
            return ChatResponse.model_validate(response.json()).reply
        except (ValueError, ValidationError) as exc:
            raise ChatServiceError(f"Malformed chat response: {exc}", response.status_code) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = None
        detail = body.get("detail") if isinstance(body, dict) else None
        message = detail if isinstance(detail, str) and detail else DEFAULT_ERROR_MESSAGE
        logger.warning("Chat service answered %s: %s", response.status_code, message)
        raise ChatServiceError(message, response.status_code)


class ChatSession:
    """Client-held transcript. The server keeps no conversation state."""

    def __init__(self, client: ChatClient) -> None:
        self.client = client
        self.messages: List[ChatMessage] = []

    def say(self, text: str) -> str:
        turn = ChatMessage(role="user", content=text)
        reply = self.client.send([*self.messages, turn])
        self.messages = [*self.messages, turn, ChatMessage(role="assistant", content=reply)]
        return reply

    def reset(self) -> None:
        self.messages = []
