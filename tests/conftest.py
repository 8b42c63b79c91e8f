from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage, BaseMessage

from app.main import create_app
from app.rate_limit import RateLimiter
from config.settings import Settings
from dialogue.backend import ScriptedBackend
from dialogue.models import ChatMessage, Reply


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingModel:
    def __init__(self, error: Exception) -> None:
        self.error = error

    async def ainvoke(self, messages: List[BaseMessage]):
        raise self.error


class SlowModel:
    async def ainvoke(self, messages: List[BaseMessage]):
        await asyncio.sleep(10)
        return AIMessage(content="too late")


class RecordingBackend(ScriptedBackend):
    """Scripted backend that remembers every transcript it was asked about."""

    name = "recording"

    def __init__(self) -> None:
        self.calls: List[Sequence[ChatMessage]] = []

    async def reply(self, messages: Sequence[ChatMessage]) -> Reply:
        self.calls.append(messages)
        return await super().reply(messages)


def transcript(user_turns: int, with_assistant: bool = True) -> List[ChatMessage]:
    messages: List[ChatMessage] = []
    for i in range(user_turns):
        messages.append(ChatMessage(role="user", content=f"message {i + 1}"))
        if with_assistant:
            messages.append(ChatMessage(role="assistant", content=f"reply {i + 1}"))
    return messages


def as_payload(messages: Sequence[ChatMessage]) -> dict:
    return {"messages": [m.model_dump() for m in messages]}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(app_env="development")


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def make_client(settings: Settings, backend: RecordingBackend, clock: FakeClock) -> Callable[..., TestClient]:
    def factory(
        settings: Settings = settings,
        backend=backend,
        limiter: Optional[RateLimiter] = None,
    ) -> TestClient:
        limiter = limiter or RateLimiter(limit=100, window_seconds=60, clock=clock)
        return TestClient(create_app(settings=settings, backend=backend, limiter=limiter))

    return factory


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
