"""Pytest configuration and shared fixtures.

Provides scripted stand-ins for model providers so the orchestrator can be
driven end to end without network access, plus zero-delay configuration so
the turn loop runs as fast as the event loop allows.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Any

import pytest

from config.settings import DelayConfig, StreamingConfig, SystemConfig
from debate_engine.models import DebateMessage, Participant
from debate_engine.orchestrator import DebateOrchestrator
from models.manager import ModelManager
from models.providers.base_model_provider import (
    BaseModelProvider,
    ProviderCapabilities,
    ProviderResponse,
)


class ScriptedProvider(BaseModelProvider):
    """Provider that answers from a script and records every call.

    ``stream_errors`` and ``send_errors`` are consumed one per call; a
    ``None`` entry means that call succeeds.
    """

    def __init__(
        self,
        name: str = "ollama",
        *,
        streaming: bool = False,
        system_prompt: bool = True,
        replies: Sequence[str] = (),
        chunks: Sequence[str] | None = None,
        stream_errors: Sequence[BaseException | None] = (),
        send_errors: Sequence[BaseException | None] = (),
    ):
        super().__init__(SystemConfig(), model="fake-model")
        self._name = name
        self._capabilities = ProviderCapabilities(streaming=streaming, system_prompt=system_prompt)
        self.replies = list(replies)
        self.chunks = list(chunks) if chunks is not None else None
        self.stream_errors = list(stream_errors)
        self.send_errors = list(send_errors)
        self.prompts: list[str] = []
        self.histories: list[list[DebateMessage]] = []
        self.send_calls = 0
        self.stream_calls = 0

    @property
    def provider_name(self) -> str:
        return self._name

    def get_capabilities(self) -> ProviderCapabilities:
        return self._capabilities

    async def send_message(
        self,
        prompt: str,
        history: Sequence[DebateMessage],
        *,
        is_debate_mode: bool = True,
        resumption_context: dict[str, Any] | None = None,
        attachments: Sequence[Any] | None = None,
        model_override: str | None = None,
    ) -> ProviderResponse:
        self.send_calls += 1
        self.prompts.append(prompt)
        self.histories.append(list(history))
        if self.send_errors:
            error = self.send_errors.pop(0)
            if error is not None:
                raise error
        reply = self.replies.pop(0) if self.replies else f"{self._name} reply {self.send_calls}"
        return ProviderResponse(response=reply, model_used="fake-model")

    async def stream_message(
        self,
        prompt: str,
        history: Sequence[DebateMessage],
        *,
        is_debate_mode: bool = True,
        resumption_context: dict[str, Any] | None = None,
        attachments: Sequence[Any] | None = None,
        model_override: str | None = None,
        cancel_event: asyncio.Event | None = None,
        on_event: Any = None,
    ) -> AsyncIterator[str]:
        self.stream_calls += 1
        self.prompts.append(prompt)
        self.histories.append(list(history))
        if self.stream_errors:
            error = self.stream_errors.pop(0)
            if error is not None:
                raise error
        for chunk in self.chunks or ["Streamed ", f"point {self.stream_calls}."]:
            yield chunk


@pytest.fixture
def sample_debate_topic() -> str:
    return "Should artificial intelligence be regulated by governments?"


@pytest.fixture
def two_participants() -> list[Participant]:
    return [
        Participant(id="model_a", name="Alpha", provider="ollama", model="llama3.2:3b"),
        Participant(id="model_b", name="Beta", provider="ollama", model="qwen2.5:3b"),
    ]


@pytest.fixture
def zero_delays() -> DelayConfig:
    return DelayConfig(
        ai_response=0,
        post_stream_pause=0,
        voting_continuation=0,
        rate_limit_recovery=0,
        error_recovery=0,
    )


@pytest.fixture
def instant_streaming() -> StreamingConfig:
    return StreamingConfig(enabled=True, speed="instant")


@pytest.fixture
def make_orchestrator(zero_delays: DelayConfig, instant_streaming: StreamingConfig):
    """Build an orchestrator whose participants use the given providers."""

    def factory(
        providers: dict[str, BaseModelProvider],
        session_store: Any = None,
        delays: DelayConfig | None = None,
    ) -> DebateOrchestrator:
        manager = ModelManager(SystemConfig())
        for participant_id, provider in providers.items():
            manager.register_provider(participant_id, provider)
        return DebateOrchestrator(
            manager,
            session_store,
            streaming=instant_streaming,
            delays=delays or zero_delays,
        )

    return factory


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
