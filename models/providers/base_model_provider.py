from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from config.settings import SystemConfig
    from debate_engine.models import DebateMessage
    from debate_engine.types import ProviderEventCallback


@dataclass(frozen=True)
class ProviderCapabilities:
    """What a provider can do for a debate turn."""

    streaming: bool = False
    system_prompt: bool = True
    attachments: bool = False


@dataclass(frozen=True)
class ProviderResponse:
    """Result of a one-shot generation call."""

    response: str
    model_used: str | None = None


class BaseModelProvider(ABC):
    """Abstract base class for model providers.

    A provider instance is bound to one debate participant by the
    ``ModelManager``; the orchestrator talks to it only through this
    interface.
    """

    def __init__(
        self,
        system_config: "SystemConfig",
        model: str | None = None,
        max_tokens: int = 600,
        temperature: float = 0.7,
    ):
        self.system_config = system_config
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.system_instruction: str | None = None

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        pass

    @abstractmethod
    def get_capabilities(self) -> ProviderCapabilities:
        """Describe what this provider supports."""
        pass

    @abstractmethod
    async def send_message(
        self,
        prompt: str,
        history: Sequence["DebateMessage"],
        *,
        is_debate_mode: bool = True,
        resumption_context: dict[str, Any] | None = None,
        attachments: Sequence[Any] | None = None,
        model_override: str | None = None,
    ) -> ProviderResponse:
        """Generate a complete response in a single call."""
        pass

    def stream_message(
        self,
        prompt: str,
        history: Sequence["DebateMessage"],
        *,
        is_debate_mode: bool = True,
        resumption_context: dict[str, Any] | None = None,
        attachments: Sequence[Any] | None = None,
        model_override: str | None = None,
        cancel_event: asyncio.Event | None = None,
        on_event: "ProviderEventCallback | None" = None,
    ) -> AsyncIterator[str]:
        """Yield response text incrementally.

        Providers that report ``streaming=True`` must override this. Non-text
        payloads (inline images, tool calls) are reported through
        ``on_event`` rather than yielded.
        """
        raise NotImplementedError(f"{self.provider_name} does not implement streaming")

    def set_system_instruction(self, instruction: str) -> None:
        """Install the per-session role brief sent as the system message."""
        self.system_instruction = instruction

    def build_chat_messages(
        self, prompt: str, history: Sequence["DebateMessage"]
    ) -> list[dict[str, str]]:
        """Translate the debate transcript into chat-completion messages."""
        messages: list[dict[str, str]] = []
        if self.system_instruction:
            messages.append({"role": "system", "content": self.system_instruction})

        for msg in history[-6:]:  # Last 6 messages for context
            if not msg.content:
                continue
            messages.append({"role": "user", "content": f"{msg.sender}: {msg.content}"})

        messages.append({"role": "user", "content": prompt})
        return messages
