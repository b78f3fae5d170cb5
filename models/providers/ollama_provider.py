from collections.abc import Sequence
from typing import Any, TYPE_CHECKING
import openai
from openai import AsyncOpenAI
from .base_model_provider import BaseModelProvider, ProviderCapabilities, ProviderResponse
from .exceptions import ProviderError, ProviderOverloadedError, ProviderRateLimitError
import logging

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion
    from config.settings import SystemConfig
    from debate_engine.models import DebateMessage

logger = logging.getLogger(__name__)


class OllamaProvider(BaseModelProvider):
    """Ollama model provider implementation.

    Local models answer in one shot; the provider does not advertise
    streaming, so the orchestrator always takes the one-shot path for it.
    """

    def __init__(
        self,
        system_config: "SystemConfig",
        model: str | None = None,
        max_tokens: int = 600,
        temperature: float = 0.7,
        client: AsyncOpenAI | None = None,
    ):
        super().__init__(system_config, model, max_tokens, temperature)
        self._client = client or AsyncOpenAI(
            base_url=f"{system_config.ollama.base_url}/v1",
            api_key="ollama",  # Ollama doesn't require real API key
            timeout=system_config.ollama.timeout,
        )

    @property
    def provider_name(self) -> str:
        return "ollama"

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(streaming=False, system_prompt=True, attachments=False)

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
        """Generate a response using Ollama."""
        model = model_override or self.model
        if not model:
            raise ProviderError(self.provider_name, "No model configured for Ollama")

        params: dict[str, Any] = {
            "model": model,
            "messages": self.build_chat_messages(prompt, history),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        # Add Ollama-specific parameters to extra_body
        ollama_config = self.system_config.ollama
        extra_body = {}
        if ollama_config.keep_alive is not None:
            extra_body["keep_alive"] = ollama_config.keep_alive
        if ollama_config.repeat_penalty is not None:
            extra_body["repeat_penalty"] = ollama_config.repeat_penalty

        if extra_body:
            params["extra_body"] = extra_body

        try:
            response: "ChatCompletion" = await self._client.chat.completions.create(**params)
        except openai.RateLimitError as e:
            raise ProviderRateLimitError(self.provider_name, str(e), status_code=429) from e
        except openai.APIStatusError as e:
            if e.status_code in (502, 503):
                raise ProviderOverloadedError(
                    self.provider_name, str(e), status_code=e.status_code
                ) from e
            raise ProviderError(self.provider_name, str(e), status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            logger.error(f"Ollama generation failed for {model}: {e}")
            raise ProviderError(self.provider_name, f"Cannot reach Ollama: {e}") from e

        content = response.choices[0].message.content or ""
        logger.debug(f"Generated {len(content)} chars from Ollama model {model}")
        return ProviderResponse(response=content.strip(), model_used=response.model or model)
