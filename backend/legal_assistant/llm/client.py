"""Generation gateway with an OpenAI-compatible client.

Security: the API key is read from settings (environment) only, never hardcoded.
Any timeout, transport error or empty completion is resolved by the
deterministic fallback synthesizer; callers never see a generation failure.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Protocol

from openai import AsyncOpenAI

from backend.legal_assistant.config import Settings
from backend.legal_assistant.errors import UpstreamUnavailableError
from backend.legal_assistant.llm.fallback import FallbackSynthesizer
from backend.legal_assistant.llm.prompts import compose_system_message
from backend.legal_assistant.models.common import SynthesisSource
from backend.legal_assistant.models.documents import LegalDocument
from backend.legal_assistant.models.sessions import MAX_MESSAGE_CHARS, Message
from backend.legal_assistant.utils.metrics import PrometheusChatMetrics

logger = logging.getLogger(__name__)

# Leaves room for the truncation marker within a stored message
MAX_ANSWER_CHARS = MAX_MESSAGE_CHARS - 100


@dataclass(frozen=True)
class Completion:
    """Raw output of one generation call."""

    text: str
    tokens: int | None = None
    model: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    """Answer text for a turn and where it came from."""

    text: str
    source: SynthesisSource
    tokens: int | None = None
    model: str | None = None


class GenerationClient(Protocol):
    """Protocol for generation service clients."""

    async def complete(self, *, messages: list[dict[str, str]]) -> Completion:
        """Generate a reply for a chat-formatted message list.

        Args:
            messages: System message followed by the conversation window

        Returns:
            Completion with the generated text

        Raises:
            Any exception on transport or service failure
        """
        ...


class UnconfiguredClient:
    """Client used when no API key is configured; every call is unavailable."""

    async def complete(self, *, messages: list[dict[str, str]]) -> Completion:
        raise UpstreamUnavailableError("no generation API key configured")


class OpenAIGenerationClient:
    """Client for OpenAI-compatible chat completion endpoints (e.g. DeepSeek)."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        model: str = "deepseek-chat",
        temperature: float = 0.7,
        max_tokens: int = 1500,
    ):
        """Initialize client.

        Args:
            api_key: API key (read from environment)
            base_url: Endpoint root; None uses the OpenAI default
            model: Model name
            temperature: Sampling temperature
            max_tokens: Completion token cap
        """
        # Retries are off: the gateway deadline bounds the whole call
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, *, messages: list[dict[str, str]]) -> Completion:
        """Generate a reply using the chat completions API."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,  # type: ignore[arg-type]
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        if not response.choices:
            return Completion(text="", model=response.model)

        text = response.choices[0].message.content or ""
        tokens = response.usage.total_tokens if response.usage else None
        return Completion(text=text, tokens=tokens, model=response.model or self.model)


class GenerationGateway:
    """Single entry point for answer generation with one timeout policy."""

    def __init__(
        self,
        client: GenerationClient,
        fallback: FallbackSynthesizer,
        *,
        timeout_s: float = 15.0,
        language: str = "ar",
        metrics: PrometheusChatMetrics | None = None,
    ) -> None:
        self._client = client
        self._fallback = fallback
        self._timeout_s = timeout_s
        self._language = language
        self._metrics = metrics or PrometheusChatMetrics()

    def build_messages(
        self, system_prompt: str, context: str, history: list[Message]
    ) -> list[dict[str, str]]:
        """System message followed by ``history`` in order."""
        messages = [
            {
                "role": "system",
                "content": compose_system_message(system_prompt, context, self._language),
            }
        ]
        messages.extend({"role": m.role.value, "content": m.content} for m in history)
        return messages

    async def generate(
        self,
        *,
        system_prompt: str,
        context: str,
        history: list[Message],
        documents: list[LegalDocument],
        article_number: str | None = None,
        deadline_s: float | None = None,
    ) -> GenerationResult:
        """Generate an answer, falling back to deterministic synthesis.

        Args:
            system_prompt: Base (and category) instructions
            context: Prompt text built from ``documents``
            history: Conversation window, oldest first (current question last)
            documents: Retrieval results for this turn, used by the fallback
            article_number: Article the user asked for, if any
            deadline_s: Overrides the configured timeout for this call

        Returns:
            GenerationResult with non-empty text
        """
        messages = self.build_messages(system_prompt, context, history)
        timeout = deadline_s if deadline_s is not None else self._timeout_s
        start = time.perf_counter()

        try:
            completion = await asyncio.wait_for(
                self._client.complete(messages=messages), timeout=timeout
            )
        except asyncio.TimeoutError:
            outcome = "timeout"
            logger.error(f"[generation] call exceeded deadline of {timeout}s")
        except Exception as e:
            outcome = "error"
            logger.error(f"[generation] call failed: {type(e).__name__}: {e}")
        else:
            text = completion.text.strip()
            if text:
                latency_ms = (time.perf_counter() - start) * 1000
                self._metrics.record_generation("success", latency_ms)

                if len(text) > MAX_ANSWER_CHARS:
                    logger.warning(
                        f"[generation] response unexpectedly large ({len(text)} chars), "
                        f"truncating to {MAX_ANSWER_CHARS}"
                    )
                    text = text[:MAX_ANSWER_CHARS] + "\n\n[...]"

                return GenerationResult(
                    text=text,
                    source=SynthesisSource.llm,
                    tokens=completion.tokens,
                    model=completion.model,
                )
            outcome = "empty"
            logger.warning("[generation] service returned an empty response")

        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_generation(outcome, latency_ms)
        logger.warning("[generation] falling back to deterministic synthesis")

        text = self._fallback.synthesize(documents, article_number)
        if len(text) > MAX_ANSWER_CHARS:
            text = text[:MAX_ANSWER_CHARS] + "\n\n[...]"
        return GenerationResult(text=text, source=SynthesisSource.fallback)


def get_generation_client(settings: Settings) -> GenerationClient:
    """Factory selecting the client based on config.

    Returns:
        OpenAIGenerationClient if an API key is configured, UnconfiguredClient otherwise
    """
    api_key = settings.generation_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using generation endpoint {settings.generation_base_url}")
        return OpenAIGenerationClient(
            api_key=api_key.get_secret_value(),
            base_url=settings.generation_base_url,
            model=settings.generation_model,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
        )

    logger.warning("No generation API key configured, answers use deterministic fallback")
    return UnconfiguredClient()


def create_generation_gateway(settings: Settings) -> GenerationGateway:
    """Build the gateway from settings."""
    return GenerationGateway(
        get_generation_client(settings),
        FallbackSynthesizer(settings.response_language),
        timeout_s=settings.generation_timeout_s,
        language=settings.response_language,
    )
