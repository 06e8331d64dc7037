"""
Generative-AI client

The AI backend is injected into services as a TextModel: anything with an
async ``generate(prompt)`` that returns a response object. ``complete()``
wraps a call with the retry policy and text extraction shared by every
AI workflow.
"""
from typing import Any, Optional, Protocol

from anthropic import AsyncAnthropic

from sensai.config import get_settings
from sensai.errors import AIUnavailableError
from sensai.services.ai_text import extract_text
from sensai.utils.logger import log
from sensai.utils.retry import with_retry

settings = get_settings()


class TextModel(Protocol):
    async def generate(self, prompt: str) -> Any:
        ...


class AnthropicTextModel:
    """TextModel backed by Claude"""

    def __init__(self, api_key: str, model: str, max_tokens: int = 4000):
        self.client = AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    async def generate(self, prompt: str) -> Any:
        return await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}]
        )


def get_text_model() -> Optional[TextModel]:
    """Build the configured TextModel, or None when AI is disabled."""
    if not settings.enable_llm or not settings.anthropic_api_key:
        log.info("AI generation disabled (no API key or feature disabled)")
        return None

    try:
        model = AnthropicTextModel(
            api_key=settings.anthropic_api_key,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
        )
        log.info(f"AI client initialized with {settings.llm_model}")
        return model
    except Exception as e:
        log.error(f"Failed to initialize Anthropic client: {str(e)}")
        return None


async def complete(
    model: Optional[TextModel],
    prompt: str,
    label: str = "ai_completion",
    max_attempts: Optional[int] = None,
    initial_delay: Optional[float] = None,
    max_jitter: Optional[float] = None,
) -> str:
    """
    Send a prompt through the retry policy and return the cleaned text.

    Raises:
        AIUnavailableError: no model configured, or the call failed for good
        AIResponseMalformedError: the model returned nothing
    """
    if model is None:
        raise AIUnavailableError("AI model is not configured")

    try:
        response = await with_retry(
            lambda: model.generate(prompt),
            max_attempts=max_attempts or settings.ai_max_attempts,
            initial_delay=settings.ai_initial_delay_seconds if initial_delay is None else initial_delay,
            max_jitter=settings.ai_max_jitter_seconds if max_jitter is None else max_jitter,
            label=label,
        )
    except Exception as e:
        raise AIUnavailableError(f"AI request failed: {e}") from e

    return extract_text(response)
