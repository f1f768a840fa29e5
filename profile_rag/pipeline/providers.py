from typing import Dict, List, Optional, Protocol

from google import genai
from google.genai import types
from groq import AsyncGroq

from profile_rag.config import Settings
from profile_rag.exceptions import ConfigurationError
from profile_rag.logger import get_logger

log = get_logger()

ChatMessage = Dict[str, str]  # {"role": ..., "content": ...}


class GenerationProvider(Protocol):
    model: str

    async def complete(
        self,
        messages: List[ChatMessage],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> Optional[str]:
        """Return the generated text, or None/"" when the model produced nothing."""
        ...

    async def close(self) -> None: ...


class GroqGenerationProvider:
    """Groq-hosted chat completions (OpenAI-style messages)."""

    def __init__(self, model: str, api_key: str | None = None, client: AsyncGroq | None = None):
        self.model = model
        self._client = client or AsyncGroq(api_key=api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GroqGenerationProvider":
        if not settings.groq_api_key:
            raise ConfigurationError("Groq backend needs GROQ_API_KEY")
        return cls(model=settings.groq_model, api_key=settings.groq_api_key)

    async def complete(self, messages, model, temperature, max_tokens):
        completion = await self._client.chat.completions.create(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not completion.choices:
            return None
        return completion.choices[0].message.content

    async def close(self) -> None:
        await self._client.close()


class GeminiGenerationProvider:
    """
    Gemini via google-genai. Gemini has no chat roles in a single call,
    so system messages become the system_instruction and the rest is joined.
    """

    def __init__(self, model: str, client: genai.Client | None = None):
        self.model = model
        self._client = client or genai.Client()  # uses GEMINI_API_KEY from env

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiGenerationProvider":
        try:
            return cls(model=settings.gemini_model)
        except ValueError as exc:
            raise ConfigurationError(f"Gemini backend misconfigured: {exc}") from exc

    async def complete(self, messages, model, temperature, max_tokens):
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        prompt = "\n\n".join(m["content"] for m in messages if m["role"] != "system")

        resp = await self._client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system or None,
                temperature=temperature,
                max_output_tokens=max_tokens,
            ),
        )
        return resp.text

    async def close(self) -> None:
        return None


def build_generation_provider(settings: Settings) -> GenerationProvider:
    backend = (settings.generation_backend or "").lower()

    if backend == "groq":
        log.info("Using Groq generation model: %s", settings.groq_model)
        return GroqGenerationProvider.from_settings(settings)

    if backend == "gemini":
        log.info("Using Gemini generation model: %s", settings.gemini_model)
        return GeminiGenerationProvider.from_settings(settings)

    raise ConfigurationError(
        f"Unknown generation_backend: {settings.generation_backend!r}. Must be 'groq' or 'gemini'."
    )
