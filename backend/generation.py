import asyncio
import logging
import os
from typing import TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_MODEL = "gemini-2.0-flash-001"


class GenerationError(RuntimeError):
    pass


class GenerationService:
    """Thin async wrapper over the Gemini text and structured-output APIs."""

    def __init__(self, api_key: str | None = None, client=None):
        self._api_key = api_key
        self._client = client

    def _get_client(self):
        if self._client is None:
            api_key = self._api_key or os.getenv("GEMINI_API_KEY")
            if not api_key:
                raise GenerationError("GEMINI_API_KEY not configured")

            from google import genai

            self._client = genai.Client(api_key=api_key)
        return self._client

    async def generate_text(self, prompt: str, *, model: str = DEFAULT_MODEL, system: str | None = None) -> str:
        from google.genai import types

        client = self._get_client()
        config = types.GenerateContentConfig(system_instruction=system) if system else None
        response = await asyncio.to_thread(
            client.models.generate_content,
            model=model,
            contents=prompt,
            config=config,
        )
        text = (response.text or "").strip()
        logger.debug("[GEN] %s returned %d chars", model, len(text))
        return text

    async def generate_object(
        self,
        prompt: str,
        schema: type[T],
        *,
        model: str = DEFAULT_MODEL,
        system: str | None = None,
    ) -> T:
        from google.genai import types

        client = self._get_client()
        config = types.GenerateContentConfig(
            system_instruction=system,
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = await asyncio.to_thread(
            client.models.generate_content,
            model=model,
            contents=prompt,
            config=config,
        )
        parsed = response.parsed
        if isinstance(parsed, schema):
            return parsed
        if not response.text:
            raise GenerationError(f"{model} returned an empty structured response")
        return schema.model_validate_json(response.text)


_default_service: GenerationService | None = None


def get_generator() -> GenerationService:
    global _default_service
    if _default_service is None:
        _default_service = GenerationService()
    return _default_service
