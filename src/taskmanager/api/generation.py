"""
Text generation backed by the Google Gemini API.

The AI proxy only needs one capability, "turn a prompt into text with this
key", so the vendor SDK is wrapped behind TextGenerator and its errors are
translated into two exception types the router knows how to render.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .settings import get_settings

logger = logging.getLogger(__name__)

_INVALID_KEY_MARKERS = ("API_KEY_INVALID", "API key not valid")


# PUBLIC_INTERFACE
class GenerationError(Exception):
    """Upstream generation failed. `message` is the vendor's message, verbatim."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# PUBLIC_INTERFACE
class InvalidApiKeyError(GenerationError):
    """The vendor rejected the caller-supplied API key."""


# PUBLIC_INTERFACE
def classify_vendor_error(exc: Exception) -> GenerationError:
    """
    Map an exception raised by the vendor SDK onto GenerationError /
    InvalidApiKeyError.
    """
    text = str(exc)
    code: Optional[int] = None
    message = text
    if isinstance(exc, genai_errors.APIError):
        code = exc.code
        message = exc.message or text

    if code in (401, 403) or any(marker in text for marker in _INVALID_KEY_MARKERS):
        return InvalidApiKeyError(message, status_code=code)
    return GenerationError(message, status_code=code)


# PUBLIC_INTERFACE
class TextGenerator(ABC):
    """Contract for anything that can answer a prompt on behalf of the AI proxy."""

    @abstractmethod
    async def generate(self, prompt: str, api_key: str, max_tokens: int) -> str:
        """Return generated text, or raise GenerationError / InvalidApiKeyError."""


class GeminiGenerator(TextGenerator):
    """TextGenerator calling Gemini through the google-genai SDK, one client per request key."""

    def __init__(self, model: str, temperature: float) -> None:
        self._model = model
        self._temperature = temperature

    async def generate(self, prompt: str, api_key: str, max_tokens: int) -> str:
        logger.info("Calling Gemini model=%s max_tokens=%d", self._model, max_tokens)
        try:
            client = genai.Client(api_key=api_key)
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    max_output_tokens=max_tokens,
                    temperature=self._temperature,
                ),
            )
        except Exception as exc:
            raise classify_vendor_error(exc) from exc

        logger.info("Gemini response received")
        return response.text or ""


# PUBLIC_INTERFACE
def get_generator() -> TextGenerator:
    """FastAPI dependency returning the configured TextGenerator."""
    settings = get_settings()
    return GeminiGenerator(model=settings.gemini_model, temperature=settings.ai_temperature)
