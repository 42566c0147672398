"""
Thin wrapper around the Gemini SDK (google-generativeai).
"""
from __future__ import annotations

import logging
from typing import Optional

import google.generativeai as genai

from domain.errors import ExternalAPIError
from settings import settings

logger = logging.getLogger(__name__)


class GeminiClient:
    def __init__(self, api_key: Optional[str], model_name: str = "gemini-1.5-flash", temperature: float = 0.7):
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self._model = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self):
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def generate(self, prompt: str) -> str:
        """Send a prompt and return the response text. All SDK failures become ExternalAPIError."""
        if not self.api_key:
            raise ExternalAPIError("Gemini API key is not configured")
        try:
            response = self._get_model().generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(temperature=self.temperature),
            )
            text = response.text
        except Exception as exc:
            logger.warning("Gemini request failed (model=%s): %s", self.model_name, exc)
            raise ExternalAPIError(f"Gemini API Error: {exc}") from exc
        if not text:
            raise ExternalAPIError("Gemini API Error: empty response")
        logger.debug("Gemini response received (model=%s, %d chars)", self.model_name, len(text))
        return text


_default_gemini_client: Optional[GeminiClient] = None


def get_default_gemini_client() -> GeminiClient:
    global _default_gemini_client
    if _default_gemini_client is None:
        _default_gemini_client = GeminiClient(api_key=settings.GEMINI_API_KEY, model_name=settings.GEMINI_MODEL)
    return _default_gemini_client
