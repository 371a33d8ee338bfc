"""
Gemini LLM client used for theme discovery, batch classification and chat.
"""
from __future__ import annotations

from typing import Any, Dict

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from config.settings import settings
from utils.exceptions import RateLimited
from utils.logger import get_logger

logger = get_logger(__name__)

# Substrings that identify a rate-limit failure in an error message
RATE_LIMIT_MARKERS = ("429", "rate limit", "rate_limit_error", "quota", "resourceexhausted")


class LLMClient:
    """Wrapper around Gemini text generation."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        generation_config: Dict[str, Any] | None = None,
    ):
        self.api_key = api_key or settings.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is not set; cannot initialize LLM client.")

        genai.configure(api_key=self.api_key)

        self.model_name = model or settings.GEMINI_MODEL
        self.generation_config = generation_config or {
            "top_p": 0.9,
            "top_k": 40,
        }
        self.model = genai.GenerativeModel(model_name=self.model_name)

    def generate(
        self,
        prompt: str,
        max_output_tokens: int | None = None,
        temperature: float = 0.2,
    ) -> str:
        """
        Generate raw text from the Gemini model.

        Raises:
            RateLimited: when Gemini reports the request quota is exhausted
        """
        config = dict(self.generation_config, temperature=temperature)
        if max_output_tokens:
            config["max_output_tokens"] = max_output_tokens

        try:
            response = self.model.generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(**config),
            )
        except google_exceptions.ResourceExhausted as exc:
            raise RateLimited(f"429 rate limit: {exc}") from exc
        return getattr(response, "text", "") or ""


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return True if the exception signals a rate-limit rejection."""
    if isinstance(exc, (RateLimited, google_exceptions.ResourceExhausted)):
        return True
    message = f"{type(exc).__name__} {exc}".lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def create_llm_client() -> LLMClient | None:
    """
    Build a client from settings, or None when no API key is configured.
    """
    if not settings.is_llm_configured():
        logger.warning("GEMINI_API_KEY not set, theme classification will use keyword fallback")
        return None
    return LLMClient()
