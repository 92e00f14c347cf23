"""
Gemini Provider — Enhanced Analysis Backend

Sends enhanced-analysis prompts to Google Gemini through the google.genai
SDK. The client is built on first use, so a missing GEMINI_API_KEY only
surfaces when a page is actually sent for a second opinion; the analyzer
logs that failure and keeps the local result.

Each call is bounded by DERIGO_LLM_TIMEOUT and retried with backoff on
rate limits, timeouts and 5xx responses.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from google import genai
from google.genai import types

from derigo.config import settings
from derigo.llm import LLMProvider

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 1.0

_RETRYABLE = (
    "429", "500", "503", "rate", "quota", "timeout",
    "connection", "unavailable", "overloaded",
)


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, asyncio.TimeoutError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _RETRYABLE)


class GeminiProvider(LLMProvider):
    """Google Gemini provider for enhanced analysis."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self._model = model or settings.GEMINI_MODEL
        self._timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        self._client: Optional[genai.Client] = None

    @property
    def model(self) -> str:
        return self._model

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _client_or_raise(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("GEMINI_API_KEY not set; enhanced analysis is unavailable")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        client = self._client_or_raise()
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
            response_mime_type="application/json" if json_mode else None,
        )

        attempt = 1
        while True:
            try:
                response = await asyncio.wait_for(
                    client.aio.models.generate_content(
                        model=self._model, contents=prompt, config=config,
                    ),
                    timeout=self._timeout,
                )
                return response.text or ""
            except Exception as e:
                if attempt >= MAX_ATTEMPTS or not _is_retryable(e):
                    raise
                logger.warning(
                    f"Gemini call failed, retrying ({attempt}/{MAX_ATTEMPTS - 1})",
                    extra={"error": str(e) or type(e).__name__, "error_type": type(e).__name__},
                )
                await asyncio.sleep(BACKOFF_BASE_SECONDS * 2 ** (attempt - 1))
                attempt += 1
