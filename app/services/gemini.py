"""
Gemini REST client.

Used endpoint:
- POST {base}/models/{model}:generateContent
  -> {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
"""

import logging
from typing import Any, Optional

import requests

from app.config import settings
from app.exceptions import ConfigError, UpstreamError

logger = logging.getLogger(__name__)


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_BASE).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def generate_text(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        top_p: float = 0.95,
        top_k: int = 40,
        max_output_tokens: int = 1024,
        response_mime_type: Optional[str] = None,
    ) -> str:
        """Send one prompt and return the text of the first candidate."""
        if not self.api_key:
            raise ConfigError("GEMINI_API_KEY is not configured")

        generation_config: dict[str, Any] = {
            "temperature": temperature,
            "topP": top_p,
            "topK": top_k,
            "maxOutputTokens": max_output_tokens,
        }
        if response_mime_type:
            generation_config["responseMimeType"] = response_mime_type

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        url = f"{self.base_url}/models/{self.model}:generateContent"

        try:
            res = requests.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise UpstreamError(f"Gemini request failed: {e}") from e

        try:
            data = res.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error"):
            message = data["error"].get("message", "unknown error")
            raise UpstreamError(f"Gemini API error: {message}")
        if not res.ok:
            raise UpstreamError(f"Gemini API error: {res.status_code} {res.text[:500]}")
        if not isinstance(data, dict):
            raise UpstreamError("Gemini returned a non-JSON response")

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamError("No valid response from Gemini API")
        if not isinstance(text, str):
            raise UpstreamError("No valid response from Gemini API")
        return text
