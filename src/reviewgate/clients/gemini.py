"""Google Gemini client over the Generative Language REST API.

Uses httpx directly so every provider record carries its own key; the
google-generativeai SDK only supports a process-wide key.
"""

from typing import Any

import httpx

from reviewgate.clients.base import ReviewClient
from reviewgate.clients.factory import register_client
from reviewgate.config import Settings
from reviewgate.models import ProviderCredentials, ProviderErrorKind, ProviderKind


class GeminiError(Exception):
  """Gemini returned a response without usable text."""


class GeminiClient(ReviewClient):
  """Google Gemini LLM client."""

  DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"

  @property
  def kind(self) -> ProviderKind:
    return ProviderKind.GEMINI

  @property
  def model(self) -> str:
    return self._credentials.model or self._settings.gemini_model

  @property
  def base_url(self) -> str:
    return (self._credentials.endpoint or self.DEFAULT_ENDPOINT).rstrip("/")

  def _build_client(self) -> Any:
    return httpx.Client(
      base_url=self.base_url,
      headers={"x-goog-api-key": self._credentials.api_key},
      timeout=self._settings.request_timeout,
    )

  def _complete(self, message: str) -> str:
    response = self._client.post(
      f"/models/{self.model}:generateContent",
      json={
        "contents": [{"role": "user", "parts": [{"text": message}]}],
        "generationConfig": {
          "temperature": self.temperature,
          "maxOutputTokens": self.max_tokens,
        },
      },
    )
    response.raise_for_status()
    return self._parse_response(response.json())

  def _parse_response(self, data: dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
      reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
      raise GeminiError(f"Gemini returned no candidates ({reason})")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts)

  def classify_error(self, error: BaseException) -> ProviderErrorKind:
    if isinstance(error, httpx.TimeoutException):
      return ProviderErrorKind.TIMEOUT
    if isinstance(error, httpx.HTTPStatusError):
      status = error.response.status_code
      if status == 429:
        return ProviderErrorKind.RATE_LIMITED
      if status == 504:
        return ProviderErrorKind.TIMEOUT
    return super().classify_error(error)


def _create_gemini(credentials: ProviderCredentials, settings: Settings) -> ReviewClient:
  return GeminiClient(credentials, settings)


register_client(ProviderKind.GEMINI, _create_gemini)
