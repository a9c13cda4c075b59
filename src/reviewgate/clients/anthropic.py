"""Anthropic Claude client."""

from typing import Any

from reviewgate.clients.base import ReviewClient
from reviewgate.clients.factory import register_client
from reviewgate.config import Settings
from reviewgate.models import ProviderCredentials, ProviderErrorKind, ProviderKind


class AnthropicClient(ReviewClient):
  """Anthropic Messages API client."""

  @property
  def kind(self) -> ProviderKind:
    return ProviderKind.ANTHROPIC

  @property
  def model(self) -> str:
    return self._credentials.model or self._settings.anthropic_model

  @property
  def max_tokens(self) -> int:
    return self._settings.anthropic_max_tokens

  def _build_client(self) -> Any:
    try:
      from anthropic import Anthropic
    except ImportError as e:
      raise ImportError(
        "anthropic not installed. Install with: pip install 'reviewgate[anthropic]'"
      ) from e
    return Anthropic(
      api_key=self._credentials.api_key,
      timeout=self._settings.request_timeout,
      max_retries=0,
    )

  def _complete(self, message: str) -> str:
    response = self._client.messages.create(
      model=self.model,
      max_tokens=self.max_tokens,
      temperature=self.temperature,
      messages=[{"role": "user", "content": message}],
    )
    return "".join(
      block.text for block in response.content if getattr(block, "type", None) == "text"
    )

  def classify_error(self, error: BaseException) -> ProviderErrorKind:
    try:
      import anthropic
    except ImportError:
      return super().classify_error(error)

    if isinstance(error, anthropic.APITimeoutError):
      return ProviderErrorKind.TIMEOUT
    if isinstance(error, anthropic.RateLimitError):
      return ProviderErrorKind.RATE_LIMITED
    return super().classify_error(error)


def _create_anthropic(credentials: ProviderCredentials, settings: Settings) -> ReviewClient:
  return AnthropicClient(credentials, settings)


register_client(ProviderKind.ANTHROPIC, _create_anthropic)
