"""Azure OpenAI client."""

from typing import Any

from reviewgate.clients.base import ReviewClient
from reviewgate.clients.factory import register_client
from reviewgate.config import Settings
from reviewgate.models import ProviderCredentials, ProviderErrorKind, ProviderKind


class AzureOpenAIClient(ReviewClient):
  """Azure OpenAI chat completions client. The deployment name selects the model."""

  REQUIRED_FIELDS = ("endpoint", "deployment", "api_key")

  @property
  def kind(self) -> ProviderKind:
    return ProviderKind.AZURE_OPENAI

  @property
  def model(self) -> str:
    return self._credentials.deployment or ""

  def _build_client(self) -> Any:
    try:
      from openai import AzureOpenAI
    except ImportError as e:
      raise ImportError(
        "openai not installed. Install with: pip install 'reviewgate[azure]'"
      ) from e
    return AzureOpenAI(
      azure_endpoint=self._credentials.endpoint,
      api_key=self._credentials.api_key,
      api_version=self._settings.azure_api_version,
      azure_deployment=self._credentials.deployment,
      timeout=self._settings.request_timeout,
      max_retries=0,
    )

  def _complete(self, message: str) -> str:
    response = self._client.chat.completions.create(
      model=self.model,
      messages=[{"role": "user", "content": message}],
      temperature=self.temperature,
      max_tokens=self.max_tokens,
    )
    if not response.choices:
      return ""
    return response.choices[0].message.content or ""

  def classify_error(self, error: BaseException) -> ProviderErrorKind:
    try:
      import openai
    except ImportError:
      return super().classify_error(error)

    if isinstance(error, openai.APITimeoutError):
      return ProviderErrorKind.TIMEOUT
    if isinstance(error, openai.RateLimitError):
      return ProviderErrorKind.RATE_LIMITED
    return super().classify_error(error)


def _create_azure_openai(credentials: ProviderCredentials, settings: Settings) -> ReviewClient:
  return AzureOpenAIClient(credentials, settings)


register_client(ProviderKind.AZURE_OPENAI, _create_azure_openai)
