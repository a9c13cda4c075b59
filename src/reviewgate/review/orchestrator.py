"""Core review orchestration."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Mapping

from rich.console import Console

from reviewgate.clients import ReviewClient, create_client
from reviewgate.clients.factory import ClientFactory
from reviewgate.config import Settings
from reviewgate.context import build_context
from reviewgate.errors import (
  ClientInitializationError,
  ConfigurationError,
  NotFoundError,
  PasswordRequiredError,
  RateLimitedError,
  ReviewFailedError,
  ReviewGateError,
  ReviewTimeoutError,
  UnauthorizedError,
  ValidationError,
  VaultError,
)
from reviewgate.models import (
  CodeFile,
  Prompt,
  ProviderErrorKind,
  ReviewedFile,
  ReviewResult,
)
from reviewgate.prompts import PromptLookup
from reviewgate.registry import ProviderService
from reviewgate.schemas import ReviewRequest, validate
from reviewgate.storage import ProviderRecord

logger = logging.getLogger(__name__)
_console = Console(stderr=True)


class ReviewOrchestrator:
  """Resolves provider and prompt, checks the password and runs the review.

  Each ``execute`` call is independent; the only shared state is the
  provider registry.
  """

  def __init__(
    self,
    providers: ProviderService,
    prompts: PromptLookup,
    settings: Settings | None = None,
    client_factory: ClientFactory = create_client,
  ):
    self.providers = providers
    self.prompts = prompts
    self.settings = settings or Settings()
    self._client_factory = client_factory

  def execute(self, request: ReviewRequest | Mapping[str, Any]) -> ReviewResult:
    """Run a review.

    Raises:
      ValidationError: Malformed request.
      NotFoundError: Unknown provider or prompt id.
      ConfigurationError: No active provider, no default prompt, or an
        unreadable stored key.
      PasswordRequiredError / UnauthorizedError: Password gate failed.
      ClientInitializationError: The provider client could not be built.
      ReviewTimeoutError / RateLimitedError / ReviewFailedError: The
        provider call failed.
    """
    started = time.perf_counter()
    request = validate(ReviewRequest, request)
    files = request.code_files()
    if len(files) > self.settings.max_files:
      raise ValidationError(f"At most {self.settings.max_files} files can be reviewed at once")

    logger.info(
      "Review requested: files=%d provider=%s prompt=%s",
      len(files), request.provider_id or "<active>", request.prompt_id or "<default>",
    )

    record = self._resolve_provider(request.provider_id)
    self._check_password(record, request.password)
    prompt = self._resolve_prompt(request.prompt_id)
    client = self._build_client(record)

    logger.info(
      "Starting review: files=%d provider=%s kind=%s prompt=%s",
      len(files), record.name, record.kind, prompt.id,
    )
    try:
      reviewed = self._run(client, files, prompt.content)
    finally:
      client.close()

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
      "Review completed: files=%d kind=%s in %dms", len(reviewed), record.kind, elapsed_ms
    )
    return ReviewResult(
      reviewed_files=reviewed,
      provider_kind=record.provider_kind,
      provider_name=record.name,
      provider_id=record.id,
      prompt_id=prompt.id,
      prompt_name=prompt.name,
      metadata={"duration_ms": elapsed_ms},
    )

  def _resolve_provider(self, provider_id: str | None) -> ProviderRecord:
    record = self.providers.find_record(provider_id)
    if record is not None:
      return record
    if provider_id is None:
      raise ConfigurationError(
        "No AI provider is configured. Register and activate a provider first.",
        code="AI_PROVIDER_NOT_CONFIGURED",
      )
    raise NotFoundError("AI provider not found", code="AI_PROVIDER_NOT_FOUND")

  def _check_password(self, record: ProviderRecord, password: str | None) -> None:
    if not record.is_password_gated:
      return
    if not password:
      raise PasswordRequiredError("A password is required to use this AI provider")
    if not self.providers.verify_password(record.id, password):
      logger.warning("Password verification failed for provider %s", record.id)
      raise UnauthorizedError("The password is incorrect", code="REVIEW_PASSWORD_INVALID")

  def _resolve_prompt(self, prompt_id: str | None) -> Prompt:
    if prompt_id:
      return self.prompts.get_by_id(prompt_id)

    prompt = self.prompts.get_default()
    if prompt is None:
      raise ConfigurationError(
        "No default prompt is set", code="REVIEW_DEFAULT_PROMPT_NOT_SET"
      )
    return prompt

  def _build_client(self, record: ProviderRecord) -> ReviewClient:
    kind = record.provider_kind
    try:
      credentials = self.providers.get_credentials(record)
    except VaultError as e:
      logger.error("Stored API key for provider %s is unreadable: %s", record.id, e.code)
      raise ConfigurationError(
        f"The stored API key for '{record.name}' cannot be decrypted",
        code="AI_PROVIDER_KEY_UNREADABLE",
      ) from None

    try:
      return self._client_factory(kind, credentials, self.settings)
    except Exception as e:
      logger.error("Failed to create %s client: %s", kind.value, type(e).__name__)
      raise ClientInitializationError(
        f"Failed to initialize the AI client: check the {kind.value} configuration"
      ) from e

  def _run(self, client: ReviewClient, files: list[CodeFile], prompt: str) -> list[ReviewedFile]:
    try:
      return client.review(files, prompt)
    except ReviewGateError:
      raise
    except Exception as e:
      raise self._classify(client, e, len(files)) from e

  def _classify(self, client: ReviewClient, error: Exception, file_count: int) -> ReviewGateError:
    kind = client.classify_error(error)
    if kind == ProviderErrorKind.TIMEOUT:
      logger.warning("Review timed out: files=%d kind=%s", file_count, client.kind.value)
      return ReviewTimeoutError(
        "The review timed out. Split the code into smaller files and try again."
      )
    if kind == ProviderErrorKind.RATE_LIMITED:
      logger.warning("Review rate limited: files=%d kind=%s", file_count, client.kind.value)
      return RateLimitedError(
        "The provider's usage limit was reached. Wait a while and try again."
      )
    logger.error(
      "Review failed: files=%d kind=%s error=%s", file_count, client.kind.value, type(error).__name__
    )
    return ReviewFailedError("The review could not be completed")


def run_review(
  files: list[CodeFile],
  prompt_id: str | None = None,
  provider_id: str | None = None,
  password: str | None = None,
  config_path: Path | None = None,
) -> ReviewResult:
  """Run a code review with the given options."""
  context = build_context(config_path)
  try:
    orchestrator = ReviewOrchestrator(context.providers, context.prompts, context.settings)
    request = {
      "files": [{"name": f.name, "language": f.language, "content": f.content} for f in files],
      "prompt_id": prompt_id,
      "provider_id": provider_id,
      "password": password,
    }
    with _console.status("Reviewing..."):
      return orchestrator.execute(request)
  finally:
    context.close()
