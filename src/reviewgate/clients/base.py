"""Base review client."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Sequence

from reviewgate.clients.parser import extract_code
from reviewgate.clients.prompt import build_review_message
from reviewgate.config import Settings
from reviewgate.errors import ConfigurationError
from reviewgate.models import CodeFile, ProviderCredentials, ProviderErrorKind, ProviderKind, ReviewedFile

logger = logging.getLogger(__name__)

_TIMEOUT_PATTERN = re.compile(r"timed? ?-?out|deadline exceeded")
_RATE_LIMIT_PATTERN = re.compile(r"\brate[ _-]?limit|\bquota\b|\b429\b|too many requests|resource[ _]exhausted")


class ReviewClient(ABC):
  """Reviews files against one provider protocol.

  Subclasses implement ``_complete`` (one request, raw text back) and may
  refine ``classify_error`` with their SDK's exception types. Provider
  exceptions propagate unchanged.
  """

  REQUIRED_FIELDS: tuple[str, ...] = ("api_key",)

  def __init__(
    self,
    credentials: ProviderCredentials,
    settings: Settings | None = None,
    client: Any = None,
  ):
    self._settings = settings or Settings()
    self._check_required(credentials)
    self._credentials = credentials
    self._client = client if client is not None else self._build_client()

  @property
  @abstractmethod
  def kind(self) -> ProviderKind:
    ...

  @property
  @abstractmethod
  def model(self) -> str:
    """Model or deployment being used."""
    ...

  @abstractmethod
  def _build_client(self) -> Any:
    """Create the underlying SDK/HTTP client."""
    ...

  @abstractmethod
  def _complete(self, message: str) -> str:
    """Send one message and return the raw response text."""
    ...

  @property
  def max_tokens(self) -> int:
    return self._settings.max_tokens

  @property
  def temperature(self) -> float:
    return self._settings.temperature

  def review(self, files: Sequence[CodeFile], system_prompt: str) -> list[ReviewedFile]:
    """Review every file concurrently. Output order matches input order.

    The first failure cancels files that have not started and is re-raised.
    """
    if not files:
      return []

    workers = min(len(files), self._settings.max_workers)
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"review-{self.kind.value}")
    futures = [executor.submit(self.review_file, f, system_prompt) for f in files]
    try:
      done, _ = wait(futures, return_when=FIRST_EXCEPTION)
      for future in futures:
        if future in done and future.exception() is not None:
          raise future.exception()
      return [f.result() for f in futures]
    finally:
      executor.shutdown(wait=False, cancel_futures=True)

  def review_file(self, file: CodeFile, system_prompt: str) -> ReviewedFile:
    message = build_review_message(system_prompt, file)
    logger.debug("Reviewing %s with %s/%s", file.name, self.kind.value, self.model)
    try:
      raw = self._complete(message)
    except Exception:
      logger.debug("Provider call failed for %s", file.name, exc_info=True)
      raise
    return ReviewedFile(name=file.name, language=file.language, content=extract_code(raw or ""))

  def close(self) -> None:
    """Release the underlying SDK/HTTP client's connections."""
    close = getattr(self._client, "close", None)
    if callable(close):
      close()

  def classify_error(self, error: BaseException) -> ProviderErrorKind:
    """Categorize a failure from ``review``. Falls back to message keywords."""
    if isinstance(error, TimeoutError):
      return ProviderErrorKind.TIMEOUT
    text = str(error).lower()
    if _TIMEOUT_PATTERN.search(text):
      return ProviderErrorKind.TIMEOUT
    if _RATE_LIMIT_PATTERN.search(text):
      return ProviderErrorKind.RATE_LIMITED
    return ProviderErrorKind.OTHER

  def _check_required(self, credentials: ProviderCredentials) -> None:
    missing = [f for f in self.REQUIRED_FIELDS if not getattr(credentials, f)]
    if missing:
      raise ConfigurationError(
        f"{self.kind.value} configuration is incomplete. Missing: {', '.join(missing)}"
      )
