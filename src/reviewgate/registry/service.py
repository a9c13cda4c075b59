"""Provider management rules on top of the repository."""

from __future__ import annotations

import logging
import time
from typing import Any

from reviewgate.errors import BusinessError, NotFoundError
from reviewgate.models import ProviderCredentials, ProviderListItem
from reviewgate.registry.repository import DeleteOutcome, ProviderRepository
from reviewgate.schemas import ProviderCreate, ProviderUpdate, validate
from reviewgate.storage import ProviderRecord
from reviewgate.vault import Vault

logger = logging.getLogger(__name__)

PROVIDER_NOT_FOUND = "AI_PROVIDER_NOT_FOUND"
DELETE_FAILED = "AI_PROVIDER_DELETE_FAILED"


class _Timer:
  def __init__(self) -> None:
    self._start = time.perf_counter()

  def elapsed_ms(self) -> int:
    return int((time.perf_counter() - self._start) * 1000)


class ProviderService:
  """Registers, updates and activates providers.

  Everything returned to callers is a ``ProviderListItem``; encrypted keys
  and password hashes stay inside this module and the orchestrator.
  """

  def __init__(self, repository: ProviderRepository, vault: Vault):
    self._repository = repository
    self._vault = vault

  def get_all(self) -> list[ProviderListItem]:
    timer = _Timer()
    records = self._repository.find_all()
    logger.debug("get_all: %d providers in %dms", len(records), timer.elapsed_ms())
    return [r.to_list_item() for r in records]

  def get_by_id(self, provider_id: str) -> ProviderListItem:
    return self._require(provider_id, "get_by_id").to_list_item()

  def get_active(self) -> ProviderListItem | None:
    record = self._repository.find_active()
    return record.to_list_item() if record else None

  def create(self, data: ProviderCreate | dict[str, Any]) -> ProviderListItem:
    timer = _Timer()
    data = validate(ProviderCreate, data)
    record = self._repository.create(data)
    logger.info(
      "Provider created: id=%s name=%r kind=%s gated=%s (%dms)",
      record.id, record.name, record.kind, record.is_password_gated, timer.elapsed_ms(),
    )
    return record.to_list_item()

  def update(self, provider_id: str, data: ProviderUpdate | dict[str, Any]) -> ProviderListItem:
    timer = _Timer()
    data = validate(ProviderUpdate, data)
    self._require(provider_id, "update")
    record = self._repository.update(provider_id, data)
    if record is None:
      raise _not_found()
    logger.info(
      "Provider updated: id=%s fields=%s (%dms)",
      provider_id, sorted(data.model_fields_set), timer.elapsed_ms(),
    )
    return record.to_list_item()

  def delete(self, provider_id: str) -> None:
    outcome = self._repository.delete(provider_id)
    if outcome is DeleteOutcome.NOT_FOUND:
      logger.warning("delete: provider not found: %s", provider_id)
      raise _not_found()
    if outcome is DeleteOutcome.ACTIVE:
      logger.warning("delete: refusing to delete active provider %s", provider_id)
      raise BusinessError(
        "The active provider cannot be deleted. Activate another provider first.",
        code=DELETE_FAILED,
      )
    logger.info("Provider deleted: id=%s", provider_id)

  def set_active(self, provider_id: str) -> ProviderListItem:
    self._require(provider_id, "set_active")
    record = self._repository.set_active(provider_id)
    if record is None:
      raise _not_found()
    logger.info("Provider activated: id=%s", provider_id)
    return record.to_list_item()

  def verify_password(self, provider_id: str, password: str) -> bool:
    """True if ``password`` matches. Unknown or ungated providers never match."""
    record = self._repository.find_by_id(provider_id)
    if record is None:
      return False
    return self._vault.verify_password(password, record.password_hash)

  def find_record(self, provider_id: str | None) -> ProviderRecord | None:
    """Raw record lookup by id, or the active record when ``provider_id`` is None."""
    if provider_id is None:
      return self._repository.find_active()
    return self._repository.find_by_id(provider_id)

  def get_credentials(self, record: ProviderRecord) -> ProviderCredentials:
    return ProviderCredentials(
      api_key=self._vault.decrypt(record.encrypted_api_key),
      endpoint=record.endpoint,
      deployment=record.deployment,
      model=record.model,
    )

  def _require(self, provider_id: str, operation: str) -> ProviderRecord:
    record = self._repository.find_by_id(provider_id)
    if record is None:
      logger.warning("%s: provider not found: %s", operation, provider_id)
      raise _not_found()
    return record


def _not_found() -> NotFoundError:
  return NotFoundError("AI provider not found", code=PROVIDER_NOT_FOUND)
