"""Data access for provider records.

API keys are encrypted and passwords hashed here, before anything reaches
the database.
"""

from __future__ import annotations

import enum
import logging

from sqlalchemy import select, update

from reviewgate.errors import ValidationError
from reviewgate.schemas import (
  ProviderCreate,
  ProviderUpdate,
  kind_requirements_message,
  missing_for_kind,
)
from reviewgate.storage import Database, ProviderRecord
from reviewgate.vault import Vault

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS = ("endpoint", "deployment", "model")


class DeleteOutcome(enum.Enum):
  DELETED = "deleted"
  NOT_FOUND = "not_found"
  ACTIVE = "active"


class ProviderRepository:
  """CRUD over ``ProviderRecord``."""

  def __init__(self, db: Database, vault: Vault):
    self._db = db
    self._vault = vault

  def find_all(self) -> list[ProviderRecord]:
    with self._db.session() as session:
      stmt = select(ProviderRecord).order_by(
        ProviderRecord.is_active.desc(), ProviderRecord.created_at.desc()
      )
      return list(session.scalars(stmt))

  def find_by_id(self, provider_id: str) -> ProviderRecord | None:
    with self._db.session() as session:
      return session.get(ProviderRecord, provider_id)

  def find_active(self) -> ProviderRecord | None:
    with self._db.session() as session:
      stmt = select(ProviderRecord).where(ProviderRecord.is_active.is_(True)).limit(1)
      return session.scalars(stmt).first()

  def create(self, data: ProviderCreate) -> ProviderRecord:
    record = ProviderRecord(
      name=data.name,
      kind=data.kind.value,
      encrypted_api_key=self._vault.encrypt(data.api_key),
      endpoint=data.endpoint,
      deployment=data.deployment,
      model=data.model,
      password_hash=self._vault.hash_password(data.password) if data.password else None,
      is_active=False,
    )
    with self._db.transaction() as session:
      session.add(record)
    return record

  def update(self, provider_id: str, data: ProviderUpdate) -> ProviderRecord | None:
    changes = data.changes()
    with self._db.transaction() as session:
      record = session.get(ProviderRecord, provider_id)
      if record is None:
        return None

      if "name" in changes:
        record.name = changes["name"]
      if "kind" in changes and changes["kind"] is not None:
        record.kind = changes["kind"].value
      if "api_key" in changes:
        record.encrypted_api_key = self._vault.encrypt(changes["api_key"])
      for field_name in _NULLABLE_FIELDS:
        if field_name in changes:
          setattr(record, field_name, changes[field_name] or None)
      if "password" in changes:
        password = changes["password"]
        record.password_hash = self._vault.hash_password(password) if password else None

      missing = missing_for_kind(record.provider_kind, record)
      if missing:
        raise ValidationError(kind_requirements_message(record.provider_kind, missing))
      return record

  def delete(self, provider_id: str) -> DeleteOutcome:
    """Delete ``provider_id`` unless it is the active record.

    The active check and the delete share one transaction with
    ``set_active``'s writer lock.
    """
    with self._db.transaction() as session:
      record = session.get(ProviderRecord, provider_id, with_for_update=True)
      if record is None:
        return DeleteOutcome.NOT_FOUND
      if record.is_active:
        return DeleteOutcome.ACTIVE
      session.delete(record)
      return DeleteOutcome.DELETED

  def set_active(self, provider_id: str) -> ProviderRecord | None:
    """Make ``provider_id`` the only active record.

    Both steps run in one transaction, so other connections see either the
    previous active record or the new one.
    """
    with self._db.transaction() as session:
      # Row locks where supported; SQLite relies on the writer lock.
      session.execute(
        select(ProviderRecord.id).where(ProviderRecord.is_active.is_(True)).with_for_update()
      )
      record = session.get(ProviderRecord, provider_id, with_for_update=True)
      if record is None:
        return None
      session.execute(
        update(ProviderRecord)
        .where(ProviderRecord.is_active.is_(True), ProviderRecord.id != provider_id)
        .values(is_active=False)
      )
      record.is_active = True
      return record
