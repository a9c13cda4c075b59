"""ORM models for provider records."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from reviewgate.models import ProviderKind, ProviderListItem


def generate_id() -> str:
  return str(uuid.uuid4())


def utcnow() -> datetime:
  return datetime.now(timezone.utc)


class Base(DeclarativeBase):
  pass


class ProviderRecord(Base):
  """A registered LLM provider.

  ``encrypted_api_key`` and ``password_hash`` never leave the core; use
  ``to_list_item()`` for anything handed to callers.
  """

  __tablename__ = "ai_providers"

  id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
  name: Mapped[str] = mapped_column(String(100), nullable=False)
  kind: Mapped[str] = mapped_column(String(32), nullable=False)
  encrypted_api_key: Mapped[str] = mapped_column(Text, nullable=False)
  endpoint: Mapped[str | None] = mapped_column(String(2048), nullable=True)
  deployment: Mapped[str | None] = mapped_column(String(255), nullable=True)
  model: Mapped[str | None] = mapped_column(String(255), nullable=True)
  password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
  is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
  created_at: Mapped[datetime] = mapped_column(default=utcnow)
  updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

  @property
  def provider_kind(self) -> ProviderKind:
    return ProviderKind(self.kind)

  @property
  def is_password_gated(self) -> bool:
    return bool(self.password_hash)

  def to_list_item(self) -> ProviderListItem:
    return ProviderListItem(
      id=self.id,
      name=self.name,
      kind=self.provider_kind,
      endpoint=self.endpoint,
      deployment=self.deployment,
      model=self.model,
      is_active=self.is_active,
      is_password_gated=self.is_password_gated,
      created_at=self.created_at,
      updated_at=self.updated_at,
    )

  def __repr__(self) -> str:
    return f"<ProviderRecord(id={self.id}, name={self.name!r}, kind={self.kind}, active={self.is_active})>"
