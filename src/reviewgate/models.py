"""Core domain models for credential storage and code review."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Sequence


class ProviderKind(Enum):
  """Supported LLM backends."""

  GEMINI = "gemini"
  AZURE_OPENAI = "azure-openai"
  ANTHROPIC = "anthropic"


class ProviderErrorKind(Enum):
  """Category of a failed provider call."""

  TIMEOUT = "timeout"
  RATE_LIMITED = "rate_limited"
  OTHER = "other"


@dataclass(frozen=True)
class CodeFile:
  """A single source file submitted for review."""

  name: str
  content: str
  language: str = ""


@dataclass(frozen=True)
class ReviewedFile:
  """A file as annotated by the provider."""

  name: str
  content: str
  language: str = ""


@dataclass(frozen=True)
class ProviderCredentials:
  """Decrypted credentials handed to a client at construction."""

  api_key: str
  endpoint: str | None = None
  deployment: str | None = None
  model: str | None = None

  def __repr__(self) -> str:
    return (
      f"ProviderCredentials(api_key='***', endpoint={self.endpoint!r}, "
      f"deployment={self.deployment!r}, model={self.model!r})"
    )


@dataclass(frozen=True)
class Prompt:
  """A reusable review prompt."""

  id: str
  name: str
  content: str
  is_default: bool = False


@dataclass(frozen=True)
class ProviderListItem:
  """Provider record with secrets omitted."""

  id: str
  name: str
  kind: ProviderKind
  endpoint: str | None
  deployment: str | None
  model: str | None
  is_active: bool
  is_password_gated: bool
  created_at: datetime | None = None
  updated_at: datetime | None = None

  def to_dict(self) -> dict[str, Any]:
    return {
      "id": self.id,
      "name": self.name,
      "provider": self.kind.value,
      "endpoint": self.endpoint,
      "deployment": self.deployment,
      "model": self.model,
      "isActive": self.is_active,
      "hasPassword": self.is_password_gated,
      "createdAt": self.created_at.isoformat() if self.created_at else None,
      "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
    }


@dataclass(frozen=True)
class ReviewResult:
  """Result of a review run."""

  reviewed_files: Sequence[ReviewedFile]
  provider_kind: ProviderKind
  provider_name: str
  prompt_id: str
  prompt_name: str
  provider_id: str | None = None
  metadata: dict[str, Any] = field(default_factory=dict)

  def to_dict(self) -> dict[str, Any]:
    return {
      "reviewedFiles": [
        {"name": f.name, "language": f.language, "content": f.content}
        for f in self.reviewed_files
      ],
      "provider": self.provider_kind.value,
      "providerName": self.provider_name,
      "promptId": self.prompt_id,
      "promptName": self.prompt_name,
    }
