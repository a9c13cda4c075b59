"""Validated inputs for provider registration and review requests."""

from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from reviewgate.errors import ValidationError
from reviewgate.models import CodeFile, ProviderKind

NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 4
FILE_NAME_MAX_LENGTH = 255
FILE_CONTENT_MAX_LENGTH = 100_000

T = TypeVar("T", bound=BaseModel)

KIND_REQUIRED_FIELDS: dict[ProviderKind, tuple[str, ...]] = {
  ProviderKind.AZURE_OPENAI: ("endpoint", "deployment"),
}


def _strip(value: Any) -> Any:
  return value.strip() if isinstance(value, str) else value


def _blank_to_none(value: Any) -> Any:
  if isinstance(value, str) and not value.strip():
    return None
  return _strip(value)


def missing_for_kind(kind: ProviderKind, values: Any) -> list[str]:
  """Fields ``kind`` requires that are empty on ``values``."""
  return [f for f in KIND_REQUIRED_FIELDS.get(kind, ()) if not getattr(values, f, None)]


def kind_requirements_message(kind: ProviderKind, missing: list[str]) -> str:
  return f"{kind.value} providers require: {', '.join(missing)}"


def _check_url(value: str | None) -> str | None:
  if value is not None and not value.startswith(("http://", "https://")):
    raise ValueError("endpoint must be an http(s) URL")
  return value


class ProviderCreate(BaseModel):
  """Registration input for a new provider."""

  model_config = ConfigDict(extra="forbid")

  name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
  kind: ProviderKind
  api_key: str = Field(min_length=1, repr=False)
  endpoint: str | None = None
  deployment: str | None = None
  model: str | None = None
  password: str | None = Field(default=None, min_length=PASSWORD_MIN_LENGTH, repr=False)

  @field_validator("name", mode="before")
  @classmethod
  def _strip_name(cls, value: Any) -> Any:
    return _strip(value)

  @field_validator("endpoint", "deployment", "model", mode="before")
  @classmethod
  def _empty_is_absent(cls, value: Any) -> Any:
    return _blank_to_none(value)

  @field_validator("password", mode="before")
  @classmethod
  def _no_password(cls, value: Any) -> Any:
    return None if value == "" else value

  @field_validator("endpoint")
  @classmethod
  def _endpoint_is_url(cls, value: str | None) -> str | None:
    return _check_url(value)

  @model_validator(mode="after")
  def _check_kind_requirements(self) -> "ProviderCreate":
    missing = missing_for_kind(self.kind, self)
    if missing:
      raise ValueError(kind_requirements_message(self.kind, missing))
    return self


class ProviderUpdate(BaseModel):
  """Partial update. Only fields present in ``model_fields_set`` are applied.

  ``None`` or ``""`` clears endpoint/deployment/model; ``password=""`` (or
  ``None``) removes the password gate.
  """

  model_config = ConfigDict(extra="forbid")

  name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
  kind: ProviderKind | None = None
  api_key: str | None = Field(default=None, min_length=1, repr=False)
  endpoint: str | None = None
  deployment: str | None = None
  model: str | None = None
  password: str | None = Field(default=None, repr=False)

  @field_validator("name", mode="before")
  @classmethod
  def _strip_name(cls, value: Any) -> Any:
    return _strip(value)

  @field_validator("endpoint", "deployment", "model", mode="before")
  @classmethod
  def _empty_is_cleared(cls, value: Any) -> Any:
    return _blank_to_none(value)

  @field_validator("endpoint")
  @classmethod
  def _endpoint_is_url(cls, value: str | None) -> str | None:
    return _check_url(value)

  @field_validator("password")
  @classmethod
  def _password_length(cls, value: str | None) -> str | None:
    if value and len(value) < PASSWORD_MIN_LENGTH:
      raise ValueError(f"password must be at least {PASSWORD_MIN_LENGTH} characters")
    return value

  @model_validator(mode="after")
  def _name_not_cleared(self) -> "ProviderUpdate":
    if "name" in self.model_fields_set and self.name is None:
      raise ValueError("name cannot be cleared")
    if "api_key" in self.model_fields_set and self.api_key is None:
      raise ValueError("api_key cannot be cleared")
    return self

  def changes(self) -> dict[str, Any]:
    """Explicitly supplied fields and their values."""
    return {name: getattr(self, name) for name in self.model_fields_set}


class CodeFileInput(BaseModel):
  name: str = Field(min_length=1, max_length=FILE_NAME_MAX_LENGTH)
  language: str = ""
  content: str = Field(min_length=1, max_length=FILE_CONTENT_MAX_LENGTH)

  @field_validator("content")
  @classmethod
  def _not_blank(cls, value: str) -> str:
    if not value.strip():
      raise ValueError("file content is required")
    return value

  def to_code_file(self) -> CodeFile:
    return CodeFile(name=self.name, language=self.language, content=self.content)


class ReviewRequest(BaseModel):
  """A review submission."""

  files: list[CodeFileInput] = Field(min_length=1)
  prompt_id: str | None = None
  provider_id: str | None = None
  password: str | None = Field(default=None, repr=False)

  @field_validator("prompt_id", "provider_id", "password", mode="before")
  @classmethod
  def _empty_is_absent(cls, value: Any) -> Any:
    if isinstance(value, str) and value == "":
      return None
    return value

  def code_files(self) -> list[CodeFile]:
    return [f.to_code_file() for f in self.files]


def validate(model: type[T], data: Any) -> T:
  """Validate ``data`` into ``model``, raising the domain ValidationError."""
  if isinstance(data, model):
    return data
  try:
    return model.model_validate(data)
  except pydantic.ValidationError as e:
    issue = e.errors()[0]
    location = ".".join(str(p) for p in issue.get("loc", ()))
    message = issue.get("msg", "invalid input")
    if location:
      message = f"{location}: {message}"
    raise ValidationError(message) from None
