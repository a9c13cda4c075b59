"""Application settings."""

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
  """Application configuration."""

  model_config = ConfigDict(use_enum_values=False)

  database_url: str = "sqlite:///reviewgate.db"
  encryption_key: str | None = Field(default=None, repr=False)
  prompts_file: str = "prompts.yaml"
  max_tokens: int = Field(default=4096, gt=0)
  anthropic_max_tokens: int = Field(default=8192, gt=0)
  temperature: float = Field(default=0.3, ge=0.0, le=1.0)
  max_workers: int = Field(default=4, ge=1)
  max_files: int = Field(default=20, ge=1)
  request_timeout: float = Field(default=120.0, gt=0)
  gemini_model: str = "gemini-1.5-flash"
  anthropic_model: str = "claude-3-5-sonnet-20241022"
  azure_api_version: str = "2024-10-21"
  password_iterations: int = Field(default=240_000, ge=1, le=10_000_000)
  log_level: str = "WARNING"
