"""Configuration file loading."""

import os
from pathlib import Path

import yaml

from reviewgate.config.settings import Settings

CONFIG_FILENAMES = [".reviewgate.yaml", ".reviewgate.yml", "reviewgate.yaml", "reviewgate.yml"]

# First variable that is set wins.
ENV_OVERRIDES = {
  "encryption_key": ("REVIEWGATE_ENCRYPTION_KEY", "ENCRYPTION_KEY"),
  "database_url": ("REVIEWGATE_DATABASE_URL",),
  "log_level": ("REVIEWGATE_LOG_LEVEL",),
  "azure_api_version": ("AZURE_OPENAI_API_VERSION",),
}


def _find_config_file(config_path: Path | None = None) -> Path | None:
  """Find config file path, or None if no config exists."""
  if config_path:
    if not config_path.exists():
      raise FileNotFoundError(f"Config file not found: {config_path}")
    return config_path

  for filename in CONFIG_FILENAMES:
    path = Path.cwd() / filename
    if path.exists():
      return path

  return None


def load_config(config_path: Path | None = None) -> Settings:
  """Load configuration from file (or defaults) and apply environment overrides."""
  path = _find_config_file(config_path)
  data = _read_yaml(path) if path else {}
  return _parse_config(_apply_env(data))


def _read_yaml(path: Path) -> dict:
  with open(path) as f:
    data = yaml.safe_load(f) or {}
  if not isinstance(data, dict):
    raise ValueError(f"Config file must contain a mapping: {path}")
  return data


def _apply_env(data: dict) -> dict:
  merged = dict(data)
  for field_name, env_vars in ENV_OVERRIDES.items():
    for env_var in env_vars:
      value = os.environ.get(env_var)
      if value:
        merged[field_name] = value
        break
  return merged


def _parse_config(data: dict) -> Settings:
  """Parse config dict into Settings."""
  if "log_level" in data:
    data["log_level"] = str(data["log_level"]).upper()
  return Settings(**data)
