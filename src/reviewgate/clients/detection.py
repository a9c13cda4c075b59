"""Provider detection from environment variables."""

import os
from dataclasses import dataclass

from reviewgate.models import ProviderCredentials, ProviderKind
from reviewgate.vault import mask_api_key


@dataclass(frozen=True)
class ProviderStatus:
  """Availability status for a provider kind."""

  kind: ProviderKind
  available: bool
  reason: str


class ProviderDetector:
  """Detects provider kinds whose credentials are present in the environment."""

  DETECTION_ORDER = (ProviderKind.ANTHROPIC, ProviderKind.AZURE_OPENAI, ProviderKind.GEMINI)
  ENV_VARS = {
    ProviderKind.ANTHROPIC: {"api_key": "ANTHROPIC_API_KEY", "model": "CLAUDE_MODEL"},
    ProviderKind.AZURE_OPENAI: {
      "endpoint": "AZURE_OPENAI_ENDPOINT",
      "api_key": "AZURE_OPENAI_API_KEY",
      "deployment": "AZURE_OPENAI_DEPLOYMENT",
    },
    ProviderKind.GEMINI: {"api_key": "GEMINI_API_KEY", "model": "GEMINI_MODEL"},
  }
  OPTIONAL_FIELDS = ("model",)

  def __init__(self, environ: dict[str, str] | None = None):
    self._environ = os.environ if environ is None else environ

  def detect(self) -> ProviderKind | None:
    """Return first available kind, or None."""
    for kind in self.DETECTION_ORDER:
      if self._is_available(kind):
        return kind
    return None

  def get_status(self) -> list[ProviderStatus]:
    """Get status for all kinds in detection order."""
    return [self._check(kind) for kind in self.DETECTION_ORDER]

  def credentials_for(self, kind: ProviderKind) -> ProviderCredentials | None:
    """Build credentials from the environment, or None if incomplete."""
    if not self._is_available(kind):
      return None
    values = {field: self._environ.get(var) or None for field, var in self.ENV_VARS[kind].items()}
    return ProviderCredentials(**values)

  def format_error(self, kind: ProviderKind) -> str:
    """Format a message listing the variables needed for ``kind``."""
    lines = [f"No credentials for '{kind.value}' in the environment.", "", "Provider status:"]
    for s in self.get_status():
      lines.append(f"  {'[ok]' if s.available else '[--]'} {s.kind.value}: {s.reason}")
    lines.extend(["", f"Set {', '.join(self._required_vars(kind))} to use {kind.value}."])
    return "\n".join(lines)

  def _required_vars(self, kind: ProviderKind) -> list[str]:
    return [var for field, var in self.ENV_VARS[kind].items() if field not in self.OPTIONAL_FIELDS]

  def _is_available(self, kind: ProviderKind) -> bool:
    return all(self._environ.get(var) for var in self._required_vars(kind))

  def _check(self, kind: ProviderKind) -> ProviderStatus:
    missing = [var for var in self._required_vars(kind) if not self._environ.get(var)]
    if missing:
      return ProviderStatus(kind, False, f"{', '.join(missing)} not set")
    key_var = self.ENV_VARS[kind]["api_key"]
    return ProviderStatus(kind, True, f"{key_var} set ({mask_api_key(self._environ[key_var])})")
