"""Prompt lookup backed by memory or a YAML file.

YAML format::

    prompts:
      - id: java-review
        name: Java review
        default: true
        content: |
          Review the following code and add comments...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol

import yaml

from reviewgate.errors import ConfigurationError, NotFoundError
from reviewgate.models import Prompt

logger = logging.getLogger(__name__)

PROMPT_NOT_FOUND = "PROMPT_NOT_FOUND"


class PromptLookup(Protocol):
  """Source of review prompts."""

  def get_by_id(self, prompt_id: str) -> Prompt:
    """Return the prompt or raise NotFoundError."""
    ...

  def get_default(self) -> Prompt | None:
    """Return the designated default prompt, if one is set."""
    ...


class InMemoryPromptLibrary:
  """Dict-backed prompt lookup."""

  def __init__(self, prompts: Iterable[Prompt] = ()):
    self._prompts: dict[str, Prompt] = {}
    for prompt in prompts:
      self.add(prompt)

  def add(self, prompt: Prompt) -> None:
    if prompt.is_default:
      current = self.get_default()
      if current is not None and current.id != prompt.id:
        raise ConfigurationError(
          f"Only one default prompt is allowed (found '{current.id}' and '{prompt.id}')"
        )
    self._prompts[prompt.id] = prompt

  def get_by_id(self, prompt_id: str) -> Prompt:
    prompt = self._prompts.get(prompt_id)
    if prompt is None:
      raise NotFoundError("Prompt not found", code=PROMPT_NOT_FOUND)
    return prompt

  def get_default(self) -> Prompt | None:
    return next((p for p in self._prompts.values() if p.is_default), None)

  def list_prompts(self) -> list[Prompt]:
    return list(self._prompts.values())


class YamlPromptLibrary(InMemoryPromptLibrary):
  """Read-only prompt library loaded from a YAML file.

  A missing file is an empty library.
  """

  def __init__(self, path: Path | str):
    self.path = Path(path)
    super().__init__(self._load())

  def _load(self) -> list[Prompt]:
    if not self.path.exists():
      logger.debug("Prompt file %s not found; library is empty", self.path)
      return []

    with open(self.path) as f:
      data = yaml.safe_load(f) or {}

    entries = data.get("prompts", []) if isinstance(data, dict) else None
    if not isinstance(entries, list):
      raise ConfigurationError(f"{self.path}: 'prompts' must be a list")

    prompts = []
    for index, entry in enumerate(entries):
      prompts.append(_parse_entry(entry, index, self.path))
    logger.debug("Loaded %d prompts from %s", len(prompts), self.path)
    return prompts


def _parse_entry(entry: object, index: int, path: Path) -> Prompt:
  if not isinstance(entry, dict):
    raise ConfigurationError(f"{path}: prompt #{index} must be a mapping")
  missing = [key for key in ("id", "name", "content") if not entry.get(key)]
  if missing:
    raise ConfigurationError(f"{path}: prompt #{index} is missing {', '.join(missing)}")
  return Prompt(
    id=str(entry["id"]),
    name=str(entry["name"]),
    content=str(entry["content"]),
    is_default=bool(entry.get("default", False)),
  )
