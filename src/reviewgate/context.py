"""Wiring of settings, storage, vault and services."""

from dataclasses import dataclass
from pathlib import Path

from reviewgate.config import Settings, load_config
from reviewgate.prompts import YamlPromptLibrary
from reviewgate.registry import ProviderRepository, ProviderService
from reviewgate.storage import Database
from reviewgate.vault import Vault


@dataclass
class AppContext:
  settings: Settings
  database: Database
  vault: Vault
  providers: ProviderService
  prompts: YamlPromptLibrary

  def close(self) -> None:
    self.database.dispose()


def build_context(config_path: Path | None = None, settings: Settings | None = None) -> AppContext:
  """Load configuration and assemble the services, creating tables if needed."""
  settings = settings or load_config(config_path)
  database = Database(settings.database_url)
  database.create_all()
  vault = Vault.from_settings(settings)
  providers = ProviderService(ProviderRepository(database, vault), vault)
  prompts = YamlPromptLibrary(settings.prompts_file)
  return AppContext(settings, database, vault, providers, prompts)
