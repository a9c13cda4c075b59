"""Pytest fixtures."""

from collections.abc import Callable
from typing import Any

import pytest
from reviewgate.clients.base import ReviewClient
from reviewgate.config import Settings
from reviewgate.models import CodeFile, Prompt, ProviderCredentials, ProviderKind
from reviewgate.prompts import InMemoryPromptLibrary
from reviewgate.registry import ProviderRepository, ProviderService
from reviewgate.storage import Database
from reviewgate.vault import Vault

TEST_KEY = "0123456789abcdef" * 4
OTHER_KEY = "fedcba9876543210" * 4


class FakeClient(ReviewClient):
  """Client whose responses come from a callable instead of a provider."""

  def __init__(
    self,
    credentials: ProviderCredentials,
    settings: Settings | None = None,
    respond: Callable[[str], str] | None = None,
    kind: ProviderKind = ProviderKind.GEMINI,
  ):
    self._kind = kind
    self._respond = respond or (lambda message: "```\nreviewed\n```")
    self.messages: list[str] = []
    super().__init__(credentials, settings, client=object())

  @property
  def kind(self) -> ProviderKind:
    return self._kind

  @property
  def model(self) -> str:
    return "fake-model"

  def _build_client(self) -> Any:
    return object()

  def _complete(self, message: str) -> str:
    self.messages.append(message)
    return self._respond(message)


@pytest.fixture
def settings() -> Settings:
  return Settings(
    database_url="sqlite:///:memory:",
    encryption_key=TEST_KEY,
    password_iterations=1000,
    max_workers=4,
  )


@pytest.fixture
def database(settings: Settings):
  db = Database(settings.database_url)
  db.create_all()
  yield db
  db.dispose()


@pytest.fixture
def vault(settings: Settings) -> Vault:
  return Vault.from_settings(settings)


@pytest.fixture
def repository(database: Database, vault: Vault) -> ProviderRepository:
  return ProviderRepository(database, vault)


@pytest.fixture
def service(repository: ProviderRepository, vault: Vault) -> ProviderService:
  return ProviderService(repository, vault)


@pytest.fixture
def prompt_library() -> InMemoryPromptLibrary:
  return InMemoryPromptLibrary([
    Prompt(id="java", name="Java review", content="Review this Java code.", is_default=True),
    Prompt(id="sql", name="SQL review", content="Review this SQL."),
  ])


@pytest.fixture
def credentials() -> ProviderCredentials:
  return ProviderCredentials(api_key="sk-test-1234567890")


@pytest.fixture
def sample_files() -> list[CodeFile]:
  return [
    CodeFile(name="A.java", language="java", content="class A {}"),
    CodeFile(name="B.java", language="java", content="class B {}"),
    CodeFile(name="q.sql", language="sql", content="select 1;"),
  ]
