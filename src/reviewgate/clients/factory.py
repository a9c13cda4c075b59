"""Client registration and construction."""

from typing import Callable

from reviewgate.clients.base import ReviewClient
from reviewgate.config import Settings
from reviewgate.errors import ConfigurationError
from reviewgate.models import ProviderCredentials, ProviderKind

ClientConstructor = Callable[[ProviderCredentials, Settings], ReviewClient]
ClientFactory = Callable[[ProviderKind, ProviderCredentials, Settings], ReviewClient]

_clients: dict[ProviderKind, ClientConstructor] = {}


def register_client(kind: ProviderKind, constructor: ClientConstructor) -> None:
  """Register a client constructor for a provider kind."""
  _clients[kind] = constructor


def create_client(
  kind: ProviderKind,
  credentials: ProviderCredentials,
  settings: Settings | None = None,
) -> ReviewClient:
  """Build the client for ``kind``.

  Raises:
    ConfigurationError: Unknown kind, or credentials missing a required field.
    ImportError: The SDK for ``kind`` is not installed.
  """
  ClientRegistry.load_all()
  if kind not in _clients:
    available = ", ".join(k.value for k in _clients) or "none"
    raise ConfigurationError(f"Unknown AI provider '{kind}'. Available: {available}")
  return _clients[kind](credentials, settings or Settings())


def list_kinds() -> list[ProviderKind]:
  """List registered provider kinds."""
  ClientRegistry.load_all()
  return list(_clients.keys())


class ClientRegistry:
  """Registry for lazy client loading."""

  @staticmethod
  def load_all() -> None:
    """Load all client modules to trigger registration."""
    from reviewgate.clients import anthropic, azure_openai, gemini  # noqa: F401
