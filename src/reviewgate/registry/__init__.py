"""Provider registry: persisted provider records and their rules."""

from reviewgate.registry.repository import ProviderRepository
from reviewgate.registry.service import ProviderService

__all__ = ["ProviderRepository", "ProviderService"]
