"""Persistence for provider records."""

from reviewgate.storage.db import Database
from reviewgate.storage.models import Base, ProviderRecord

__all__ = ["Base", "Database", "ProviderRecord"]
