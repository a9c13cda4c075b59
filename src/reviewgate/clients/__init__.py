"""LLM review clients, one per provider kind."""

from reviewgate.clients.base import ReviewClient
from reviewgate.clients.factory import (
  ClientRegistry,
  create_client,
  list_kinds,
  register_client,
)

__all__ = ["ReviewClient", "ClientRegistry", "create_client", "list_kinds", "register_client"]
