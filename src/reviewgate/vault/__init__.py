"""
Credential vault: API key encryption and provider password hashing.

Public API:
    Vault(key_hex).encrypt(text)      -> "nonce:ciphertext"
    Vault(key_hex).decrypt(record)    -> plaintext
    hash_password(password)           -> salted hash
    verify_password(password, hash)   -> bool
"""

from __future__ import annotations

from reviewgate.vault.crypto import (
  DEFAULT_ITERATIONS,
  decrypt,
  encrypt,
  generate_key,
  hash_password,
  load_key,
  mask_api_key,
  verify_password,
)


class Vault:
  """Binds the configured key to encrypt/decrypt.

  The key is parsed lazily so a process without one can still hash and
  verify passwords; encrypt/decrypt raise ConfigurationError in that case.
  """

  def __init__(self, key_hex: str | None, *, iterations: int = DEFAULT_ITERATIONS):
    self._key_hex = key_hex
    self._key: bytes | None = None
    self._iterations = iterations

  @classmethod
  def from_settings(cls, settings) -> "Vault":
    return cls(settings.encryption_key, iterations=settings.password_iterations)

  def _get_key(self) -> bytes:
    if self._key is None:
      self._key = load_key(self._key_hex)
    return self._key

  def encrypt(self, plaintext: str) -> str:
    return encrypt(plaintext, self._get_key())

  def decrypt(self, record: str) -> str:
    return decrypt(record, self._get_key())

  def hash_password(self, password: str) -> str:
    return hash_password(password, self._iterations)

  def verify_password(self, password: str, stored_hash: str | None) -> bool:
    return verify_password(password, stored_hash)


__all__ = [
  "Vault",
  "decrypt",
  "encrypt",
  "generate_key",
  "hash_password",
  "load_key",
  "mask_api_key",
  "verify_password",
]
