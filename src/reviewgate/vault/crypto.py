"""
AES-256-GCM encryption for provider API keys and PBKDF2 password hashing.

Ciphertext is stored as ``<nonce hex>:<ciphertext+tag hex>``. Each call uses a
fresh 12-byte nonce. The 32-byte key is supplied as 64 hex characters.

Password hashes are ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
Bare 64-character SHA-256 hex digests are still accepted by
``verify_password`` so records imported from older deployments keep working.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import logging
import re
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from reviewgate.errors import ConfigurationError, DecryptionError, MalformedCiphertextError

logger = logging.getLogger(__name__)

NONCE_LENGTH = 12
KEY_LENGTH = 32
SALT_LENGTH = 16
DEFAULT_ITERATIONS = 240_000
MAX_ITERATIONS = 10_000_000
HASH_SCHEME = "pbkdf2_sha256"
SEPARATOR = ":"

_LEGACY_SHA256 = re.compile(r"^[0-9a-f]{64}$")


def generate_key() -> str:
  """Return a new random key as 64 hex characters."""
  return secrets.token_hex(KEY_LENGTH)


def load_key(key_hex: str | None) -> bytes:
  """Parse a hex key from configuration."""
  if not key_hex:
    raise ConfigurationError(
      "Encryption key is not configured. Set REVIEWGATE_ENCRYPTION_KEY "
      "(run 'reviewgate keygen' to create one).",
      code="ENCRYPTION_KEY_MISSING",
    )
  try:
    key = bytes.fromhex(key_hex.strip())
  except ValueError:
    raise ConfigurationError(
      "Encryption key must be hex encoded", code="ENCRYPTION_KEY_INVALID"
    ) from None
  if len(key) != KEY_LENGTH:
    raise ConfigurationError(
      f"Encryption key must be {KEY_LENGTH} bytes ({KEY_LENGTH * 2} hex chars), got {len(key)}",
      code="ENCRYPTION_KEY_INVALID",
    )
  return key


def encrypt(plaintext: str, key: bytes) -> str:
  """Encrypt plaintext. Returns ``nonce:ciphertext`` in hex."""
  nonce = secrets.token_bytes(NONCE_LENGTH)
  body = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
  return nonce.hex() + SEPARATOR + body.hex()


def decrypt(record: str, key: bytes) -> str:
  """Decrypt a ``nonce:ciphertext`` record back to plaintext."""
  nonce_hex, sep, body_hex = (record or "").partition(SEPARATOR)
  if not sep or not nonce_hex or not body_hex:
    raise MalformedCiphertextError("Encrypted value is not in nonce:ciphertext format")
  try:
    nonce = binascii.unhexlify(nonce_hex)
    body = binascii.unhexlify(body_hex)
  except (binascii.Error, ValueError):
    raise MalformedCiphertextError("Encrypted value is not valid hex") from None
  if len(nonce) != NONCE_LENGTH:
    raise MalformedCiphertextError(f"Nonce must be {NONCE_LENGTH} bytes")

  try:
    plaintext = AESGCM(key).decrypt(nonce, body, None)
  except InvalidTag:
    raise DecryptionError("Encrypted value could not be decrypted with the configured key") from None
  return plaintext.decode("utf-8")


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
  """Hash a password with a random salt."""
  salt = secrets.token_bytes(SALT_LENGTH)
  digest = _pbkdf2(password, salt, iterations)
  return f"{HASH_SCHEME}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored_hash: str | None) -> bool:
  """Check a candidate password against a stored hash in constant time."""
  if not stored_hash:
    return False

  if _LEGACY_SHA256.match(stored_hash):
    candidate = hashlib.sha256(password.encode("utf-8")).hexdigest()
    return hmac.compare_digest(candidate, stored_hash)

  parts = stored_hash.split("$")
  if len(parts) != 4 or parts[0] != HASH_SCHEME:
    logger.warning("Unrecognized password hash format")
    return False
  try:
    iterations = int(parts[1])
    if not 1 <= iterations <= MAX_ITERATIONS:
      raise ValueError("iteration count out of range")
    salt = bytes.fromhex(parts[2])
    expected = bytes.fromhex(parts[3])
  except ValueError:
    logger.warning("Corrupt password hash")
    return False

  return hmac.compare_digest(_pbkdf2(password, salt, iterations), expected)


def mask_api_key(api_key: str) -> str:
  """Mask a key for display, e.g. ``sk-a...wxyz``."""
  if len(api_key) <= 8:
    return "***"
  return api_key[:4] + "..." + api_key[-4:]


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
  return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=32)
