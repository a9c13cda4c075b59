"""Error taxonomy shared by the vault, registry and review pipeline.

Every error carries a stable machine-readable ``code`` and an HTTP-equivalent
``status`` so callers can map failures without parsing messages.
"""


class ReviewGateError(Exception):
  """Base for all reviewgate errors."""

  default_code = "INTERNAL_ERROR"
  default_status = 500

  def __init__(self, message: str, code: str | None = None, status: int | None = None):
    super().__init__(message)
    self.message = message
    self.code = code or self.default_code
    self.status = status or self.default_status

  def to_dict(self) -> dict[str, str]:
    return {"error": self.message, "code": self.code}


class ValidationError(ReviewGateError):
  """Input failed validation."""

  default_code = "VALIDATION_ERROR"
  default_status = 400


class ConfigurationError(ReviewGateError):
  """Required configuration is missing or unusable."""

  default_code = "CONFIGURATION_ERROR"
  default_status = 500


class NotFoundError(ReviewGateError):
  """Referenced provider or prompt does not exist."""

  default_code = "NOT_FOUND"
  default_status = 404


class PasswordRequiredError(ReviewGateError):
  """A gated provider was used without a password."""

  default_code = "REVIEW_PASSWORD_REQUIRED"
  default_status = 400


class UnauthorizedError(ReviewGateError):
  """Password did not match the stored hash."""

  default_code = "UNAUTHORIZED"
  default_status = 401


class BusinessError(ReviewGateError):
  """Operation violates a registry rule."""

  default_code = "BUSINESS_ERROR"
  default_status = 400


class ClientInitializationError(ReviewGateError):
  """Provider client could not be constructed."""

  default_code = "REVIEW_AI_CLIENT_INIT_FAILED"
  default_status = 500


class ReviewTimeoutError(ReviewGateError):
  default_code = "REVIEW_TIMEOUT"
  default_status = 504


class RateLimitedError(ReviewGateError):
  default_code = "REVIEW_RATE_LIMITED"
  default_status = 429


class ReviewFailedError(ReviewGateError):
  default_code = "REVIEW_FAILED"
  default_status = 500


class VaultError(ReviewGateError):
  """Base for encryption failures. Messages never include secret material."""

  default_code = "VAULT_ERROR"


class MalformedCiphertextError(VaultError):
  default_code = "MALFORMED_CIPHERTEXT"


class DecryptionError(VaultError):
  default_code = "DECRYPTION_FAILED"
