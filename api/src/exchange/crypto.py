from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from ..errors import ConfigurationError, StorageError


class CredentialCipher:
    """Symmetric encryption for exchange credentials at rest"""

    def __init__(self, key: str):
        try:
            self._fernet = Fernet(key.encode("utf-8"))
        except (ValueError, TypeError) as e:
            raise ConfigurationError("ENCRYPTION_KEY must be a urlsafe base64-encoded 32-byte key") from e

    def encrypt(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        return self._fernet.encrypt(value.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            raise StorageError("Stored credentials cannot be decrypted with the configured key") from e
