"""Fernet implementation of the credential cipher."""

from __future__ import annotations

from cryptography.fernet import Fernet, InvalidToken

from tenantry.core.exceptions import DecryptionError


class FernetCipher:
    """Symmetric encryption for stored vendor credentials.

    Tokens are URL-safe base64 text, so they fit a TEXT column as is.
    """

    def __init__(self, key: str | bytes) -> None:
        """Initialize the cipher.

        Args:
            key: 32-byte url-safe base64 Fernet key.

        Raises:
            ValueError: If key is not a valid Fernet key.
        """
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode()

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, token: str) -> str:
        """Decrypt a token produced by encrypt.

        Raises:
            DecryptionError: If the token is malformed or was made with another key.
        """
        try:
            return self._fernet.decrypt(token.encode()).decode()
        except (InvalidToken, UnicodeDecodeError) as e:
            raise DecryptionError("Stored credential could not be decrypted") from e
