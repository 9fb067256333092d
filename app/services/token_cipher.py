"""Symmetric encryption for provider tokens stored with connection records."""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any, Dict

from cryptography.fernet import Fernet, InvalidToken


class TokenCipherService:
    """Encrypt and decrypt token payloads using a derived Fernet key."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token data; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")

    def encrypt_token_data(self, token_data: Dict[str, Any]) -> str:
        """Serialize and encrypt a provider token response."""
        return self.encrypt(json.dumps(token_data, sort_keys=True))

    def decrypt_token_data(self, ciphertext: str) -> Dict[str, Any]:
        return json.loads(self.decrypt(ciphertext))


__all__ = ["TokenCipherService"]
