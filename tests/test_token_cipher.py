try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from app.services.token_cipher import TokenCipherService


def test_token_data_encryption_hides_tokens() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    token_data = {"access_token": "plain-access-token", "refresh_token": "RT1", "fetched_at": 1}

    encrypted = cipher.encrypt_token_data(token_data)

    assert "plain-access-token" not in encrypted
    assert cipher.decrypt_token_data(encrypted) == token_data


def test_token_cipher_rejects_foreign_ciphertext() -> None:
    encrypted = TokenCipherService(secret="one").encrypt("sensitive-token")

    with pytest.raises(ValueError):
        TokenCipherService(secret="two").decrypt(encrypted)
    with pytest.raises(ValueError):
        TokenCipherService(secret="one").decrypt("not-valid")


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")
