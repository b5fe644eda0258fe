try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from setoran_auth.services.token_cipher import TokenCipherService


def test_token_cipher_roundtrip() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    plaintext = "refresh-token-value"

    encrypted = cipher.encrypt(plaintext)
    assert encrypted != plaintext
    assert cipher.decrypt(encrypted) == plaintext


def test_token_cipher_rejects_bad_ciphertext() -> None:
    cipher = TokenCipherService(secret="another-secret", purpose="vault")

    with pytest.raises(ValueError, match="vault"):
        cipher.decrypt("not-valid")


def test_purposes_derive_distinct_keys() -> None:
    tokens = TokenCipherService(secret="shared", purpose="tokens")
    vault = TokenCipherService(secret="shared", purpose="vault")

    with pytest.raises(ValueError):
        vault.decrypt(tokens.encrypt("access-token"))


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")
