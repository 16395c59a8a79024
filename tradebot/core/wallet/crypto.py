"""
Symmetric encryption of private keys at rest.

AES-256-GCM with a key derived by SHA-256 from the configured secret. Each
encryption uses a fresh 12-byte nonce, stored alongside the ciphertext as
``nonce_hex:ciphertext_hex``.
"""

import hashlib
import secrets
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ...config import settings

NONCE_BYTES = 12


class KeyCipherError(Exception):
    """Encrypted payload is malformed or was encrypted under another secret."""


class KeyCipher:
    def __init__(self, secret: Optional[str] = None):
        secret = secret if secret is not None else settings.wallet_encryption_key
        if not secret:
            raise KeyCipherError("wallet_encryption_key is not configured")
        self._aead = AESGCM(hashlib.sha256(secret.encode("utf-8")).digest())

    def encrypt(self, plaintext: str) -> str:
        nonce = secrets.token_bytes(NONCE_BYTES)
        ciphertext = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return f"{nonce.hex()}:{ciphertext.hex()}"

    def decrypt(self, payload: str) -> str:
        try:
            nonce_hex, ciphertext_hex = payload.split(":", 1)
            nonce = bytes.fromhex(nonce_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError as exc:
            raise KeyCipherError("Encrypted key payload is malformed") from exc

        if len(nonce) != NONCE_BYTES:
            raise KeyCipherError("Encrypted key payload has an invalid nonce")

        try:
            return self._aead.decrypt(nonce, ciphertext, None).decode("utf-8")
        except InvalidTag as exc:
            raise KeyCipherError("Encrypted key could not be authenticated") from exc
