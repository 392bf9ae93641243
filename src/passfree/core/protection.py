# core/protection.py
"""
Data protection
===============
Authenticated encryption for short opaque strings that leave the process
(login links, cookies).

  DataProtectionProvider(secret_keys)
    └─ create_protector(purpose) → DataProtector
         ├─ protect(plaintext)   → opaque string
         └─ unprotect(opaque)    → plaintext, or ProtectionError

Each purpose gets its own AES-256-GCM subkey, derived from the configured
secret with HKDF-SHA256, and the purpose is also bound as associated data.
A payload protected for one purpose never unprotects under another.

Wire form: unpadded URL-safe base64 of ``nonce(12) || ciphertext || tag(16)``.
Decoding is strict: a string that does not re-encode to itself is rejected,
so every character of the token is covered by the authentication tag.

Key rotation: the first key protects; all keys are tried on unprotect.
"""

import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from passfree.core.exceptions import ProtectionError

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32


def _encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _decode(text: str) -> bytes:
    try:
        raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as exc:
        raise ProtectionError("Protected payload is not valid base64") from exc

    if _encode(raw) != text:
        raise ProtectionError("Protected payload is not canonically encoded")
    return raw


def _derive_key(secret_key: bytes, purpose: str) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=None,
        info=f"passfree:{purpose}".encode(),
    )
    return hkdf.derive(secret_key)


class DataProtector:
    def __init__(self, purpose: str, keys: list[bytes]) -> None:
        self.purpose = purpose
        self._associated_data = purpose.encode()
        self._ciphers = [AESGCM(key) for key in keys]

    def protect(self, plaintext: str) -> str:
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._ciphers[0].encrypt(nonce, plaintext.encode(), self._associated_data)
        return _encode(nonce + ciphertext)

    def unprotect(self, protected: str) -> str:
        """
        Reverse protect().

        Raises:
            ProtectionError: malformed, truncated, tampered, wrong key or wrong purpose.
        """
        if not isinstance(protected, str) or not protected:
            raise ProtectionError("Protected payload is empty")

        raw = _decode(protected)
        if len(raw) < NONCE_SIZE + TAG_SIZE:
            raise ProtectionError("Protected payload is truncated")

        nonce, ciphertext = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        for cipher in self._ciphers:
            try:
                data = cipher.decrypt(nonce, ciphertext, self._associated_data)
            except InvalidTag:
                continue

            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ProtectionError("Protected payload is not UTF-8") from exc

        raise ProtectionError("Protected payload failed authentication")


class DataProtectionProvider:
    """Holds the process-wide key material. Create once at startup."""

    def __init__(self, secret_keys: list[str]) -> None:
        if not secret_keys:
            raise ValueError("At least one secret key is required")
        self._secret_keys = [key.encode() for key in secret_keys]

    def create_protector(self, purpose: str) -> DataProtector:
        if not purpose:
            raise ValueError("A purpose string is required")
        keys = [_derive_key(secret, purpose) for secret in self._secret_keys]
        logger.debug(f"[Protection] Protector created for purpose={purpose} keys={len(keys)}")
        return DataProtector(purpose, keys)
