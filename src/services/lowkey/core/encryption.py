"""
Encryption utilities for the message body

The body layout is nonce (12 bytes) + ciphertext + tag (16 bytes), sealed
with ChaCha20-Poly1305.
"""

import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .errors import EncryptionFailed, InvalidCiphertext, MalformedBody


NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32
MIN_BODY_SIZE = NONCE_SIZE + TAG_SIZE

# Used when no passphrase is supplied. It is public and provides
# obfuscation only, not confidentiality.
DEFAULT_KEY = b"my-secret-key-32-bytes-long!!!!!"


def derive_key(passphrase: Optional[str] = None) -> bytes:
    """
    Derive the 32-byte cipher key from a passphrase

    Args:
        passphrase: User passphrase; None or empty selects DEFAULT_KEY

    Returns:
        SHA-256 digest of the UTF-8 passphrase
    """
    if not passphrase:
        return DEFAULT_KEY
    digest = hashes.Hash(hashes.SHA256())
    digest.update(passphrase.encode("utf-8"))
    return digest.finalize()


def encrypt_body(plaintext: bytes, key: bytes) -> bytes:
    """
    Encrypt a payload under a fresh random nonce

    Returns:
        nonce + ciphertext + tag
    """
    nonce = os.urandom(NONCE_SIZE)
    try:
        ciphertext = ChaCha20Poly1305(key).encrypt(nonce, plaintext, None)
    except (ValueError, OverflowError) as e:
        raise EncryptionFailed(f"Encryption failed: {e}") from e
    return nonce + ciphertext


def decrypt_body(body: bytes, key: bytes) -> bytes:
    """
    Open a body produced by encrypt_body

    Raises:
        MalformedBody: If the body cannot even hold a nonce and tag
        InvalidCiphertext: If authentication fails (wrong key or tampering)
    """
    if len(body) < MIN_BODY_SIZE:
        raise MalformedBody(
            f"Encrypted data too short: {len(body)} bytes (minimum is {MIN_BODY_SIZE} bytes)"
        )

    nonce, ciphertext = body[:NONCE_SIZE], body[NONCE_SIZE:]
    try:
        return ChaCha20Poly1305(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise InvalidCiphertext("Decryption failed: invalid passphrase or corrupted payload") from e
