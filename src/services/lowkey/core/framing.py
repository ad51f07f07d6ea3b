"""
Message framing for embedded payloads

Frame layout (protocol version 0):
    [1 byte version][4 bytes big-endian body length][body]
where body is the encrypted payload (see encryption.py).
"""

import struct
from typing import Optional, Tuple

from .encryption import MIN_BODY_SIZE, decrypt_body, derive_key, encrypt_body
from .errors import TruncatedInput, UnsupportedVersion


PROTOCOL_VERSION = 0

HEADER_FORMAT = ">BI"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
HEADER_BITS = HEADER_SIZE * 8

# header + nonce + tag
FRAME_OVERHEAD = HEADER_SIZE + MIN_BODY_SIZE


def build_header(body_length: int) -> bytes:
    return struct.pack(HEADER_FORMAT, PROTOCOL_VERSION, body_length)


def parse_header(header: bytes) -> Tuple[int, int]:
    """
    Parse and validate a frame header

    Args:
        header: At least HEADER_SIZE bytes

    Returns:
        Tuple of (version, body_length)

    Raises:
        TruncatedInput: If fewer than HEADER_SIZE bytes are given
        UnsupportedVersion: If the version byte is not PROTOCOL_VERSION
    """
    if len(header) < HEADER_SIZE:
        raise TruncatedInput(f"Header needs {HEADER_SIZE} bytes, got {len(header)}")

    version, body_length = struct.unpack(HEADER_FORMAT, header[:HEADER_SIZE])
    if version != PROTOCOL_VERSION:
        raise UnsupportedVersion(version, PROTOCOL_VERSION)
    return version, body_length


def encode_frame(payload: bytes, passphrase: Optional[str] = None) -> bytes:
    """
    Encrypt a payload and prepend the versioned header

    Args:
        payload: Raw bytes to hide
        passphrase: Optional passphrase; the default key is used without one

    Returns:
        Complete frame ready to be expanded into bits
    """
    body = encrypt_body(payload, derive_key(passphrase))
    return build_header(len(body)) + body


def decode_frame(frame: bytes, passphrase: Optional[str] = None) -> bytes:
    """
    Validate a frame and return the decrypted payload

    Raises:
        UnsupportedVersion: Unknown version byte
        TruncatedInput: Fewer bytes than the header declares
        MalformedBody: Body shorter than nonce + tag
        InvalidCiphertext: Wrong passphrase or tampered body
    """
    _, body_length = parse_header(frame)
    body = frame[HEADER_SIZE:HEADER_SIZE + body_length]
    if len(body) < body_length:
        raise TruncatedInput(f"Frame declares {body_length} body bytes but only {len(body)} are available")
    return decrypt_body(body, derive_key(passphrase))
