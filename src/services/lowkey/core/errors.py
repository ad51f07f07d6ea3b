"""
Error types raised by the steganography core
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union


class StegoError(ValueError):
    """Base class for every failure raised by the encode/decode pipeline."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedVersion(StegoError):
    def __init__(self, version: int, expected: int):
        super().__init__(
            f"Unsupported protocol version {version}. Expected version {expected}",
            {"version": version, "expected": expected},
        )
        self.version = version
        self.expected = expected


class MalformedBody(StegoError):
    pass


class TruncatedInput(MalformedBody):
    pass


class InvalidCiphertext(StegoError):
    pass


class EncryptionFailed(StegoError):
    pass


class MessageTooLarge(StegoError):
    def __init__(self, capacity_bits: int, required_bits: int):
        super().__init__(
            f"Message is too long for the image. Capacity: {capacity_bits} bits, required: {required_bits} bits",
            {"capacity_bits": capacity_bits, "required_bits": required_bits},
        )
        self.capacity_bits = capacity_bits
        self.required_bits = required_bits


class CapacityExceeded(MessageTooLarge):
    pass


class InsufficientData(StegoError):
    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Count of channels ({available}) is fewer than length ({requested})",
            {"available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class UnsupportedOutputFormat(StegoError):
    pass


class NotAPngError(StegoError):
    pass


class CarrierIOError(StegoError):
    def __init__(self, message: str, path: Union[str, Path], reason: Optional[object] = None):
        text = f"{message} '{path}'"
        if reason is not None:
            text += f": {reason}"
        super().__init__(text, {"path": str(path)})
        self.path = Path(path)
