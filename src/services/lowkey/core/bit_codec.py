"""
Bit-level conversion between payload bytes and RGBA pixel channels

Bits are ordered LSB-first within each byte (bit 0 of byte 0 first) and
carriers are addressed as a flat, row-major R,G,B,A channel stream.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
from PIL import Image

from .errors import CapacityExceeded, InsufficientData


CHANNELS_PER_PIXEL = 4


@dataclass
class Carrier:
    """
    RGBA raster used to hide bits

    Attributes:
        pixels: uint8 array of shape (height, width, 4)
        source_path: File the carrier was decoded from, if any
    """

    pixels: np.ndarray
    source_path: Optional[Path] = None

    def __post_init__(self):
        self.pixels = np.ascontiguousarray(self.pixels, dtype=np.uint8)

    @classmethod
    def from_image(cls, image: Image.Image, source_path: Optional[Path] = None) -> "Carrier":
        rgba = image.convert("RGBA") if image.mode != "RGBA" else image
        return cls(np.array(rgba, dtype=np.uint8), source_path)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def capacity_bits(self) -> int:
        return self.width * self.height * CHANNELS_PER_PIXEL

    def channels(self) -> np.ndarray:
        """Flat view over the channel stream; writes go through to ``pixels``."""
        return self.pixels.reshape(-1)


def bytes_to_bits(data: bytes) -> np.ndarray:
    """
    Expand bytes into one 0/1 entry per bit, least-significant bit first

    Args:
        data: Bytes to expand

    Returns:
        uint8 array of length 8 * len(data)
    """
    return np.unpackbits(np.frombuffer(data, dtype=np.uint8), bitorder="little")


def bits_to_bytes(bits: np.ndarray) -> bytes:
    """
    Pack LSB-first bits back into bytes

    Callers reconstructing bytes must hand in whole groups of 8 bits.
    """
    bits = np.asarray(bits, dtype=np.uint8)
    if len(bits) % 8:
        raise ValueError(f"Bit count must be a multiple of 8, got {len(bits)}")
    return np.packbits(bits, bitorder="little").tobytes()


def write_bits(carrier: Carrier, bits: np.ndarray) -> None:
    """
    Store bit i in the LSB of channel i; the upper 7 bits of each channel
    and every channel past len(bits) stay untouched.
    """
    count = len(bits)
    if count > carrier.capacity_bits:
        raise CapacityExceeded(carrier.capacity_bits, count)
    if not count:
        return

    flat = carrier.channels()
    flat[:count] = (flat[:count] & 0xFE) | np.asarray(bits, dtype=np.uint8)


class ChannelCursor:
    """
    Read position over the concatenated channel streams of several carriers

    The cursor owns no pixel data; it tracks (carrier_index, offset) and
    advances carrier by carrier as bits are consumed.
    """

    def __init__(self, carriers: Sequence[Carrier]):
        self._streams: List[np.ndarray] = [c.channels() for c in carriers]
        self.carrier_index = 0
        self.offset = 0

    @property
    def remaining(self) -> int:
        if self.carrier_index >= len(self._streams):
            return 0
        rest = sum(len(s) for s in self._streams[self.carrier_index + 1:])
        return len(self._streams[self.carrier_index]) - self.offset + rest

    def take(self, count: int) -> np.ndarray:
        """Pull up to ``count`` raw channel values, advancing the cursor."""
        parts = []
        needed = count
        while needed and self.carrier_index < len(self._streams):
            stream = self._streams[self.carrier_index]
            chunk = stream[self.offset:self.offset + needed]
            parts.append(chunk)
            needed -= len(chunk)
            self.offset += len(chunk)
            if self.offset >= len(stream):
                self.carrier_index += 1
                self.offset = 0

        if not parts:
            return np.empty(0, dtype=np.uint8)
        return np.concatenate(parts)


def read_bits(cursor: ChannelCursor, count: int) -> np.ndarray:
    """
    Read the LSBs of the next ``count`` channels

    Raises:
        InsufficientData: If the carriers run out before ``count`` bits
    """
    available = cursor.remaining
    if available < count:
        raise InsufficientData(available, count)
    return cursor.take(count) & 1
