"""
Capacity accounting and auto-fit sizing for carriers
"""

import logging
import math
from typing import Iterable, Tuple

from PIL import Image

from .bit_codec import CHANNELS_PER_PIXEL, Carrier
from .errors import MessageTooLarge
from .framing import FRAME_OVERHEAD


logger = logging.getLogger(__name__)

DEFAULT_MIN_DIMENSION = 600


def check_capacity(capacity_bits: int, needed_bits: int) -> None:
    """
    Raises:
        MessageTooLarge: If needed_bits does not fit in capacity_bits
    """
    if needed_bits > capacity_bits:
        raise MessageTooLarge(capacity_bits, needed_bits)


def total_capacity_bits(carriers: Iterable[Carrier]) -> int:
    return sum(c.capacity_bits for c in carriers)


def max_payload_bytes(capacity_bits: int) -> int:
    """Largest plaintext that fits once framed and encrypted."""
    return max(0, capacity_bits // 8 - FRAME_OVERHEAD)


def compute_optimal_dimensions(
    payload_len: int,
    original_width: int,
    original_height: int,
    min_dimension: int = DEFAULT_MIN_DIMENSION,
) -> Tuple[int, int]:
    """
    Calculate the smallest carrier size that still fits a payload

    Args:
        payload_len: Plaintext payload size in bytes (framing is added here)
        original_width: Width of the source carrier
        original_height: Height of the source carrier
        min_dimension: Lower bound for the shorter side, capped by the
            source's own shorter side

    Returns:
        (width, height) no larger than the original, keeping the aspect
        ratio up to integer rounding. Falls back to the original size when
        no smaller size fits.
    """
    required_bits = (payload_len + FRAME_OVERHEAD) * 8
    min_pixels = math.ceil(required_bits / CHANNELS_PER_PIXEL)

    aspect_ratio = original_width / original_height

    new_height = math.ceil(math.sqrt(min_pixels / aspect_ratio))
    new_width = math.ceil(new_height * aspect_ratio)

    effective_min = min(min_dimension, original_width, original_height)

    if min(new_width, new_height) < effective_min:
        # grow from the shorter side so it lands exactly on the floor
        if aspect_ratio >= 1.0:
            new_height = effective_min
            new_width = math.ceil(effective_min * aspect_ratio)
        else:
            new_width = effective_min
            new_height = math.ceil(effective_min / aspect_ratio)

    new_width = min(new_width, original_width)
    new_height = min(new_height, original_height)

    if new_width * new_height * CHANNELS_PER_PIXEL < required_bits:
        return original_width, original_height

    return new_width, new_height


def resize_carrier(carrier: Carrier, payload_len: int, min_dimension: int = DEFAULT_MIN_DIMENSION) -> Carrier:
    """Shrink a carrier to the optimal size for ``payload_len`` (never enlarges)."""
    width, height = carrier.width, carrier.height
    new_width, new_height = compute_optimal_dimensions(payload_len, width, height, min_dimension)

    if new_width < width or new_height < height:
        logger.info(
            f"Resizing image from {width}x{height} to {new_width}x{new_height} to optimize for message size"
        )
        resized = carrier.to_image().resize((new_width, new_height), resample=Image.LANCZOS)
        return Carrier.from_image(resized, carrier.source_path)

    logger.info(f"Image size {width}x{height} is already optimal for message size")
    return carrier
