"""
Spreads one logical bitstream across an ordered set of carriers
"""

import logging
from typing import List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from ..models.stego_models import SequenceInfo
from .bit_codec import Carrier, ChannelCursor, bits_to_bytes, read_bits, write_bits
from .capacity import check_capacity, total_capacity_bits
from .framing import HEADER_BITS, HEADER_SIZE, parse_header


logger = logging.getLogger(__name__)

T = TypeVar("T")


def plan_allocation(capacities: Sequence[int], total_bits: int) -> List[Tuple[int, int]]:
    """
    Assign each carrier a [start, end) range of the bitstream

    Carriers are filled to capacity in order; carriers past the end of the
    stream get an empty range.
    """
    ranges = []
    cursor = 0
    for capacity in capacities:
        end = min(cursor + capacity, total_bits)
        ranges.append((cursor, end))
        cursor = end
    return ranges


def embed_bits(carriers: Sequence[Carrier], bits: np.ndarray) -> List[int]:
    """
    Write a bitstream across carriers in order

    Returns:
        Number of bits written into each carrier

    Raises:
        MessageTooLarge: If the summed capacity is too small
    """
    check_capacity(total_capacity_bits(carriers), len(bits))

    ranges = plan_allocation([c.capacity_bits for c in carriers], len(bits))
    written = []
    for carrier, (start, end) in zip(carriers, ranges):
        if end > start:
            write_bits(carrier, bits[start:end])
        written.append(end - start)
    return written


def extract_frame(carriers: Sequence[Carrier]) -> bytes:
    """
    Read header then body from the front of the carrier set

    Returns:
        The raw frame (header + encrypted body)

    Raises:
        InsufficientData: If the carriers hold fewer bits than declared
        UnsupportedVersion: If the header version is unknown
    """
    cursor = ChannelCursor(carriers)

    header = bits_to_bytes(read_bits(cursor, HEADER_BITS))
    _, body_length = parse_header(header[:HEADER_SIZE])

    body = bits_to_bytes(read_bits(cursor, body_length * 8))
    return header + body


def order_by_sequence(items: Sequence[T], sequence: Sequence[Optional[SequenceInfo]]) -> Tuple[List[T], bool]:
    """
    Sort items by their sequence index when every one of them has metadata

    Returns:
        Tuple of (ordered_items, auto_ordered). When any entry is missing
        metadata the caller's order is returned unchanged.
    """
    if not items or any(info is None for info in sequence):
        return list(items), False

    paired = sorted(zip(items, sequence), key=lambda pair: pair[1].index)
    logger.info("Detected sequence information in PNG metadata, using automatic ordering")
    return [item for item, _ in paired], True
