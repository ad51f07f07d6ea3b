"""
PNG re-serialization that keeps the source file's ancillary chunks

Pillow strips most metadata when saving, which would drop an embedded ICC
profile and shift colors on color-managed viewers. The writer here lets
Pillow compress the pixel data, then rebuilds the file as:

    signature, IHDR, ancillary chunks (source order), [sequence chunk], IDAT..., IEND
"""

import logging
import struct
import zlib
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Sequence, Union

from ..models.stego_models import SequenceInfo
from .bit_codec import Carrier
from .errors import CarrierIOError, NotAPngError, TruncatedInput


logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

IHDR = b"IHDR"
PLTE = b"PLTE"
IDAT = b"IDAT"
IEND = b"IEND"
PIXEL_CHUNK_TYPES = frozenset({IHDR, PLTE, IDAT, IEND})

# ancillary, private, safe-to-copy
SEQUENCE_CHUNK_TYPE = b"lkSq"

BIT_DEPTH = 8
COLOR_TYPE_RGBA = 6


@dataclass(frozen=True)
class PngChunk:
    chunk_type: bytes
    data: bytes

    @property
    def crc(self) -> int:
        return zlib.crc32(self.chunk_type + self.data) & 0xFFFFFFFF

    @property
    def is_pixel_chunk(self) -> bool:
        return self.chunk_type in PIXEL_CHUNK_TYPES

    def to_bytes(self) -> bytes:
        return struct.pack(">I", len(self.data)) + self.chunk_type + self.data + struct.pack(">I", self.crc)


def iter_chunks(stream: BinaryIO) -> Iterator[PngChunk]:
    """
    Yield chunks from a stream positioned just after the signature

    Stops after IEND or at a clean end of file. Stored CRCs are not checked.

    Raises:
        TruncatedInput: If a chunk is cut short
    """
    while True:
        length_bytes = stream.read(4)
        if len(length_bytes) < 4:
            return
        (length,) = struct.unpack(">I", length_bytes)

        chunk_type = stream.read(4)
        data = stream.read(length)
        crc = stream.read(4)
        if len(chunk_type) < 4 or len(data) < length or len(crc) < 4:
            raise TruncatedInput(f"PNG chunk {chunk_type!r} is truncated")

        yield PngChunk(chunk_type, data)
        if chunk_type == IEND:
            return


def _open_png(path: Path) -> BinaryIO:
    try:
        stream = open(path, "rb")
    except OSError as e:
        raise CarrierIOError("Failed to open image", path, e.strerror) from e

    if stream.read(len(PNG_SIGNATURE)) != PNG_SIGNATURE:
        stream.close()
        raise NotAPngError(f"'{path}' is not a PNG file")
    return stream


def read_chunks(path: Union[str, Path]) -> List[PngChunk]:
    """Every chunk of a PNG file, in file order."""
    with _open_png(Path(path)) as stream:
        return list(iter_chunks(stream))


def extract_ancillary_chunks(path: Union[str, Path]) -> List[PngChunk]:
    """
    Collect the chunks that carry metadata rather than pixels

    Args:
        path: Source PNG file

    Returns:
        Non-pixel chunks in their original order

    Raises:
        NotAPngError: If the file has no PNG signature
    """
    return [chunk for chunk in read_chunks(path) if not chunk.is_pixel_chunk]


def read_sequence_info(path: Union[str, Path]) -> Optional[SequenceInfo]:
    """Sequence metadata of a carrier file, or None when absent or unreadable."""
    try:
        chunks = read_chunks(path)
    except NotAPngError:
        return None

    for chunk in chunks:
        if chunk.chunk_type == SEQUENCE_CHUNK_TYPE:
            try:
                return SequenceInfo.from_bytes(chunk.data)
            except ValueError:
                logger.warning(f"Ignoring malformed sequence metadata in '{path}'")
                return None
    return None


def build_ihdr(width: int, height: int) -> PngChunk:
    # compression, filter and interlace methods are all 0
    return PngChunk(IHDR, struct.pack(">IIBBBBB", width, height, BIT_DEPTH, COLOR_TYPE_RGBA, 0, 0, 0))


def encode_idat(carrier: Carrier) -> List[PngChunk]:
    """Compress the carrier's pixels into IDAT chunks using Pillow's PNG encoder."""
    buf = BytesIO()
    carrier.to_image().save(buf, format="PNG")
    buf.seek(len(PNG_SIGNATURE))
    return [chunk for chunk in iter_chunks(buf) if chunk.chunk_type == IDAT]


def serialize_png(
    carrier: Carrier,
    ancillary_chunks: Sequence[PngChunk] = (),
    sequence: Optional[SequenceInfo] = None,
) -> bytes:
    chunks = [build_ihdr(carrier.width, carrier.height)]
    # a re-encoded carrier must not keep a stale position from an earlier set
    chunks.extend(c for c in ancillary_chunks if c.chunk_type != SEQUENCE_CHUNK_TYPE)
    if sequence is not None:
        chunks.append(PngChunk(SEQUENCE_CHUNK_TYPE, sequence.to_bytes()))
    chunks.extend(encode_idat(carrier))
    chunks.append(PngChunk(IEND, b""))

    return PNG_SIGNATURE + b"".join(chunk.to_bytes() for chunk in chunks)


def write_png(
    carrier: Carrier,
    ancillary_chunks: Sequence[PngChunk],
    destination: Union[str, Path],
    sequence: Optional[SequenceInfo] = None,
) -> Path:
    destination = Path(destination)
    data = serialize_png(carrier, ancillary_chunks, sequence)
    try:
        destination.write_bytes(data)
    except OSError as e:
        raise CarrierIOError("Failed to write image", destination, e.strerror) from e
    return destination


def save_carrier(
    carrier: Carrier,
    destination: Union[str, Path],
    source_path: Optional[Union[str, Path]] = None,
    sequence: Optional[SequenceInfo] = None,
) -> Path:
    """
    Write a carrier as PNG, carrying over metadata from its source file

    A source that is not a PNG (for example a JPEG used only as input) is
    written without preserved chunks.
    """
    ancillary: List[PngChunk] = []
    if source_path is not None:
        try:
            ancillary = extract_ancillary_chunks(source_path)
        except NotAPngError:
            logger.info(f"Source '{source_path}' is not a PNG, saving without metadata preservation")

    return write_png(carrier, ancillary, destination, sequence)
