"""
Main service class for LSB steganography across one or more PNG carriers
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from PIL import Image

from ..models.stego_models import (
    SequenceInfo,
    StegoCapacityResult,
    StegoDecodeResult,
    StegoEncodeResult,
    StegoOptions,
)
from ..utils.image_utils import load_carrier, output_name_for
from ..utils.validation import (
    validate_carrier_list,
    validate_output_path,
    validate_png_path,
    validate_unique_output_names,
)
from .allocator import embed_bits, extract_frame, order_by_sequence
from .bit_codec import Carrier, bytes_to_bits
from .capacity import max_payload_bytes, resize_carrier, total_capacity_bits
from .errors import CarrierIOError, StegoError
from .framing import decode_frame, encode_frame
from .png_chunks import read_sequence_info, save_carrier


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _ensure_dir(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CarrierIOError("Failed to create output directory", directory, e.strerror) from e


class LowkeyStegoService:
    """
    High-level encode/decode operations

    Every call owns the carriers it loads; nothing is shared between calls.
    Multi-carrier encodes write files one by one, so a failure part way
    through leaves the earlier outputs on disk.
    """

    def capacity(self, images: Sequence[Union[Image.Image, Carrier]]) -> StegoCapacityResult:
        """
        Calculate the combined capacity of a carrier set

        Args:
            images: Carriers, or Pillow images to be treated as carriers

        Returns:
            StegoCapacityResult with total and per-carrier capacity
        """
        carriers = [img if isinstance(img, Carrier) else Carrier.from_image(img) for img in images]
        per_carrier = [c.capacity_bits for c in carriers]
        total_bits = sum(per_carrier)
        return StegoCapacityResult(
            carriers=len(carriers),
            capacity_bits=total_bits,
            capacity_bytes=total_bits // 8,
            max_payload_bytes=max_payload_bytes(total_bits),
            capacity_per_carrier=per_carrier,
        )

    def encode_carriers(
        self,
        carriers: Sequence[Carrier],
        payload: bytes,
        passphrase: Optional[str] = None,
    ) -> Tuple[List[int], int]:
        """
        Frame a payload and write it into carriers in memory

        Returns:
            Tuple of (bits written per carrier, total frame bits)

        Raises:
            MessageTooLarge: If the frame does not fit the carriers
        """
        bits = bytes_to_bits(encode_frame(payload, passphrase))
        written = embed_bits(carriers, bits)
        return written, len(bits)

    def decode_carriers(self, carriers: Sequence[Carrier], passphrase: Optional[str] = None) -> bytes:
        """Recover a payload from carriers already in decode order."""
        return decode_frame(extract_frame(carriers), passphrase)

    def encode_file(
        self,
        input_image: PathLike,
        payload: bytes,
        output_image: PathLike,
        options: Optional[StegoOptions] = None,
    ) -> StegoEncodeResult:
        """
        Hide a payload in a single carrier image

        Args:
            input_image: Cover image in any format Pillow reads
            payload: Bytes to hide
            output_image: Destination, must be a .png path
            options: Passphrase and auto-resize settings

        Returns:
            StegoEncodeResult describing the written file

        Raises:
            UnsupportedOutputFormat: If output_image is not PNG
            MessageTooLarge: If the payload does not fit
        """
        options = options or StegoOptions()
        output_image = Path(output_image)
        validate_output_path(output_image)

        carrier = load_carrier(input_image)
        resized_to = None
        if options.auto_resize:
            original_size = (carrier.width, carrier.height)
            carrier = resize_carrier(carrier, len(payload), options.min_dimension)
            if (carrier.width, carrier.height) != original_size:
                resized_to = (carrier.width, carrier.height)

        written, total_bits = self.encode_carriers([carrier], payload, options.passphrase)

        if output_image.parent != Path(""):
            _ensure_dir(output_image.parent)
        save_carrier(carrier, output_image, source_path=input_image)
        logger.info(f"Saved encoded image: {output_image}")

        return StegoEncodeResult(
            output_paths=[output_image],
            payload_size_bytes=len(payload),
            used_capacity_bits=total_bits,
            capacity_bits=carrier.capacity_bits,
            bits_per_carrier=written,
            resized_to=resized_to,
            encrypted_with_passphrase=bool(options.passphrase),
        )

    def encode_files(
        self,
        input_images: Sequence[PathLike],
        payload: bytes,
        output_dir: PathLike,
        options: Optional[StegoOptions] = None,
    ) -> StegoEncodeResult:
        """
        Spread a payload over several carriers

        Each input yields one output in output_dir named after the input
        (JPEG names become .png), tagged with its position in the set.

        Raises:
            ValueError: If no inputs are given, auto-resize is requested or
                two inputs would share an output name
            MessageTooLarge: If the payload does not fit all carriers together
        """
        options = options or StegoOptions()
        validate_carrier_list(input_images)
        if options.auto_resize:
            raise StegoError("Auto-resize is not supported with multiple images")

        output_dir = Path(output_dir)
        output_names = [output_name_for(path) for path in input_images]
        validate_unique_output_names(input_images, output_names)
        carriers = [load_carrier(path) for path in input_images]
        _ensure_dir(output_dir)

        written, total_bits = self.encode_carriers(carriers, payload, options.passphrase)

        total = len(carriers)
        output_paths = []
        for index, (source, name, carrier) in enumerate(zip(input_images, output_names, carriers)):
            output_path = output_dir / name
            save_carrier(carrier, output_path, source_path=source, sequence=SequenceInfo(index=index, total=total))
            logger.info(f"Saved encoded image {index + 1}/{total}: {output_path}")
            output_paths.append(output_path)

        return StegoEncodeResult(
            output_paths=output_paths,
            payload_size_bytes=len(payload),
            used_capacity_bits=total_bits,
            capacity_bits=total_capacity_bits(carriers),
            bits_per_carrier=written,
            encrypted_with_passphrase=bool(options.passphrase),
        )

    def _sequence_of(self, path: Path) -> Optional[SequenceInfo]:
        try:
            return read_sequence_info(path)
        except (StegoError, OSError) as e:
            logger.debug(f"No usable sequence metadata in '{path}': {e}")
            return None

    def decode_files(self, image_paths: Sequence[PathLike], passphrase: Optional[str] = None) -> StegoDecodeResult:
        """
        Recover a payload from one or more encoded carriers

        Carriers are reordered by their sequence metadata when every file
        carries it; otherwise the given order is used.

        Raises:
            UnsupportedOutputFormat: If a carrier path is a JPEG
            InsufficientData: If the carriers hold fewer bits than declared
            UnsupportedVersion: If the embedded header is from another version
            InvalidCiphertext: Wrong passphrase or damaged payload
        """
        validate_carrier_list(image_paths)
        paths = [Path(p) for p in image_paths]
        sequence = [self._sequence_of(p) for p in paths]
        ordered, auto_ordered = order_by_sequence(paths, sequence)

        for path in ordered:
            validate_png_path(path)
        carriers = [load_carrier(path) for path in ordered]

        payload = self.decode_carriers(carriers, passphrase)
        return StegoDecodeResult(payload=payload, carrier_order=ordered, auto_ordered=auto_ordered)

    def decode_to_file(
        self,
        image_paths: Sequence[PathLike],
        output_file: PathLike,
        passphrase: Optional[str] = None,
    ) -> StegoDecodeResult:
        """Decode carriers and write the recovered payload to output_file."""
        result = self.decode_files(image_paths, passphrase)

        output_file = Path(output_file)
        if output_file.parent != Path(""):
            _ensure_dir(output_file.parent)
        try:
            output_file.write_bytes(result.payload)
        except OSError as e:
            raise CarrierIOError("Failed to create output file", output_file, e.strerror) from e

        result.output_path = output_file
        return result
