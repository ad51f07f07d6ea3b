"""
Command line entry point: ``lowkey encode`` / ``lowkey decode``
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from src.utility.constants_manager import ConstantsManager

from .core.errors import CarrierIOError
from .core.service import LowkeyStegoService
from .models.stego_models import StegoOptions
from .utils.image_utils import collect_images_from_dir


class UsageError(ValueError):
    pass


def _add_image_sources(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--image", help="Single input image (mutually exclusive with --image-list and --image-dir)")
    parser.add_argument("--image-list", nargs="+", help="Multiple input images, in embedding order")
    parser.add_argument("--image-dir", help="Directory containing input images")
    parser.add_argument("--passphrase", help="Passphrase for encryption (a public default key is used without one)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lowkey", description="LSB steganography tool for hiding messages in PNG images")
    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Hide a message file in one or more images")
    _add_image_sources(encode)
    encode.add_argument("--message", required=True, help="File whose bytes are hidden")
    encode.add_argument("--output", help="Single output image (used with --image)")
    encode.add_argument("--output-dir", help="Output directory (used with --image-list or --image-dir)")
    encode.add_argument("--auto-resize", action="store_true", help="Shrink a single image to fit the message")
    encode.add_argument("--min-dimension", type=int, default=None, help="Smallest short side when auto-resizing")

    decode = subparsers.add_parser("decode", help="Recover a hidden message")
    _add_image_sources(decode)
    decode.add_argument("--output", required=True, help="File to write the recovered message to")

    return parser


def _check_sources(args: argparse.Namespace) -> None:
    sources = [args.image is not None, args.image_list is not None, args.image_dir is not None]
    if not any(sources):
        raise UsageError("Must specify one of --image, --image-list, or --image-dir")
    if sum(sources) > 1:
        raise UsageError("Only one of --image, --image-list, or --image-dir can be specified")


def _resolve_images(args: argparse.Namespace) -> List[Path]:
    _check_sources(args)
    if args.image is not None:
        return [Path(args.image)]
    if args.image_list is not None:
        return [Path(p) for p in args.image_list]
    return collect_images_from_dir(args.image_dir)


def _read_message(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise CarrierIOError("Failed to open message file", path, e.strerror) from e


def run_encode(args: argparse.Namespace, service: LowkeyStegoService) -> str:
    _check_sources(args)
    if args.image is not None:
        if args.output is None:
            raise UsageError("--output is required when using --image")
        if args.output_dir is not None:
            raise UsageError("--output-dir cannot be used with --image (use --output instead)")
    else:
        if args.output_dir is None:
            raise UsageError("--output-dir is required when using --image-list or --image-dir")
        if args.output is not None:
            raise UsageError("--output cannot be used with --image-list or --image-dir (use --output-dir instead)")
        if args.auto_resize:
            raise UsageError("--auto-resize is not supported with multiple images yet")

    images = _resolve_images(args)
    payload = _read_message(args.message)
    options = StegoOptions(
        passphrase=args.passphrase,
        auto_resize=args.auto_resize,
        min_dimension=args.min_dimension if args.min_dimension is not None else ConstantsManager().get_min_dimension(),
    )

    if args.image is not None:
        service.encode_file(images[0], payload, args.output, options)
        return f"Encoded message into {args.output}"

    service.encode_files(images, payload, args.output_dir, options)
    return f"Encoded message into output directory {args.output_dir}"


def run_decode(args: argparse.Namespace, service: LowkeyStegoService) -> str:
    images = _resolve_images(args)
    service.decode_to_file(images, args.output, args.passphrase)
    return f"Successfully decoded message to {args.output}"


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = build_parser().parse_args(argv)
    service = LowkeyStegoService()

    try:
        if args.command == "encode":
            message = run_encode(args, service)
        else:
            message = run_decode(args, service)
    except UsageError as e:
        print(str(e), file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Failed to {args.command} message: {e}", file=sys.stderr)
        return 1

    print(f"OK: {message}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
