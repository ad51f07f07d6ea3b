"""
Validation utilities for steganography operations
"""

from pathlib import Path
from typing import Dict, List, Sequence, Union

from ..core.errors import StegoError, UnsupportedOutputFormat


LOSSY_EXTENSIONS = {".jpg", ".jpeg"}


def validate_png_path(path: Union[str, Path]) -> None:
    """
    Reject carrier paths whose format would destroy embedded bits
    
    Args:
        path: Output image path, or a carrier path to be decoded
        
    Raises:
        UnsupportedOutputFormat: If the path names a JPEG
    """
    if Path(path).suffix.lower() in LOSSY_EXTENSIONS:
        raise UnsupportedOutputFormat(
            "JPEG format is not supported. JPEG's lossy compression will destroy the hidden data. "
            "Please use PNG format instead."
        )


def validate_output_path(path: Union[str, Path]) -> None:
    """
    Encoded carriers are always written as PNG
    
    Raises:
        UnsupportedOutputFormat: If the suffix is anything but .png
    """
    validate_png_path(path)
    if Path(path).suffix.lower() != ".png":
        raise UnsupportedOutputFormat(f"Output image must be a .png file, got '{path}'")


def validate_carrier_list(paths: Sequence[Union[str, Path]]) -> None:
    """
    Raises:
        ValueError: If no carriers were given
    """
    if not paths:
        raise ValueError("No input images provided")


def validate_unique_output_names(inputs: Sequence[Union[str, Path]], names: Sequence[str]) -> None:
    """
    Make sure no two carriers of a set would be written to the same file
    
    Args:
        inputs: Carrier input paths
        names: Output file name chosen for each input
        
    Raises:
        StegoError: If two inputs map to one output name
    """
    # case-folded so the check also holds on case-insensitive filesystems
    seen: Dict[str, List[str]] = {}
    for source, name in zip(inputs, names):
        seen.setdefault(name.lower(), []).append(str(source))

    clashes = {name: sources for name, sources in seen.items() if len(sources) > 1}
    if clashes:
        described = "; ".join(f"{', '.join(sources)} -> {name}" for name, sources in clashes.items())
        raise StegoError(f"Input images would overwrite each other's output: {described}", details=clashes)
