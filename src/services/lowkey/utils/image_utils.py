"""
Image utility functions for steganography operations
"""

import httpx
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image, UnidentifiedImageError

from ..core.bit_codec import Carrier
from ..core.errors import CarrierIOError


IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg"}


def load_image_from_input(file: Optional[BytesIO] = None, url: Optional[str] = None) -> Image.Image:
    """
    Load an image from either a file object or URL
    
    Args:
        file: BytesIO object containing image data
        url: URL to fetch image from
        
    Returns:
        PIL Image object
        
    Raises:
        ValueError: If neither file nor url is provided
    """
    if file is not None:
        return Image.open(file)
    if url is not None:
        with httpx.Client(timeout=30) as client:
            resp = client.get(url)
            resp.raise_for_status()
            return Image.open(BytesIO(resp.content))
    raise ValueError("Provide file or url")


def load_carrier(path: Union[str, Path]) -> Carrier:
    """
    Decode any raster Pillow understands into an RGBA carrier
    
    Args:
        path: Image file to read
        
    Returns:
        Carrier remembering its source path
        
    Raises:
        CarrierIOError: If the file is missing or not a readable image
    """
    path = Path(path)
    try:
        with Image.open(path) as image:
            image.load()
            return Carrier.from_image(image, source_path=path)
    except FileNotFoundError as e:
        raise CarrierIOError("Image file not found", path) from e
    except (UnidentifiedImageError, OSError) as e:
        raise CarrierIOError("Failed to open image", path, e) from e


def collect_images_from_dir(directory: Union[str, Path]) -> List[Path]:
    """
    List image files in a directory, sorted by path
    
    Args:
        directory: Directory to scan (not recursive)
        
    Returns:
        Paths with a png/jpg/jpeg extension, case-insensitive
        
    Raises:
        ValueError: If the path is not a directory or holds no images
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ValueError(f"'{directory}' is not a directory")

    image_files = sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    )
    if not image_files:
        raise ValueError(f"No image files found in directory '{directory}'")
    return image_files


def output_name_for(input_path: Union[str, Path]) -> str:
    """File name for an encoded carrier; JPEG inputs come out as PNG."""
    path = Path(input_path)
    if path.suffix.lower() in {".jpg", ".jpeg"}:
        return path.with_suffix(".png").name
    return path.name
