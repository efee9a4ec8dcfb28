"""Raster image ingestion into RGBA pixel buffers."""
import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from tracevec.types import DecodeError, PixelBuffer

ImageSource = Union[str, Path, bytes, Image.Image]


def decode(source: ImageSource) -> PixelBuffer:
    """
    Decode an image into an 8-bit RGBA pixel buffer.

    Args:
        source: Path to an image file, encoded image bytes, or a PIL image

    Returns:
        PixelBuffer with top-left origin

    Raises:
        DecodeError: If the file is missing or cannot be decoded
    """
    if isinstance(source, Image.Image):
        return _to_buffer(source)

    if isinstance(source, (bytes, bytearray)):
        try:
            img = Image.open(io.BytesIO(source))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise DecodeError(f"Failed to decode image bytes: {e}") from e
        return _to_buffer(img)

    path = Path(source)

    if not path.exists():
        raise DecodeError(f"Image file not found: {path}")

    if not path.is_file():
        raise DecodeError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            img.load()
            return _to_buffer(img)
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeError(f"Failed to load image {path}: {e}") from e


def _to_buffer(img: Image.Image) -> PixelBuffer:
    # Only the first frame of multi-frame images is used
    img = ImageOps.exif_transpose(img)
    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return PixelBuffer.from_array(np.array(img))
