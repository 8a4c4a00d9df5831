"""
Image Decoding
==============

Decodes embedded images (PNG, JPEG, BMP...) into RasterImage objects
for the ESC/POS raster encoder. Uses Pillow.
"""

import base64
import binascii
from io import BytesIO
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError


class RasterImage:
    """Decoded RGB bitmap."""

    def __init__(self, img: Image.Image):
        if img.mode != 'RGB':
            img = _flatten(img)
        self._img = img
        self._pixels = img.load()

    @property
    def width(self) -> int:
        return self._img.width

    @property
    def height(self) -> int:
        return self._img.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        """RGB value of the pixel at (x, y)."""
        return self._pixels[x, y]


def _flatten(img: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency on white."""
    if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
        rgba = img.convert('RGBA')
        background = Image.new('RGB', rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        return background
    return img.convert('RGB')


def decode(data: bytes, max_width: Optional[int] = None) -> RasterImage:
    """
    Decode image bytes.

    Args:
        data: Raw image bytes
        max_width: Scale down proportionally when wider (optional)

    Returns:
        RasterImage

    Raises:
        DecodeError: empty or malformed input
    """
    if not data:
        raise DecodeError('Empty image data')

    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f'Invalid image: {e}') from e

    if max_width and img.width > max_width:
        ratio = max_width / img.width
        img = img.resize((max_width, max(1, int(img.height * ratio))), Image.Resampling.LANCZOS)

    return RasterImage(img)


def decode_base64(data: Union[str, bytes], max_width: Optional[int] = None) -> RasterImage:
    """Decode a base64 image, tolerating a data: URI prefix."""
    if isinstance(data, str):
        if data.startswith('data:') and ',' in data:
            data = data.split(',', 1)[1]
        data = data.encode('ascii', errors='ignore')

    try:
        raw = base64.b64decode(data, validate=False)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f'Invalid base64 image: {e}') from e

    return decode(raw, max_width=max_width)
