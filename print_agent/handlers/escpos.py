"""
ESC/POS Handler
===============

Command bytes for ESC/POS thermal receipt printers: text, raster
bitmaps and paper cut.
"""

from typing import Union

from .base import BaseHandler
from ..errors import ValidationError


class ESCPOSHandler(BaseHandler):
    """Handler for ESC/POS receipt printers."""

    # ESC/POS commands
    INIT = b'\x1b\x40'  # Initialize printer
    CUT = b'\x1d\x56\x41\x00'  # Feed to cut position and full cut
    FEED = b'\x1b\x64'  # Feed lines
    LF = b'\n'

    # Raster line: ESC * m nL nH, m = 0x21
    RASTER_LINE = b'\x1b\x2a\x21'

    # Alignment
    ALIGN_LEFT = b'\x1b\x61\x00'
    ALIGN_CENTER = b'\x1b\x61\x01'

    # Luminance below this prints as a dot
    THRESHOLD = 128

    def prepare(self, payload: Union[str, bytes]) -> bytes:
        """Raw text job: init, text, feed and cut."""
        data = bytearray()
        data.extend(self.INIT)
        data.extend(self.encode_text(payload))
        if not data.endswith(self.LF):
            data.extend(self.LF)
        data.extend(self.feed(3))
        data.extend(self.CUT)
        return bytes(data)

    def encode_text(self, text: Union[str, bytes]) -> bytes:
        """Encode text with the configured code page."""
        if isinstance(text, bytes):
            return text
        return text.encode(self.encoding, errors='replace')

    def line(self, text: str = '') -> bytes:
        """One text line, terminated by LF."""
        return self.encode_text(text) + self.LF

    def feed(self, lines: int = 3) -> bytes:
        """Feed paper by `lines` lines."""
        return self.FEED + bytes([max(0, min(lines, 255))])

    def encode_raster(self, image) -> bytes:
        """
        Convert a RasterImage to ESC/POS raster lines.

        Each row is `ESC * 0x21 nL nH`, ceil(width/8) packed bytes (MSB is
        the leftmost pixel, set when average RGB < 128) and a line feed.

        Raises:
            ValidationError: zero-dimension image
        """
        width, height = image.width, image.height
        if width <= 0 or height <= 0:
            raise ValidationError(f'Image has no pixels ({width}x{height})')

        width_bytes = (width + 7) // 8

        data = bytearray()
        for y in range(height):
            data.extend(self.RASTER_LINE)
            data.append(width_bytes % 256)  # nL
            data.append(width_bytes // 256)  # nH

            for x_byte in range(width_bytes):
                byte = 0
                for bit in range(8):
                    x = x_byte * 8 + bit
                    if x < width:
                        r, g, b = image.pixel(x, y)[:3]
                        if (r + g + b) // 3 < self.THRESHOLD:  # Dark pixel
                            byte |= (1 << (7 - bit))
                data.append(byte)

            data.append(0x0A)

        return bytes(data)


def encode(image) -> bytes:
    """Encode a RasterImage with the default ESC/POS handler."""
    return ESCPOSHandler().encode_raster(image)
