"""
ZPL Handler
===========

Handler for ZPL (Zebra Programming Language) label printers.
"""

from typing import Union

from .base import BaseHandler


class ZPLHandler(BaseHandler):
    """Handler for ZPL-compatible printers."""

    TERMINATOR = '\r\n'

    def prepare(self, payload: Union[str, bytes]) -> bytes:
        """ZPL job: UTF-8 text ending in CRLF."""
        if isinstance(payload, bytes):
            payload = payload.decode('utf-8', errors='replace')
        if not payload.endswith(self.TERMINATOR):
            payload += self.TERMINATOR
        return payload.encode('utf-8')

    @staticmethod
    def field_data(text) -> str:
        """Field text with ZPL control characters (^ and ~) removed."""
        return str(text).replace('^', '').replace('~', '').strip()
