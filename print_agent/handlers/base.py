"""
Base Handler
============

Abstract base class for protocol handlers. A handler turns a job payload
into the exact bytes written to the printer transport.
"""

from abc import ABC, abstractmethod
from typing import Union

from ..config import TEXT_ENCODING


class BaseHandler(ABC):
    """Abstract base class for protocol handlers."""

    def __init__(self, encoding: str = TEXT_ENCODING):
        self.encoding = encoding

    @abstractmethod
    def prepare(self, payload: Union[str, bytes]) -> bytes:
        """
        Convert a job payload to printer bytes.

        Args:
            payload: Job payload (text, ZPL or pre-rendered bytes)

        Returns:
            Bytes ready for the transport
        """
        pass


class RawHandler(BaseHandler):
    """Pass-through for payloads that are already printer bytes."""

    def prepare(self, payload: Union[str, bytes]) -> bytes:
        if isinstance(payload, str):
            return payload.encode(self.encoding, errors='replace')
        return bytes(payload)
