"""
Base Transport
==============

A transport moves finished printer bytes to a device. It never raises
for device problems: `send` returns False and logs the failing stage.
"""

import unicodedata
from abc import ABC, abstractmethod
from typing import List, Optional


def normalize_name(printer_name: Optional[str]) -> str:
    """Trim and NFC-normalize a printer name."""
    return unicodedata.normalize('NFC', (printer_name or '').strip())


class BaseTransport(ABC):
    """Abstract base class for printer transports."""

    name = 'base'

    @abstractmethod
    def send(self, printer_name: str, data: bytes) -> bool:
        """
        Write raw bytes to a printer as one document.

        Returns:
            True when every stage succeeded
        """
        pass

    @abstractmethod
    def list_printers(self) -> List[str]:
        """Names of the printers this transport can reach."""
        pass

    def default_printer(self) -> Optional[str]:
        """System default printer, if the platform has one."""
        printers = self.list_printers()
        return printers[0] if printers else None
