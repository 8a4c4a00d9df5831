"""
Printer Directory
=================

Installed printers, the system default, and the persisted preferred printer.
"""

from typing import List

from .base import BaseTransport, normalize_name
from ..config import PrinterSettings
from ..errors import ConfigError
from ..logger import logger


class PrinterDirectory:
    """Printer lookup and preference management."""

    def __init__(self, transport: BaseTransport, settings: PrinterSettings):
        self.transport = transport
        self.settings = settings

    def list_installed(self) -> List[str]:
        return self.transport.list_printers()

    def get_system_default(self) -> str:
        return self.transport.default_printer() or ''

    def get_preferred(self) -> str:
        """Preferred printer, falling back to the system default."""
        return self.settings.preferred_printer or self.get_system_default()

    def set_preferred(self, printer_name: str):
        """
        Change and persist the preferred printer.

        Raises:
            ConfigError: printer not installed
        """
        printer_name = normalize_name(printer_name)
        if not printer_name or printer_name not in self.list_installed():
            raise ConfigError(f"Printer '{printer_name}' not found.")

        self.settings.preferred_printer = printer_name
        self.settings.save()
        logger.info("Preferred printer: %s", printer_name)

    def reload(self):
        """Re-read the persisted preference."""
        self.settings.reload()
        logger.info("Printer settings reloaded (preferred=%s)", self.settings.preferred_printer)

    def to_dict(self):
        return {
            'defaultPrinter': self.get_system_default(),
            'preferredPrinter': self.get_preferred(),
            'printers': self.list_installed(),
        }
