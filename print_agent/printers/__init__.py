"""
Printer transports and directory.
"""

import platform

from .base import BaseTransport
from .cups import CupsTransport
from .directory import PrinterDirectory
from .network import NetworkTransport
from .windows import WindowsSpoolerTransport
from ..config import NETWORK_PRINTERS, TRANSPORT

__all__ = [
    'BaseTransport', 'CupsTransport', 'NetworkTransport', 'WindowsSpoolerTransport',
    'PrinterDirectory', 'get_transport',
]

TRANSPORTS = {
    'windows': WindowsSpoolerTransport,
    'cups': CupsTransport,
    'network': NetworkTransport,
}


def get_transport(name: str = TRANSPORT) -> BaseTransport:
    """Transport by name; 'auto' picks the platform spooler."""
    if name == 'auto':
        name = 'windows' if platform.system() == 'Windows' else 'cups'

    if name == 'network':
        return NetworkTransport(NETWORK_PRINTERS)

    transport_class = TRANSPORTS.get(name)
    if not transport_class:
        raise ValueError(f'Unknown transport {name!r}. Valid: auto, {", ".join(TRANSPORTS)}')
    return transport_class()
