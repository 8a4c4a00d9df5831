"""
Network Transport
=================

Raw TCP (port 9100) printing. Printer names are "host" or "host:port".
"""

import socket
from typing import List, Optional, Tuple

from .base import BaseTransport, normalize_name
from ..config import DEFAULT_TIMEOUT, NETWORK_PORT
from ..logger import logger


class NetworkTransport(BaseTransport):
    """Send bytes straight to a network printer socket."""

    name = 'network'

    def __init__(self, printers: Optional[List[str]] = None, timeout: int = DEFAULT_TIMEOUT):
        self.printers = list(printers or [])
        self.timeout = timeout

    @staticmethod
    def _address(printer_name: str) -> Tuple[str, int]:
        host, _, port = printer_name.rpartition(':')
        if host and port.isdigit():
            return host, int(port)
        return printer_name, NETWORK_PORT

    def send(self, printer_name: str, data: bytes) -> bool:
        host, port = self._address(normalize_name(printer_name))

        if not host:
            logger.error("Printer host not configured")
            return False

        try:
            with socket.create_connection((host, port), timeout=self.timeout) as sock:
                sock.sendall(data)
            return True

        except socket.timeout:
            logger.error("Connection timeout to %s:%s", host, port)
        except ConnectionRefusedError:
            logger.error("Connection refused by %s:%s", host, port)
        except OSError as e:
            logger.error("Send to %s:%s failed: %s", host, port, e)
        return False

    def list_printers(self) -> List[str]:
        return list(self.printers)
