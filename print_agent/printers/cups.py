"""
CUPS Transport
==============

RAW jobs through the CUPS command line tools (lp / lpstat).
"""

import subprocess
from typing import List, Optional

from .base import BaseTransport, normalize_name
from ..config import DEFAULT_TIMEOUT
from ..logger import logger


class CupsTransport(BaseTransport):
    """Send bytes to a CUPS queue."""

    name = 'cups'

    def _run(self, args: List[str], data: Optional[bytes] = None) -> Optional[subprocess.CompletedProcess]:
        try:
            return subprocess.run(args, input=data, capture_output=True, timeout=DEFAULT_TIMEOUT)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("%s failed: %s", args[0], e)
            return None

    def send(self, printer_name: str, data: bytes) -> bool:
        printer_name = normalize_name(printer_name)
        result = self._run(['lp', '-d', printer_name, '-o', 'raw'], data)
        if result is None:
            return False
        if result.returncode != 0:
            logger.error("lp rejected job for '%s': %s", printer_name,
                         result.stderr.decode(errors='replace').strip())
            return False
        return True

    def list_printers(self) -> List[str]:
        result = self._run(['lpstat', '-a'])
        if result is None or result.returncode != 0:
            return []
        out = result.stdout.decode(errors='replace')
        return [line.split()[0] for line in out.splitlines() if line.strip()]

    def default_printer(self) -> Optional[str]:
        result = self._run(['lpstat', '-d'])
        if result is None or result.returncode != 0:
            return None
        # "system default destination: NAME"
        out = result.stdout.decode(errors='replace').strip()
        if ':' in out:
            return out.split(':', 1)[1].strip() or None
        return None
