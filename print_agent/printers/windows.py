"""
Windows Spooler Transport
=========================

RAW documents through the Windows print spooler (pywin32).
"""

from typing import List, Optional

from .base import BaseTransport, normalize_name
from ..logger import logger


class WindowsSpoolerTransport(BaseTransport):
    """Send bytes to an installed Windows printer."""

    name = 'windows'
    DOC_NAME = 'Print Agent Job'

    def send(self, printer_name: str, data: bytes) -> bool:
        import win32print

        printer_name = normalize_name(printer_name)
        handle = None
        doc_started = page_started = False
        stage = 'OpenPrinter'
        ok = False

        try:
            handle = win32print.OpenPrinter(printer_name)

            stage = 'StartDocPrinter'
            win32print.StartDocPrinter(handle, 1, (self.DOC_NAME, None, 'RAW'))
            doc_started = True

            stage = 'StartPagePrinter'
            win32print.StartPagePrinter(handle)
            page_started = True

            stage = 'WritePrinter'
            written = win32print.WritePrinter(handle, data)
            if written != len(data):
                logger.error("WritePrinter wrote %s of %s bytes to '%s'", written, len(data), printer_name)
            else:
                ok = True

        except Exception as e:
            logger.error("%s failed for '%s': %s", stage, printer_name, e)

        if handle is None:
            return ok

        # Teardown in reverse order; the handle is closed even if an end stage fails
        if page_started and not self._end_stage(win32print.EndPagePrinter, handle, printer_name):
            ok = False
        if doc_started and not self._end_stage(win32print.EndDocPrinter, handle, printer_name):
            ok = False
        if not self._end_stage(win32print.ClosePrinter, handle, printer_name):
            ok = False

        return ok

    @staticmethod
    def _end_stage(call, handle, printer_name: str) -> bool:
        """Run one session teardown call; failures are logged, not raised."""
        try:
            call(handle)
            return True
        except Exception as e:
            logger.error("%s failed for '%s': %s", call.__name__, printer_name, e)
            return False

    def list_printers(self) -> List[str]:
        import win32print

        printers = win32print.EnumPrinters(
            win32print.PRINTER_ENUM_LOCAL | win32print.PRINTER_ENUM_CONNECTIONS
        )
        return [p[2] for p in printers]

    def default_printer(self) -> Optional[str]:
        import win32print

        try:
            return win32print.GetDefaultPrinter()
        except Exception as e:
            logger.warning("No default printer: %s", e)
            return None
