"""
Print Service
=============

Transport-agnostic request operations. Each returns a small result dict
({'success': ..., 'status': ...}) or raises a PrintAgentError.

Label batches and raw ZPL return as soon as they are queued. Text,
tickets and QR prints also go through the queue, but wait for the
worker so the caller learns whether the printer took them.
"""

from typing import Any, Dict, Optional

from .config import COLUMN_WIDTH, MAX_IMAGE_WIDTH, SYNC_TIMEOUT
from .errors import ValidationError, TransportError
from .job_queue import JobHandle, PrintQueue
from .labels import build_labels, get_profile
from .models import JobKind, JobState, PrintJob
from .printers import PrinterDirectory
from .ticket import TicketLayout, TicketModel


class PrintService:
    """Print operations backed by the job queue."""

    def __init__(self, print_queue: PrintQueue, directory: PrinterDirectory,
                 column_width: int = COLUMN_WIDTH,
                 max_image_width: int = MAX_IMAGE_WIDTH,
                 label_profile: Optional[str] = None,
                 sync_timeout: float = SYNC_TIMEOUT):
        self.queue = print_queue
        self.directory = directory
        self.column_width = column_width
        self.max_image_width = max_image_width
        self.label_profile = label_profile
        self.sync_timeout = sync_timeout

    def _layout(self) -> TicketLayout:
        return TicketLayout(self.column_width, self.max_image_width)

    def _wait(self, handle: JobHandle) -> Dict[str, Any]:
        state = handle.wait(self.sync_timeout)

        if state is JobState.FAILED:
            raise TransportError(handle.error or 'Print failed')

        if state is JobState.DELIVERED:
            return {'success': True, 'status': 'printed', 'job': handle.job.to_dict()}

        return {'success': True, 'status': 'pending', 'job': handle.job.to_dict()}

    # =========================================================================
    # Printers
    # =========================================================================

    def printers(self) -> Dict[str, Any]:
        return self.directory.to_dict()

    def set_preferred(self, printer_name: Any) -> Dict[str, Any]:
        if not isinstance(printer_name, str) or not printer_name.strip():
            raise ValidationError("Missing field 'printer'")
        self.directory.set_preferred(printer_name)
        return {'success': True, 'status': 'ok', 'preferredPrinter': self.directory.get_preferred()}

    def reload_config(self) -> Dict[str, Any]:
        self.directory.reload()
        return {'success': True, 'status': 'ok', 'preferredPrinter': self.directory.get_preferred()}

    # =========================================================================
    # Print operations
    # =========================================================================

    def print_text(self, text: Any) -> Dict[str, Any]:
        """(a) Raw text, printed with a trailing cut."""
        if not isinstance(text, str):
            raise ValidationError("Missing field 'text'")
        return self._wait(self.queue.enqueue(PrintJob(JobKind.TEXT, text)))

    def print_labels(self, items: Any, profile: Optional[str] = None) -> Dict[str, Any]:
        """(b) Barcode label batch, generated as ZPL and queued."""
        if not isinstance(items, list) or not items:
            raise ValidationError("Missing array 'valores' with name and barcode")

        layout = get_profile(profile or self.label_profile)
        batch = build_labels(items, layout)
        if not batch.rendered:
            raise ValidationError('No valid label items')

        job = PrintJob(JobKind.ZPL, batch.zpl)
        self.queue.enqueue(job)
        return {
            'success': True,
            'status': 'queued',
            'labels': batch.rendered,
            'skipped': batch.skipped,
            'profile': layout.name,
            'job': job.to_dict(),
        }

    def print_zpl(self, zpl: Any) -> Dict[str, Any]:
        """(c) Raw ZPL, queued as given."""
        if not isinstance(zpl, str) or not zpl.strip():
            raise ValidationError("Missing field 'zpl'")
        job = PrintJob(JobKind.ZPL, zpl)
        self.queue.enqueue(job)
        return {'success': True, 'status': 'queued', 'job': job.to_dict()}

    def print_ticket(self, data: Any) -> Dict[str, Any]:
        """(d) Full ticket."""
        model = TicketModel.from_dict(data)
        layout = self._layout()
        payload = layout.render(model)

        result = self._wait(self.queue.enqueue(PrintJob(JobKind.RAW, payload)))
        result['warnings'] = list(layout.warnings)
        return result

    def print_qr(self, qr: Any, text_top: Any = None, text_bottom: Any = None) -> Dict[str, Any]:
        """(e) QR image between two text blocks."""
        if qr is not None and not isinstance(qr, str):
            raise ValidationError("Field 'qr' must be a base64 string")
        for name, value in (('text_top', text_top), ('text_bottom', text_bottom)):
            if value is not None and not isinstance(value, (str, list)):
                raise ValidationError(f"Field '{name}' must be text")

        payload = self._layout().render_qr(qr, text_top, text_bottom)
        return self._wait(self.queue.enqueue(PrintJob(JobKind.RAW, payload)))

    def health(self) -> Dict[str, Any]:
        return {'queue': self.queue.state()}

