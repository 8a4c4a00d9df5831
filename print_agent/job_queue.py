"""
Print Job Queue
===============

Unbounded FIFO of print jobs drained by one background worker thread.

The worker is the only code path that writes to the printer, so at most
one job is ever in flight. Any other caller that must reach the printer
goes through `send`, which takes the same transport lock.
"""

import queue
import threading
from typing import Dict, Optional

from .errors import TransportError
from .handlers import get_handler
from .logger import logger
from .models import JobState, PrintJob
from .printers import BaseTransport, PrinterDirectory

_STOP = object()


class JobHandle:
    """Tracks one enqueued job through its states."""

    def __init__(self, job: PrintJob):
        self.job = job
        self.state = JobState.QUEUED
        self.error: Optional[str] = None
        self._done = threading.Event()

    def _set(self, state: JobState, error: Optional[str] = None):
        self.state = state
        self.error = error
        if state.is_terminal:
            self._done.set()

    def wait(self, timeout: Optional[float] = None) -> JobState:
        """Block until the job is delivered or failed (or timeout)."""
        self._done.wait(timeout)
        return self.state


class PrintQueue:
    """Single-consumer print queue."""

    def __init__(self, transport: BaseTransport, directory: Optional[PrinterDirectory] = None):
        self.transport = transport
        self.directory = directory
        self.transport_lock = threading.Lock()
        self._queue: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    # =========================================================================
    # Producer side
    # =========================================================================

    def enqueue(self, job: PrintJob) -> JobHandle:
        """Append a job to the tail of the queue. Never blocks."""
        handle = JobHandle(job)
        self._queue.put(handle)
        logger.info("Job %s (%s) queued", job.id, job.kind.value)
        return handle

    def send(self, printer_name: str, data: bytes) -> bool:
        """Write to the transport while holding the transport lock."""
        with self.transport_lock:
            return self.transport.send(printer_name, data)

    # =========================================================================
    # Worker
    # =========================================================================

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start the worker thread (no-op when already running)."""
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name='print-worker', daemon=True)
        self._thread.start()
        logger.info("Print worker started")

    def stop(self, timeout: Optional[float] = None):
        """Stop the worker after the jobs already queued."""
        if not self.running:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        logger.info("Print worker stopped")

    def join(self):
        """Block until every queued job has been processed."""
        self._queue.join()

    def _run(self):
        while True:
            handle = self._queue.get()
            try:
                if handle is _STOP:
                    return
                self.process(handle)
            finally:
                self._queue.task_done()

    def _resolve_printer(self, job: PrintJob) -> str:
        if job.printer:
            return job.printer
        if self.directory:
            return self.directory.get_preferred()
        return ''

    def process(self, handle: JobHandle) -> JobState:
        """Deliver one job. Failures are logged, never raised or retried."""
        job = handle.job
        handle._set(JobState.IN_FLIGHT)

        try:
            handler = get_handler(job.kind)()
            data = handler.prepare(job.payload)

            printer_name = self._resolve_printer(job)
            if not printer_name:
                raise TransportError('No printer configured')

            if not self.send(printer_name, data):
                raise TransportError(f"Printer '{printer_name}' did not accept the job")

        except TransportError as e:
            handle._set(JobState.FAILED, e.message)
            logger.error("Job %s (%s) failed: %s", job.id, job.kind.value, e.message)
            return handle.state
        except Exception as e:
            handle._set(JobState.FAILED, str(e))
            logger.exception("Job %s (%s) failed", job.id, job.kind.value)
            return handle.state

        handle._set(JobState.DELIVERED)
        logger.info("Job %s (%s) printed on %s (%d bytes)", job.id, job.kind.value, printer_name, len(data))
        return handle.state

    def state(self) -> Dict[str, object]:
        return {
            'queue_len': self._queue.qsize(),
            'running': self.running,
        }
