"""
Print Job Model
===============

Represents a print job in the queue.
"""

import uuid
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Union


class JobKind(str, Enum):
    """What the payload holds."""

    TEXT = 'text'  # plain text, printed as ESC/POS with a cut
    ZPL = 'zpl'  # ZPL label markup
    RAW = 'raw'  # pre-rendered ESC/POS bytes (tickets, QR)


class JobState(str, Enum):
    """Job lifecycle: QUEUED -> IN_FLIGHT -> DELIVERED | FAILED."""

    QUEUED = 'queued'
    IN_FLIGHT = 'in_flight'
    DELIVERED = 'delivered'
    FAILED = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DELIVERED, JobState.FAILED)


@dataclass(frozen=True)
class PrintJob:
    """Immutable unit of work for the print worker."""

    kind: JobKind
    payload: Union[str, bytes]

    # Target printer; None resolves to the preferred printer at dispatch
    printer: Optional[str] = None

    id: str = field(default_factory=lambda: f"JOB-{str(uuid.uuid4())[:8].upper()}")
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        kind = JobKind(self.kind)
        object.__setattr__(self, 'kind', kind)
        expected = bytes if kind is JobKind.RAW else str
        if not isinstance(self.payload, expected):
            raise TypeError(f'{kind.value} job payload must be {expected.__name__}')

    def to_dict(self) -> Dict[str, Any]:
        """Summary for JSON responses and logs (payload omitted)."""
        return {
            'id': self.id,
            'kind': self.kind.value,
            'printer': self.printer,
            'size': len(self.payload),
            'created_at': self.created_at.isoformat(),
        }
