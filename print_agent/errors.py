"""
Print Agent Errors
==================

Error taxonomy shared by the encoders, the queue and the HTTP layer.
Each error carries the HTTP status the request surface answers with.
"""


class PrintAgentError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 500

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'success': False, 'status': 'error', 'error': self.message}


class ValidationError(PrintAgentError):
    """Missing or malformed required field. Nothing was printed."""

    status_code = 400


class DecodeError(PrintAgentError):
    """Embedded image could not be decoded."""

    status_code = 422


class TransportError(PrintAgentError):
    """Printer unreachable or write failed."""

    status_code = 502


class ConfigError(PrintAgentError):
    """Rejected configuration change (e.g. unknown printer name)."""

    status_code = 400
