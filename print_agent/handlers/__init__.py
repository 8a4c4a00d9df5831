"""
Print Agent Handlers
====================

Protocol handlers, one per job kind.
"""

from .base import BaseHandler, RawHandler
from .zpl import ZPLHandler
from .escpos import ESCPOSHandler

__all__ = ['BaseHandler', 'RawHandler', 'ZPLHandler', 'ESCPOSHandler', 'get_handler']

# Handler registry, keyed by job kind
HANDLERS = {
    'text': ESCPOSHandler,
    'zpl': ZPLHandler,
    'raw': RawHandler,
}


def get_handler(kind: str) -> type:
    """Get handler class by job kind."""
    return HANDLERS.get(getattr(kind, 'value', kind))
