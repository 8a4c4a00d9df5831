"""
Print Agent
===========

Local print service for point-of-sale clients and kiosks.

Turns semantic print requests into printer-native byte streams:
- Raw text (ESC/POS, with trailing cut)
- ESC/POS raster bitmaps (logos, QR images)
- ZPL label markup (Code128 / EAN-8 barcode labels)
- Fixed-width receipts (tickets)

All output reaches the device through a single-writer job queue.

Usage:
    python -m print_agent

API Endpoints:
    GET  /printers        - Installed, default and preferred printers
    POST /config          - Set preferred printer
    POST /print_text      - Print raw text
    POST /print_zpl       - Queue barcode labels
    POST /print_zpl_raw   - Queue raw ZPL
    POST /print_ticket    - Print a receipt
    POST /print_qr        - Print QR image between two text blocks
"""

__version__ = '1.0.0'
__author__ = 'Print Agent Developers'
