"""
Print Agent Client
==================

Python SDK for the Print Agent HTTP API.

Usage:
    from print_agent.client import PrintAgentClient

    client = PrintAgentClient('http://localhost:5000')

    # Printers
    client.list_printers()
    client.set_preferred_printer('POS-80')

    # Labels
    client.print_labels([{'codigo_barra': '123456', 'nombre': 'Coffee'}], profile='ean8')

    # Ticket with a logo
    with open('logo.png', 'rb') as f:
        client.print_ticket({'items': [...]}, logo=f.read())
"""

import base64
from typing import Any, Dict, List, Optional, Union

import requests


def _b64(image: Union[bytes, str, None]) -> Optional[str]:
    if image is None or isinstance(image, str):
        return image
    return base64.b64encode(image).decode('ascii')


class PrintAgentClient:
    """Client for the Print Agent."""

    def __init__(self, base_url: str = 'http://localhost:5000', timeout: int = 60):
        """
        Initialize client.

        Args:
            base_url: Base URL of the print agent
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, data: Dict = None) -> Dict[str, Any]:
        """Make API request."""
        url = f'{self.base_url}{endpoint}'

        try:
            if method == 'GET':
                response = requests.get(url, timeout=self.timeout)
            elif method == 'POST':
                response = requests.post(url, json=data or {}, timeout=self.timeout)
            else:
                raise ValueError(f'Unknown method: {method}')

            return response.json()

        except requests.exceptions.Timeout:
            return {'success': False, 'error': 'Request timeout'}
        except requests.exceptions.ConnectionError:
            return {'success': False, 'error': f'Cannot connect to {self.base_url}'}
        except ValueError as e:
            return {'success': False, 'error': f'Invalid response: {e}'}

    # =========================================================================
    # Health
    # =========================================================================

    def health(self) -> Dict[str, Any]:
        """Check service health."""
        return self._request('GET', '/health')

    def is_online(self) -> bool:
        """Check if service is online."""
        return self.health().get('status') == 'online'

    # =========================================================================
    # Printers
    # =========================================================================

    def list_printers(self) -> Dict[str, Any]:
        """Installed, default and preferred printers."""
        return self._request('GET', '/printers')

    def set_preferred_printer(self, name: str) -> Dict[str, Any]:
        return self._request('POST', '/config', {'printer': name})

    def reload_config(self) -> Dict[str, Any]:
        return self._request('POST', '/config/reload')

    # =========================================================================
    # Printing
    # =========================================================================

    def print_text(self, text: str) -> Dict[str, Any]:
        """Print raw text (cut afterwards)."""
        return self._request('POST', '/print_text', {'text': text})

    def print_labels(self, items: List[Dict[str, Any]], profile: str = None) -> Dict[str, Any]:
        """
        Queue barcode labels.

        Args:
            items: [{'codigo_barra': ..., 'nombre': ..., 'precio': ...}]
            profile: Label profile (code128, ean8, ean8_rotated, price_tag)
        """
        data = {'valores': items}
        if profile:
            data['profile'] = profile
        return self._request('POST', '/print_zpl', data)

    def print_zpl(self, zpl: str) -> Dict[str, Any]:
        """Queue raw ZPL."""
        return self._request('POST', '/print_zpl_raw', {'zpl': zpl})

    def print_ticket(self, ticket: Dict[str, Any], logo: Union[bytes, str] = None,
                     qr: Union[bytes, str] = None) -> Dict[str, Any]:
        """Print a ticket; images may be bytes or base64 text."""
        data = dict(ticket)
        if logo is not None:
            data['logo'] = _b64(logo)
        if qr is not None:
            data['qr'] = _b64(qr)
        return self._request('POST', '/print_ticket', data)

    def print_qr(self, qr: Union[bytes, str], text_top: str = '', text_bottom: str = '') -> Dict[str, Any]:
        """Print a QR image between two text blocks."""
        return self._request('POST', '/print_qr', {
            'qr': _b64(qr),
            'text_top': text_top,
            'text_bottom': text_bottom,
        })

    def print_qr_file(self, file_path: str, **kwargs) -> Dict[str, Any]:
        """Print a QR image file."""
        with open(file_path, 'rb') as f:
            return self.print_qr(f.read(), **kwargs)
