"""
Print Agent - HTTP Application
==============================

Thin JSON dispatch over PrintService.

Run: python -m print_agent
"""

import platform
import socket
import sys
from datetime import datetime

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from . import __version__
from .config import (
    COLUMN_WIDTH, DATA_DIR, DEBUG, LABEL_PROFILE, LOG_LEVEL, MAX_IMAGE_WIDTH,
    SYNC_TIMEOUT, TRANSPORT, PrinterSettings, ServerConfig,
)
from .errors import PrintAgentError, ValidationError
from .job_queue import PrintQueue
from .logger import configure_logging, logger
from .printers import PrinterDirectory, get_transport
from .service import PrintService

api = Blueprint('api', __name__)


def _service() -> PrintService:
    return current_app.extensions['print_service']


def _body() -> dict:
    """JSON request body (object)."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body required')
    return data


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@api.route('/api', methods=['GET'])
def api_info():
    """API info (JSON)."""
    return jsonify({
        'service': 'Print Agent',
        'version': __version__,
        'status': 'running',
        'endpoints': {
            'health': '/health',
            'printers': '/printers',
            'config': '/config',
            'text': '/print_text',
            'labels': '/print_zpl',
            'zpl': '/print_zpl_raw',
            'ticket': '/print_ticket',
            'qr': '/print_qr',
        }
    })


@api.route('/health', methods=['GET'])
def health():
    """Health check with system info."""
    return jsonify({
        'status': 'online',
        'version': __version__,
        'hostname': socket.gethostname(),
        'platform': platform.system(),
        'python': sys.version.split()[0],
        'timestamp': datetime.now().isoformat(),
        **_service().health(),
    })


# =============================================================================
# Printer Configuration
# =============================================================================

@api.route('/printers', methods=['GET'])
def list_printers():
    """Installed, default and preferred printers."""
    return jsonify(_service().printers())


@api.route('/config', methods=['POST'])
def set_config():
    """Set the preferred printer."""
    data = _body()
    return jsonify(_service().set_preferred(data.get('printer')))


@api.route('/config/reload', methods=['POST'])
def reload_config():
    """Re-read printer settings from disk."""
    return jsonify(_service().reload_config())


# =============================================================================
# Print Endpoints
# =============================================================================

@api.route('/print', methods=['POST'])
@api.route('/print_text', methods=['POST'])
def print_text():
    """Print raw text with a trailing cut."""
    data = _body()
    return jsonify(_service().print_text(data.get('text')))


@api.route('/print_zpl', methods=['POST'])
def print_labels():
    """Queue a barcode label batch.

    Body:
        valores (or items): [{"codigo_barra": ..., "nombre": ..., "precio": ...}]
        profile: label profile name (optional)
    """
    data = _body()
    items = data.get('valores')
    if items is None:
        items = data.get('items')
    return jsonify(_service().print_labels(items, data.get('profile')))


@api.route('/print_zpl_raw', methods=['POST'])
def print_zpl_raw():
    """Queue raw ZPL."""
    data = _body()
    return jsonify(_service().print_zpl(data.get('zpl')))


@api.route('/print_ticket', methods=['POST'])
def print_ticket():
    """Render and print a ticket."""
    return jsonify(_service().print_ticket(_body()))


@api.route('/print_qr', methods=['POST'])
def print_qr():
    """Print a QR image between two text blocks."""
    data = _body()
    return jsonify(_service().print_qr(data.get('qr'), data.get('text_top'), data.get('text_bottom')))


# =============================================================================
# Error Handlers
# =============================================================================

def _handle_agent_error(e: PrintAgentError):
    logger.warning("%s %s -> %s: %s", request.method, request.path, type(e).__name__, e.message)
    return jsonify(e.to_dict()), e.status_code


def _handle_http_error(e: HTTPException):
    if e.code == 404:
        return jsonify({'success': False, 'status': 'error', 'error': 'not-found'}), 404
    return jsonify({'success': False, 'status': 'error', 'error': e.description}), e.code


def _handle_unexpected(e: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({'success': False, 'status': 'error', 'error': str(e)}), 500


# =============================================================================
# Application Setup
# =============================================================================

def create_app(service: PrintService) -> Flask:
    """Build the Flask app around a PrintService."""
    app = Flask(__name__)
    CORS(app)

    app.extensions['print_service'] = service
    app.register_blueprint(api)

    app.register_error_handler(PrintAgentError, _handle_agent_error)
    app.register_error_handler(HTTPException, _handle_http_error)
    app.register_error_handler(Exception, _handle_unexpected)

    return app


def build_service(settings: PrinterSettings = None) -> PrintService:
    """Wire transport, directory, queue and service from configuration."""
    settings = settings or PrinterSettings()
    transport = get_transport(TRANSPORT)
    directory = PrinterDirectory(transport, settings)
    print_queue = PrintQueue(transport, directory)
    print_queue.start()

    return PrintService(
        print_queue,
        directory,
        column_width=COLUMN_WIDTH,
        max_image_width=MAX_IMAGE_WIDTH,
        label_profile=LABEL_PROFILE,
        sync_timeout=SYNC_TIMEOUT,
    )


# =============================================================================
# Main
# =============================================================================

def main():
    """Run the service."""
    configure_logging(DATA_DIR, LOG_LEVEL)

    config = ServerConfig.load()
    service = build_service()
    app = create_app(service)

    host, port = config.address
    logger.info("Print Agent %s started on %s (transport=%s, printer=%s)",
                __version__, config.prefix, service.queue.transport.name,
                service.directory.get_preferred() or '-')

    app.run(host=host, port=port, debug=DEBUG, threaded=True, use_reloader=False)


if __name__ == '__main__':
    main()
