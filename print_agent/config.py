"""
Print Agent Configuration
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

from dotenv import dotenv_values

from .logger import logger

# =============================================================================
# Server Defaults
# =============================================================================

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 5000

DEBUG = os.environ.get('PRINTAGENT_DEBUG', 'false').lower() == 'true'
LOG_LEVEL = os.environ.get('PRINTAGENT_LOG_LEVEL', 'INFO')

# =============================================================================
# Storage Configuration
# =============================================================================

DATA_DIR = os.environ.get('PRINTAGENT_DATA_DIR', os.path.expanduser('~/.print_agent'))

# =============================================================================
# Printing Defaults
# =============================================================================

COLUMN_WIDTH = int(os.environ.get('PRINTAGENT_COLUMN_WIDTH', 48))
MAX_IMAGE_WIDTH = int(os.environ.get('PRINTAGENT_MAX_IMAGE_WIDTH', 576))  # 80 mm paper at 203 dpi
DPI = int(os.environ.get('PRINTAGENT_DPI', 203))
LABEL_PROFILE = os.environ.get('PRINTAGENT_LABEL_PROFILE', 'code128')
TEXT_ENCODING = os.environ.get('PRINTAGENT_TEXT_ENCODING', 'utf-8')
SYNC_TIMEOUT = float(os.environ.get('PRINTAGENT_SYNC_TIMEOUT', 30))
TRANSPORT = os.environ.get('PRINTAGENT_TRANSPORT', 'auto')  # auto, windows, cups, network

# Comma-separated host[:port] list for the network transport
NETWORK_PRINTERS = [p.strip() for p in os.environ.get('PRINTAGENT_NETWORK_PRINTERS', '').split(',') if p.strip()]

# Raw socket port for network printers
NETWORK_PORT = 9100
DEFAULT_TIMEOUT = 30  # seconds

ENV_TEMPLATE = """# Print Agent settings
# Edit and restart the agent, no reinstall needed.
#
# HOST: IP or hostname to bind (used when LISTEN_ALL=false)
HOST=localhost
PORT=5000
# LISTEN_ALL: true -> listen on every interface
LISTEN_ALL=false
# PREFIX: takes priority when set (e.g. http://0.0.0.0:7000/)
#PREFIX=http://0.0.0.0:5000/
"""

TRUE_VALUES = ('1', 'true', 'yes', 'y', 'on')


def _first_non_empty(*values) -> Optional[str]:
    for value in values:
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _parse_port(value: Optional[str], fallback: int) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        return fallback
    if 0 < port < 65536:
        return port
    return fallback


def _parse_bool(value: Optional[str], fallback: bool) -> bool:
    if value is None or not value.strip():
        return fallback
    return value.strip().lower() in TRUE_VALUES


# =============================================================================
# Server Configuration
# =============================================================================

@dataclass(frozen=True)
class ServerConfig:
    """Where the HTTP surface listens."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    listen_all: bool = False
    prefix: Optional[str] = None

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) to bind, taken from the prefix when it parses."""
        host = '0.0.0.0' if self.listen_all else self.host
        port = self.port

        if self.prefix:
            parsed = urlparse(self.prefix)
            if parsed.hostname:
                host = '0.0.0.0' if parsed.hostname in ('+', '*') else parsed.hostname
            try:
                port = parsed.port or port
            except ValueError:
                logger.warning("Config: invalid port in prefix %s", self.prefix)

        return host, port

    @classmethod
    def load(cls, env_path: Optional[str] = None) -> 'ServerConfig':
        """
        Load server settings.

        Priority:
            1) PRINTAGENT_PREFIX (full prefix)
            2) PRINTAGENT_HOST / PRINTAGENT_PORT / PRINTAGENT_LISTEN_ALL
            3) printagent.env file (or PRINTAGENT_ENV_PATH)
            4) defaults
        """
        env_path = env_path or os.environ.get('PRINTAGENT_ENV_PATH') \
            or os.path.join(DATA_DIR, 'printagent.env')

        path = Path(env_path)
        if path.exists():
            file_values = {k.upper(): v for k, v in dotenv_values(path).items()}
        else:
            file_values = {}
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(ENV_TEMPLATE, encoding='utf-8')
                logger.info("Config: template written to %s", path)
            except OSError as e:
                logger.warning("Config: could not write template %s: %s", path, e)

        host = _first_non_empty(os.environ.get('PRINTAGENT_HOST'), file_values.get('HOST')) or DEFAULT_HOST
        port = _parse_port(_first_non_empty(os.environ.get('PRINTAGENT_PORT'), file_values.get('PORT')), DEFAULT_PORT)
        listen_all = _parse_bool(_first_non_empty(os.environ.get('PRINTAGENT_LISTEN_ALL'), file_values.get('LISTEN_ALL')), False)

        prefix = _first_non_empty(os.environ.get('PRINTAGENT_PREFIX'), file_values.get('PREFIX'))
        if not prefix:
            prefix = f"http://0.0.0.0:{port}/" if listen_all else f"http://{host}:{port}/"

        config = cls(host=host, port=port, listen_all=listen_all, prefix=prefix)
        logger.info("Config: prefix=%s (host=%s, port=%s, listen_all=%s)", prefix, host, port, listen_all)
        return config


# =============================================================================
# Printer Settings
# =============================================================================

class PrinterSettings:
    """Persisted printer preferences (preferred printer)."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or os.path.join(DATA_DIR, 'config.json'))
        self.preferred_printer: Optional[str] = None
        self.reload()

    def reload(self):
        """Re-read settings from disk."""
        self.preferred_printer = None
        if not self.path.exists():
            return

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.preferred_printer = data.get('preferredPrinter') or None
        except (OSError, ValueError, AttributeError) as e:
            logger.error("Could not read config %s: %s", self.path, e)

    def save(self):
        """Write settings to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump({'preferredPrinter': self.preferred_printer}, f, indent=2)
        except OSError as e:
            logger.error("Could not save config %s: %s", self.path, e)
