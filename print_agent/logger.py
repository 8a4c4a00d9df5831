"""
Centralized logging configuration for the Print Agent.

Modules log through the shared `logger`. Until `configure_logging` runs,
records propagate to the root logger.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

logger = logging.getLogger('print_agent')

detailed_formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

simple_formatter = logging.Formatter(
    '%(levelname)s - %(message)s'
)

LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def configure_logging(log_dir: str, level: str = 'INFO') -> logging.Logger:
    """
    Attach file and console handlers to the agent logger.

    Safe to call more than once: handlers are only added the first time.
    """
    if logger.handlers:
        return logger

    os.makedirs(log_dir, exist_ok=True)
    log_level = LEVELS.get(str(level).upper(), logging.INFO)
    logger.setLevel(logging.DEBUG)

    # File handler (with rotation)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, 'agent.log'),
        maxBytes=10*1024*1024,  # 10 MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(detailed_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    logger.propagate = False

    return logger
