"""
utils/logger.py
---------------
One stdout handler on the root logger, installed on first use.
Modules take their logger from `get_logger(__name__)`.
"""

import logging
import sys

from config import LOG_LEVEL

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# httpx logs each getUpdates round trip at INFO.
_QUIET = {"httpx": logging.WARNING, "httpcore": logging.WARNING}

_configured = False


def configure(level: str = LOG_LEVEL) -> None:
    """Install the handler and set levels. Only the first call has an effect."""
    global _configured
    if _configured:
        return
    _configured = True

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level.upper())
    for name, quiet_level in _QUIET.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    configure()
    return logging.getLogger(name)
