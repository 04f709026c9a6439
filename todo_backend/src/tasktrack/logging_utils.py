"""Logging setup shared by the HTTP, service and storage layers."""

from __future__ import annotations

import logging

_FORMAT = '%(asctime)s level=%(levelname)s logger=%(name)s message="%(message)s"'


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """Install a key=value log format on the root logger unless one is already set."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=_FORMAT)
    else:
        root_logger.setLevel(level)
