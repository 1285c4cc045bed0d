"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)` with `event key=value`
messages; this only installs the root handler.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
