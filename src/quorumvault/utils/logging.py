from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """
    Configure the root logger once for command-line use.

    Library code never calls this; it only logs through module loggers.
    """
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=fmt or LOG_FORMAT)
