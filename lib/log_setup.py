"""Logging configuration for bw-config entry points.

lib/ and services/ only create module loggers; the CLI and the API call
setup_logging() once at startup. Level comes from BWCONFIG_LOG_LEVEL
(default WARNING so the TUI stays quiet).
"""

import logging
import os
from typing import Optional

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    level_name = (level or os.environ.get("BWCONFIG_LOG_LEVEL") or "WARNING").upper()
    handlers = [logging.FileHandler(log_file, encoding="utf-8")] if log_file else None
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format=DEFAULT_LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # requests/urllib3 debug output includes full URLs with query strings
    logging.getLogger("urllib3").setLevel(logging.WARNING)
