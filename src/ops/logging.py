"""
Logging setup.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_path: str, log_level: str, quiet_access_log: bool = True) -> None:
    """Log to log_path and stderr; creates the log directory if needed."""
    log_dir = os.path.dirname(log_path)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logging.basicConfig(
        level=getattr(logging, log_level),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler(),
        ],
    )

    # Per-request lines from the polling UI drown out pipeline logs
    if quiet_access_log:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
