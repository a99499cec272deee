"""Logging configuration for the application."""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure application logging.

    Args:
        level: Logging level name (default: INFO)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )
    # Engine echo is controlled per engine; keep the library quiet otherwise
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
