"""
Logging configuration
"""
import logging
import sys
from typing import Optional

from app.core.config import get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Client libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3", "postgrest", "storage3")


def setup_logging(level: Optional[str] = None):
    """
    Send application logs to stdout.

    Safe to call more than once (app factory in tests, uvicorn reload);
    the stdout handler is only attached the first time.
    """
    level_name = (level or get_settings().LOG_LEVEL).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not any(getattr(h, "_chefmind", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        console_handler._chefmind = True
        root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
