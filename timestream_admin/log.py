"""
Logging setup for timestream_admin.

Library modules only call ``logging.getLogger(__name__)``. Programs (the CLI,
scripts) call ``setup_logging()`` once at startup:

- text: human readable output through rich
- json: one JSON object per line, for log shipping
"""
import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter
from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level name (default: TIMESTREAM_LOG_LEVEL or INFO)
        fmt: "text" or "json" (default: TIMESTREAM_LOG_FORMAT or text)

    Returns:
        The root logger

    Raises:
        ValueError: If the level or format is unknown
    """
    level_name = (level or os.environ.get("TIMESTREAM_LOG_LEVEL") or "INFO").upper()
    if level_name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level '{level_name}'. Use one of {sorted(LOG_LEVELS)}")

    fmt = (fmt or os.environ.get("TIMESTREAM_LOG_FORMAT") or "text").lower()
    if fmt == "json":
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter(_JSON_FORMAT, rename_fields={"levelname": "level", "name": "logger"}))
    elif fmt == "text":
        handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        raise ValueError(f"Unknown log format '{fmt}'. Use 'text' or 'json'")

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(LOG_LEVELS[level_name])

    # boto internals are noisy at DEBUG
    for name in ("botocore", "boto3", "urllib3"):
        logging.getLogger(name).setLevel(max(LOG_LEVELS[level_name], logging.WARNING))

    return root
