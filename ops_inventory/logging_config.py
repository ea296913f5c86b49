"""Logging configuration.

``setup_logging`` attaches a console handler, and optionally a file handler,
to the root logger. Modules log through ``logging.getLogger(__name__)`` and
never configure handlers themselves.
"""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: str | Path | None = None) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str, default="INFO"
        Logging level name. Case insensitive; unknown names fall back to INFO.
    logfile : str | Path | None, default=None
        File to append log records to. No file handler is added when omitted.

    Returns
    -------
    None
        Leaves an already configured root logger untouched.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
