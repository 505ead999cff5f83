"""
Logging Configuration
Console (and optional file) logging for the 'studymap' namespace.
"""
import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "studymap"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, os.PathLike]] = None,
) -> logging.Logger:
    """
    Attach handlers to the 'studymap' logger and return it.

    Args:
        level: Threshold for the logger and every handler (logging.DEBUG with --debug).
        log_file: Optional path; the file is truncated on every start.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Re-running main() in the same interpreter (tests, IPython) must not double every line
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(f"Logging initialized (level {logging.getLevelName(level)}, file {log_file or '-'}).")
    return logger
