"""
logging_config.py - Run Logging
================================
Every massflow module logs through `logging.getLogger(__name__)`, so all
records end up under the "massflow" logger configured here:

  - INFO    : loaded configuration, mass image placement, run summary
  - DEBUG   : per-frame stage timings (enabled by `main.py --verbose`)
  - WARNING : flow fields that could not be normalized

The CLI calls setup_logging() once per invocation. Calling it again replaces
the previous handlers, so a `--log-file` from an earlier run is closed.
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Attach a stdout handler (and optionally a file handler) to the
    "massflow" logger.

    Args:
        level    : Threshold for the logger and both handlers
        log_file : Also write records to this file (truncated first)
    """
    logger = logging.getLogger("massflow")
    logger.setLevel(level)

    # Repeated CLI invocations in one process must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
