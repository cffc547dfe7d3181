"""
Logging Configuration
Attaches handlers to the 'thermalhouse' logger for hosts and the demo runner.
The library modules never call this themselves.
"""
import logging
import sys
from typing import List, Optional, Union

PACKAGE_LOGGER = "thermalhouse"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def _make_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    return handlers


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Send 'thermalhouse' records to stdout and, optionally, a log file.

    Calling it again replaces the handlers of the previous call.

    Args:
        level: Level number or name ("DEBUG" shows the sub-stepping decisions).
        log_file: Optional path; the file is truncated.

    Returns:
        The package logger.
    """
    if isinstance(level, str):
        number = logging.getLevelName(level.upper())
        if not isinstance(number, int):
            raise ValueError(f"Unknown logging level: {level}")
        level = number

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _make_handlers(log_file):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    target = f"stdout and {log_file}" if log_file else "stdout"
    package_logger.debug(f"Logging to {target} at level {logging.getLevelName(level)}.")
    return package_logger
