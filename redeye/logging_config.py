"""
Logging configuration for the command line harness
Console output plus an optional daily-rotated log file
"""
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path


def setup_logging(level="INFO", log_file=None):
    """
    Configure the root logger

    Sets up:
    - Console logging at the requested level
    - Optional file logging with daily rotation (DEBUG level, 7 days kept)

    Args:
        level: Console level name or number
        log_file: Path of the log file, or None for console only

    Returns:
        The root logger
    """
    # numba's compiler logs a lot at DEBUG
    for logger_name in ['numba', 'PIL']:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # setup_logging may be called more than once
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                log_file,
                when='midnight',
                interval=1,
                backupCount=7,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)
            logger.debug(f"Logging initialized - Log file: {log_file}")
        except OSError as e:
            # console logging still works
            logger.error(f"Failed to initialize file logging: {e}")

    return logger
