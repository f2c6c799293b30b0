# app/core/logger_config.py
import logging
import logging.handlers
import sys

from app.utils import constants

DEFAULT_LOG_FORMAT = constants.LOG_FORMAT
DEFAULT_LOG_LEVEL = constants.LOG_LEVEL


def setup_logging(config=None):
    """
    Configures the root logger for the application.

    Args:
        config (BoardConfig, optional): Application config supplying level, format and log file.
    """
    log_level_str = DEFAULT_LOG_LEVEL
    log_format_str = DEFAULT_LOG_FORMAT
    log_file = None

    if config:
        log_level_str = config.log_level.value
        log_format_str = config.log_format
        log_file = config.log_file

    numeric_log_level = getattr(logging, log_level_str, logging.INFO)

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplicate lines when called twice
    if root_logger.hasHandlers():
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()

    logging.basicConfig(
        level=numeric_log_level,
        format=log_format_str,
        stream=sys.stdout
    )

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(log_format_str))
        root_logger.addHandler(file_handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Root logger configured. Level: {log_level_str}, File: {log_file or 'none'}")
