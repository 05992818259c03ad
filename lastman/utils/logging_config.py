"""
Logging configuration for Last Man Standing

Console output plus three rotating files under LOG_DIR:
  lastman.log     everything at LOG_LEVEL
  errors.log      ERROR and above, with source location
  settlement.log  settlement and fixture-result activity from lastman.services
"""

import logging
import logging.handlers
import os
from logging import Filter

from flask import has_request_context, request

SETTLEMENT_LOGGER = "lastman.services"

BASE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class RequestContextFilter(Filter):
    """Stamp the calling request (or N/A outside one) on each record"""

    def filter(self, record):
        in_request = has_request_context()
        record.url = request.url if in_request else "N/A"
        record.remote_addr = request.remote_addr if in_request else "N/A"
        record.method = request.method if in_request else "N/A"
        return True


class ColoredFormatter(logging.Formatter):
    """Colored level names for console output in debug mode"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(app):
    """
    Install console and file handlers for the application.

    Safe to call once per create_app: handlers from an earlier call are
    removed first.

    Args:
        app: Flask application instance
    """
    log_level = getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    settlement_logger = logging.getLogger(SETTLEMENT_LOGGER)

    for logger in (root_logger, settlement_logger):
        _remove_installed(logger)

    if app.config.get("LOG_TO_CONSOLE", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        if app.debug:
            console_handler.setFormatter(
                ColoredFormatter(
                    BASE_FORMAT + " [%(filename)s:%(lineno)d]", datefmt="%H:%M:%S"
                )
            )
        else:
            console_handler.setFormatter(
                logging.Formatter(BASE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            )
        _install(root_logger, console_handler)

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        _install(
            root_logger,
            _rotating_file(
                os.path.join(log_dir, "lastman.log"),
                log_level,
                BASE_FORMAT + " [%(url)s] [%(remote_addr)s] [%(method)s]",
                max_bytes=10 * 1024 * 1024,
                backups=5,
            ),
        )
        _install(
            root_logger,
            _rotating_file(
                os.path.join(log_dir, "errors.log"),
                logging.ERROR,
                BASE_FORMAT + " [%(pathname)s:%(lineno)d] [%(url)s] [%(remote_addr)s]",
                max_bytes=5 * 1024 * 1024,
                backups=3,
            ),
        )
        _install(
            settlement_logger,
            _rotating_file(
                os.path.join(log_dir, "settlement.log"),
                logging.INFO,
                BASE_FORMAT,
                max_bytes=5 * 1024 * 1024,
                backups=10,
            ),
        )

    # Third-party noise
    for name in ("werkzeug", "flask_limiter", "alembic"):
        logging.getLogger(name).setLevel(logging.WARNING)

    app.logger.info(f"Logging configured - Level: {logging.getLevelName(log_level)}")


def _rotating_file(path, level, fmt, max_bytes, backups):
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backups
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _install(logger, handler):
    handler.addFilter(RequestContextFilter())
    handler._lastman_handler = True
    logger.addHandler(handler)


def _remove_installed(logger):
    for handler in logger.handlers[:]:
        if getattr(handler, "_lastman_handler", False):
            logger.removeHandler(handler)
            handler.close()


def get_logger(name):
    """Module logger; handlers live on the root and settlement loggers"""
    return logging.getLogger(name)
