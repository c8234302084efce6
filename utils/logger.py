"""
============================================================================
USERNAME WATCH BOT - LOGGING UTILITY
============================================================================
Logging system built on loguru with console, file and error-file sinks.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Optional

from loguru import logger

from config.settings import Settings


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(settings: Settings) -> None:
    """
    Configure logging system with multiple handlers.
    Sets up console logging and, when enabled, file logging.
    """
    # Remove default loguru handler
    logger.remove()

    log_level = settings.LOG_LEVEL.value

    # Console Handler
    if settings.LOG_TO_CONSOLE:
        logger.add(
            sys.stdout,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=log_level,
            colorize=settings.LOG_COLORIZE,
            backtrace=True,
            diagnose=False,
        )

    # File Handlers
    if settings.LOG_TO_FILE:
        log_file_path = settings.logs_dir / Path("watch_bot.log")
        logger.add(
            log_file_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
            level=log_level,
            rotation=settings.LOG_FILE_MAX_SIZE,
            retention=settings.LOG_FILE_BACKUP_COUNT,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

        # Error log file (separate file for errors)
        error_log_path = settings.logs_dir / "errors.log"
        logger.add(
            error_log_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[name]}:{function}:{line} | {message}",
            level="ERROR",
            rotation="1 day",
            retention="7 days",
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.bind(name="Logger").info("Logging system initialized")
    logger.bind(name="Logger").info(f"Log level: {log_level}")
    logger.bind(name="Logger").info(f"Console logging: {settings.LOG_TO_CONSOLE}")
    logger.bind(name="Logger").info(f"File logging: {settings.LOG_TO_FILE}")


# Records logged before setup_logging() still need extra[name]
logger.configure(extra={"name": "root"})


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Logger name (usually the component name)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


# ============================================================================
# LOG DECORATORS
# ============================================================================

def log_execution_time(func):
    """
    Decorator to log function execution time at DEBUG level.

    Works for both coroutine functions and plain functions.
    """

    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            result = await func(*args, **kwargs)
            execution_time = time.perf_counter() - start_time
            logger.bind(name="Timing").debug(
                f"Function {func.__name__} executed in {execution_time:.4f} seconds"
            )
            return result
        except Exception as e:
            execution_time = time.perf_counter() - start_time
            logger.bind(name="Timing").error(
                f"Function {func.__name__} failed after {execution_time:.4f} seconds: {e}"
            )
            raise

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
            execution_time = time.perf_counter() - start_time
            logger.bind(name="Timing").debug(
                f"Function {func.__name__} executed in {execution_time:.4f} seconds"
            )
            return result
        except Exception as e:
            execution_time = time.perf_counter() - start_time
            logger.bind(name="Timing").error(
                f"Function {func.__name__} failed after {execution_time:.4f} seconds: {e}"
            )
            raise

    if asyncio.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper


# ============================================================================
# END OF LOGGER MODULE
# ============================================================================
