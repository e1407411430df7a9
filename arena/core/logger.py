# arena/core/logger.py
from loguru import logger
import sys
import os

from arena.config import settings

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def console_level(debug: bool) -> str:
    return "DEBUG" if debug else "INFO"


def configure(log_dir: str, debug: bool = False) -> None:
    """Console plus rotating files under log_dir; replaces any existing sinks"""
    os.makedirs(log_dir, exist_ok=True)

    logger.remove()

    # Console
    logger.add(
        sys.stdout,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=console_level(debug)
    )

    # Everything: votes, lifecycle transitions, retries
    logger.add(
        os.path.join(log_dir, "arena.log"),
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        format=FILE_FORMAT,
        level="DEBUG"
    )

    # Errors and lifecycle anomalies; variable values only in debug
    logger.add(
        os.path.join(log_dir, "error.log"),
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        format=FILE_FORMAT,
        level="ERROR",
        backtrace=True,
        diagnose=debug
    )


configure(settings.log_dir, settings.debug)
