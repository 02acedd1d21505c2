"""
Logging configuration for the Hardhat Detection Service.
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from hardhat.core.config import settings


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(log_level: Optional[str] = None, log_dir: Optional[str] = None):
    """
    Configure logging for the application.

    A file sink is only added when a log directory is configured.
    """
    log_level = (log_level or settings.LOG_LEVEL).upper()
    log_dir = log_dir if log_dir is not None else settings.LOG_DIR

    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=log_level,
        diagnose=False
    )

    if log_dir:
        logs_path = Path(log_dir)
        logs_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(logs_path / "hardhat_{time:YYYY-MM-DD}.log"),
            rotation="00:00",  # new file at midnight
            retention="30 days",
            compression="zip",
            format=LOG_FORMAT,
            level=log_level,
            diagnose=False
        )

    return logger


def mask_secret(value: Optional[str], visible: int = 10) -> str:
    """Shorten a credential for log output."""
    if not value:
        return "MISSING"
    return f"{value[:visible]}..."
