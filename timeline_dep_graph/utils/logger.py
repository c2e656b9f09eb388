"""
Logger module - Logging configuration and utilities

get_logger() is the single entry point used by every module. On first use it
loads .env and initializes ComprehensiveLogger from these variables:

    TDG_LOG_FOLDER               default ./logs
    TDG_LOG_LEVEL                default INFO
    TDG_ENABLE_CONSOLE_LOGGING   default true
    TDG_ENABLE_FILE_LOGGING      default false
    TDG_LOG_MAX_BYTES            default 10485760
    TDG_LOG_BACKUP_COUNT         default 5
    ENABLE_LANGFUSE              default false (LANGFUSE_PUBLIC_KEY, LANGFUSE_SECRET_KEY, LANGFUSE_BASE_URL)
"""

import logging
import os
from typing import Optional

from .comprehensive_logger import ComprehensiveLogger, TimelineLogger

_initialized = False


def _ensure_initialized() -> None:
    """Initialize ComprehensiveLogger from the environment exactly once."""
    global _initialized

    if _initialized:
        return
    _initialized = True

    from timeline_dep_graph.config.env_config import EnvConfig

    EnvConfig.load_env_file()

    try:
        ComprehensiveLogger.initialize(
            log_folder=EnvConfig.get("TDG_LOG_FOLDER", "./logs"),
            log_level=EnvConfig.get("TDG_LOG_LEVEL", "INFO"),
            enable_console=EnvConfig.get_bool("TDG_ENABLE_CONSOLE_LOGGING", True),
            enable_file=EnvConfig.get_bool("TDG_ENABLE_FILE_LOGGING", False),
            enable_langfuse=EnvConfig.get_bool("ENABLE_LANGFUSE", False),
            langfuse_public_key=os.getenv("LANGFUSE_PUBLIC_KEY"),
            langfuse_secret_key=os.getenv("LANGFUSE_SECRET_KEY"),
            langfuse_host=os.getenv("LANGFUSE_BASE_URL"),
            max_bytes=EnvConfig.get_int("TDG_LOG_MAX_BYTES", 10 * 1024 * 1024),
            backup_count=EnvConfig.get_int("TDG_LOG_BACKUP_COUNT", 5),
        )
    except (OSError, ValueError) as e:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        logging.getLogger(__name__).warning(
            f"Failed to initialize ComprehensiveLogger: {e}. Using basic logging."
        )


def get_logger(name: str, level: Optional[str] = None) -> TimelineLogger:
    """
    Get or create a logger with standard formatting and .env configuration.

    Args:
        name: Logger name (typically __name__)
        level: Optional level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured TimelineLogger
    """
    _ensure_initialized()

    timeline_logger = ComprehensiveLogger.get_logger(name)
    if level:
        timeline_logger.logger.setLevel(level.upper())
    return timeline_logger
