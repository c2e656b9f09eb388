"""
Comprehensive Logging System with Console, File, and Langfuse Integration

Features:
- Configurable log folder and level (via .env)
- Unicode-safe console logging
- Rotating file logging
- Optional Langfuse event forwarding
- Structured logging with JSON context
- Performance metrics logging
"""

import logging
import logging.handlers
import sys
import os
from pathlib import Path
from typing import Optional, Dict, Any, Literal, cast
import json
import traceback

try:
    from langfuse import Langfuse
    HAS_LANGFUSE = True
except ImportError:
    HAS_LANGFUSE = False


class SafeStreamHandler(logging.StreamHandler):
    """
    StreamHandler that never raises on characters the console cannot encode.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            stream = self.stream
            try:
                stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                encoding = getattr(stream, 'encoding', None) or 'utf-8'
                safe_msg = msg.encode(encoding, errors='replace').decode(encoding)
                stream.write(safe_msg + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


class ComprehensiveLogger:
    """
    Centralized logging system with console, file and Langfuse support.

    Usage:
        ComprehensiveLogger.initialize(log_level="DEBUG", enable_file=False)
        logger = ComprehensiveLogger.get_logger("timeline_dep_graph.core.arrow_service")
        logger.info("Arrow added", extra={"source": "1", "target": "2"})
    """

    _loggers: Dict[str, "TimelineLogger"] = {}
    _langfuse_client = None
    _log_folder: Optional[str] = None
    _config: Dict[str, Any] = {}

    @classmethod
    def initialize(
        cls,
        log_folder: Optional[str] = None,
        log_level: str = "INFO",
        enable_console: bool = True,
        enable_file: bool = False,
        enable_langfuse: bool = False,
        langfuse_public_key: Optional[str] = None,
        langfuse_secret_key: Optional[str] = None,
        langfuse_host: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
    ) -> None:
        """
        Initialize the logging system.

        Loggers created before this call keep their handlers; call it once at
        process start (get_logger() does so automatically from the environment).

        Args:
            log_folder: Folder for log files (default: ./logs)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            enable_console: Enable console logging
            enable_file: Enable rotating file logging
            enable_langfuse: Forward log events to Langfuse
            langfuse_public_key: Langfuse public key
            langfuse_secret_key: Langfuse secret key
            langfuse_host: Langfuse host URL
            max_bytes: Max file size before rotation (default: 10MB)
            backup_count: Number of rotated files to keep
        """
        cls._log_folder = log_folder or "./logs"
        cls._config = {
            "log_level": log_level.upper(),
            "enable_console": enable_console,
            "enable_file": enable_file,
            "enable_langfuse": enable_langfuse,
            "max_bytes": max_bytes,
            "backup_count": backup_count,
        }

        if enable_file:
            Path(cls._log_folder).mkdir(parents=True, exist_ok=True)

        if enable_langfuse and HAS_LANGFUSE:
            try:
                cls._langfuse_client = Langfuse(
                    public_key=langfuse_public_key,
                    secret_key=langfuse_secret_key,
                    host=langfuse_host
                )
                logging.getLogger("ComprehensiveLogger").info("Langfuse initialized")
            except Exception as e:
                logging.getLogger("ComprehensiveLogger").warning(
                    f"Failed to initialize Langfuse: {e}"
                )
                cls._langfuse_client = None
        elif enable_langfuse:
            logging.getLogger("ComprehensiveLogger").warning(
                "Langfuse enabled but not installed. Install with: pip install timeline-dep-graph[langfuse]"
            )

    @classmethod
    def get_logger(cls, name: str) -> "TimelineLogger":
        """
        Get or create a logger instance.

        Args:
            name: Logger name (typically __name__)

        Returns:
            TimelineLogger instance
        """
        if name not in cls._loggers:
            cls._loggers[name] = TimelineLogger(
                name, cls._log_folder, cls._config, cls._langfuse_client
            )
        return cls._loggers[name]

    @classmethod
    def reset(cls) -> None:
        """Drop all cached loggers and their handlers."""
        for timeline_logger in cls._loggers.values():
            for handler in list(timeline_logger.logger.handlers):
                timeline_logger.logger.removeHandler(handler)
                handler.close()
        cls._loggers = {}
        cls._langfuse_client = None
        cls._config = {}
        cls._log_folder = None

    @classmethod
    def flush(cls) -> None:
        """Flush all loggers and Langfuse."""
        for timeline_logger in cls._loggers.values():
            timeline_logger.flush()
        if cls._langfuse_client:
            try:
                cls._langfuse_client.flush()
            except Exception as e:
                logging.getLogger("ComprehensiveLogger").debug(f"Langfuse flush failed: {e}")


class TimelineLogger:
    """
    Thin wrapper around logging.Logger adding JSON context and Langfuse events.
    """

    def __init__(
        self,
        name: str,
        log_folder: Optional[str],
        config: Dict[str, Any],
        langfuse_client=None
    ):
        self.name = name
        self.log_folder = log_folder or "./logs"
        self.config = config
        self.langfuse_client = langfuse_client

        self.logger = logging.getLogger(name)
        self.logger.setLevel(config.get("log_level", "INFO"))
        self.logger.propagate = False
        self.logger.handlers.clear()

        if config.get("enable_console", True):
            self._add_console_handler()

        if config.get("enable_file"):
            self._add_file_handler()

    def _add_console_handler(self) -> None:
        handler = SafeStreamHandler(sys.stdout)
        handler.setLevel(self.config.get("log_level", "INFO"))
        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

    def _add_file_handler(self) -> None:
        Path(self.log_folder).mkdir(parents=True, exist_ok=True)
        log_file = os.path.join(self.log_folder, "timeline_dep_graph.log")

        try:
            handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=self.config.get("max_bytes", 10 * 1024 * 1024),
                backupCount=self.config.get("backup_count", 5),
                encoding='utf-8'
            )
            handler.setLevel(self.config.get("log_level", "INFO"))
            formatter = logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        except OSError as e:
            self.logger.error(f"Failed to add file handler: {e}")

    def debug(self, message: str, extra: Optional[Dict] = None):
        self._log("DEBUG", message, extra)

    def info(self, message: str, extra: Optional[Dict] = None):
        self._log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict] = None):
        self._log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict] = None):
        self._log("ERROR", message, extra)

    def critical(self, message: str, extra: Optional[Dict] = None):
        self._log("CRITICAL", message, extra)

    def isEnabledFor(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)

    def _log(self, level: str, message: str, extra: Optional[Dict] = None) -> None:
        """
        Log to the standard logger and, if configured, to Langfuse.

        Args:
            level: Log level name
            message: Log message
            extra: Context dict, appended to the message as JSON
        """
        if extra:
            message = f"{message} | {json.dumps(extra, default=str)}"

        getattr(self.logger, level.lower())(message)

        if self.langfuse_client:
            level_map = {
                'debug': 'DEBUG',
                'info': 'DEFAULT',
                'warning': 'WARNING',
                'error': 'ERROR',
                'critical': 'ERROR'
            }
            langfuse_level = cast(
                Literal['DEBUG', 'DEFAULT', 'WARNING', 'ERROR'],
                level_map.get(level.lower(), 'DEFAULT')
            )
            try:
                self.langfuse_client.create_event(
                    name=f"{self.name}.{level.lower()}",
                    input=extra or {},
                    output=message,
                    level=langfuse_level
                )
            except Exception as e:
                self.logger.debug(f"Langfuse event failed: {e}")

    def log_exception(self, message: str, exc: Optional[BaseException] = None) -> None:
        """
        Log an exception with its full traceback.

        Args:
            message: Error message
            exc: Exception object (uses the exception being handled if None)
        """
        if exc:
            tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
        else:
            tb = traceback.format_exc().splitlines(keepends=True)
        self.logger.error(f"{message}\n{''.join(tb)}")

    def log_performance(
        self,
        operation: str,
        duration_seconds: float,
        success: bool = True,
        metadata: Optional[Dict] = None
    ) -> None:
        """
        Log how long an operation took.

        Args:
            operation: Operation name
            duration_seconds: Duration in seconds
            success: Whether operation succeeded
            metadata: Additional metadata
        """
        extra = dict(metadata or {})
        extra.update({
            "operation": operation,
            "duration_seconds": round(duration_seconds, 6),
            "success": success
        })
        status = "ok" if success else "failed"
        log_func = self.debug if success else self.warning
        log_func(f"{operation} {status} in {duration_seconds * 1000:.2f}ms", extra=extra)

    def flush(self) -> None:
        for handler in self.logger.handlers:
            handler.flush()
