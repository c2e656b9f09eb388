"""
Environment configuration - Load settings from .env files
"""

import os
from pathlib import Path
from typing import Optional, Dict
import json

from dotenv import load_dotenv


class EnvConfig:
    """
    Load and read configuration from environment variables and .env files.

    Priority:
    1. Environment variables already set (never overwritten)
    2. .env file in the current directory or up to three parents
    """

    @staticmethod
    def find_env_file(start: Optional[Path] = None) -> Optional[Path]:
        """Search start (default: cwd) and up to 3 parent levels for a .env file."""
        current = start or Path.cwd()
        for _ in range(4):
            candidate = current / ".env"
            if candidate.exists():
                return candidate
            if current.parent == current:
                break
            current = current.parent
        return None

    @staticmethod
    def load_env_file(path: Optional[str] = None) -> bool:
        """
        Load environment variables from a .env file.

        Args:
            path: Path to .env file (default: search current dir and parents)

        Returns:
            True if a file was loaded, False otherwise
        """
        env_path = Path(path) if path else EnvConfig.find_env_file()
        if env_path and env_path.exists():
            return load_dotenv(env_path, override=False)
        return False

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with optional default."""
        return os.getenv(key, default)

    @staticmethod
    def get_bool(key: str, default: bool = False) -> bool:
        """Get boolean environment variable."""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    @staticmethod
    def get_int(key: str, default: int = 0) -> int:
        """Get integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def get_float(key: str, default: float = 0.0) -> float:
        """Get float environment variable."""
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def get_optional_float(key: str) -> Optional[float]:
        """Get float environment variable, None when unset or unparsable."""
        value = os.getenv(key)
        if not value:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    @staticmethod
    def get_json(key: str, default: Optional[Dict] = None) -> Optional[Dict]:
        """Get JSON environment variable."""
        value = os.getenv(key)
        if not value:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return default

    @staticmethod
    def show_config_template() -> str:
        """Return a .env template listing every supported setting."""
        return """
# Logging
TDG_LOG_LEVEL=INFO
TDG_LOG_FOLDER=./logs
TDG_ENABLE_CONSOLE_LOGGING=true
TDG_ENABLE_FILE_LOGGING=false

# Geometry
TDG_BEZIER_PULL=1.0
TDG_OFFSCREEN_EDGE=
TDG_NESTED_LABEL_PADDING=20
TDG_HIERARCHY_PADDING=5
TDG_LABEL_OFFSET=10

# Navigation
TDG_FOCUS_MARGIN_SECONDS=5
TDG_ZOOM_RATIO=0.2
TDG_MOTION_RATIO=0.2
"""
