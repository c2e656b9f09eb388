"""
Configuration module - Settings and configuration management
"""

from .env_config import EnvConfig
from .timeline_config import TimelineConfig

__all__ = [
    'EnvConfig',
    'TimelineConfig',
]
