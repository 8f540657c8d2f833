"""Configuration module for healthtree.

Usage:
    from healthtree.core.config import settings

    timeout = settings.HEALTH_CHECK_TIMEOUT
"""

from healthtree.core.config.enums import LogFormat
from healthtree.core.config.settings import Settings

__all__ = [
    "LogFormat",
    "Settings",
    "settings",
]

# Singleton settings instance
settings = Settings()
