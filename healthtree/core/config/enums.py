"""Configuration enums."""

from enum import Enum


class LogFormat(str, Enum):
    """Output format of the root log handler."""

    TEXT = "text"
    JSON = "json"
