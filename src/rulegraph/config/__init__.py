"""
rulegraph configuration.

Pydantic-based settings read from RULEGRAPH_* environment variables and an
optional .env file. Command-line flags take precedence.
"""

from rulegraph.config.settings import LOG_LEVELS, Settings, get_settings

__all__ = [
    "LOG_LEVELS",
    "Settings",
    "get_settings",
]
