"""
SessionSync: Core

Configuration de la session et construction depuis la configuration.
"""

from .interfaces import IConfigLoader, SessionConfig
from .config_loader import ConfigLoader, ConfigError
from .bootstrap import build_logger, build_session

__all__ = [
    # Interfaces
    "IConfigLoader",
    # Models
    "SessionConfig",
    # Implementations
    "ConfigLoader",
    "build_logger",
    "build_session",
    # Exceptions
    "ConfigError",
]
