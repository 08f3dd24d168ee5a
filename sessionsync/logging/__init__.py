"""
SessionSync: Logging

Logging structuré JSON pour la session:
- Champs obligatoires: timestamp, level, correlation_id, message
- Corrélation par opération (ContextVar)
- Masquage des données de session sensibles
"""

from .interfaces import (
    # Enums
    LogLevel,
    # Dataclasses
    LogEntry,
    LogConfig,
    # Interfaces
    IStructuredLogger,
    ISensitiveMasker,
    # Constantes
    DEFAULT_SENSITIVE_PATTERNS,
    MASK_VALUE,
    # Context
    correlation_id_var,
    # Exceptions
    InvalidLogLevelError,
)
from .correlation import (
    correlation_scope,
    get_correlation_id,
    new_correlation_id,
)
from .sensitive_masker import SensitiveMasker
from .structured_logger import (
    StructuredLogger,
    MissingRequiredFieldError,
)

__all__ = [
    "LogLevel",
    "LogEntry",
    "LogConfig",
    "IStructuredLogger",
    "ISensitiveMasker",
    "DEFAULT_SENSITIVE_PATTERNS",
    "MASK_VALUE",
    "SensitiveMasker",
    "StructuredLogger",
    "correlation_id_var",
    "correlation_scope",
    "get_correlation_id",
    "new_correlation_id",
    "MissingRequiredFieldError",
    "InvalidLogLevelError",
]
