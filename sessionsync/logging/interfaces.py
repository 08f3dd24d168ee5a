"""
SessionSync: Logging - Interfaces

Contrats du logging structuré de la session.

Une ligne de log est un objet JSON portant toujours timestamp (ISO 8601 UTC),
level, correlation_id et message. Le contenu de session (tokens,
identifiants) n'y apparaît jamais en clair.
"""

import json
from abc import ABC, abstractmethod
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "sessionsync_correlation_id", default=None
)

# Fragments de clés dont la valeur est masquée. "auth" et "key" seuls en sont
# exclus: ils masqueraient l'identifiant d'authenticator (authenticatorFactory).
DEFAULT_SENSITIVE_PATTERNS: Tuple[str, ...] = (
    "password",
    "passwd",
    "pwd",
    "token",
    "secret",
    "api_key",
    "apikey",
    "private_key",
    "credential",
    "authorization",
    "bearer",
    "jwt",
    "cookie",
    "otp",
)

MASK_VALUE = "***MASKED***"


class InvalidLogLevelError(Exception):
    """Niveau de log invalide."""

    def __init__(self, level: str) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")


class LogLevel(Enum):
    """Niveaux de log, du moins au plus sévère."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def priority(self) -> int:
        return list(LogLevel).index(self)

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """
        Résout un niveau depuis la configuration ("warning", "Info"...).

        Raises:
            InvalidLogLevelError: Nom inconnu
        """
        normalized = (name or "").strip().upper()
        if normalized == "WARNING":
            normalized = "WARN"
        if normalized not in cls.__members__:
            raise InvalidLogLevelError(name)
        return cls[normalized]


@dataclass(frozen=True)
class LogEntry:
    """Ligne de log émise par un StructuredLogger."""

    timestamp: str
    level: LogLevel
    correlation_id: str
    message: str
    extra: Dict[str, Any] = field(default_factory=dict)
    logger_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "correlation_id": self.correlation_id,
            "message": self.message,
            "logger": self.logger_name or None,
            "extra": self.extra or None,
        }
        return {k: v for k, v in payload.items() if v is not None}

    def to_json(self) -> str:
        # Les valeurs non sérialisables (datetime, exceptions) sont rendues en texte
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


@dataclass
class LogConfig:
    """
    Configuration d'un StructuredLogger.

    Attributes:
        min_level: Niveau minimum émis
        include_extra: Conserver les champs supplémentaires
        mask_sensitive: Masquer les valeurs sensibles des champs supplémentaires
        max_entries: Nombre d'entrées gardées en mémoire pour inspection
    """

    min_level: LogLevel = LogLevel.INFO
    include_extra: bool = True
    mask_sensitive: bool = True
    max_entries: int = 1000

    def __post_init__(self) -> None:
        if self.max_entries < 0:
            raise ValueError("max_entries must be >= 0")


class IStructuredLogger(ABC):
    """
    Logger structuré utilisé par la session.

    Seuls log() et get_entries() sont à fournir, les raccourcis
    par niveau s'appuient sur log().
    """

    @abstractmethod
    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Émet une ligne de log.

        Args:
            level: Niveau de la ligne
            message: Texte, obligatoire
            correlation_id: Identifiant imposé (sinon celui du contexte courant)
            **extra: Champs supplémentaires

        Returns:
            L'entrée émise, ou None si le niveau est filtré
        """

    @abstractmethod
    def get_entries(self) -> List[LogEntry]:
        """Entrées conservées en mémoire, de la plus ancienne à la plus récente."""

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, message, **extra)


class ISensitiveMasker(ABC):
    """Masquage des valeurs sensibles avant écriture."""

    @abstractmethod
    def mask(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Retourne une copie de data dont les valeurs sensibles sont masquées."""

    @abstractmethod
    def is_sensitive_key(self, key: str) -> bool:
        """Vrai si la clé désigne une valeur sensible."""
