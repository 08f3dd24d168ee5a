"""
SessionSync: Logging - Structured Logger
"""

import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from .correlation import get_correlation_id
from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    InvalidLogLevelError,
    LogConfig,
    LogEntry,
    LogLevel,
)
from .sensitive_masker import SensitiveMasker

OutputHandler = Callable[[str], None]


class MissingRequiredFieldError(Exception):
    """Champ obligatoire absent d'une ligne de log."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Required field missing: {field_name}")


def _utc_timestamp() -> str:
    """Horodatage ISO 8601 UTC à la milliseconde: 2024-12-04T14:30:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StructuredLogger(IStructuredLogger):
    """
    Logger JSON de la session.

    Chaque entrée est conservée en mémoire (les config.max_entries
    dernières) et, si un output_handler est fourni, lui est transmise
    sérialisée en JSON.

    Le correlation_id d'une entrée est, par ordre de priorité, celui passé
    en argument, celui du correlation_scope courant, ou un UUID neuf.

    Example:
        logger = StructuredLogger("sessionsync.session", output_handler=print)
        with correlation_scope():
            logger.info("Session authenticated", authenticator="password")
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        masker: Optional[ISensitiveMasker] = None,
        output_handler: Optional[OutputHandler] = None,
    ) -> None:
        """
        Raises:
            ValueError: name vide
        """
        if not name or not name.strip():
            raise ValueError("Logger name cannot be empty")

        self._name = name.strip()
        self._config = config or LogConfig()
        self._masker = masker or SensitiveMasker()
        self._output_handler = output_handler
        self._entries: Deque[LogEntry] = deque(maxlen=self._config.max_entries)

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> LogConfig:
        return self._config

    @property
    def masker(self) -> ISensitiveMasker:
        return self._masker

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Raises:
            InvalidLogLevelError: level n'est pas un LogLevel
            MissingRequiredFieldError: message vide (niveau non filtré)
        """
        if not isinstance(level, LogLevel):
            raise InvalidLogLevelError(str(level))
        if level.priority < self._config.min_level.priority:
            return None
        if not message:
            raise MissingRequiredFieldError("message")

        entry = LogEntry(
            timestamp=_utc_timestamp(),
            level=level,
            correlation_id=correlation_id or get_correlation_id() or str(uuid.uuid4()),
            message=message,
            extra=self._prepare_extra(extra),
            logger_name=self._name,
        )
        self._entries.append(entry)

        if self._output_handler is not None:
            self._output_handler(entry.to_json())
        return entry

    def _prepare_extra(self, extra: Dict[str, Any]) -> Dict[str, Any]:
        if not extra or not self._config.include_extra:
            return {}
        if self._config.mask_sensitive:
            return self._masker.mask(extra)
        return dict(extra)

    # Inspection (tests, debug)

    def get_entries(self) -> List[LogEntry]:
        return list(self._entries)

    def get_entries_by_level(self, level: LogLevel) -> List[LogEntry]:
        return [entry for entry in self._entries if entry.level is level]

    def get_entries_by_correlation(self, correlation_id: str) -> List[LogEntry]:
        return [entry for entry in self._entries if entry.correlation_id == correlation_id]

    def clear_entries(self) -> None:
        self._entries.clear()
