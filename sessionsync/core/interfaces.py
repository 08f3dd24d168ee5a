"""
SessionSync: Core Interfaces

Modèle de configuration de la session et contrat de chargement.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping

from pydantic import BaseModel, field_validator

from ..logging import InvalidLogLevelError, LogLevel
from ..session import DEFAULT_AUTHENTICATOR_KEY, CollaboratorRegistry


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


class SessionConfig(BaseModel):
    """
    Configuration de la session.

    Attributes:
        store: Identifiant du store dans le registre
        authenticator_key: Clé de l'identifiant d'authenticator dans le store
        log_level: Niveau minimum de log (DEBUG, INFO, WARN, ERROR, CRITICAL)
        mask_sensitive: Masquer les données sensibles dans les logs
        sensitive_patterns: Patterns sensibles supplémentaires
        log_content_values: Logger les valeurs du contenu, pas seulement les clés
    """

    store: str = CollaboratorRegistry.EPHEMERAL_STORE
    authenticator_key: str = DEFAULT_AUTHENTICATOR_KEY
    log_level: str = "INFO"
    mask_sensitive: bool = True
    sensitive_patterns: List[str] = []
    log_content_values: bool = False

    @field_validator("store", "authenticator_key")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        try:
            return LogLevel.from_name(value).value
        except InvalidLogLevelError as e:
            raise ValueError(str(e)) from e

    @field_validator("sensitive_patterns")
    @classmethod
    def _non_empty_patterns(cls, value: List[str]) -> List[str]:
        return [p.strip().lower() for p in value if p and p.strip()]

    @property
    def min_level(self) -> LogLevel:
        """Niveau de log résolu."""
        return LogLevel.from_name(self.log_level)


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IConfigLoader(ABC):
    """Charge et valide la configuration de la session."""

    @abstractmethod
    async def load(self) -> SessionConfig:
        """
        Charge la configuration.

        Raises:
            ConfigError: Fichier absent, YAML invalide ou schéma non respecté
        """
        pass

    @abstractmethod
    def load_from_mapping(self, data: Mapping[str, Any]) -> SessionConfig:
        """Valide une configuration déjà chargée."""
        pass
