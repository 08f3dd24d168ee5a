"""
SessionSync: Config Loader

Charge la configuration de la session depuis un fichier YAML.

Format attendu:
    session:
      store: ephemeral
      authenticator_key: authenticatorFactory
      log_level: INFO
      mask_sensitive: true
      sensitive_patterns: [refresh]

La section `session` est optionnelle: sans elle, le document
entier est lu comme configuration de session.
"""

from pathlib import Path
from typing import Any, Mapping, Union

import yaml
from pydantic import ValidationError

from .interfaces import IConfigLoader, SessionConfig


class ConfigError(Exception):
    """Configuration de session illisible ou invalide."""

    pass


class ConfigLoader(IConfigLoader):
    """Chargement de SessionConfig depuis un fichier YAML."""

    SECTION: str = "session"

    def __init__(self, config_path: Union[str, Path] = "config/session.yaml"):
        self.config_path = Path(config_path)

    async def load(self) -> SessionConfig:
        """
        Charge et valide le fichier de configuration.

        Returns:
            SessionConfig validée

        Raises:
            ConfigError: Fichier absent, YAML invalide ou schéma non respecté
        """
        if not self.config_path.exists():
            raise ConfigError(f"Configuration non trouvée: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Erreur de parsing YAML: {e}") from e
        except OSError as e:
            raise ConfigError(f"Erreur de lecture fichier: {e}") from e

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ConfigError("Configuration doit être un objet YAML")

        return self.load_from_mapping(document)

    def load_from_mapping(self, data: Mapping[str, Any]) -> SessionConfig:
        """
        Valide une configuration déjà chargée.

        Raises:
            ConfigError: Section invalide ou schéma non respecté
        """
        section = data.get(self.SECTION, data)
        if section is None:
            section = {}
        if not isinstance(section, Mapping):
            raise ConfigError(f"Section '{self.SECTION}' doit être un objet")

        try:
            return SessionConfig.model_validate(dict(section))
        except ValidationError as e:
            raise ConfigError(f"Configuration de session invalide: {e}") from e
