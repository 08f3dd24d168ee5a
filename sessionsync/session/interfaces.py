"""
SessionSync: Session - Interfaces

Contrats des collaborateurs de la session (Authenticator, Store),
types d'événements et état immuable de la session.

Toute implémentation d'authenticator ou de store DOIT respecter ces
interfaces; la session ne connaît rien d'autre de ses collaborateurs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from .events import EventChannel


# Clé sous laquelle le store persiste l'identifiant de l'authenticator
DEFAULT_AUTHENTICATOR_KEY: str = "authenticatorFactory"


# ══════════════════════════════════════════════════════════════════════════════
# EVENTS
# ══════════════════════════════════════════════════════════════════════════════


class SessionEvent(Enum):
    """Événements publiés par la session pour le code applicatif."""

    AUTHENTICATION_SUCCEEDED = "session_authentication_succeeded"
    AUTHENTICATION_FAILED = "session_authentication_failed"  # (error)
    INVALIDATION_SUCCEEDED = "session_invalidation_succeeded"
    INVALIDATION_FAILED = "session_invalidation_failed"  # (error)
    AUTHORIZATION_FAILED = "authorization_failed"  # levé par la couche HTTP
    STATE_CHANGED = "session_state_changed"  # (SessionState)


class CollaboratorEvent(Enum):
    """Événements poussés par un authenticator ou un store."""

    SESSION_DATA_UPDATED = "session_data_updated"  # (data)
    SESSION_DATA_INVALIDATED = "session_data_invalidated"  # authenticator seulement


# ══════════════════════════════════════════════════════════════════════════════
# EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════════════


class SessionError(Exception):
    """Erreur de base de la session."""

    pass


class AuthenticatorError(Exception):
    """
    Erreur levée par un authenticator.

    Le payload est opaque pour la session: il est propagé tel quel
    à l'appelant et aux abonnés des événements *_FAILED.
    """

    def __init__(self, message: str, payload: Optional[Mapping[str, Any]] = None) -> None:
        self.payload: Dict[str, Any] = dict(payload or {})
        super().__init__(message)


# ══════════════════════════════════════════════════════════════════════════════
# STATE
# ══════════════════════════════════════════════════════════════════════════════


def _empty_content() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class SessionState:
    """
    État complet de la session, remplacé en un seul bloc.

    Attributes:
        is_authenticated: True si une authentification ou restauration a réussi
        authenticator_factory: Identifiant de l'authenticator lié (None si non authentifié)
        content: Données résolues par l'authenticator (lecture seule)
    """

    is_authenticated: bool = False
    authenticator_factory: Optional[str] = None
    content: Mapping[str, Any] = field(default_factory=_empty_content)

    def __post_init__(self):
        """Validation des contraintes."""
        if self.is_authenticated != (self.authenticator_factory is not None):
            raise ValueError(
                "is_authenticated must be True exactly when authenticator_factory is set"
            )

    @classmethod
    def authenticated(cls, authenticator_factory: str, content: Mapping[str, Any]) -> "SessionState":
        """Construit un état authentifié avec une copie figée du contenu."""
        return cls(
            is_authenticated=True,
            authenticator_factory=authenticator_factory,
            content=MappingProxyType(dict(content)),
        )

    def to_snapshot(self, authenticator_key: str = DEFAULT_AUTHENTICATOR_KEY) -> Dict[str, Any]:
        """
        Données à persister dans le store.

        Returns:
            content ∪ {authenticator_key: authenticator_factory}, ou {} si non authentifié
        """
        if not self.is_authenticated:
            return {}
        data = dict(self.content)
        data[authenticator_key] = self.authenticator_factory
        return data


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IAuthenticator(ABC):
    """
    Interface authenticator.

    Réalise le protocole de login/restauration/logout contre un backend.
    Peut pousser à tout moment, tant que la session est liée:
        - SESSION_DATA_UPDATED(content): rafraîchissement (ex: nouveau token)
        - SESSION_DATA_INVALIDATED: invalidation forcée côté serveur
    """

    @property
    @abstractmethod
    def events(self) -> "EventChannel":
        """Canal d'événements de l'authenticator."""
        pass

    @abstractmethod
    async def authenticate(self, options: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Authentifie avec les options fournies (credentials, token OAuth...).

        Returns:
            Contenu de session résolu

        Raises:
            Exception: Erreur propre à l'authenticator (propagée telle quelle)
        """
        pass

    @abstractmethod
    async def restore(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Restaure une session depuis les données persistées.

        Returns:
            Contenu de session (éventuellement rafraîchi)
        """
        pass

    @abstractmethod
    async def invalidate(self, data: Mapping[str, Any]) -> None:
        """
        Invalide la session. Lever une exception annule l'invalidation.
        """
        pass


class IStore(ABC):
    """
    Interface store.

    Persiste les données de session entre rechargements/onglets.
    Peut pousser SESSION_DATA_UPDATED(data) quand les données changent
    hors de la session (autre onglet, autre processus).
    """

    @property
    @abstractmethod
    def events(self) -> "EventChannel":
        """Canal d'événements du store."""
        pass

    @abstractmethod
    def persist(self, data: Mapping[str, Any]) -> None:
        """Remplace les données persistées."""
        pass

    @abstractmethod
    def restore(self) -> Dict[str, Any]:
        """Retourne une copie des données persistées ({} si aucune)."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Efface les données persistées."""
        pass
