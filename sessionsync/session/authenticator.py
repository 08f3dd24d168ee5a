"""
SessionSync: Session - Base Authenticator

Base commune des authenticators: canal d'événements et
comportements par défaut de restauration/invalidation.
"""

from typing import Any, Mapping, Optional

from .events import EventChannel
from .interfaces import AuthenticatorError, CollaboratorEvent, IAuthenticator


class BaseAuthenticator(IAuthenticator):
    """
    Authenticator de base.

    Les sous-classes implémentent authenticate() et, si elles savent
    restaurer une session persistée, restore(). Par défaut:
        - restore() échoue (aucune session restaurable)
        - invalidate() réussit sans appel backend

    Example:
        class PasswordAuthenticator(BaseAuthenticator):
            async def authenticate(self, options):
                token = await api.login(options["user"], options["password"])
                return {"token": token}
    """

    def __init__(self, name: Optional[str] = None) -> None:
        """
        Args:
            name: Nom du canal d'événements (défaut: nom de la classe)
        """
        self._events = EventChannel(name or type(self).__name__)

    @property
    def events(self) -> EventChannel:
        """Canal d'événements de l'authenticator."""
        return self._events

    async def restore(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        """Échoue: cet authenticator ne sait pas restaurer de session."""
        raise AuthenticatorError(
            f"{type(self).__name__} cannot restore a persisted session"
        )

    async def invalidate(self, data: Mapping[str, Any]) -> None:
        """Invalidation sans effet côté backend."""
        return None

    def notify_data_updated(self, data: Mapping[str, Any]) -> int:
        """
        Pousse un nouveau contenu de session (ex: token rafraîchi).

        Returns:
            Nombre d'abonnés notifiés
        """
        return self._events.emit(CollaboratorEvent.SESSION_DATA_UPDATED, dict(data))

    def notify_data_invalidated(self) -> int:
        """
        Signale une invalidation forcée (ex: révocation serveur).

        Returns:
            Nombre d'abonnés notifiés
        """
        return self._events.emit(CollaboratorEvent.SESSION_DATA_INVALIDATED)
