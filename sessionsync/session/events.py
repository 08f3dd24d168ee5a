"""
SessionSync: Session - Event Channel

Canal d'événements synchrone avec abonnements par handle:
subscribe() retourne une Subscription, unsubscribe() la consomme.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List


class EventChannelError(Exception):
    """Erreur d'utilisation du canal d'événements."""

    pass


@dataclass(frozen=True)
class Subscription:
    """
    Handle d'abonnement.

    Attributes:
        channel: Nom du canal émetteur
        event: Événement écouté
        subscription_id: Identifiant unique du handle
    """

    channel: str
    event: Hashable
    subscription_id: str


class EventChannel:
    """
    Canal d'événements.

    Les handlers sont appelés de façon synchrone, dans l'ordre
    d'abonnement. Une exception levée par un handler est propagée
    à l'émetteur.

    Example:
        channel = EventChannel("session")
        sub = channel.subscribe(SessionEvent.AUTHENTICATION_SUCCEEDED, on_login)
        channel.emit(SessionEvent.AUTHENTICATION_SUCCEEDED)
        channel.unsubscribe(sub)
    """

    def __init__(self, name: str = "events") -> None:
        if not name or not name.strip():
            raise ValueError("Channel name cannot be empty")

        self._name = name.strip()
        # event -> {subscription_id: handler}, ordre d'insertion conservé
        self._handlers: Dict[Hashable, Dict[str, Callable[..., Any]]] = {}

    @property
    def name(self) -> str:
        """Retourne le nom du canal."""
        return self._name

    def subscribe(self, event: Hashable, handler: Callable[..., Any]) -> Subscription:
        """
        Abonne un handler à un événement.

        Args:
            event: Événement écouté
            handler: Callable appelé avec les arguments de emit()

        Returns:
            Subscription à passer à unsubscribe()

        Raises:
            EventChannelError: Si handler non appelable
        """
        if not callable(handler):
            raise EventChannelError(f"Handler for {event!r} must be callable")

        subscription = Subscription(
            channel=self._name,
            event=event,
            subscription_id=str(uuid.uuid4()),
        )
        self._handlers.setdefault(event, {})[subscription.subscription_id] = handler
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """
        Retire un abonnement.

        Returns:
            True si retiré, False si déjà retiré ou inconnu de ce canal
        """
        if subscription.channel != self._name:
            return False

        handlers = self._handlers.get(subscription.event)
        if not handlers or subscription.subscription_id not in handlers:
            return False

        del handlers[subscription.subscription_id]
        if not handlers:
            del self._handlers[subscription.event]
        return True

    def off(self, event: Hashable) -> int:
        """
        Retire tous les handlers d'un événement.

        Returns:
            Nombre de handlers retirés
        """
        handlers = self._handlers.pop(event, {})
        return len(handlers)

    def emit(self, event: Hashable, *args: Any) -> int:
        """
        Appelle les handlers abonnés à l'événement.

        Un handler retiré pendant l'émission n'est plus appelé;
        un handler ajouté pendant l'émission ne l'est qu'à la suivante.

        Returns:
            Nombre de handlers appelés
        """
        handlers = self._handlers.get(event)
        if not handlers:
            return 0

        called = 0
        for subscription_id, handler in list(handlers.items()):
            if subscription_id not in self._handlers.get(event, {}):
                continue
            handler(*args)
            called += 1
        return called

    def listener_count(self, event: Hashable) -> int:
        """Nombre de handlers abonnés à un événement."""
        return len(self._handlers.get(event, {}))

    def listeners(self, event: Hashable) -> List[Callable[..., Any]]:
        """Copie de la liste des handlers d'un événement."""
        return list(self._handlers.get(event, {}).values())
