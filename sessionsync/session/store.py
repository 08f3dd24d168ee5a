"""
SessionSync: Session - Stores

Base commune des stores et store en mémoire (EphemeralStore).

Les stores persistants (stockage navigateur, cookies, fichiers)
sont fournis par l'application.
"""

from typing import Any, Dict, Mapping, Optional

from .events import EventChannel
from .interfaces import CollaboratorEvent, IStore


class BaseStore(IStore):
    """Store de base: fournit le canal d'événements."""

    def __init__(self, name: Optional[str] = None) -> None:
        self._events = EventChannel(name or type(self).__name__)

    @property
    def events(self) -> EventChannel:
        """Canal d'événements du store."""
        return self._events

    def notify_data_updated(self, data: Mapping[str, Any]) -> int:
        """
        Signale un changement externe des données persistées.

        Returns:
            Nombre d'abonnés notifiés
        """
        return self._events.emit(CollaboratorEvent.SESSION_DATA_UPDATED, dict(data))


class EphemeralStore(BaseStore):
    """
    Store en mémoire, perdu à l'arrêt du processus.

    N'émet jamais d'événement pour ses propres écritures;
    simulate_external_update() reproduit l'écriture d'un autre onglet.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__(name)
        self._data: Dict[str, Any] = {}

    def persist(self, data: Mapping[str, Any]) -> None:
        """Remplace les données par une copie de data."""
        self._data = dict(data)

    def restore(self) -> Dict[str, Any]:
        """Retourne une copie des données ({} si aucune)."""
        return dict(self._data)

    def clear(self) -> None:
        """Efface les données."""
        self._data = {}

    def simulate_external_update(self, data: Mapping[str, Any]) -> int:
        """
        Remplace les données puis notifie les abonnés.

        Returns:
            Nombre d'abonnés notifiés
        """
        self._data = dict(data)
        return self.notify_data_updated(data)
