"""
SessionSync: Session

Machine à états de la session d'authentification côté client.

États:
    - non authentifiée (initial)
    - authentifiée(authenticator_factory, content)

Garanties:
    - is_authenticated == (authenticator_factory is not None)
    - authentifiée → le store contient content ∪ {authenticator_key: factory}
    - non authentifiée → le store est vide
    - au plus un authenticator lié, avec au plus une paire d'abonnements
"""

import asyncio
from typing import Any, Iterator, List, Mapping, Optional, Set

from ..logging import IStructuredLogger, StructuredLogger, correlation_scope
from .events import EventChannel, Subscription
from .interfaces import (
    DEFAULT_AUTHENTICATOR_KEY,
    CollaboratorEvent,
    IAuthenticator,
    IStore,
    SessionError,
    SessionEvent,
    SessionState,
)
from .registry import CollaboratorRegistry


class SessionMisuseError(SessionError):
    """Appel invalide (bug appelant): jamais réessayé."""

    pass


class SessionRestoreError(SessionError):
    """Aucune session restaurable; le store a été vidé."""

    pass


class Session:
    """
    Session d'authentification.

    Délègue l'authentification à l'authenticator enregistré sous
    l'identifiant demandé, persiste les données résolues dans le store
    et publie les événements de cycle de vie sur `events`.

    Les changements poussés par le store (autre onglet) ou par
    l'authenticator lié (rafraîchissement, révocation) sont réconciliés
    sans appelant explicite.

    Concurrence:
        Boucle asyncio mono-thread. L'état est modifié uniquement de façon
        synchrone, après la résolution d'un appel à l'authenticator, et
        remplacé en une seule affectation. Deux authenticate() concurrents
        ne sont PAS sérialisés: le dernier à se résoudre détermine l'état.

    Example:
        session = Session(store, registry)
        session.events.subscribe(SessionEvent.AUTHENTICATION_SUCCEEDED, on_login)
        await session.authenticate("password", {"user": "a", "password": "b"})
        token = session.get("token")
        await session.invalidate()
    """

    def __init__(
        self,
        store: IStore,
        registry: CollaboratorRegistry,
        logger: Optional[IStructuredLogger] = None,
        authenticator_key: str = DEFAULT_AUTHENTICATOR_KEY,
        log_content_values: bool = False,
    ) -> None:
        """
        Initialise la session et s'abonne aux événements du store.

        Args:
            store: Store de persistance
            registry: Registre des authenticators
            logger: Logger structuré (défaut: "sessionsync.session")
            authenticator_key: Clé de l'identifiant d'authenticator dans le store
            log_content_values: Logger les valeurs (masquées) du contenu, pas seulement les clés

        Raises:
            ValueError: Si authenticator_key vide
        """
        if not authenticator_key or not authenticator_key.strip():
            raise ValueError("authenticator_key cannot be empty")

        self._store = store
        self._registry = registry
        self._logger = logger or StructuredLogger("sessionsync.session")
        self._authenticator_key = authenticator_key
        self._log_content_values = log_content_values
        self._state = SessionState()
        self._events = EventChannel("session")
        self._bound_authenticator: Optional[IAuthenticator] = None
        self._authenticator_subscriptions: List[Subscription] = []
        self._pending_tasks: Set["asyncio.Task[None]"] = set()
        self.attempted_transition: Any = None

        self._store_subscription: Optional[Subscription] = self._bind_to_store_events()

    # ──────────────────────────────────────────────────────────────────────────
    # État exposé
    # ──────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        """État courant (immuable)."""
        return self._state

    @property
    def is_authenticated(self) -> bool:
        """True si la session est authentifiée."""
        return self._state.is_authenticated

    @property
    def authenticator_factory(self) -> Optional[str]:
        """Identifiant de l'authenticator lié, None si non authentifiée."""
        return self._state.authenticator_factory

    @property
    def content(self) -> Mapping[str, Any]:
        """Données résolues par l'authenticator (lecture seule)."""
        return self._state.content

    @property
    def events(self) -> EventChannel:
        """Canal des événements de session."""
        return self._events

    @property
    def store(self) -> IStore:
        """Store de persistance."""
        return self._store

    @property
    def authenticator_key(self) -> str:
        """Clé de l'identifiant d'authenticator dans le store."""
        return self._authenticator_key

    @property
    def pending_reconciliations(self) -> int:
        """Nombre de réconciliations asynchrones en cours."""
        return len(self._pending_tasks)

    def get(self, key: str, default: Any = None) -> Any:
        """Lit une donnée de session."""
        return self._state.content.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._state.content[key]

    def __contains__(self, key: object) -> bool:
        return key in self._state.content

    def __iter__(self) -> Iterator[str]:
        return iter(self._state.content)

    # ──────────────────────────────────────────────────────────────────────────
    # Opérations publiques
    # ──────────────────────────────────────────────────────────────────────────

    async def authenticate(
        self, authenticator_factory: str, options: Optional[Mapping[str, Any]] = None
    ) -> None:
        """
        Authentifie la session avec l'authenticator désigné.

        Succès: état authentifié, store mis à jour, AUTHENTICATION_SUCCEEDED
        émis si la session n'était pas déjà authentifiée.
        Échec: état effacé, AUTHENTICATION_FAILED(error) émis, erreur
        de l'authenticator relancée telle quelle.

        Args:
            authenticator_factory: Identifiant de l'authenticator
            options: Options transmises à l'authenticator (credentials...)

        Raises:
            SessionMisuseError: Identifiant vide
            CollaboratorNotFoundError: Identifiant inconnu
            Exception: Erreur de l'authenticator
        """
        if not authenticator_factory:
            self._logger.error("Authentication requested without authenticator")
            raise SessionMisuseError(
                "Session.authenticate requires the authenticator factory to be "
                f"specified, was {authenticator_factory!r}"
            )

        authenticator = self._registry.lookup_authenticator(authenticator_factory)

        with correlation_scope():
            self._logger.debug("Authentication started", authenticator=authenticator_factory)
            try:
                content = await authenticator.authenticate(options if options is not None else {})
            except Exception as error:
                self.clear()
                self._logger.warn(
                    "Authentication failed",
                    authenticator=authenticator_factory,
                    error=repr(error),
                )
                self._events.emit(SessionEvent.AUTHENTICATION_FAILED, error)
                raise

            self.setup(authenticator_factory, content, trigger=True)

    async def invalidate(self) -> None:
        """
        Invalide la session auprès de l'authenticator lié.

        Succès: abonnements à l'authenticator retirés, état effacé,
        INVALIDATION_SUCCEEDED émis.
        Échec: la session reste authentifiée, INVALIDATION_FAILED(error)
        émis, erreur relancée telle quelle.

        Raises:
            SessionMisuseError: Session non authentifiée
            Exception: Erreur de l'authenticator
        """
        state = self._state
        if not state.is_authenticated:
            self._logger.error("Invalidation requested on unauthenticated session")
            raise SessionMisuseError("Session.invalidate requires an authenticated session")

        authenticator = self._registry.lookup_authenticator(state.authenticator_factory)

        with correlation_scope():
            self._logger.debug("Invalidation started", authenticator=state.authenticator_factory)
            try:
                await authenticator.invalidate(dict(state.content))
            except Exception as error:
                self._logger.warn(
                    "Invalidation failed, session kept",
                    authenticator=state.authenticator_factory,
                    error=repr(error),
                )
                self._events.emit(SessionEvent.INVALIDATION_FAILED, error)
                raise

            self._unbind_authenticator_events()
            self.clear(trigger=True)

    async def restore(self) -> None:
        """
        Restauration silencieuse depuis le store (au démarrage).

        Aucun événement de succès n'est émis. En cas d'échec le store
        est vidé et la session reste non authentifiée.

        Raises:
            SessionRestoreError: Rien à restaurer ou restauration refusée
        """
        with correlation_scope():
            data = dict(self._store.restore() or {})
            authenticator_factory = data.pop(self._authenticator_key, None)
            if not authenticator_factory:
                self._store.clear()
                self._logger.info("No persisted session to restore")
                raise SessionRestoreError("No persisted session to restore")

            try:
                authenticator = self._registry.lookup_authenticator(authenticator_factory)
                content = await authenticator.restore(data)
            except Exception as error:
                self._store.clear()
                self._logger.warn(
                    "Session restore failed",
                    authenticator=authenticator_factory,
                    error=repr(error),
                )
                raise SessionRestoreError(
                    f"Authenticator {authenticator_factory!r} could not restore the session"
                ) from error

            self.setup(authenticator_factory, content)

    def notify_authorization_failed(self, *args: Any) -> int:
        """
        Relaie un refus d'autorisation (HTTP 401) signalé par la couche HTTP.

        La session ne change pas d'état: la réaction appartient à l'application.

        Returns:
            Nombre d'abonnés notifiés
        """
        self._logger.warn("Authorization rejected by server", authenticator=self.authenticator_factory)
        return self._events.emit(SessionEvent.AUTHORIZATION_FAILED, *args)

    async def drain(self) -> None:
        """Attend la fin des réconciliations asynchrones en cours."""
        while self._pending_tasks:
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)

    def close(self) -> None:
        """
        Détache la session de ses collaborateurs (arrêt, tests).

        L'état et le store ne sont pas modifiés.
        """
        if self._store_subscription is not None:
            self._store.events.unsubscribe(self._store_subscription)
            self._store_subscription = None
        self._unbind_authenticator_events()
        for task in list(self._pending_tasks):
            task.cancel()

    # ──────────────────────────────────────────────────────────────────────────
    # Transitions
    # ──────────────────────────────────────────────────────────────────────────

    def setup(
        self,
        authenticator_factory: str,
        content: Optional[Mapping[str, Any]],
        trigger: bool = False,
    ) -> None:
        """
        Entre (ou reste) dans l'état authentifié.

        L'état est remplacé d'un bloc, les abonnements à l'authenticator
        sont rétablis puis le store est réécrit. AUTHENTICATION_SUCCEEDED
        n'est émis que si trigger est vrai ET que la session n'était pas
        déjà authentifiée.

        Raises:
            CollaboratorNotFoundError: Identifiant inconnu
        """
        should_trigger = trigger and not self._state.is_authenticated
        authenticator = self._registry.lookup_authenticator(authenticator_factory)

        data = dict(content or {})
        data.pop(self._authenticator_key, None)
        new_state = SessionState.authenticated(authenticator_factory, data)

        self._state = new_state
        self._bind_to_authenticator_events(authenticator_factory, authenticator)
        self._store.persist(new_state.to_snapshot(self._authenticator_key))

        self._logger.info(
            "Session authenticated",
            authenticator=authenticator_factory,
            content=self._describe_content(new_state.content),
        )
        self._events.emit(SessionEvent.STATE_CHANGED, new_state)
        if should_trigger:
            self._events.emit(SessionEvent.AUTHENTICATION_SUCCEEDED)

    def clear(self, trigger: bool = False) -> None:
        """
        Entre (ou reste) dans l'état non authentifié.

        INVALIDATION_SUCCEEDED n'est émis que si trigger est vrai ET
        que la session était authentifiée.
        """
        previous = self._state
        should_trigger = trigger and previous.is_authenticated

        new_state = SessionState()
        self._state = new_state
        self._unbind_authenticator_events()
        self._store.clear()

        if previous.is_authenticated:
            self._logger.info("Session cleared", authenticator=previous.authenticator_factory)
        self._events.emit(SessionEvent.STATE_CHANGED, new_state)
        if should_trigger:
            self._events.emit(SessionEvent.INVALIDATION_SUCCEEDED)

    # ──────────────────────────────────────────────────────────────────────────
    # Abonnements aux collaborateurs
    # ──────────────────────────────────────────────────────────────────────────

    def _bind_to_authenticator_events(
        self, authenticator_factory: str, authenticator: IAuthenticator
    ) -> None:
        self._unbind_authenticator_events()

        def on_data_updated(content: Mapping[str, Any]) -> None:
            self._on_authenticator_data_updated(authenticator_factory, content)

        def on_data_invalidated(*_: Any) -> None:
            self._on_authenticator_data_invalidated(authenticator_factory)

        events = authenticator.events
        self._bound_authenticator = authenticator
        self._authenticator_subscriptions = [
            events.subscribe(CollaboratorEvent.SESSION_DATA_UPDATED, on_data_updated),
            events.subscribe(CollaboratorEvent.SESSION_DATA_INVALIDATED, on_data_invalidated),
        ]

    def _unbind_authenticator_events(self) -> None:
        if self._bound_authenticator is not None:
            for subscription in self._authenticator_subscriptions:
                self._bound_authenticator.events.unsubscribe(subscription)
        self._bound_authenticator = None
        self._authenticator_subscriptions = []

    def _bind_to_store_events(self) -> Subscription:
        return self._store.events.subscribe(
            CollaboratorEvent.SESSION_DATA_UPDATED, self._on_store_data_updated
        )

    def _on_authenticator_data_updated(
        self, authenticator_factory: str, content: Mapping[str, Any]
    ) -> None:
        with correlation_scope():
            self._logger.debug("Authenticator refreshed session data", authenticator=authenticator_factory)
            self.setup(authenticator_factory, content)

    def _on_authenticator_data_invalidated(self, authenticator_factory: str) -> None:
        with correlation_scope():
            self._logger.info("Authenticator invalidated the session", authenticator=authenticator_factory)
            self.clear(trigger=True)

    def _on_store_data_updated(self, data: Mapping[str, Any]) -> None:
        payload = dict(data or {})
        authenticator_factory = payload.pop(self._authenticator_key, None)

        if not authenticator_factory:
            with correlation_scope():
                self._logger.info("Store reported session data without authenticator")
                self.clear(trigger=True)
            return

        task = asyncio.get_running_loop().create_task(
            self._reconcile_store_update(authenticator_factory, payload)
        )
        self._pending_tasks.add(task)
        task.add_done_callback(self._on_reconciliation_done)

    async def _reconcile_store_update(
        self, authenticator_factory: str, data: Mapping[str, Any]
    ) -> None:
        with correlation_scope():
            self._logger.debug("Restoring session data pushed by store", authenticator=authenticator_factory)
            try:
                authenticator = self._registry.lookup_authenticator(authenticator_factory)
                content = await authenticator.restore(data)
            except Exception as error:
                self._logger.warn(
                    "Store session data rejected, clearing session",
                    authenticator=authenticator_factory,
                    error=repr(error),
                )
                self.clear(trigger=True)
                return

            self.setup(authenticator_factory, content, trigger=True)

    def _on_reconciliation_done(self, task: "asyncio.Task[None]") -> None:
        self._pending_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._logger.error("Session reconciliation crashed", error=repr(error))

    def _describe_content(self, content: Mapping[str, Any]) -> Any:
        if self._log_content_values:
            return dict(content)
        return sorted(content)
