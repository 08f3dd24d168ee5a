"""
SessionSync: Session - Collaborator Registry

Résolution des authenticators et stores par identifiant.

Chaque identifiant correspond à une instance unique: enregistrée
directement, ou construite une seule fois au premier lookup
lorsqu'une factory est enregistrée.
"""

from typing import Callable, Dict, Generic, List, TypeVar

from .interfaces import IAuthenticator, IStore, SessionError
from .store import EphemeralStore

T = TypeVar("T")


class CollaboratorNotFoundError(SessionError, LookupError):
    """Aucun collaborateur enregistré pour cet identifiant."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"No {kind} registered as {identifier!r}")


class CollaboratorRegistrationError(SessionError):
    """Enregistrement invalide (identifiant vide, doublon, type incorrect)."""

    pass


class _Section(Generic[T]):
    """Instances et factories d'un type de collaborateur."""

    def __init__(self, kind: str, expected_type: type) -> None:
        self.kind = kind
        self.expected_type = expected_type
        self.instances: Dict[str, T] = {}
        self.factories: Dict[str, Callable[[], T]] = {}

    def check_identifier(self, identifier: str) -> None:
        if not identifier or not identifier.strip():
            raise CollaboratorRegistrationError(f"{self.kind} identifier cannot be empty")
        if identifier in self.instances or identifier in self.factories:
            raise CollaboratorRegistrationError(
                f"{self.kind} {identifier!r} is already registered"
            )

    def check_instance(self, identifier: str, instance: object) -> None:
        if not isinstance(instance, self.expected_type):
            raise CollaboratorRegistrationError(
                f"{self.kind} {identifier!r} must implement {self.expected_type.__name__}, "
                f"got {type(instance).__name__}"
            )

    def register(self, identifier: str, instance: T) -> None:
        self.check_identifier(identifier)
        self.check_instance(identifier, instance)
        self.instances[identifier] = instance

    def register_factory(self, identifier: str, factory: Callable[[], T]) -> None:
        self.check_identifier(identifier)
        if not callable(factory):
            raise CollaboratorRegistrationError(f"{self.kind} factory {identifier!r} must be callable")
        self.factories[identifier] = factory

    def lookup(self, identifier: str) -> T:
        if identifier in self.instances:
            return self.instances[identifier]

        factory = self.factories.get(identifier) if identifier else None
        if factory is None:
            raise CollaboratorNotFoundError(self.kind, identifier)

        instance = factory()
        self.check_instance(identifier, instance)
        # Construit une seule fois: la factory est remplacée par l'instance
        self.instances[identifier] = instance
        del self.factories[identifier]
        return instance

    def contains(self, identifier: str) -> bool:
        return identifier in self.instances or identifier in self.factories

    def identifiers(self) -> List[str]:
        return sorted(set(self.instances) | set(self.factories))


class CollaboratorRegistry:
    """
    Registre explicite des collaborateurs de la session.

    Un store "ephemeral" (EphemeralStore) est pré-enregistré sauf
    si register_defaults=False.

    Example:
        registry = CollaboratorRegistry()
        registry.register_authenticator("password", PasswordAuthenticator())
        registry.register_authenticator_factory("oauth", lambda: OAuthAuthenticator(client))
        authenticator = registry.lookup_authenticator("password")
    """

    EPHEMERAL_STORE: str = "ephemeral"

    def __init__(self, register_defaults: bool = True) -> None:
        self._authenticators: _Section[IAuthenticator] = _Section("authenticator", IAuthenticator)
        self._stores: _Section[IStore] = _Section("store", IStore)
        if register_defaults:
            self.register_store_factory(self.EPHEMERAL_STORE, EphemeralStore)

    # ──────────────────────────────────────────────────────────────────────────
    # Authenticators
    # ──────────────────────────────────────────────────────────────────────────

    def register_authenticator(self, identifier: str, authenticator: IAuthenticator) -> None:
        """
        Enregistre une instance d'authenticator.

        Raises:
            CollaboratorRegistrationError: Identifiant vide/dupliqué ou type incorrect
        """
        self._authenticators.register(identifier, authenticator)

    def register_authenticator_factory(
        self, identifier: str, factory: Callable[[], IAuthenticator]
    ) -> None:
        """Enregistre une factory appelée une seule fois, au premier lookup."""
        self._authenticators.register_factory(identifier, factory)

    def lookup_authenticator(self, identifier: str) -> IAuthenticator:
        """
        Résout un authenticator.

        Raises:
            CollaboratorNotFoundError: Identifiant inconnu ou vide
        """
        return self._authenticators.lookup(identifier)

    def has_authenticator(self, identifier: str) -> bool:
        """True si un authenticator est enregistré sous cet identifiant."""
        return self._authenticators.contains(identifier)

    def authenticator_identifiers(self) -> List[str]:
        """Identifiants des authenticators enregistrés (triés)."""
        return self._authenticators.identifiers()

    # ──────────────────────────────────────────────────────────────────────────
    # Stores
    # ──────────────────────────────────────────────────────────────────────────

    def register_store(self, identifier: str, store: IStore) -> None:
        """Enregistre une instance de store."""
        self._stores.register(identifier, store)

    def register_store_factory(self, identifier: str, factory: Callable[[], IStore]) -> None:
        """Enregistre une factory de store construite au premier lookup."""
        self._stores.register_factory(identifier, factory)

    def lookup_store(self, identifier: str) -> IStore:
        """
        Résout un store.

        Raises:
            CollaboratorNotFoundError: Identifiant inconnu ou vide
        """
        return self._stores.lookup(identifier)

    def has_store(self, identifier: str) -> bool:
        """True si un store est enregistré sous cet identifiant."""
        return self._stores.contains(identifier)

    def store_identifiers(self) -> List[str]:
        """Identifiants des stores enregistrés (triés)."""
        return self._stores.identifiers()
