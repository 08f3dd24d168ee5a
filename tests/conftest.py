"""
SessionSync - Pytest Configuration
Fixtures partagées pour tous les tests.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pytest

from sessionsync.logging import LogConfig, LogLevel, StructuredLogger
from sessionsync.session import (
    AuthenticatorError,
    BaseAuthenticator,
    CollaboratorRegistry,
    EphemeralStore,
    Session,
    SessionEvent,
)


class FakeAuthenticator(BaseAuthenticator):
    """
    Authenticator de test piloté par ses attributs.

    authenticate/restore/invalidate retournent le résultat configuré
    ou lèvent l'erreur configurée, et enregistrent chaque appel.
    """

    def __init__(self, name: str = "fake") -> None:
        super().__init__(name)
        self.authenticate_result: Optional[Dict[str, Any]] = {}
        self.authenticate_error: Optional[Exception] = None
        self.restore_result: Optional[Dict[str, Any]] = None
        self.restore_error: Optional[Exception] = None
        self.invalidate_error: Optional[Exception] = None
        self.calls: List[tuple] = []

    async def authenticate(self, options: Mapping[str, Any]) -> Mapping[str, Any]:
        self.calls.append(("authenticate", dict(options)))
        if self.authenticate_error is not None:
            raise self.authenticate_error
        if self.authenticate_result is None:
            return None
        return dict(self.authenticate_result)

    async def restore(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        self.calls.append(("restore", dict(data)))
        if self.restore_error is not None:
            raise self.restore_error
        if self.restore_result is None:
            return dict(data)
        return dict(self.restore_result)

    async def invalidate(self, data: Mapping[str, Any]) -> None:
        self.calls.append(("invalidate", dict(data)))
        if self.invalidate_error is not None:
            raise self.invalidate_error


class EventRecorder:
    """Enregistre les événements de session reçus."""

    def __init__(self, session: Session) -> None:
        self.events: List[tuple] = []
        for event in SessionEvent:
            session.events.subscribe(event, self._recorder(event))

    def _recorder(self, event: SessionEvent):
        def record(*args: Any) -> None:
            self.events.append((event, args))

        return record

    def count(self, event: SessionEvent) -> int:
        return len([e for e, _ in self.events if e == event])

    def args(self, event: SessionEvent) -> List[tuple]:
        return [a for e, a in self.events if e == event]


@pytest.fixture
def fixtures_path() -> Path:
    """Chemin vers le dossier fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def password_authenticator() -> FakeAuthenticator:
    authenticator = FakeAuthenticator("password")
    authenticator.authenticate_result = {"token": "xyz"}
    return authenticator


@pytest.fixture
def token_authenticator() -> FakeAuthenticator:
    return FakeAuthenticator("token")


@pytest.fixture
def registry(password_authenticator, token_authenticator) -> CollaboratorRegistry:
    registry = CollaboratorRegistry()
    registry.register_authenticator("password", password_authenticator)
    registry.register_authenticator("token", token_authenticator)
    return registry


@pytest.fixture
def store() -> EphemeralStore:
    return EphemeralStore()


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger("test.session", config=LogConfig(min_level=LogLevel.DEBUG))


@pytest.fixture
def session(store, registry, logger) -> Session:
    return Session(store, registry, logger=logger)


@pytest.fixture
def recorder(session) -> EventRecorder:
    return EventRecorder(session)


@pytest.fixture
def bad_credentials() -> AuthenticatorError:
    return AuthenticatorError("bad credentials", {"message": "bad credentials"})


@pytest.fixture
def make_authenticator():
    """Construit des FakeAuthenticator supplémentaires."""
    return FakeAuthenticator


@pytest.fixture
def make_recorder():
    """Construit un EventRecorder pour une autre session."""
    return EventRecorder
