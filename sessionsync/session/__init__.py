"""
SessionSync: Session

Machine à états de la session d'authentification et contrats
de ses collaborateurs (Authenticator, Store).
"""

from .interfaces import (
    DEFAULT_AUTHENTICATOR_KEY,
    # Enums
    SessionEvent,
    CollaboratorEvent,
    # Dataclasses
    SessionState,
    # Interfaces
    IAuthenticator,
    IStore,
    # Exceptions
    SessionError,
    AuthenticatorError,
)
from .events import EventChannel, EventChannelError, Subscription
from .authenticator import BaseAuthenticator
from .store import BaseStore, EphemeralStore
from .registry import (
    CollaboratorRegistry,
    CollaboratorNotFoundError,
    CollaboratorRegistrationError,
)
from .session import Session, SessionMisuseError, SessionRestoreError

__all__ = [
    "DEFAULT_AUTHENTICATOR_KEY",
    # Enums
    "SessionEvent",
    "CollaboratorEvent",
    # Dataclasses
    "SessionState",
    "Subscription",
    # Interfaces
    "IAuthenticator",
    "IStore",
    # Implementations
    "EventChannel",
    "BaseAuthenticator",
    "BaseStore",
    "EphemeralStore",
    "CollaboratorRegistry",
    "Session",
    # Exceptions
    "SessionError",
    "SessionMisuseError",
    "SessionRestoreError",
    "AuthenticatorError",
    "CollaboratorNotFoundError",
    "CollaboratorRegistrationError",
    "EventChannelError",
]
