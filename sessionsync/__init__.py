"""
SessionSync

Gestion de l'état d'authentification côté client: une Session unique
synchronisée avec un Authenticator et un Store interchangeables.
"""

from .session import (
    AuthenticatorError,
    BaseAuthenticator,
    BaseStore,
    CollaboratorRegistry,
    EphemeralStore,
    Session,
    SessionError,
    SessionEvent,
    SessionMisuseError,
    SessionRestoreError,
    SessionState,
)
from .core import ConfigLoader, SessionConfig, build_session

__version__ = "0.1.0"

__all__ = [
    "AuthenticatorError",
    "BaseAuthenticator",
    "BaseStore",
    "CollaboratorRegistry",
    "ConfigLoader",
    "EphemeralStore",
    "Session",
    "SessionConfig",
    "SessionError",
    "SessionEvent",
    "SessionMisuseError",
    "SessionRestoreError",
    "SessionState",
    "build_session",
    "__version__",
]
