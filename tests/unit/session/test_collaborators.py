"""
Tests unitaires BaseAuthenticator, BaseStore, EphemeralStore et SessionState
"""

from dataclasses import FrozenInstanceError

import pytest

from sessionsync.session import (
    AuthenticatorError,
    BaseAuthenticator,
    CollaboratorEvent,
    EphemeralStore,
    SessionState,
)


class PasswordAuthenticator(BaseAuthenticator):
    async def authenticate(self, options):
        return {"token": options["user"]}


class TestBaseAuthenticator:
    """Comportements par défaut de BaseAuthenticator."""

    def test_cannot_instantiate_without_authenticate(self):
        """authenticate() reste abstraite."""
        with pytest.raises(TypeError):
            BaseAuthenticator()

    def test_channel_named_after_class(self):
        """Nom du canal par défaut = nom de la classe."""
        assert PasswordAuthenticator().events.name == "PasswordAuthenticator"
        assert PasswordAuthenticator("pwd").events.name == "pwd"

    @pytest.mark.asyncio
    async def test_default_restore_fails(self):
        """restore() par défaut → AuthenticatorError."""
        with pytest.raises(AuthenticatorError, match="cannot restore"):
            await PasswordAuthenticator().restore({"token": "a"})

    @pytest.mark.asyncio
    async def test_default_invalidate_succeeds(self):
        """invalidate() par défaut → None."""
        assert await PasswordAuthenticator().invalidate({"token": "a"}) is None

    def test_notify_helpers_emit_events(self):
        """notify_* émettent sur le canal de l'authenticator."""
        authenticator = PasswordAuthenticator()
        received = []
        authenticator.events.subscribe(CollaboratorEvent.SESSION_DATA_UPDATED, received.append)
        authenticator.events.subscribe(
            CollaboratorEvent.SESSION_DATA_INVALIDATED, lambda: received.append("invalidated")
        )

        assert authenticator.notify_data_updated({"token": "b"}) == 1
        assert authenticator.notify_data_invalidated() == 1
        assert received == [{"token": "b"}, "invalidated"]

    def test_authenticator_error_payload(self):
        """AuthenticatorError conserve une copie du payload."""
        payload = {"message": "bad credentials"}
        error = AuthenticatorError("bad credentials", payload)
        payload["message"] = "changed"

        assert error.payload == {"message": "bad credentials"}
        assert str(error) == "bad credentials"
        assert AuthenticatorError("no payload").payload == {}


class TestEphemeralStore:
    """Store en mémoire."""

    def test_restore_empty(self):
        """Store neuf → {}."""
        assert EphemeralStore().restore() == {}

    def test_persist_keeps_copy(self):
        """persist copie les données; restore retourne une copie."""
        store = EphemeralStore()
        data = {"token": "a"}
        store.persist(data)
        data["token"] = "mutated"

        restored = store.restore()
        restored["token"] = "mutated again"

        assert store.restore() == {"token": "a"}

    def test_clear(self):
        """clear → {}."""
        store = EphemeralStore()
        store.persist({"token": "a"})
        store.clear()

        assert store.restore() == {}

    def test_own_writes_do_not_emit(self):
        """persist/clear n'émettent aucun événement."""
        store = EphemeralStore()
        received = []
        store.events.subscribe(CollaboratorEvent.SESSION_DATA_UPDATED, received.append)

        store.persist({"token": "a"})
        store.clear()

        assert received == []

    def test_simulated_external_update(self):
        """simulate_external_update remplace les données et notifie."""
        store = EphemeralStore()
        received = []
        store.events.subscribe(CollaboratorEvent.SESSION_DATA_UPDATED, received.append)

        notified = store.simulate_external_update({"authenticatorFactory": "token", "token": "b"})

        assert notified == 1
        assert received == [{"authenticatorFactory": "token", "token": "b"}]
        assert store.restore() == {"authenticatorFactory": "token", "token": "b"}


class TestSessionState:
    """État immuable de la session."""

    def test_default_is_unauthenticated(self):
        state = SessionState()

        assert state.is_authenticated is False
        assert state.authenticator_factory is None
        assert dict(state.content) == {}
        assert state.to_snapshot() == {}

    def test_authenticated_state_snapshot(self):
        """Snapshot = contenu + identifiant d'authenticator."""
        state = SessionState.authenticated("password", {"token": "a"})

        assert state.to_snapshot() == {"authenticatorFactory": "password", "token": "a"}
        assert state.to_snapshot("factory") == {"factory": "password", "token": "a"}

    def test_inconsistent_state_rejected(self):
        """is_authenticated sans authenticator (ou l'inverse) → ValueError."""
        with pytest.raises(ValueError):
            SessionState(is_authenticated=True)
        with pytest.raises(ValueError):
            SessionState(is_authenticated=False, authenticator_factory="password")

    def test_state_is_frozen(self):
        """Attributs non modifiables."""
        state = SessionState()
        with pytest.raises(FrozenInstanceError):
            state.is_authenticated = True

    def test_content_is_copied(self):
        """Le contenu source peut changer sans affecter l'état."""
        content = {"token": "a"}
        state = SessionState.authenticated("password", content)
        content["token"] = "b"

        assert state.content["token"] == "a"
