"""
Tests d'intégration pour la session.
Vérifie que ConfigLoader, build_session, le registre et le store partagé
fonctionnent ensemble sur un cycle de vie complet.
"""

import pytest

from sessionsync.core import ConfigLoader, build_session
from sessionsync.session import CollaboratorEvent, SessionEvent, SessionRestoreError


class TestSessionIntegration:
    """Tests d'intégration pour le module Session."""

    @pytest.mark.asyncio
    async def test_authenticate_restore_invalidate(self, fixtures_path, registry, make_recorder):
        """Authentification, reprise par une seconde session, invalidation."""
        config = await ConfigLoader(fixtures_path / "configs" / "session.yaml").load()
        outputs = []
        first = build_session(config, registry, output_handler=outputs.append)
        await first.authenticate("password", {"user": "a", "password": "p"})

        # Seconde session (rechargement applicatif) sur le même store
        second = build_session(config, registry)
        recorder = make_recorder(second)
        await second.restore()

        assert second.is_authenticated is True
        assert second.authenticator_factory == "password"
        assert dict(second.content) == {"token": "xyz"}
        assert recorder.count(SessionEvent.AUTHENTICATION_SUCCEEDED) == 0

        await first.invalidate()

        assert first.is_authenticated is False
        assert first.store.restore() == {}
        assert "xyz" not in "".join(outputs)

        # Plus rien à reprendre
        third = build_session(config, registry)
        with pytest.raises(SessionRestoreError):
            await third.restore()

    @pytest.mark.asyncio
    async def test_store_update_reconciles_all_sessions(self, fixtures_path, registry, make_recorder):
        """Mise à jour externe du store → toutes les sessions suivent."""
        config = await ConfigLoader(fixtures_path / "configs" / "session.yaml").load()
        first = build_session(config, registry)
        second = build_session(config, registry)
        first_recorder = make_recorder(first)
        second_recorder = make_recorder(second)

        first.store.simulate_external_update({"authenticatorFactory": "token", "token": "shared"})
        await first.drain()
        await second.drain()

        for session, recorder in ((first, first_recorder), (second, second_recorder)):
            assert session.authenticator_factory == "token"
            assert dict(session.content) == {"token": "shared"}
            assert recorder.count(SessionEvent.AUTHENTICATION_SUCCEEDED) == 1

        first.store.simulate_external_update({})

        for session, recorder in ((first, first_recorder), (second, second_recorder)):
            assert session.is_authenticated is False
            assert recorder.count(SessionEvent.INVALIDATION_SUCCEEDED) == 1

    @pytest.mark.asyncio
    async def test_authenticator_invalidation_reaches_bound_sessions(
        self, fixtures_path, registry, password_authenticator, make_recorder
    ):
        """Invalidation côté authenticator → sessions liées effacées."""
        config = await ConfigLoader(fixtures_path / "configs" / "session.yaml").load()
        session = build_session(config, registry)
        recorder = make_recorder(session)
        await session.authenticate("password", {"user": "a"})

        password_authenticator.notify_data_updated({"token": "refreshed"})

        assert dict(session.content) == {"token": "refreshed"}
        assert session.store.restore() == {"authenticatorFactory": "password", "token": "refreshed"}

        password_authenticator.notify_data_invalidated()

        assert session.is_authenticated is False
        assert recorder.count(SessionEvent.INVALIDATION_SUCCEEDED) == 1
        assert password_authenticator.events.listener_count(CollaboratorEvent.SESSION_DATA_UPDATED) == 0
