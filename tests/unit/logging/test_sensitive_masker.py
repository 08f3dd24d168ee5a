"""
Tests unitaires Logging - Sensitive Masker

Données de session sensibles jamais en clair.
"""

import pytest

from sessionsync.logging import ISensitiveMasker, SensitiveMasker


class TestSensitiveDataMasking:
    """Masquage des clés sensibles."""

    @pytest.mark.parametrize(
        "key",
        ["password", "access_token", "refresh_token", "client_secret", "api_key", "credential", "Authorization"],
    )
    def test_sensitive_keys_masked(self, key: str) -> None:
        """Clé sensible → valeur masquée."""
        result = SensitiveMasker().mask({key: "value", "user": "john"})

        assert result[key] == "***MASKED***"
        assert result["user"] == "john"

    def test_authenticator_identifier_not_masked(self) -> None:
        """L'identifiant d'authenticator reste lisible."""
        result = SensitiveMasker().mask({"authenticatorFactory": "password", "authenticator": "oauth"})

        assert result == {"authenticatorFactory": "password", "authenticator": "oauth"}

    def test_nested_dict_masked(self) -> None:
        """Dict imbriqué masqué récursivement."""
        result = SensitiveMasker().mask({"user": {"name": "john", "password": "secret"}})

        assert result["user"] == {"name": "john", "password": "***MASKED***"}

    def test_list_with_dicts_masked(self) -> None:
        """Listes (et tuples) de dicts masquées."""
        data = {"sessions": [{"token": "a"}, {"token": "b"}], "pairs": ({"secret": 1}, "plain")}

        result = SensitiveMasker().mask(data)

        assert result["sessions"] == [{"token": "***MASKED***"}, {"token": "***MASKED***"}]
        assert result["pairs"] == [{"secret": "***MASKED***"}, "plain"]

    def test_original_not_modified(self) -> None:
        """La donnée source reste intacte."""
        data = {"token": "xyz"}
        SensitiveMasker().mask(data)

        assert data == {"token": "xyz"}

    def test_non_dict_returned_as_is(self) -> None:
        assert SensitiveMasker().mask("plain") == "plain"

    def test_case_insensitive(self) -> None:
        """Détection insensible à la casse."""
        masker = SensitiveMasker()

        assert masker.is_sensitive_key("ACCESS_TOKEN") is True
        assert masker.is_sensitive_key("Username") is False
        assert masker.is_sensitive_key("") is False


class TestPatterns:
    """Gestion des patterns."""

    def test_additional_patterns(self) -> None:
        """Patterns supplémentaires au constructeur."""
        masker = SensitiveMasker(["Email", "", "  "])

        assert "email" in masker.patterns
        assert masker.mask({"user_email": "a@b.c"}) == {"user_email": "***MASKED***"}

    def test_add_pattern_no_duplicates(self) -> None:
        masker = SensitiveMasker()
        count = len(masker.patterns)

        masker.add_pattern("TOKEN")

        assert len(masker.patterns) == count

    def test_add_empty_pattern_raises(self) -> None:
        with pytest.raises(ValueError, match="cannot be empty"):
            SensitiveMasker().add_pattern(" ")

    def test_implements_interface(self) -> None:
        assert isinstance(SensitiveMasker(), ISensitiveMasker)
