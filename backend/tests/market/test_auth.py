"""Tests for CredentialProvider."""

from coinfeed.market.auth import CredentialProvider


class TestCredentialProvider:
    def test_initial_token(self):
        assert CredentialProvider("abc").token == "abc"
        assert CredentialProvider().token is None

    def test_blank_token_is_none(self):
        assert CredentialProvider("   ").token is None

    def test_listener_called_on_change(self):
        provider = CredentialProvider()
        seen: list = []
        provider.subscribe(seen.append)

        provider.set_token("abc")
        provider.clear()

        assert seen == ["abc", None]

    def test_same_token_not_notified(self):
        provider = CredentialProvider("abc")
        seen: list = []
        provider.subscribe(seen.append)

        provider.set_token("abc")
        provider.set_token(" abc ")
        assert seen == []

    def test_unsubscribe(self):
        provider = CredentialProvider()
        seen: list = []
        unsubscribe = provider.subscribe(seen.append)
        unsubscribe()
        unsubscribe()  # Second call is harmless

        provider.set_token("abc")
        assert seen == []
