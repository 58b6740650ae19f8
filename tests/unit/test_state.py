"""
Unit tests for the package-wide state module.

Tests the module-level instance, its accessors, and reload semantics.
"""

import importlib
from unittest.mock import MagicMock

import pytest

from pkgstate.constants import FAVORITE_LETTERS_KEY, REMOTE_IDENTIFIER_KEY
from pkgstate.domain.cache.value_objects import EntryState
from pkgstate.exceptions import ComputeFailedException, IdentityLookupException


class TestPackageState:
    """Test pkgstate.state."""

    def test_initial_entries(self, fresh_state):
        assert fresh_state.the.declared_keys() == [
            FAVORITE_LETTERS_KEY,
            REMOTE_IDENTIFIER_KEY,
        ]
        assert fresh_state.the.describe() == {
            FAVORITE_LETTERS_KEY: EntryState.POPULATED,
            REMOTE_IDENTIFIER_KEY: EntryState.UNPOPULATED,
        }

    def test_favorite_letters_lifecycle(self, fresh_state):
        assert fresh_state.favorite_letters() == ["a", "b", "c"]
        assert fresh_state.set_favorite_letters("jfb") == ["a", "b", "c"]
        assert fresh_state.favorite_letters() == ["j", "f", "b"]

        fresh_state.reset_state()

        assert fresh_state.favorite_letters() == ["a", "b", "c"]

    def test_reload_discards_state(self, fresh_state):
        fresh_state.set_favorite_letters(["x"])
        fresh_state.the.set("scratch", 1)
        old_instance = fresh_state.the

        reloaded = importlib.reload(fresh_state)

        assert reloaded.the is not old_instance
        assert reloaded.favorite_letters() == ["a", "b", "c"]
        assert "scratch" not in reloaded.the

    def test_remote_identifier_is_memoized(self, fresh_state, monkeypatch):
        client = MagicMock()
        client.fetch_identifier.return_value = "user-42"
        from_settings = MagicMock(return_value=client)
        monkeypatch.setattr(
            fresh_state.RemoteIdentityClient, "from_settings", from_settings
        )

        assert fresh_state.remote_identifier() == "user-42"
        assert fresh_state.remote_identifier() == "user-42"
        client.fetch_identifier.assert_called_once_with()

    def test_remote_identifier_recomputed_after_reset(self, fresh_state, monkeypatch):
        client = MagicMock()
        client.fetch_identifier.side_effect = ["first", "second"]
        monkeypatch.setattr(
            fresh_state.RemoteIdentityClient,
            "from_settings",
            MagicMock(return_value=client),
        )

        assert fresh_state.remote_identifier() == "first"
        fresh_state.reset_state()
        assert fresh_state.remote_identifier() == "second"

    def test_remote_identifier_not_configured(self, fresh_state):
        with pytest.raises(ComputeFailedException) as exc_info:
            fresh_state.remote_identifier()

        assert isinstance(exc_info.value.__cause__, IdentityLookupException)
        assert not fresh_state.the.is_populated(REMOTE_IDENTIFIER_KEY)
