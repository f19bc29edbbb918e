"""Unit tests for the SQLite-backed TokenStore."""

import pytest

from focaplus.core.models import AuthTokens
from focaplus.persistence.token_store import TokenStore


@pytest.fixture
def store(tmp_path):
    s = TokenStore(str(tmp_path / "test.db"))
    s.init_db()
    yield s
    s.close()


class TestTokenStore:
    def test_empty_store(self, store):
        assert store.get_access_token() is None
        assert store.load_tokens() is None
        assert store.get_user() is None

    def test_save_and_load(self, store):
        store.save_tokens(AuthTokens("acc", "ref", {"id": "u-1", "name": "Ana"}))
        tokens = store.load_tokens()
        assert tokens.access_token == "acc"
        assert tokens.refresh_token == "ref"
        assert tokens.user == {"id": "u-1", "name": "Ana"}

    def test_save_overwrites(self, store):
        store.save_tokens(AuthTokens("acc", "ref"))
        store.save_tokens(AuthTokens("acc2", "ref2"))
        assert store.get_access_token() == "acc2"

    def test_tokens_without_user(self, store):
        store.save_tokens(AuthTokens("acc", "ref"))
        assert store.load_tokens().user == {}

    def test_clear(self, store):
        store.save_tokens(AuthTokens("acc", "ref", {"id": "u-1"}))
        store.clear()
        assert store.load_tokens() is None
        assert store.get_user() is None

    def test_persists_across_connections(self, tmp_path):
        path = str(tmp_path / "persist.db")
        first = TokenStore(path)
        first.init_db()
        first.save_tokens(AuthTokens("acc", "ref"))
        first.close()

        second = TokenStore(path)
        second.init_db()
        assert second.get_refresh_token() == "ref"
        second.close()

    def test_init_db_is_idempotent(self, store):
        store.save_user({"id": "u-1"})
        store.init_db()
        assert store.get_user() == {"id": "u-1"}
