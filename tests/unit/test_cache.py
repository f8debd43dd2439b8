"""Tests for cached projections, the cache hook and the Live / Cached handle."""
import pytest

from user_storage.core.storage import (
    PASSWORD_HASH_CACHE_KEY,
    Cached,
    CachedUserModel,
    Live,
    LiveAdapterUnavailableError,
    UserCredential,
    user_handle,
)


@pytest.fixture()
def alice(provider, realm, make_entity):
    make_entity("k-1", "alice", email="alice@example.com", first_name="Alice")
    return provider.get_user_by_id(realm, "user-store:k-1")


def _snapshot(provider, realm, adapter):
    return CachedUserModel.snapshot(adapter, lambda: provider.get_user_by_id(realm, adapter.id))


def test_cache_key_is_namespaced_by_adapter_type():
    assert PASSWORD_HASH_CACHE_KEY == "user_storage.core.storage.adapter.UserAdapter.passwordHash"


def test_snapshot_copies_fields(provider, realm, alice):
    cached = _snapshot(provider, realm, alice)
    assert cached.id == alice.id
    assert cached.username == "alice"
    assert cached.attributes == {"firstName": ["Alice"]}
    assert cached.cached_with == {}


def test_on_cache_publishes_hash(provider, realm, alice):
    provider.update_credential(realm, alice, UserCredential.password("s3cret"))
    cached = _snapshot(provider, realm, alice)

    provider.on_cache(realm, cached, alice)

    assert cached.cached_with[PASSWORD_HASH_CACHE_KEY] == alice.password_hash


def test_on_cache_skips_missing_hash(provider, realm, alice):
    cached = _snapshot(provider, realm, alice)
    provider.on_cache(realm, cached, alice)
    assert PASSWORD_HASH_CACHE_KEY not in cached.cached_with


def test_validation_against_cached_projection(provider, realm, alice):
    provider.update_credential(realm, alice, UserCredential.password("s3cret"))
    cached = _snapshot(provider, realm, alice)
    provider.on_cache(realm, cached, alice)

    assert provider.is_valid(realm, cached, UserCredential.password("s3cret"))
    assert not provider.is_valid(realm, cached, UserCredential.password("wrong"))
    assert provider.is_configured_for(realm, cached, "password")
    # Reads never unwrap to the live adapter
    assert cached.invalidated is False


def test_update_through_cached_projection_reaches_live_adapter(provider, realm, alice):
    cached = _snapshot(provider, realm, alice)

    assert provider.update_credential(realm, cached, UserCredential.password("n3w"))

    assert cached.invalidated is True
    live = provider.get_user_by_id(realm, alice.id)
    assert live.password_hash is not None
    assert provider.is_valid(realm, live, UserCredential.password("n3w"))


def test_user_handle_variants(provider, realm, alice):
    cached = _snapshot(provider, realm, alice)

    live_handle = user_handle(alice)
    cached_handle = user_handle(cached)
    assert isinstance(live_handle, Live)
    assert isinstance(cached_handle, Cached)
    assert user_handle(live_handle) is live_handle
    assert live_handle.as_mutable() is alice


def test_cached_without_live_delegate_cannot_be_mutated(alice):
    cached = CachedUserModel.snapshot(alice, lambda: None)
    with pytest.raises(LiveAdapterUnavailableError):
        Cached(cached).as_mutable()


def test_cached_with_foreign_delegate_cannot_be_mutated(alice):
    cached = CachedUserModel.snapshot(alice, lambda: object())
    with pytest.raises(LiveAdapterUnavailableError):
        user_handle(cached).as_mutable()


def test_unknown_user_object_is_rejected():
    with pytest.raises(LiveAdapterUnavailableError):
        user_handle("alice")


def test_cached_read_falls_back_to_live_record(provider, realm, alice):
    cached = _snapshot(provider, realm, alice)
    # Password set after the snapshot was taken, so nothing was published
    provider.update_credential(realm, alice, UserCredential.password("late"))

    assert PASSWORD_HASH_CACHE_KEY not in cached.cached_with
    assert provider.is_valid(realm, cached, UserCredential.password("late"))
    assert cached.invalidated is False


def test_published_hash_wins_over_live_record(provider, realm, alice):
    provider.update_credential(realm, alice, UserCredential.password("old"))
    cached = _snapshot(provider, realm, alice)
    provider.on_cache(realm, cached, alice)
    provider.update_credential(realm, alice, UserCredential.password("new"))

    assert provider.is_valid(realm, cached, UserCredential.password("old"))
    assert not provider.is_valid(realm, cached, UserCredential.password("new"))
