"""Pytest shared fixtures for the user storage provider and API."""
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from user_storage.config.settings import AppConfig
from user_storage.core.storage import (
    ClientRoleEntity,
    ComponentModel,
    Database,
    FederatedBase,
    FederatedStorage,
    RealmModel,
    RealmRoleEntity,
    UserEntity,
    UserStorageProviderFactory,
    UserStoreBase,
)

COMPONENT_ID = "user-store"
API_TOKEN = "test-federation-token"
# Cheap hash so the suite stays fast
FAST_HASH_METHOD = "pbkdf2:sha256:1000"


# ─────────────────────────────────────────────────────────────────────────────
# Host realm
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def realm():
    """Realm with two realm roles and one client carrying two roles."""
    realm = RealmModel(name="demo")
    realm.add_role("analyst")
    realm.add_role("manager")
    portal = realm.add_client("portal")
    portal.add_role("viewer")
    portal.add_role("editor")
    return realm


# ─────────────────────────────────────────────────────────────────────────────
# Stores
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def database():
    """In-memory database holding both the user store and the fallback tables."""
    db = Database("sqlite://")
    db.create_schema(UserStoreBase.metadata, FederatedBase.metadata)
    yield db
    db.dispose()


@pytest.fixture()
def session(database):
    session = database.session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture()
def federated(session):
    return FederatedStorage(session, COMPONENT_ID)


# ─────────────────────────────────────────────────────────────────────────────
# Provider
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def make_provider(session, federated):
    """Build a provider; ``read_only=None`` leaves the option unconfigured."""
    factory = UserStorageProviderFactory(hash_method=FAST_HASH_METHOD)

    def _make(read_only="false"):
        config = {} if read_only is None else {"readOnly": [read_only]}
        model = ComponentModel(id=COMPONENT_ID, provider_id=factory.get_id(), config=config)
        return factory.create(session, model, federated)

    return _make


@pytest.fixture()
def provider(make_provider):
    """Writable provider."""
    return make_provider("false")


@pytest.fixture()
def read_only_provider(make_provider):
    return make_provider("true")


@pytest.fixture()
def make_entity(session):
    """Insert a raw record into the external store, bypassing the provider."""

    def _make(external_id, username, client_roles=(), realm_roles=(), **fields):
        entity = UserEntity(id=external_id, username=username, **fields)
        entity.client_roles = [ClientRoleEntity(client=client, role=role) for client, role in client_roles]
        entity.realm_roles = [RealmRoleEntity(role=role) for role in realm_roles]
        session.add(entity)
        session.flush()
        return entity

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides):
    base = dict(
        demo_mode=False,
        user_store_database_url="sqlite://",
        federated_database_url="",
        component_id=COMPONENT_ID,
        component_name="Test store",
        read_only="false",
        password_hash_method=FAST_HASH_METHOD,
        realm_config_path="does-not-exist.yaml",
        api_token=API_TOKEN,
        log_level="WARNING",
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def make_app(realm):
    from user_storage.flask_app import create_app

    def _make(use_realm_fixture=True, **overrides):
        flask_app = create_app(make_config(**overrides), realm=realm if use_realm_fixture else None)
        flask_app.config.update(TESTING=True)
        return flask_app

    return _make


@pytest.fixture()
def app(make_app):
    return make_app()


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def auth_headers():
    return {"Authorization": f"Bearer {API_TOKEN}"}
