"""Per-application federation wiring and per-request provider access.

``init_federation`` binds the stores, realm and component model to the Flask
app once. ``get_provider`` lazily opens the store and fallback sessions for
the current request, sharing one session when both live in one database.
``finish_request`` commits or rolls them back and always closes them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import Flask, current_app, g

from user_storage.config.settings import AppConfig
from user_storage.core.storage import (
    ComponentModel,
    Database,
    FederatedBase,
    FederatedStorage,
    RealmModel,
    UserStorageProvider,
    UserStorageProviderFactory,
    UserStoreBase,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = "user_storage"


@dataclass
class FederationContext:
    store: Database
    federated: Database
    realm: RealmModel
    model: ComponentModel
    factory: UserStorageProviderFactory


def init_federation(app: Flask, cfg: AppConfig, realm: RealmModel) -> FederationContext:
    """Create databases and the component model and attach them to ``app``."""
    store = Database(cfg.user_store_database_url)
    federated_url = cfg.federated_database_url_resolved
    # One database for both: requests then share a single session
    federated = store if federated_url == cfg.user_store_database_url else Database(federated_url)

    store.create_schema(UserStoreBase.metadata)
    federated.create_schema(FederatedBase.metadata)

    factory = UserStorageProviderFactory(hash_method=cfg.password_hash_method)
    model = ComponentModel(
        id=cfg.component_id,
        provider_id=factory.get_id(),
        name=cfg.component_name,
        config=cfg.component_config,
    )

    context = FederationContext(store=store, federated=federated, realm=realm, model=model, factory=factory)
    app.extensions[EXTENSION_KEY] = context
    return context


def federation_context() -> FederationContext:
    return current_app.extensions[EXTENSION_KEY]


def current_realm() -> RealmModel:
    return federation_context().realm


def get_provider() -> UserStorageProvider:
    """Provider bound to the current request's sessions."""
    if "federation_provider" not in g:
        context = federation_context()
        g.federation_store_session = context.store.session()
        if context.federated is context.store:
            g.federation_host_session = g.federation_store_session
        else:
            g.federation_host_session = context.federated.session()
        federated = FederatedStorage(g.federation_host_session, context.model.id)
        g.federation_provider = context.factory.create(g.federation_store_session, context.model, federated)
    return g.federation_provider


def finish_request(commit: bool) -> None:
    """Commit (or roll back) and close the request's sessions, if any were opened."""
    provider = g.pop("federation_provider", None)
    store_session = g.pop("federation_store_session", None)
    host_session = g.pop("federation_host_session", None)
    sessions = [session for session in (store_session, host_session) if session is not None]
    if host_session is store_session:
        sessions = sessions[:1]
    try:
        for session in sessions:
            if commit:
                session.commit()
            else:
                session.rollback()
    finally:
        for session in sessions:
            session.close()
        if provider is not None:
            provider.close()
