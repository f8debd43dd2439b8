"""External user storage provider.

This package exposes an externally persisted user table through the
user-model contract of a Keycloak-style host.

Architecture:
- entity.py: SQLAlchemy schema and named queries of the external store
- database.py: Engine, sessions and transaction scope
- models.py: Host realm / client / role / component models
- storage_id.py: Composite ``<provider-id>:<external-id>`` ids
- federated.py: Fallback attribute and role storage
- guard.py: Read-only enforcement
- roles.py: Tolerant role reference resolution
- adapter.py: Per-user view with attribute overlay
- cache.py: Cached projections and the Live / Cached user handle
- credentials.py: Password hashing and validation
- provider.py: Lookup, search, registration, cache hook
- factory.py: Provider factory and configuration schema
- exceptions.py: Typed exceptions

Usage:
    from user_storage.core.storage import (
        ComponentModel, Database, FederatedStorage, RealmModel,
        UserStorageProviderFactory,
    )

    factory = UserStorageProviderFactory()
    with store.session_scope() as session, host.session_scope() as host_session:
        federated = FederatedStorage(host_session, model.id)
        provider = factory.create(session, model, federated)
        user = provider.get_user_by_username(realm, "alice")
"""
from .adapter import UserAdapter
from .cache import (
    PASSWORD_HASH_CACHE_KEY,
    Cached,
    CachedUserModel,
    Live,
    UserHandle,
    user_handle,
)
from .credentials import (
    PASSWORD,
    CredentialValidator,
    UserCredential,
    hash_password,
    verify_password,
)
from .database import Database
from .entity import ClientRoleEntity, RealmRoleEntity, UserEntity, UserStoreBase
from .exceptions import (
    InvalidRepresentationError,
    LiveAdapterUnavailableError,
    ReadOnlyException,
    UserStorageError,
)
from .factory import ProviderConfigProperty, UserStorageProviderFactory
from .federated import AttributeFallback, FederatedBase, FederatedStorage, RoleFallback
from .guard import READ_ONLY_OPTION, ReadOnlyGuard
from .models import ClientModel, ComponentModel, RealmModel, RoleModel, UserModel
from .provider import UserStorageProvider
from .roles import RoleResolver
from .storage_id import StorageId

__all__ = [
    # Store
    "Database",
    "UserStoreBase",
    "UserEntity",
    "ClientRoleEntity",
    "RealmRoleEntity",
    "FederatedBase",
    "FederatedStorage",
    "AttributeFallback",
    "RoleFallback",

    # Host models
    "ClientModel",
    "ComponentModel",
    "RealmModel",
    "RoleModel",
    "UserModel",
    "StorageId",

    # Exceptions
    "UserStorageError",
    "ReadOnlyException",
    "LiveAdapterUnavailableError",
    "InvalidRepresentationError",

    # Provider
    "READ_ONLY_OPTION",
    "ReadOnlyGuard",
    "RoleResolver",
    "UserAdapter",
    "CachedUserModel",
    "Cached",
    "Live",
    "UserHandle",
    "user_handle",
    "PASSWORD_HASH_CACHE_KEY",
    "PASSWORD",
    "UserCredential",
    "CredentialValidator",
    "hash_password",
    "verify_password",
    "UserStorageProvider",
    "UserStorageProviderFactory",
    "ProviderConfigProperty",
]
