"""User storage provider: lookup, search, registration and credentials.

The provider is built per host request. It queries the external store through
the request's session, wraps rows in :class:`UserAdapter` instances, and
publishes the password hash into cached projections so validation can run
without another query.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Iterator, List, Mapping, Optional

from sqlalchemy.orm import Session

from . import entity as queries
from .adapter import UserAdapter
from .cache import PASSWORD_HASH_CACHE_KEY, CachedUserModel, user_handle
from .credentials import DEFAULT_HASH_METHOD, CredentialValidator
from .entity import UserEntity
from .federated import FederatedStorage
from .guard import ReadOnlyGuard
from .models import ComponentModel, RealmModel, RoleModel, UserModel
from .storage_id import StorageId

logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = "Storage is read-only"


class UserStorageProvider:
    """Host-facing provider for the external user store.

    Args:
        session: Session bound to the external user store
        model: Component registration carrying the configuration
        federated: Fallback attribute and role storage
        hash_method: werkzeug method used for new password hashes
    """

    def __init__(
        self,
        session: Session,
        model: ComponentModel,
        federated: FederatedStorage,
        hash_method: str = DEFAULT_HASH_METHOD,
    ):
        self.session = session
        self.model = model
        self.federated = federated
        self.guard = ReadOnlyGuard.from_config(model)
        self.credentials = CredentialValidator(self.guard, hash_method=hash_method)

    @property
    def read_only(self) -> bool:
        return self.guard.read_only

    def _adapter(self, realm: RealmModel, entity: UserEntity) -> UserAdapter:
        return UserAdapter(
            self.session,
            realm,
            self.model,
            entity,
            self.guard,
            attributes=self.federated,
            roles=self.federated,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────────

    def get_user_by_id(self, realm: RealmModel, user_id: str) -> Optional[UserAdapter]:
        entity = self.session.get(UserEntity, StorageId.external_id(user_id))
        if entity is None:
            logger.info("could not find user by id: %s", user_id)
            return None
        return self._adapter(realm, entity)

    def get_user_by_username(self, realm: RealmModel, username: str) -> Optional[UserAdapter]:
        entity = self.session.scalars(queries.user_by_username(username)).first()
        if entity is None:
            logger.info("could not find username: %s", username)
            return None
        return self._adapter(realm, entity)

    def get_user_by_email(self, realm: RealmModel, email: str) -> Optional[UserAdapter]:
        entity = self.session.scalars(queries.user_by_email(email)).first()
        if entity is None:
            return None
        return self._adapter(realm, entity)

    # ─────────────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────────────

    def add_user(self, realm: RealmModel, username: str) -> UserAdapter:
        """Create a record with a fresh id and only the username set.

        Raises:
            ReadOnlyException: If the provider is read-only
        """
        self.guard.check(READ_ONLY_MESSAGE)

        entity = UserEntity(id=str(uuid.uuid4()), username=username, email_verified=False)
        self.session.add(entity)
        self.session.flush()

        logger.info("added user: %s", username)
        return self._adapter(realm, entity)

    def remove_user(self, realm: RealmModel, user: Any) -> bool:
        """Delete the record behind ``user``.

        Returns:
            False if the record no longer exists, True after removal

        Raises:
            ReadOnlyException: If the provider is read-only
        """
        self.guard.check(READ_ONLY_MESSAGE)

        entity = self.session.get(UserEntity, StorageId.external_id(user.id))
        if entity is None:
            return False

        username = entity.username
        self.session.delete(entity)
        self.federated.remove_user(realm, user.id)
        self.session.flush()

        logger.info("removed user: %s", username)
        return True

    # ─────────────────────────────────────────────────────────────────────
    # Query
    # ─────────────────────────────────────────────────────────────────────

    def get_users_count(self, realm: RealmModel) -> int:
        return int(self.session.scalar(queries.user_count()) or 0)

    def search_for_user_stream(
        self,
        realm: RealmModel,
        params: Mapping[str, str],
        first_result: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> Iterator[UserAdapter]:
        """Substring search on username (case-insensitive) or email.

        ``*`` in the search term becomes the SQL wildcard and the term is
        always wrapped in wildcards, so ``"ann"`` and ``"*ann*"`` match alike.

        Args:
            realm: Realm to serve the users in
            params: Search parameters; the term is under ``UserModel.SEARCH``
            first_result: Offset, ignored when None
            max_results: Limit, ignored when None

        Returns:
            Adapters ordered by username
        """
        search = params.get(UserModel.SEARCH) or ""
        pattern = "%" + search.lower().replace("*", "%") + "%"

        stmt = queries.search_for_user(pattern)
        if first_result is not None:
            stmt = stmt.offset(first_result)
        if max_results is not None:
            stmt = stmt.limit(max_results)

        return (self._adapter(realm, entity) for entity in self.session.scalars(stmt).all())

    def search(
        self,
        realm: RealmModel,
        search: Optional[str],
        first_result: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> List[UserAdapter]:
        params = {UserModel.SEARCH: search} if search is not None else {}
        return list(self.search_for_user_stream(realm, params, first_result, max_results))

    def get_group_members_stream(self, realm: RealmModel, group: Any, first_result=None, max_results=None):
        return iter(())

    def search_for_user_by_user_attribute_stream(self, realm: RealmModel, name: str, value: str):
        return iter(())

    # ─────────────────────────────────────────────────────────────────────
    # Cache hook
    # ─────────────────────────────────────────────────────────────────────

    def on_cache(self, realm: RealmModel, user: CachedUserModel, delegate: UserAdapter) -> None:
        """Publish the delegate's password hash into the cached projection."""
        password_hash = user_handle(delegate).password_hash()
        if password_hash is not None:
            user.cached_with[PASSWORD_HASH_CACHE_KEY] = password_hash

    # ─────────────────────────────────────────────────────────────────────
    # Credentials
    # ─────────────────────────────────────────────────────────────────────

    def supports_credential_type(self, credential_type: str) -> bool:
        return self.credentials.is_supported(credential_type)

    def update_credential(self, realm: RealmModel, user: Any, credential: Any) -> bool:
        return self.credentials.update(user, credential)

    def disable_credential_type(self, realm: RealmModel, user: Any, credential_type: str) -> None:
        self.credentials.disable(user, credential_type)

    def get_disableable_credential_types(self, realm: RealmModel, user: Any) -> List[str]:
        return self.credentials.disableable_types(user)

    def is_configured_for(self, realm: RealmModel, user: Any, credential_type: str) -> bool:
        return self.credentials.is_configured(user, credential_type)

    def is_valid(self, realm: RealmModel, user: Any, credential: Any) -> bool:
        return self.credentials.validate(user, credential)

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle hooks
    # ─────────────────────────────────────────────────────────────────────

    def pre_remove_realm(self, realm: RealmModel) -> None:
        pass

    def pre_remove_group(self, realm: RealmModel, group: Any) -> None:
        pass

    def pre_remove_role(self, realm: RealmModel, role: RoleModel) -> None:
        pass

    def close(self) -> None:
        pass
