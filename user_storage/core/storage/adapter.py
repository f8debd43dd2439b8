"""Per-user view of an external record, as seen by the host.

The adapter holds a reference to the live ``UserEntity`` (never a copy), so
every setter writes straight into the store session. ``firstName`` and
``lastName`` live in dedicated columns; any other attribute goes to the
fallback attribute storage.
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from sqlalchemy.orm import Session

from .entity import UserEntity
from .federated import AttributeFallback, RoleFallback
from .guard import ReadOnlyGuard
from .models import ComponentModel, RealmModel, RoleModel, UserModel
from .roles import RoleResolver
from .storage_id import StorageId

READ_ONLY_MESSAGE = "User is read-only"


class UserAdapter:
    """Host-facing user model backed by one external record.

    Args:
        session: Store session the entity is attached to
        realm: Realm the user is served in
        model: Provider component (id prefix and configuration)
        entity: The external record
        guard: Read-only guard shared with the provider
        attributes: Fallback attribute storage
        roles: Fallback role storage
    """

    def __init__(
        self,
        session: Session,
        realm: RealmModel,
        model: ComponentModel,
        entity: UserEntity,
        guard: ReadOnlyGuard,
        attributes: AttributeFallback,
        roles: RoleFallback,
    ):
        self.session = session
        self.realm = realm
        self.model = model
        self.entity = entity
        self.guard = guard
        self.attribute_fallback = attributes
        self.role_fallback = roles
        self._id = StorageId.keycloak_id(model, entity.id)

    def __repr__(self) -> str:
        return f"<UserAdapter {self._id} username={self.entity.username!r}>"

    @property
    def id(self) -> str:
        return self._id

    @property
    def external_id(self) -> str:
        return self.entity.id

    # ─────────────────────────────────────────────────────────────────────
    # Dedicated fields
    # ─────────────────────────────────────────────────────────────────────

    @property
    def username(self) -> Optional[str]:
        return self.entity.username

    def set_username(self, username: Optional[str]) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        self.entity.username = username

    @property
    def email(self) -> Optional[str]:
        return self.entity.email

    def set_email(self, email: Optional[str]) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        self.entity.email = email

    @property
    def email_verified(self) -> bool:
        return bool(self.entity.email_verified)

    def set_email_verified(self, verified: bool) -> None:
        # Not gated by the read-only guard.
        self.entity.email_verified = bool(verified)

    @property
    def created_timestamp(self) -> Optional[int]:
        return self.entity.created_timestamp

    def set_created_timestamp(self, timestamp: Optional[int]) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        self.entity.created_timestamp = timestamp

    @property
    def first_name(self) -> Optional[str]:
        return self.entity.first_name

    def set_first_name(self, first_name: Optional[str]) -> None:
        self.set_single_attribute(UserModel.FIRST_NAME, first_name)

    @property
    def last_name(self) -> Optional[str]:
        return self.entity.last_name

    def set_last_name(self, last_name: Optional[str]) -> None:
        self.set_single_attribute(UserModel.LAST_NAME, last_name)

    @property
    def password_hash(self) -> Optional[str]:
        return self.entity.password_hash

    def set_password_hash(self, password_hash: Optional[str]) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        self.entity.password_hash = password_hash
        self.session.add(self.entity)

    # ─────────────────────────────────────────────────────────────────────
    # Attribute overlay
    # ─────────────────────────────────────────────────────────────────────

    def _set_dedicated(self, name: str, value: Optional[str]) -> bool:
        if name == UserModel.FIRST_NAME:
            self.entity.first_name = value
        elif name == UserModel.LAST_NAME:
            self.entity.last_name = value
        else:
            return False
        return True

    def _get_dedicated(self, name: str) -> Optional[str]:
        if name == UserModel.FIRST_NAME:
            return self.entity.first_name
        return self.entity.last_name

    @staticmethod
    def _is_dedicated(name: str) -> bool:
        return name in (UserModel.FIRST_NAME, UserModel.LAST_NAME)

    def set_single_attribute(self, name: str, value: Optional[str]) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        if not self._set_dedicated(name, value):
            self.attribute_fallback.set_single_attribute(self.realm, self._id, name, value)

    def set_attribute(self, name: str, values: Iterable[Optional[str]]) -> None:
        """Replace all values of an attribute.

        Dedicated fields keep only the first value; an empty list clears them.
        """
        self.guard.check(READ_ONLY_MESSAGE)
        values = list(values)
        if not self._set_dedicated(name, values[0] if values else None):
            self.attribute_fallback.set_attribute(self.realm, self._id, name, values)

    def remove_attribute(self, name: str) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        if not self._set_dedicated(name, None):
            self.attribute_fallback.remove_attribute(self.realm, self._id, name)

    def get_first_attribute(self, name: str) -> Optional[str]:
        if self._is_dedicated(name):
            return self._get_dedicated(name)
        values = self.attribute_fallback.get_attribute(self.realm, self._id, name)
        return values[0] if values else None

    def get_attribute_stream(self, name: str) -> Iterator[Optional[str]]:
        if self._is_dedicated(name):
            value = self._get_dedicated(name)
            return iter([] if value is None else [value])
        return iter(self.attribute_fallback.get_attribute(self.realm, self._id, name))

    def get_attributes(self) -> Dict[str, List[Optional[str]]]:
        """Fallback attributes merged with the dedicated name fields.

        Dedicated fields without a value are left out of the result.
        """
        merged = {
            name: list(values)
            for name, values in self.attribute_fallback.get_attributes(self.realm, self._id).items()
        }
        for name in (UserModel.FIRST_NAME, UserModel.LAST_NAME):
            value = self._get_dedicated(name)
            if value is not None:
                merged.setdefault(name, []).append(value)
        return merged

    # ─────────────────────────────────────────────────────────────────────
    # Role mappings
    # ─────────────────────────────────────────────────────────────────────

    def get_role_mappings_stream(self) -> Iterator[RoleModel]:
        """Fallback roles, then stored client roles, then stored realm roles."""
        base_roles = self.role_fallback.get_role_mappings(self.realm, self._id)
        return RoleResolver(self.realm, self.entity).resolve_role_mappings(base_roles)

    def get_realm_role_mappings_stream(self) -> Iterator[RoleModel]:
        return (role for role in self.get_role_mappings_stream() if not role.client_role)

    def get_client_role_mappings_stream(self, client_id: str) -> Iterator[RoleModel]:
        return (
            role
            for role in self.get_role_mappings_stream()
            if role.client_role and role.container_id == client_id
        )

    def has_role(self, role: RoleModel) -> bool:
        return any(candidate == role for candidate in self.get_role_mappings_stream())

    def grant_role(self, role: RoleModel) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        self.role_fallback.grant_role(self.realm, self._id, role)

    def delete_role_mapping(self, role: RoleModel) -> None:
        self.guard.check(READ_ONLY_MESSAGE)
        self.role_fallback.delete_role_mapping(self.realm, self._id, role)
