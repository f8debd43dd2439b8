"""Fallback storage for attributes and role mappings without dedicated columns.

The host keeps a small store of its own for data the external user table has
no place for: custom attributes and roles granted through the host. Adapters
receive the two capabilities separately so either can be swapped out.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Protocol

from sqlalchemy import Integer, String, Text, delete, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from .models import RealmModel, RoleModel

logger = logging.getLogger(__name__)


class AttributeFallback(Protocol):
    """Generic multi-valued attribute storage keyed by composite user id."""

    def get_attributes(self, realm: RealmModel, user_id: str) -> Dict[str, List[str]]: ...

    def get_attribute(self, realm: RealmModel, user_id: str, name: str) -> List[str]: ...

    def set_single_attribute(self, realm: RealmModel, user_id: str, name: str, value: Optional[str]) -> None: ...

    def set_attribute(self, realm: RealmModel, user_id: str, name: str, values: Iterable[Optional[str]]) -> None: ...

    def remove_attribute(self, realm: RealmModel, user_id: str, name: str) -> None: ...


class RoleFallback(Protocol):
    """Role mappings granted by the host rather than the external store."""

    def get_role_mappings(self, realm: RealmModel, user_id: str) -> Iterator[RoleModel]: ...

    def grant_role(self, realm: RealmModel, user_id: str, role: RoleModel) -> None: ...

    def delete_role_mapping(self, realm: RealmModel, user_id: str, role: RoleModel) -> None: ...


class FederatedBase(DeclarativeBase):
    """Declarative base for the host-side fallback tables."""
    pass


class FederatedAttributeEntity(FederatedBase):
    __tablename__ = "federated_user_attribute"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    storage_provider_id: Mapped[str] = mapped_column(String(255), nullable=False)
    realm_id: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Optional[str]] = mapped_column(Text)


class FederatedRoleMappingEntity(FederatedBase):
    __tablename__ = "federated_user_role_mapping"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    storage_provider_id: Mapped[str] = mapped_column(String(255), nullable=False)
    realm_id: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # NULL for realm roles
    client_id: Mapped[Optional[str]] = mapped_column(String(255))
    role_name: Mapped[str] = mapped_column(String(255), nullable=False)


class FederatedStorage:
    """SQLAlchemy implementation of both fallback capabilities.

    Args:
        session: Session bound to the host database
        storage_provider_id: Component id owning the rows
    """

    def __init__(self, session: Session, storage_provider_id: str):
        self.session = session
        self.storage_provider_id = storage_provider_id

    def _attribute_rows(self, realm: RealmModel, user_id: str, name: Optional[str] = None):
        stmt = select(FederatedAttributeEntity).where(
            FederatedAttributeEntity.storage_provider_id == self.storage_provider_id,
            FederatedAttributeEntity.realm_id == realm.id,
            FederatedAttributeEntity.user_id == user_id,
        )
        if name is not None:
            stmt = stmt.where(FederatedAttributeEntity.name == name)
        return self.session.scalars(stmt.order_by(FederatedAttributeEntity.id)).all()

    def get_attributes(self, realm: RealmModel, user_id: str) -> Dict[str, List[str]]:
        attributes: Dict[str, List[str]] = {}
        for row in self._attribute_rows(realm, user_id):
            attributes.setdefault(row.name, []).append(row.value)
        return attributes

    def get_attribute(self, realm: RealmModel, user_id: str, name: str) -> List[str]:
        return [row.value for row in self._attribute_rows(realm, user_id, name)]

    def set_single_attribute(self, realm: RealmModel, user_id: str, name: str, value: Optional[str]) -> None:
        self.set_attribute(realm, user_id, name, [value])

    def set_attribute(self, realm: RealmModel, user_id: str, name: str, values: Iterable[Optional[str]]) -> None:
        """Replace the attribute's values; ``None`` entries are not stored."""
        self.remove_attribute(realm, user_id, name)
        for value in values:
            if value is None:
                continue
            self.session.add(
                FederatedAttributeEntity(
                    storage_provider_id=self.storage_provider_id,
                    realm_id=realm.id,
                    user_id=user_id,
                    name=name,
                    value=value,
                )
            )
        self.session.flush()

    def remove_attribute(self, realm: RealmModel, user_id: str, name: str) -> None:
        self.session.execute(
            delete(FederatedAttributeEntity).where(
                FederatedAttributeEntity.storage_provider_id == self.storage_provider_id,
                FederatedAttributeEntity.realm_id == realm.id,
                FederatedAttributeEntity.user_id == user_id,
                FederatedAttributeEntity.name == name,
            )
        )

    def _mapping_rows(self, realm: RealmModel, user_id: str):
        stmt = (
            select(FederatedRoleMappingEntity)
            .where(
                FederatedRoleMappingEntity.storage_provider_id == self.storage_provider_id,
                FederatedRoleMappingEntity.realm_id == realm.id,
                FederatedRoleMappingEntity.user_id == user_id,
            )
            .order_by(FederatedRoleMappingEntity.id)
        )
        return self.session.scalars(stmt).all()

    def get_role_mappings(self, realm: RealmModel, user_id: str) -> Iterator[RoleModel]:
        """Yield granted roles that still exist in the realm."""
        for row in self._mapping_rows(realm, user_id):
            if row.client_id is None:
                role = realm.get_role(row.role_name)
            else:
                client = realm.get_client_by_client_id(row.client_id)
                role = client.get_role(row.role_name) if client is not None else None
            if role is not None:
                yield role

    def grant_role(self, realm: RealmModel, user_id: str, role: RoleModel) -> None:
        client_id = role.container_id if role.client_role else None
        for row in self._mapping_rows(realm, user_id):
            if row.client_id == client_id and row.role_name == role.name:
                return
        self.session.add(
            FederatedRoleMappingEntity(
                storage_provider_id=self.storage_provider_id,
                realm_id=realm.id,
                user_id=user_id,
                client_id=client_id,
                role_name=role.name,
            )
        )
        self.session.flush()

    def delete_role_mapping(self, realm: RealmModel, user_id: str, role: RoleModel) -> None:
        client_id = role.container_id if role.client_role else None
        stmt = delete(FederatedRoleMappingEntity).where(
            FederatedRoleMappingEntity.storage_provider_id == self.storage_provider_id,
            FederatedRoleMappingEntity.realm_id == realm.id,
            FederatedRoleMappingEntity.user_id == user_id,
            FederatedRoleMappingEntity.role_name == role.name,
        )
        if client_id is None:
            stmt = stmt.where(FederatedRoleMappingEntity.client_id.is_(None))
        else:
            stmt = stmt.where(FederatedRoleMappingEntity.client_id == client_id)
        self.session.execute(stmt)

    def remove_user(self, realm: RealmModel, user_id: str) -> None:
        """Drop every fallback row stored for the user."""
        for model in (FederatedAttributeEntity, FederatedRoleMappingEntity):
            self.session.execute(
                delete(model).where(
                    model.storage_provider_id == self.storage_provider_id,
                    model.realm_id == realm.id,
                    model.user_id == user_id,
                )
            )
        logger.debug("Removed federated data for %s", user_id)
