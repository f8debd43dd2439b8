"""Host-side models consulted by the provider.

These are the read-only views of the host identity system the provider needs:
the realm with its role and client registries, and the component model that
carries the provider configuration. Role lookups return ``None`` on a miss;
callers decide how to degrade.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


class UserModel:
    """Well-known user model keys."""

    USERNAME = "username"
    EMAIL = "email"
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    SEARCH = "keycloak.session.realm.users.query.search"


@dataclass(frozen=True)
class RoleModel:
    """A live role handle.

    Attributes:
        name: Role name, unique within its container
        container_id: Realm name for realm roles, client id for client roles
        client_role: True when the role belongs to a client
    """
    name: str
    container_id: str
    client_role: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.container_id}.{self.name}" if self.client_role else self.name


@dataclass
class ClientModel:
    """A host client and its role registry."""
    client_id: str
    roles: Dict[str, RoleModel] = field(default_factory=dict)

    def get_role(self, name: str) -> Optional[RoleModel]:
        return self.roles.get(name)

    def add_role(self, name: str) -> RoleModel:
        role = self.roles.get(name)
        if role is None:
            role = RoleModel(name=name, container_id=self.client_id, client_role=True)
            self.roles[name] = role
        return role

    def remove_role(self, name: str) -> bool:
        return self.roles.pop(name, None) is not None


@dataclass
class RealmModel:
    """A host realm with its realm-role and client registries."""
    name: str
    roles: Dict[str, RoleModel] = field(default_factory=dict)
    clients: Dict[str, ClientModel] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.name

    def get_role(self, name: str) -> Optional[RoleModel]:
        return self.roles.get(name)

    def add_role(self, name: str) -> RoleModel:
        role = self.roles.get(name)
        if role is None:
            role = RoleModel(name=name, container_id=self.name)
            self.roles[name] = role
        return role

    def remove_role(self, name: str) -> bool:
        return self.roles.pop(name, None) is not None

    def get_client_by_client_id(self, client_id: str) -> Optional[ClientModel]:
        return self.clients.get(client_id)

    def add_client(self, client_id: str) -> ClientModel:
        client = self.clients.get(client_id)
        if client is None:
            client = ClientModel(client_id=client_id)
            self.clients[client_id] = client
        return client

    def remove_client(self, client_id: str) -> bool:
        return self.clients.pop(client_id, None) is not None


@dataclass
class ComponentModel:
    """Provider component registration with multi-valued configuration.

    Attributes:
        id: Component id, used as the composite user id prefix
        provider_id: Factory id that created the provider
        name: Display name
        config: Option name -> list of string values
    """
    id: str
    provider_id: str
    name: str = ""
    config: Dict[str, List[str]] = field(default_factory=dict)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first configured value for ``key``."""
        values = self.config.get(key)
        if not values:
            return default
        return values[0]
