"""Resolution of stored role references into live role handles."""
from __future__ import annotations

import itertools
import logging
from typing import Iterable, Iterator, Optional

from .entity import UserEntity
from .models import RealmModel, RoleModel

logger = logging.getLogger(__name__)


class RoleResolver:
    """Turn a record's role references into roles of the host realm.

    References to clients or roles the realm no longer knows are skipped with
    a warning; they never fail the surrounding call.
    """

    def __init__(self, realm: RealmModel, entity: UserEntity, log: Optional[logging.Logger] = None):
        self.realm = realm
        self.entity = entity
        self.log = log or logger

    def resolve_role_mappings(self, base_roles: Iterable[RoleModel]) -> Iterator[RoleModel]:
        """Chain base roles, then client roles, then realm roles.

        Args:
            base_roles: Roles from the fallback role storage

        Returns:
            Lazy iterator over role handles; duplicates are kept
        """
        return itertools.chain(base_roles, self.client_roles(), self.realm_roles())

    def client_roles(self) -> Iterator[RoleModel]:
        for reference in self.entity.client_roles:
            client = self.realm.get_client_by_client_id(reference.client)
            if client is None:
                self.log.warning(
                    "User %s requests client role %s.%s, but client %s does not exist; "
                    "client role not assigned.",
                    self.entity.username,
                    reference.client,
                    reference.role,
                    reference.client,
                )
                continue

            role = client.get_role(reference.role)
            if role is None:
                self.log.warning(
                    "User %s requests client role %s.%s, but client role %s does not exist; "
                    "client role not assigned.",
                    self.entity.username,
                    reference.client,
                    reference.role,
                    reference.role,
                )
                continue

            yield role

    def realm_roles(self) -> Iterator[RoleModel]:
        for reference in self.entity.realm_roles:
            role = self.realm.get_role(reference.role)
            if role is None:
                self.log.warning(
                    "User %s requests realm role %s, but realm role %s does not exist; "
                    "realm role not assigned.",
                    self.entity.username,
                    reference.role,
                    reference.role,
                )
                continue

            yield role
