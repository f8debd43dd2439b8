"""Realm definition loader.

The host realm (realm roles and clients with their roles) is described in a
YAML file:

    realm: demo
    roles: [analyst, manager]
    clients:
      portal: [viewer, editor]
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from user_storage.core.storage.models import RealmModel

logger = logging.getLogger(__name__)


def realm_from_mapping(data: Mapping[str, Any], default_name: str = "demo") -> RealmModel:
    """Build a realm from an already-parsed definition.

    Raises:
        ValueError: If roles or clients have the wrong shape
    """
    realm = RealmModel(name=str(data.get("realm") or default_name))

    roles = data.get("roles") or []
    if not isinstance(roles, list):
        raise ValueError("'roles' must be a list of role names")
    for role in roles:
        realm.add_role(str(role))

    clients = data.get("clients") or {}
    if not isinstance(clients, Mapping):
        raise ValueError("'clients' must map client ids to role lists")
    for client_id, client_roles in clients.items():
        client = realm.add_client(str(client_id))
        for role in client_roles or []:
            client.add_role(str(role))

    return realm


def load_realm(path: str | os.PathLike) -> RealmModel:
    """Load the realm definition from ``path``.

    A missing file yields an empty realm named after ``REALM_NAME``.
    """
    default_name = os.environ.get("REALM_NAME", "demo")
    realm_file = Path(path)
    if not realm_file.is_file():
        logger.warning("Realm definition %s not found; serving empty realm '%s'", realm_file, default_name)
        return RealmModel(name=default_name)

    with realm_file.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Realm definition {realm_file} must be a mapping")

    realm = realm_from_mapping(data, default_name)
    logger.info(
        "Loaded realm '%s' (%d realm roles, %d clients)",
        realm.name,
        len(realm.roles),
        len(realm.clients),
    )
    return realm
