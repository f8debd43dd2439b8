"""User adapter ↔ JSON representation.

Usage:
    # Adapter → JSON
    payload = UserRepresentation.from_adapter(adapter)

    # JSON → adapter (through the adapter's guarded setters)
    UserRepresentation.apply(adapter, payload)
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from user_storage.core.storage.adapter import UserAdapter
from user_storage.core.storage.exceptions import InvalidRepresentationError
from user_storage.core.validators import validate_email, validate_name, validate_username


class UserRepresentation:
    """Transformer between adapters and the federation API's user JSON."""

    @staticmethod
    def from_adapter(adapter: UserAdapter) -> Dict[str, Any]:
        """Convert an adapter to its JSON representation.

        Args:
            adapter: Live user adapter

        Returns:
            Representation dict; the password hash is never included

        Example:
            >>> rep = UserRepresentation.from_adapter(adapter)
            >>> rep["id"]
            'user-store:0b6f...'
        """
        realm_roles: List[str] = []
        client_roles: Dict[str, List[str]] = {}
        for role in adapter.get_role_mappings_stream():
            if role.client_role:
                client_roles.setdefault(role.container_id, []).append(role.name)
            else:
                realm_roles.append(role.name)

        return {
            "id": adapter.id,
            "username": adapter.username,
            "email": adapter.email,
            "emailVerified": adapter.email_verified,
            "firstName": adapter.first_name,
            "lastName": adapter.last_name,
            "createdTimestamp": adapter.created_timestamp,
            "attributes": adapter.get_attributes(),
            "realmRoles": realm_roles,
            "clientRoles": client_roles,
        }

    @staticmethod
    def validate(payload: Any) -> Dict[str, Any]:
        """Validate an update payload and return the normalized changes.

        Only keys present in the payload are returned. ``None`` clears
        email, first name and last name.

        Raises:
            InvalidRepresentationError: On the first invalid field
        """
        if not isinstance(payload, dict):
            raise InvalidRepresentationError("Request body must be a JSON object")

        changes: Dict[str, Any] = {}
        try:
            if "username" in payload:
                changes["username"] = validate_username(payload["username"])
            if "email" in payload:
                changes["email"] = None if payload["email"] is None else validate_email(payload["email"])
            for key, label in (("firstName", "First name"), ("lastName", "Last name")):
                if key in payload:
                    changes[key] = None if payload[key] is None else validate_name(payload[key], label)
        except ValueError as exc:
            raise InvalidRepresentationError(str(exc)) from exc

        if "createdTimestamp" in payload:
            timestamp = payload["createdTimestamp"]
            if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int)):
                raise InvalidRepresentationError("must be epoch milliseconds", "createdTimestamp")
            changes["createdTimestamp"] = timestamp

        if "emailVerified" in payload:
            if not isinstance(payload["emailVerified"], bool):
                raise InvalidRepresentationError("must be a boolean", "emailVerified")
            changes["emailVerified"] = payload["emailVerified"]

        if "attributes" in payload:
            changes["attributes"] = UserRepresentation._validate_attributes(payload["attributes"])

        return changes

    @staticmethod
    def _validate_attributes(attributes: Any) -> Dict[str, List[Optional[str]]]:
        if not isinstance(attributes, dict):
            raise InvalidRepresentationError("must be an object of string lists", "attributes")
        normalized: Dict[str, List[Optional[str]]] = {}
        for name, values in attributes.items():
            if isinstance(values, str):
                values = [values]
            if not isinstance(values, list) or not all(v is None or isinstance(v, str) for v in values):
                raise InvalidRepresentationError(f"values of '{name}' must be strings", "attributes")
            normalized[name] = values
        return normalized

    @staticmethod
    def apply(adapter: UserAdapter, payload: Any) -> UserAdapter:
        """Validate ``payload`` and write it through the adapter.

        Guarded fields are written before ``emailVerified`` so a read-only
        provider rejects the update before anything changes.

        Raises:
            InvalidRepresentationError: If the payload is invalid
            ReadOnlyException: If a guarded field is present and the provider is read-only
        """
        changes = UserRepresentation.validate(payload)

        if "username" in changes:
            adapter.set_username(changes["username"])
        if "email" in changes:
            adapter.set_email(changes["email"])
        if "firstName" in changes:
            adapter.set_first_name(changes["firstName"])
        if "lastName" in changes:
            adapter.set_last_name(changes["lastName"])
        if "createdTimestamp" in changes:
            adapter.set_created_timestamp(changes["createdTimestamp"])
        for name, values in changes.get("attributes", {}).items():
            adapter.set_attribute(name, values)
        if "emailVerified" in changes:
            adapter.set_email_verified(changes["emailVerified"])

        return adapter
