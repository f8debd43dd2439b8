"""Composite user identifiers.

Host-visible ids take the form ``<provider-id>:<external-id>``; the external
store only ever sees the part after the first colon.
"""
from __future__ import annotations

from .models import ComponentModel

SEPARATOR = ":"


class StorageId:
    """Build and split composite user ids."""

    @staticmethod
    def keycloak_id(model: ComponentModel, external_id: str) -> str:
        return f"{model.id}{SEPARATOR}{external_id}"

    @staticmethod
    def external_id(user_id: str) -> str:
        """Strip the provider prefix; ids without one are returned as-is."""
        provider_id, separator, external = user_id.partition(SEPARATOR)
        if not separator:
            return user_id
        return external

    @staticmethod
    def provider_id(user_id: str) -> str | None:
        provider_id, separator, _ = user_id.partition(SEPARATOR)
        return provider_id if separator else None
