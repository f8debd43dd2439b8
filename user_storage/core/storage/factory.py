"""Provider factory and configuration schema."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from sqlalchemy.orm import Session

from .credentials import DEFAULT_HASH_METHOD
from .federated import FederatedStorage
from .guard import READ_ONLY_OPTION
from .models import ComponentModel
from .provider import UserStorageProvider

BOOLEAN_TYPE = "boolean"


@dataclass(frozen=True)
class ProviderConfigProperty:
    """One configuration option the provider understands."""
    name: str
    label: str
    type: str
    default_value: Any = None
    help_text: str = ""


class UserStorageProviderFactory:
    """Creates one provider per host request."""

    PROVIDER_ID = "external-user-storage"
    HELP_TEXT = "External user store federation provider"

    CONFIG_PROPERTIES: List[ProviderConfigProperty] = [
        ProviderConfigProperty(
            name=READ_ONLY_OPTION,
            label="Read-only",
            type=BOOLEAN_TYPE,
            default_value=True,
            help_text=(
                "If set to ON, this provider is read-only, users can not be added or deleted, "
                "and no user properties or attributes can be modified."
            ),
        ),
    ]

    def __init__(self, hash_method: str = DEFAULT_HASH_METHOD):
        self.hash_method = hash_method

    def create(self, session: Session, model: ComponentModel, federated: FederatedStorage) -> UserStorageProvider:
        return UserStorageProvider(session, model, federated, hash_method=self.hash_method)

    def get_id(self) -> str:
        return self.PROVIDER_ID

    def get_help_text(self) -> str:
        return self.HELP_TEXT

    def get_config_properties(self) -> List[ProviderConfigProperty]:
        return list(self.CONFIG_PROPERTIES)

    def close(self) -> None:
        pass
