"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_USER_STORE_URL = "sqlite:///user-store.db"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as exc:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, exc)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Stores
    user_store_database_url: str = DEFAULT_USER_STORE_URL
    federated_database_url: str = ""

    # Provider component
    component_id: str = "user-store"
    component_name: str = "External user store"
    # Raw readOnly option; None means "not configured"
    read_only: Optional[str] = None
    password_hash_method: str = "scrypt"

    # Host realm
    realm_config_path: str = "config/realm.yaml"

    # API
    api_token: str = ""

    # Logging
    log_level: str = "INFO"

    @property
    def federated_database_url_resolved(self) -> str:
        """Fallback store URL, defaulting to the user store itself."""
        return self.federated_database_url or self.user_store_database_url

    @property
    def component_config(self) -> Dict[str, List[str]]:
        """Multi-valued component configuration handed to the provider.

        ``readOnly`` is only present when it was explicitly configured.
        """
        if self.read_only is None:
            return {}
        return {"readOnly": [self.read_only]}


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    user_store_database_url = os.environ.get("USER_STORE_DATABASE_URL", DEFAULT_USER_STORE_URL)
    federated_database_url = os.environ.get("FEDERATED_DATABASE_URL", "")

    component_id = os.environ.get("USER_STORAGE_COMPONENT_ID", "user-store").strip()
    if not component_id or ":" in component_id:
        raise RuntimeError("USER_STORAGE_COMPONENT_ID must be non-empty and must not contain ':'")
    component_name = os.environ.get("USER_STORAGE_COMPONENT_NAME", "External user store")

    # Passed through untouched; the read-only policy lives in ReadOnlyGuard
    read_only = os.environ.get("USER_STORAGE_READ_ONLY")

    password_hash_method = os.environ.get("PASSWORD_HASH_METHOD", "scrypt").strip() or "scrypt"
    realm_config_path = os.environ.get("REALM_CONFIG_PATH", "config/realm.yaml")

    api_token = _load_secret_from_file("federation_api_token", "FEDERATION_API_TOKEN")
    if not api_token:
        if demo_mode:
            api_token = secrets.token_urlsafe(32)
            os.environ["FEDERATION_API_TOKEN"] = api_token
            logger.warning("[demo-mode] Generated temporary FEDERATION_API_TOKEN")
        else:
            raise RuntimeError("FEDERATION_API_TOKEN not found in /run/secrets or environment")

    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    logger.info(
        "Mode=%s; component=%s; readOnly=%s",
        mode_label,
        component_id,
        "unset" if read_only is None else read_only,
    )

    return AppConfig(
        demo_mode=demo_mode,
        user_store_database_url=user_store_database_url,
        federated_database_url=federated_database_url,
        component_id=component_id,
        component_name=component_name,
        read_only=read_only,
        password_hash_method=password_hash_method,
        realm_config_path=realm_config_path,
        api_token=api_token,
        log_level=log_level,
    )
