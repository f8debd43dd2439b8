"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the federation service with its blueprints, stores and configuration.

Gunicorn:
    gunicorn -c gunicorn.conf.py "user_storage.flask_app:create_app()"
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from user_storage.config import AppConfig, load_realm, load_settings
from user_storage.core.storage import ReadOnlyGuard, RealmModel

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, realm: Optional[RealmModel] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        cfg: Settings to use; loaded from the environment when omitted
        realm: Host realm; loaded from ``cfg.realm_config_path`` when omitted

    Returns:
        Configured Flask app with the federation and health blueprints
    """
    cfg = cfg or load_settings()
    _configure_logging(cfg.log_level)

    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["DEMO_MODE"] = cfg.demo_mode

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)  # type: ignore

    # Stores, realm and provider component
    from user_storage.api.context import init_federation
    context = init_federation(app, cfg, realm or load_realm(cfg.realm_config_path))

    # Register blueprints
    from user_storage.api import errors, federation, health

    app.register_blueprint(health.bp)
    app.register_blueprint(federation.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    logger.info(
        "Mode=%s; federation API registered at /federation/v1 for component '%s' (realm '%s', read-only=%s)",
        mode_label,
        context.model.id,
        context.realm.name,
        ReadOnlyGuard.from_config(context.model).read_only,
    )
    if cfg.demo_mode:
        logger.warning("Demo mode active - do not deploy with demo credentials")

    return app


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(level)
