"""Health check endpoints."""
import logging

from flask import Blueprint
from sqlalchemy.exc import SQLAlchemyError

from user_storage.api.context import federation_context

bp = Blueprint("health", __name__)

logger = logging.getLogger(__name__)


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness check: the external user store must answer ``SELECT 1``."""
    try:
        federation_context().store.ping()
    except SQLAlchemyError as exc:
        logger.warning("Readiness check failed: %s", exc)
        return ("not ready", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
