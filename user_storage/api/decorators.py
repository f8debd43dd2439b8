"""
Flask decorators for authenticating the host against the federation API.

The host identity system calls this service with a static Bearer token
(RFC 6750 header syntax) shared through Docker secrets or the environment.

Security:
- Constant-time comparison via hmac.compare_digest
- Tokens are never logged; only a truncated SHA-256 digest is
"""

import hashlib
import hmac
import logging
from functools import wraps

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)


def _token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()[:12]


def _validate_static_token(provided_token: str) -> bool:
    """Compare the presented token with the configured one.

    Returns:
        bool: True if token matches configured secret
    """
    cfg = current_app.config.get("APP_CONFIG")
    if not cfg or not cfg.api_token:
        return False
    return hmac.compare_digest(provided_token.encode(), cfg.api_token.encode())


def _unauthorized(message: str):
    response = jsonify({"error": "Unauthorized", "message": message})
    response.status_code = 401
    response.headers["WWW-Authenticate"] = 'Bearer realm="user-federation"'
    return response


def require_api_token(f):
    """
    Decorator requiring ``Authorization: Bearer <token>`` on a route.

    Returns 401 with a ``WWW-Authenticate`` header when the header is missing,
    malformed, or carries the wrong token.

    Example:
        @bp.route("/users/<user_id>")
        @require_api_token
        def get_user(user_id):
            ...
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        scheme, _, token = auth_header.partition(" ")
        token = token.strip()

        if scheme.lower() != "bearer" or not token:
            logger.info("Rejected federation request without bearer token | path=%s", request.path)
            return _unauthorized("Authentication required")

        if not _validate_static_token(token):
            logger.warning(
                "Rejected federation request | token_hash=%s | path=%s | client_ip=%s",
                _token_fingerprint(token),
                request.path,
                request.remote_addr,
            )
            return _unauthorized("Invalid token")

        return f(*args, **kwargs)

    return decorated
