"""Federation API endpoints consumed by the host identity system.

Every route maps onto one provider operation. The host resolves users by id,
username or email, runs searches and counts, registers and deletes users,
and validates or rotates passwords through this surface.

Architecture:
    Host → /federation/v1/* → UserStorageProvider → external user store

Security:
    - Static Bearer token on every route via @require_api_token
    - Writes are refused with 403 while the component is read-only
"""

from __future__ import annotations
import logging
from typing import Optional

from flask import Blueprint, abort, jsonify, request

from user_storage.api.context import current_realm, finish_request, get_provider
from user_storage.api.decorators import require_api_token
from user_storage.core.representation import UserRepresentation
from user_storage.core.storage import (
    PASSWORD,
    InvalidRepresentationError,
    LiveAdapterUnavailableError,
    ReadOnlyException,
    UserAdapter,
    UserCredential,
    UserModel,
)
from user_storage.core.validators import validate_username

bp = Blueprint("federation", __name__, url_prefix="/federation/v1")

JSON_MAX_SIZE_BYTES = 65536  # 64 KB

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Request lifecycle
# ─────────────────────────────────────────────────────────────────────────────

@bp.before_request
def limit_payload_size():
    if request.content_length and request.content_length > JSON_MAX_SIZE_BYTES:
        return _error(413, "Payload Too Large", f"Request body exceeds {JSON_MAX_SIZE_BYTES} bytes")
    return None


@bp.after_request
def close_sessions(response):
    """Commit successful requests, roll back everything else."""
    finish_request(commit=response.status_code < 400)
    return response


@bp.teardown_request
def discard_sessions(exc):
    # No-op when after_request already finished the sessions
    finish_request(commit=False)


@bp.errorhandler(ReadOnlyException)
def handle_read_only(error: ReadOnlyException):
    logger.info("Rejected write on read-only storage | path=%s", request.path)
    return _error(403, "Forbidden", str(error))


@bp.errorhandler(InvalidRepresentationError)
def handle_invalid_representation(error: InvalidRepresentationError):
    return _error(400, "Bad Request", str(error))


@bp.errorhandler(LiveAdapterUnavailableError)
def handle_live_adapter_unavailable(error: LiveAdapterUnavailableError):
    return _error(409, "Conflict", str(error))


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _error(status: int, error: str, message: str):
    return jsonify({"error": error, "message": message}), status


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidRepresentationError("Request body must be a JSON object")
    return payload


def _int_arg(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise InvalidRepresentationError("must be an integer", name) from None
    if value < 0:
        raise InvalidRepresentationError("must not be negative", name)
    return value


def _load_user(user_id: str) -> UserAdapter:
    user = get_provider().get_user_by_id(current_realm(), user_id)
    if user is None:
        abort(404)
    return user


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/users", methods=["GET"])
@require_api_token
def list_users():
    """Look up by ``username`` or ``email``, or search with ``search``/``first``/``max``."""
    provider = get_provider()
    realm = current_realm()

    username = request.args.get("username")
    if username is not None:
        user = provider.get_user_by_username(realm, username)
        return jsonify([UserRepresentation.from_adapter(user)] if user else [])

    email = request.args.get("email")
    if email is not None:
        user = provider.get_user_by_email(realm, email)
        return jsonify([UserRepresentation.from_adapter(user)] if user else [])

    params = {UserModel.SEARCH: request.args.get("search", "")}
    users = provider.search_for_user_stream(realm, params, _int_arg("first"), _int_arg("max"))
    return jsonify([UserRepresentation.from_adapter(user) for user in users])


@bp.route("/users/count", methods=["GET"])
@require_api_token
def count_users():
    return jsonify({"count": get_provider().get_users_count(current_realm())})


@bp.route("/users/<user_id>", methods=["GET"])
@require_api_token
def get_user(user_id: str):
    return jsonify(UserRepresentation.from_adapter(_load_user(user_id)))


@bp.route("/users", methods=["POST"])
@require_api_token
def create_user():
    """Register a user; remaining representation fields are applied afterwards."""
    payload = _json_body()
    try:
        username = validate_username(payload.get("username"))
    except ValueError as exc:
        raise InvalidRepresentationError(str(exc), "username") from exc

    provider = get_provider()
    realm = current_realm()
    if provider.get_user_by_username(realm, username) is not None:
        return _error(409, "Conflict", f"User '{username}' already exists")

    remaining = {key: value for key, value in payload.items() if key not in ("id", "username")}
    # Validated before add_user; a bad payload creates nothing
    UserRepresentation.validate(remaining)

    user = provider.add_user(realm, username)
    UserRepresentation.apply(user, remaining)
    return jsonify(UserRepresentation.from_adapter(user)), 201


@bp.route("/users/<user_id>", methods=["PUT"])
@require_api_token
def update_user(user_id: str):
    payload = _json_body()
    user = _load_user(user_id)
    changes = {key: value for key, value in payload.items() if key != "id"}
    UserRepresentation.apply(user, changes)
    return jsonify(UserRepresentation.from_adapter(user))


@bp.route("/users/<user_id>", methods=["DELETE"])
@require_api_token
def delete_user(user_id: str):
    provider = get_provider()
    user = _load_user(user_id)
    if not provider.remove_user(current_realm(), user):
        abort(404)
    return ("", 204)


# ─────────────────────────────────────────────────────────────────────────────
# Credentials
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/users/<user_id>/credentials", methods=["GET"])
@require_api_token
def credential_status(user_id: str):
    provider = get_provider()
    realm = current_realm()
    user = _load_user(user_id)
    configured = [PASSWORD] if provider.is_configured_for(realm, user, PASSWORD) else []
    return jsonify({
        "configured": configured,
        "disableable": provider.get_disableable_credential_types(realm, user),
    })


@bp.route("/users/<user_id>/credentials/validate", methods=["POST"])
@require_api_token
def validate_credential(user_id: str):
    payload = _json_body()
    credential_type = payload.get("type", PASSWORD)
    value = payload.get("value")
    if not isinstance(credential_type, str) or not isinstance(value, str):
        raise InvalidRepresentationError("'type' and 'value' must be strings")

    user = _load_user(user_id)
    valid = get_provider().is_valid(current_realm(), user, UserCredential(type=credential_type, value=value))
    return jsonify({"valid": valid})


@bp.route("/users/<user_id>/credentials/password", methods=["PUT"])
@require_api_token
def update_password(user_id: str):
    payload = _json_body()
    value = payload.get("value")
    if not isinstance(value, str) or not value:
        raise InvalidRepresentationError("must be a non-empty string", "value")

    user = _load_user(user_id)
    get_provider().update_credential(current_realm(), user, UserCredential.password(value))
    logger.info("Password updated | user=%s", user.id)
    return ("", 204)


@bp.route("/users/<user_id>/credentials/password", methods=["DELETE"])
@require_api_token
def disable_password(user_id: str):
    user = _load_user(user_id)
    get_provider().disable_credential_type(current_realm(), user, PASSWORD)
    logger.info("Password disabled | user=%s", user.id)
    return ("", 204)
