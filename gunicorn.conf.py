"""Gunicorn configuration for the user federation service.

Secrets are read from /run/secrets (Docker secrets) by load_settings(); the
post_fork hook only reports which of them a worker can see.

Usage:
    gunicorn -c gunicorn.conf.py "user_storage.flask_app:create_app()"
"""
import os
from pathlib import Path

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"

# SQLite engines must not be shared across forks
preload_app = False


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    secrets_dir = Path("/run/secrets")
    token_file = secrets_dir / "federation_api_token"
    if token_file.is_file():
        worker.log.info("Federation API token available in /run/secrets")
    elif os.environ.get("FEDERATION_API_TOKEN"):
        worker.log.info("Federation API token taken from environment")
    elif os.environ.get("DEMO_MODE", "false").lower() == "true":
        worker.log.warning("DEMO_MODE=true: a temporary federation API token will be generated per worker")
    else:
        worker.log.error("FEDERATION_API_TOKEN missing; worker startup will fail")

    read_only = os.environ.get("USER_STORAGE_READ_ONLY")
    worker.log.info("USER_STORAGE_READ_ONLY=%s", "unset" if read_only is None else read_only)
