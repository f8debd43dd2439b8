import logging
from types import SimpleNamespace

import pytest
from flask import Flask, jsonify

from user_storage.api import decorators


@pytest.fixture
def app():
    app = Flask(__name__)
    app.config["APP_CONFIG"] = SimpleNamespace(api_token="expected-token")

    @app.route("/protected")
    @decorators.require_api_token
    def protected():
        return jsonify({"ok": True})

    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def test_valid_token_passes(client):
    response = client.get("/protected", headers={"Authorization": "Bearer expected-token"})
    assert response.status_code == 200
    assert response.get_json() == {"ok": True}


def test_scheme_is_case_insensitive(client):
    response = client.get("/protected", headers={"Authorization": "bearer expected-token"})
    assert response.status_code == 200


@pytest.mark.parametrize(
    "header",
    [None, "", "Bearer", "Bearer   ", "Basic expected-token", "expected-token"],
)
def test_missing_or_malformed_header(client, header):
    headers = {"Authorization": header} if header is not None else {}
    response = client.get("/protected", headers=headers)
    assert response.status_code == 401
    assert response.get_json()["message"] == "Authentication required"
    assert response.headers["WWW-Authenticate"].startswith("Bearer")


def test_wrong_token_is_rejected_and_only_fingerprint_logged(client, caplog):
    with caplog.at_level(logging.WARNING):
        response = client.get("/protected", headers={"Authorization": "Bearer wrong-token"})

    assert response.status_code == 401
    assert response.get_json() == {"error": "Unauthorized", "message": "Invalid token"}
    assert "wrong-token" not in caplog.text
    assert decorators._token_fingerprint("wrong-token") in caplog.text


def test_unconfigured_token_rejects_everything(app, client):
    app.config["APP_CONFIG"] = SimpleNamespace(api_token="")
    response = client.get("/protected", headers={"Authorization": "Bearer "})
    assert response.status_code == 401
    response = client.get("/protected", headers={"Authorization": "Bearer anything"})
    assert response.status_code == 401
