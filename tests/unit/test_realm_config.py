import logging

import pytest

from user_storage.config.realm import load_realm, realm_from_mapping


def test_load_realm_from_yaml(tmp_path):
    realm_file = tmp_path / "realm.yaml"
    realm_file.write_text(
        "realm: corp\n"
        "roles: [analyst, manager]\n"
        "clients:\n"
        "  portal: [viewer, editor]\n"
        "  reports: []\n"
    )

    realm = load_realm(realm_file)

    assert realm.name == "corp"
    assert realm.id == "corp"
    assert sorted(realm.roles) == ["analyst", "manager"]
    assert realm.get_role("analyst").container_id == "corp"
    viewer = realm.get_client_by_client_id("portal").get_role("viewer")
    assert viewer.client_role is True
    assert viewer.qualified_name == "portal.viewer"
    assert realm.get_client_by_client_id("reports").roles == {}


def test_missing_file_yields_empty_realm(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("REALM_NAME", "fallback")
    with caplog.at_level(logging.WARNING):
        realm = load_realm(tmp_path / "absent.yaml")
    assert realm.name == "fallback"
    assert realm.roles == {}
    assert "not found" in caplog.text


def test_empty_file_uses_default_name(tmp_path, monkeypatch):
    monkeypatch.delenv("REALM_NAME", raising=False)
    realm_file = tmp_path / "realm.yaml"
    realm_file.write_text("")
    assert load_realm(realm_file).name == "demo"


def test_non_mapping_document_is_rejected(tmp_path):
    realm_file = tmp_path / "realm.yaml"
    realm_file.write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_realm(realm_file)


@pytest.mark.parametrize(
    "data, message",
    [
        ({"roles": "analyst"}, "'roles' must be a list"),
        ({"clients": ["portal"]}, "'clients' must map"),
    ],
)
def test_bad_shapes(data, message):
    with pytest.raises(ValueError, match=message):
        realm_from_mapping(data)


def test_bundled_realm_definition_loads():
    from pathlib import Path

    realm = load_realm(Path(__file__).resolve().parents[2] / "config" / "realm.yaml")
    assert realm.name == "demo"
    assert realm.get_client_by_client_id("portal") is not None
