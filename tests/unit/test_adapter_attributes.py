"""Tests for the attribute overlay of the user adapter."""
import pytest

from user_storage.core.storage import ReadOnlyException, UserModel


@pytest.fixture()
def alice(provider, realm, make_entity):
    make_entity("a-1", "alice", email="alice@example.com", first_name="Alice", last_name="Smith")
    return provider.get_user_by_id(realm, "user-store:a-1")


def test_adapter_id_is_composite(alice):
    assert alice.id == "user-store:a-1"
    assert alice.external_id == "a-1"


def test_first_name_is_read_from_dedicated_column(alice, federated, realm):
    assert alice.get_first_attribute(UserModel.FIRST_NAME) == "Alice"
    assert list(alice.get_attribute_stream(UserModel.LAST_NAME)) == ["Smith"]
    assert federated.get_attributes(realm, alice.id) == {}


def test_set_first_name_writes_column_not_fallback(alice, federated, realm):
    alice.set_single_attribute(UserModel.FIRST_NAME, "Ann")
    assert alice.entity.first_name == "Ann"
    assert alice.first_name == "Ann"
    assert federated.get_attributes(realm, alice.id) == {}


def test_set_attribute_on_dedicated_keeps_first_value(alice):
    alice.set_attribute(UserModel.LAST_NAME, ["Jones", "Ignored"])
    assert alice.last_name == "Jones"


def test_set_attribute_with_empty_list_clears_dedicated(alice):
    alice.set_attribute(UserModel.FIRST_NAME, [])
    assert alice.first_name is None
    assert list(alice.get_attribute_stream(UserModel.FIRST_NAME)) == []


def test_remove_dedicated_attribute_clears_column(alice):
    alice.remove_attribute(UserModel.LAST_NAME)
    assert alice.entity.last_name is None


def test_custom_attribute_goes_to_fallback(alice, federated, realm):
    alice.set_attribute("department", ["sales", "emea"])
    assert federated.get_attribute(realm, alice.id, "department") == ["sales", "emea"]
    assert alice.get_first_attribute("department") == "sales"
    assert list(alice.get_attribute_stream("department")) == ["sales", "emea"]


def test_custom_attribute_replace_and_remove(alice):
    alice.set_single_attribute("team", "blue")
    alice.set_single_attribute("team", "red")
    assert list(alice.get_attribute_stream("team")) == ["red"]

    alice.remove_attribute("team")
    assert alice.get_first_attribute("team") is None


def test_setting_custom_attribute_to_none_removes_it(alice, federated, realm):
    alice.set_single_attribute("department", "sales")
    alice.set_single_attribute("department", None)

    assert alice.get_attributes() == {"firstName": ["Alice"], "lastName": ["Smith"]}
    assert alice.get_first_attribute("department") is None
    assert federated.get_attributes(realm, alice.id) == {}


def test_none_values_in_custom_attribute_are_dropped(alice):
    alice.set_attribute("team", ["blue", None, "red"])
    assert list(alice.get_attribute_stream("team")) == ["blue", "red"]


def test_get_attributes_merges_fallback_and_columns(alice):
    alice.set_attribute("department", ["sales"])
    attributes = alice.get_attributes()
    assert attributes == {
        "department": ["sales"],
        "firstName": ["Alice"],
        "lastName": ["Smith"],
    }


def test_get_attributes_omits_null_columns(provider, realm, make_entity):
    make_entity("b-1", "bob")
    bob = provider.get_user_by_id(realm, "user-store:b-1")
    assert bob.get_attributes() == {}


def test_email_verified_is_not_guarded(read_only_provider, realm, make_entity):
    make_entity("c-1", "carol")
    carol = read_only_provider.get_user_by_id(realm, "user-store:c-1")
    carol.set_email_verified(True)
    assert carol.email_verified is True


@pytest.mark.parametrize(
    "mutate",
    [
        lambda user: user.set_username("mallory"),
        lambda user: user.set_email("mallory@example.com"),
        lambda user: user.set_first_name("Mallory"),
        lambda user: user.set_last_name("M"),
        lambda user: user.set_created_timestamp(1),
        lambda user: user.set_single_attribute("department", "x"),
        lambda user: user.set_attribute("department", ["x"]),
        lambda user: user.remove_attribute("firstName"),
        lambda user: user.set_password_hash(None),
        lambda user: user.grant_role(user.realm.get_role("manager")),
        lambda user: user.grant_role(user.realm.get_client_by_client_id("portal").get_role("editor")),
        lambda user: user.delete_role_mapping(user.realm.get_role("analyst")),
    ],
)
def test_read_only_rejects_guarded_setters(read_only_provider, realm, make_entity, mutate):
    make_entity(
        "d-1",
        "dave",
        realm_roles=["analyst"],
        email="dave@example.com",
        first_name="Dave",
        password_hash="x$y$z",
    )
    dave = read_only_provider.get_user_by_id(realm, "user-store:d-1")
    roles_before = list(dave.get_role_mappings_stream())

    with pytest.raises(ReadOnlyException):
        mutate(dave)

    assert dave.username == "dave"
    assert dave.email == "dave@example.com"
    assert dave.first_name == "Dave"
    assert dave.password_hash == "x$y$z"
    assert dave.get_attributes() == {"firstName": ["Dave"]}
    assert list(dave.get_role_mappings_stream()) == roles_before
    assert [role.name for role in roles_before] == ["analyst"]
