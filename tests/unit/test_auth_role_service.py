import types
from unittest.mock import MagicMock

from cakeshop.auth import service as auth_service
from cakeshop.auth.service import determine_role


def test_profile_role_has_priority():
    assert determine_role("a@b", {"role": "admin"}, {"role": "user"}) == "admin"
    assert determine_role("a@b", {"role": "ADMIN"}, None) == "admin"


def test_app_metadata_role_then_default():
    assert determine_role(None, None, {"role": "admin"}) == "admin"
    assert determine_role(None, None, None) == "user"
    assert determine_role(None, {"role": "customer"}, None) == "user"


def test_admin_emails(monkeypatch):
    monkeypatch.setattr(auth_service, "ADMIN_EMAILS", ["boss@cakes.test"])
    assert determine_role("boss@cakes.test", None, None) == "admin"
    assert determine_role("client@cakes.test", None, None) == "user"


def test_get_user_from_token_normalises(monkeypatch):
    client = MagicMock()
    client.auth.get_user.return_value = types.SimpleNamespace(
        user=types.SimpleNamespace(id="u-9", email="c@d", user_metadata={"full_name": "C"}, app_metadata={})
    )
    monkeypatch.setattr("cakeshop.auth.repository.get_user_profile", lambda c, uid: {"id": uid, "role": "admin"})

    user = auth_service.get_user_from_token(client, "tok")
    client.auth.get_user.assert_called_once_with("tok")
    assert user == {"id": "u-9", "email": "c@d", "metadata": {"full_name": "C"}, "role": "admin", "token": "tok"}


def test_self_edited_user_metadata_grants_nothing(monkeypatch):
    client = MagicMock()
    client.auth.get_user.return_value = types.SimpleNamespace(
        user=types.SimpleNamespace(id="u-7", email="c@d", user_metadata={"role": "admin"}, app_metadata={})
    )
    monkeypatch.setattr("cakeshop.auth.repository.get_user_profile", lambda c, uid: None)

    assert auth_service.get_user_from_token(client, "tok")["role"] == "user"


def test_app_metadata_role_without_profile(monkeypatch):
    client = MagicMock()
    client.auth.get_user.return_value = types.SimpleNamespace(
        user=types.SimpleNamespace(id="u-8", email="c@d", user_metadata={}, app_metadata={"role": "admin"})
    )
    monkeypatch.setattr("cakeshop.auth.repository.get_user_profile", lambda c, uid: None)

    assert auth_service.get_user_from_token(client, "tok")["role"] == "admin"
