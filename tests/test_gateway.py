"""Unit tests for core/gateway.py -- identity provider calls.

The module-level requests.Session is patched, so nothing leaves the process.
Tests focus on:
- URL building, x-api-key header and timeouts
- Failure classification (AuthRejected, UpstreamError, NotFound, Misconfigured)
- Payload parsing into ExternalIdentity, including unusable 2xx bodies
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from core.errors import AuthRejected, Misconfigured, NotFound, UpstreamError
from core.gateway import API_KEY_HEADER, authenticate, get_user_by_id, list_users
from core.models import ExternalIdentity

_BASE = "https://reqres.test/api"
_KEY = "secret-key"

_JANET = {
    "id": 2,
    "email": "janet.weaver@reqres.in",
    "first_name": "Janet",
    "last_name": "Weaver",
    "avatar": "https://reqres.in/img/faces/2-image.jpg",
}


def _response(status: int = 200, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error", response=resp)
    return resp


# ---------------------------------------------------------------------------
# authenticate
# ---------------------------------------------------------------------------


class TestAuthenticate:
    def test_returns_token_and_sends_key(self):
        with patch("core.gateway._session") as session:
            session.post.return_value = _response(200, {"token": "QpwL5tke4Pnpja7X4"})
            result = authenticate("eve.holt@reqres.in", "cityslicka", _KEY, _BASE, timeout=3)

        assert result.token == "QpwL5tke4Pnpja7X4"
        args, kwargs = session.post.call_args
        assert args[0] == f"{_BASE}/login"
        assert kwargs["json"] == {"email": "eve.holt@reqres.in", "password": "cityslicka"}
        assert kwargs["headers"] == {API_KEY_HEADER: _KEY}
        assert kwargs["timeout"] == 3

    def test_trailing_slash_in_base_url_is_ignored(self):
        with patch("core.gateway._session") as session:
            session.post.return_value = _response(200, {"token": "t"})
            authenticate("a@b.com", "pw", _KEY, _BASE + "/")
        assert session.post.call_args.args[0] == f"{_BASE}/login"

    def test_no_key_sends_no_header(self):
        with patch("core.gateway._session") as session:
            session.post.return_value = _response(200, {"token": "t"})
            authenticate("a@b.com", "pw", "", _BASE)
        assert session.post.call_args.kwargs["headers"] == {}

    def test_non_2xx_raises_auth_rejected(self):
        with patch("core.gateway._session") as session:
            session.post.return_value = _response(400, {"error": "user not found"})
            with pytest.raises(AuthRejected):
                authenticate("nobody@x.com", "pw", _KEY, _BASE)

    def test_transport_error_raises_auth_rejected(self):
        with patch("core.gateway._session") as session:
            session.post.side_effect = requests.ConnectionError("refused")
            with pytest.raises(AuthRejected):
                authenticate("a@b.com", "pw", _KEY, _BASE)

    def test_provider_error_text_is_not_in_exception(self):
        with patch("core.gateway._session") as session:
            session.post.return_value = _response(400, {"error": "Missing password"})
            with pytest.raises(AuthRejected) as exc_info:
                authenticate("a@b.com", "pw", _KEY, _BASE)
        assert "Missing password" not in str(exc_info.value)

    def test_success_without_token_propagates_key_error(self):
        """A 2xx body without a token is a provider defect, not a rejected login."""
        with patch("core.gateway._session") as session:
            session.post.return_value = _response(200, {"unexpected": True})
            with pytest.raises(KeyError):
                authenticate("a@b.com", "pw", _KEY, _BASE)

    def test_empty_base_url_raises_before_network(self):
        with patch("core.gateway._session") as session:
            with pytest.raises(Misconfigured):
                authenticate("a@b.com", "pw", _KEY, "")
        session.post.assert_not_called()


# ---------------------------------------------------------------------------
# list_users
# ---------------------------------------------------------------------------


class TestListUsers:
    def test_parses_directory_page(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(200, {"page": 1, "data": [_JANET]})
            users = list_users(1, _KEY, _BASE)

        assert users == [ExternalIdentity.from_payload(_JANET)]
        args, kwargs = session.get.call_args
        assert args[0] == f"{_BASE}/users"
        assert kwargs["params"] == {"page": 1}
        assert kwargs["timeout"] > 0

    def test_missing_data_is_empty_list(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(200, {"page": 3})
            assert list_users(3, _KEY, _BASE) == []

    def test_entry_without_id_is_skipped(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(200, {"data": [{"email": "ghost@x.com"}, _JANET]})
            users = list_users(1, _KEY, _BASE)
        assert [u.id for u in users] == [2]

    def test_http_error_carries_status(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(503)
            with pytest.raises(UpstreamError) as exc_info:
                list_users(2, _KEY, _BASE)
        assert exc_info.value.status_code == 503

    def test_timeout_has_no_status(self):
        with patch("core.gateway._session") as session:
            session.get.side_effect = requests.Timeout("slow")
            with pytest.raises(UpstreamError) as exc_info:
                list_users(1, _KEY, _BASE)
        assert exc_info.value.status_code is None


# ---------------------------------------------------------------------------
# get_user_by_id
# ---------------------------------------------------------------------------


class TestGetUserById:
    def test_returns_identity(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(200, {"data": _JANET})
            user = get_user_by_id(2, _KEY, _BASE)

        assert user.id == 2
        assert user.email == "janet.weaver@reqres.in"
        assert user.first_name == "Janet"
        assert session.get.call_args.args[0] == f"{_BASE}/users/2"

    def test_remote_404_raises_not_found(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(404, {})
            with pytest.raises(NotFound, match="999"):
                get_user_by_id(999, _KEY, _BASE)

    def test_remote_500_raises_upstream_error(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(500)
            with pytest.raises(UpstreamError):
                get_user_by_id(2, _KEY, _BASE)

    def test_missing_data_returns_none(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(200, {"support": {}})
            assert get_user_by_id(2, _KEY, _BASE) is None

    def test_non_json_body_returns_none(self):
        resp = _response(200)
        resp.json.side_effect = requests.JSONDecodeError("Expecting value", "<html>", 0)
        with patch("core.gateway._session") as session:
            session.get.return_value = resp
            assert get_user_by_id(5, _KEY, _BASE) is None

    def test_non_object_body_returns_none(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(200, [])
            assert get_user_by_id(5, _KEY, _BASE) is None

    def test_data_without_id_returns_none(self):
        with patch("core.gateway._session") as session:
            session.get.return_value = _response(200, {"data": {"email": "x@y.com"}})
            assert get_user_by_id(5, _KEY, _BASE) is None

    def test_empty_base_url_raises_misconfigured(self):
        with pytest.raises(Misconfigured):
            get_user_by_id(2, _KEY, None)


# ---------------------------------------------------------------------------
# ExternalIdentity.from_payload
# ---------------------------------------------------------------------------


class TestFromPayload:
    def test_string_id_is_coerced(self):
        assert ExternalIdentity.from_payload({"id": "3", "email": "emma.wong@reqres.in"}).id == 3

    @pytest.mark.parametrize("raw_id", [None, "abc", True])
    def test_unusable_id_raises(self, raw_id):
        with pytest.raises(ValueError, match="usable id"):
            ExternalIdentity.from_payload({"id": raw_id, "email": "x@y.com"})

    def test_missing_id_raises(self):
        with pytest.raises(ValueError):
            ExternalIdentity.from_payload({"email": "x@y.com"})
