# tests/test_identity.py
import httpx
import pytest

from newsengine.errors import IdentityUnavailableError
from newsengine.identity import DisabledIdentityProvider, RemoteIdentityProvider, bearer_token


def provider_with(handler):
    return RemoteIdentityProvider("https://auth.example/", api_key="anon",
                                  client=httpx.Client(transport=httpx.MockTransport(handler)))


@pytest.mark.parametrize("header,expected", [
    ("Bearer abc", "abc"),
    ("bearer   abc ", "abc"),
    ("Basic abc", None),
    ("Bearer ", None),
    (None, None),
])
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected


def test_remote_provider_resolves_user_id():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json={"id": "user-123"})

    assert provider_with(handler).resolve("tok") == "user-123"
    assert seen == {"url": "https://auth.example/auth/v1/user", "auth": "Bearer tok", "apikey": "anon"}


def test_remote_provider_rejects_invalid_token():
    assert provider_with(lambda r: httpx.Response(401, json={"msg": "bad jwt"})).resolve("tok") is None


def test_remote_provider_outage_is_not_reported_as_bad_credentials():
    with pytest.raises(IdentityUnavailableError):
        provider_with(lambda r: httpx.Response(502)).resolve("tok")

    def boom(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(IdentityUnavailableError):
        provider_with(boom).resolve("tok")


def test_disabled_provider_rejects_everything():
    assert DisabledIdentityProvider().resolve("anything") is None


def test_remote_provider_non_json_answer_is_an_outage():
    with pytest.raises(IdentityUnavailableError):
        provider_with(lambda r: httpx.Response(200, text="<html>maintenance</html>")).resolve("tok")


def test_remote_provider_close_releases_client(mocker):
    client = mocker.MagicMock()
    RemoteIdentityProvider("https://auth.example", client=client).close()
    client.close.assert_called_once()
