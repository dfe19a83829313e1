import asyncio

import pytest
import requests
from urllib3.exceptions import InsecureRequestWarning

from plain_api import SessionTransport, TransportConfig, create_resource, raise_on_failure
from plain_api.exceptions import HTTPStatusError, ResponseError
from plain_api.transport import default_transport

BASE_URL = "https://api.example.com/v1"


def run(coro):
    return asyncio.run(coro)


def test_get_sends_query_and_parses_json(requests_mock):
    matcher = requests_mock.get(f"{BASE_URL}/markets/btc", json={"success": True, "result": [1]})
    resource = create_resource(
        "get",
        f"{BASE_URL}/markets/{{{{market}}}}",
        input_map={"depth": "depth"},
        parsers=[raise_on_failure, lambda data: data["result"]],
        transport=SessionTransport(),
    )

    result = run(resource.call({"market": "btc", "depth": 5}))

    assert result == [1]
    assert matcher.last_request.qs == {"depth": ["5"]}


def test_post_sends_mapped_json_body(requests_mock):
    matcher = requests_mock.post(f"{BASE_URL}/orders", status_code=201, json={"id": "o1"})
    resource = create_resource(
        "post",
        f"{BASE_URL}/orders",
        input_map={"qty": "quantity"},
        transport=SessionTransport(),
    )

    result = run(resource.call({"qty": 2, "note": "ignored"}))

    assert result == {"id": "o1"}
    assert matcher.last_request.json() == {"quantity": 2}


def test_post_without_payload_sends_no_body(requests_mock):
    matcher = requests_mock.post(f"{BASE_URL}/ping", status_code=204)
    resource = create_resource("post", f"{BASE_URL}/ping", transport=SessionTransport())

    result = run(resource.call())

    assert result is None
    assert matcher.last_request.body is None


def test_mapped_headers_are_sent_as_strings(requests_mock):
    matcher = requests_mock.get(f"{BASE_URL}/me", json={})
    resource = create_resource(
        "get",
        f"{BASE_URL}/me",
        headers_map={"version": "X-Api-Version"},
        transport=SessionTransport(TransportConfig(default_headers={"User-Agent": "plain-api"})),
    )

    run(resource.call({"version": 2}))

    assert matcher.last_request.headers["X-Api-Version"] == "2"
    assert matcher.last_request.headers["User-Agent"] == "plain-api"


def test_failure_status_reaches_parsers(requests_mock):
    requests_mock.get(f"{BASE_URL}/items/9", status_code=404, json={"msg": "nf"})

    def parser(body, is_failure):
        if is_failure:
            raise ValueError(body["msg"])
        return body

    resource = create_resource(
        "get", f"{BASE_URL}/items/{{{{id}}}}", parsers=[parser], transport=SessionTransport()
    )

    with pytest.raises(ValueError, match="nf"):
        run(resource.call({"id": 9}))


def test_raise_on_failure_reports_status(requests_mock):
    requests_mock.delete(f"{BASE_URL}/items/1", status_code=409, json={"message": "locked"})
    resource = create_resource(
        "delete", f"{BASE_URL}/items/1", parsers=raise_on_failure, transport=SessionTransport()
    )

    with pytest.raises(ResponseError) as excinfo:
        run(resource.call())

    assert excinfo.value.status_code == 409
    assert excinfo.value.details == {"message": "locked"}


def test_connection_error_propagates(requests_mock):
    requests_mock.get(f"{BASE_URL}/down", exc=requests.exceptions.ConnectionError("refused"))
    invoked = []
    resource = create_resource(
        "get", f"{BASE_URL}/down", parsers=[invoked.append], transport=SessionTransport()
    )

    with pytest.raises(requests.exceptions.ConnectionError, match="refused"):
        run(resource.call())
    assert invoked == []


def test_transport_raises_status_error_with_response(requests_mock):
    requests_mock.put(f"{BASE_URL}/items/1", status_code=500, text="boom")

    with pytest.raises(HTTPStatusError) as excinfo:
        run(SessionTransport().put(f"{BASE_URL}/items/1", {"a": 1}))

    assert excinfo.value.response.status_code == 500
    assert excinfo.value.response.data == "boom"


def test_credentials_only_sent_when_requested(requests_mock):
    matcher = requests_mock.get(f"{BASE_URL}/private", json={})
    transport = SessionTransport(auth=("u", "p"))

    run(create_resource("get", f"{BASE_URL}/private", transport=transport).call())
    assert "Authorization" not in matcher.last_request.headers

    run(create_resource("get", f"{BASE_URL}/private", with_credentials=True, transport=transport).call())
    assert matcher.last_request.headers["Authorization"].startswith("Basic ")


def test_patch_uses_patch_verb(requests_mock):
    matcher = requests_mock.patch(f"{BASE_URL}/items/3", json={"ok": True})
    resource = create_resource(
        "patch", f"{BASE_URL}/items/{{{{id}}}}", input_map={"name": "name"}, transport=SessionTransport()
    )

    assert run(resource.call({"id": 3, "name": "n"})) == {"ok": True}
    assert matcher.last_request.json() == {"name": "n"}


def test_disables_insecure_warning_when_verify_disabled(monkeypatch):
    captured: list[object] = []

    def fake_disable(warning):  # pragma: no cover - helper
        captured.append(warning)

    monkeypatch.setattr(
        "plain_api.transport.session.urllib3.disable_warnings",
        fake_disable,
    )

    SessionTransport(TransportConfig(verify_ssl=False))

    assert captured and captured[0] is InsecureRequestWarning


def test_session_credentials_only_sent_when_requested(requests_mock):
    matcher = requests_mock.get(f"{BASE_URL}/private", json={})
    session = requests.Session()
    session.auth = ("session-user", "secret")
    session.headers["Authorization"] = "Bearer session-token"
    transport = SessionTransport(session=session)

    run(create_resource("get", f"{BASE_URL}/private", transport=transport).call())
    assert "Authorization" not in matcher.last_request.headers

    run(create_resource("get", f"{BASE_URL}/private", with_credentials=True, transport=transport).call())
    assert matcher.last_request.headers["Authorization"].startswith("Basic ")


def test_anonymous_calls_ignore_netrc(requests_mock, monkeypatch):
    monkeypatch.setattr(
        "requests.sessions.get_netrc_auth", lambda url, raise_errors=False: ("netrc-user", "pw")
    )
    matcher = requests_mock.get(f"{BASE_URL}/private", json={})

    run(create_resource("get", f"{BASE_URL}/private", transport=SessionTransport()).call())

    assert "Authorization" not in matcher.last_request.headers


def test_default_transport_is_shared():
    assert default_transport() is default_transport()
    assert isinstance(default_transport(), SessionTransport)
