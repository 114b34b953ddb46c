import json
from typing import List

import httpx
import pytest

from httpeek.config import ClientConfig
from httpeek.dispatch import USER_AGENT, build_client, build_request, send_request
from httpeek.errors import EXIT_TRANSPORT, TransportError
from httpeek.models import KeyValuePair, Method, RequestDescriptor


def _client(handler, config: ClientConfig = ClientConfig()) -> httpx.Client:
    return build_client(config, transport=httpx.MockTransport(handler))


def test_build_client_uses_config() -> None:
    with build_client(ClientConfig(timeout=12.5)) as client:
        assert client.timeout == httpx.Timeout(12.5)
        assert client.follow_redirects is True
        assert client.headers["User-Agent"] == USER_AGENT


def test_post_request_carries_json_body() -> None:
    descriptor = RequestDescriptor(
        method=Method.POST,
        url="https://example.com/",
        body=(KeyValuePair("name", "joe"), KeyValuePair("age", "5")),
    )
    with build_client(ClientConfig()) as client:
        request = build_request(client, descriptor)
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "application/json"
    assert request.content == b'{"name":"joe","age":"5"}'


def test_post_with_empty_body_sends_empty_object() -> None:
    descriptor = RequestDescriptor(method=Method.POST, url="https://example.com/")
    with build_client(ClientConfig()) as client:
        request = build_request(client, descriptor)
    assert request.content == b"{}"


def test_get_sends_exactly_one_request_without_body() -> None:
    seen: List[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    descriptor = RequestDescriptor(method=Method.GET, url="https://example.com/items?q=1")
    with _client(_handler) as client:
        response = send_request(client, descriptor)
        response.close()

    assert len(seen) == 1
    assert seen[0].method == "GET"
    assert str(seen[0].url) == "https://example.com/items?q=1"
    assert seen[0].content == b""
    assert "content-type" not in seen[0].headers


def test_post_payload_reaches_server() -> None:
    captured: dict = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["json"] = json.loads(request.content.decode())
        captured["content_type"] = request.headers["Content-Type"]
        return httpx.Response(201)

    descriptor = RequestDescriptor(
        method=Method.POST,
        url="https://example.com/",
        body=(KeyValuePair("a", "1"), KeyValuePair("a", "2")),
    )
    with _client(_handler) as client:
        response = send_request(client, descriptor)
        response.close()

    assert response.status_code == 201
    assert captured == {"json": {"a": "2"}, "content_type": "application/json"}


@pytest.mark.parametrize(
    "exc_type",
    [httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout, httpx.RemoteProtocolError],
)
def test_network_failures_become_transport_error(exc_type) -> None:
    calls: List[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise exc_type("boom", request=request)

    descriptor = RequestDescriptor(method=Method.GET, url="https://unreachable.invalid/")
    with _client(_handler) as client:
        with pytest.raises(TransportError, match="boom") as excinfo:
            send_request(client, descriptor)

    assert isinstance(excinfo.value.__cause__, exc_type)
    assert excinfo.value.exit_code == EXIT_TRANSPORT
    assert len(calls) == 1
