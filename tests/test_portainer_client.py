"""Tests for the Portainer HTTP client."""

import httpx
import pytest

from portainer_mcp.core.config_loader import PortainerConnection
from portainer_mcp.core.exceptions import BackendError
from portainer_mcp.core.portainer_client import API_KEY_HEADER, PortainerClient

from .conftest import TEST_TOKEN, RecordingBackend


class TestConnection:
    @pytest.mark.parametrize(
        ("server_url", "expected"),
        [
            ("portainer.local:9443", "https://portainer.local:9443/api"),
            ("http://portainer.local:9000", "http://portainer.local:9000/api"),
            ("https://portainer.local/", "https://portainer.local/api"),
        ],
    )
    def test_base_url(self, server_url, expected):
        assert PortainerConnection(server_url=server_url, token="t").base_url == expected

    def test_connection_is_immutable(self, connection):
        with pytest.raises(ValueError):
            connection.token = "other"


class TestRequest:
    async def test_api_key_header_and_url(self, make_client):
        backend = RecordingBackend({("GET", "/api/stacks"): httpx.Response(200, json=[])})

        result = await make_client(backend).request("GET", "/stacks")

        assert result == []
        request = backend.last_request
        assert request.headers[API_KEY_HEADER] == TEST_TOKEN
        assert str(request.url) == "https://portainer.example.com:9443/api/stacks"

    async def test_query_parameters(self, make_client):
        backend = RecordingBackend({("POST", "/api/stacks/1/start"): httpx.Response(200, json={})})

        await make_client(backend).request("POST", "/stacks/1/start", params={"endpointId": 3})

        assert backend.last_request.url.params["endpointId"] == "3"

    async def test_no_content_returns_none(self, make_client):
        backend = RecordingBackend({("DELETE", "/api/stacks/1"): httpx.Response(204)})

        assert await make_client(backend).request("DELETE", "/stacks/1") is None

    async def test_error_status_carries_portainer_message(self, make_client):
        backend = RecordingBackend(
            {
                ("GET", "/api/stacks"): httpx.Response(
                    500, json={"message": "Unable to retrieve stacks", "details": "disk full"}
                )
            }
        )

        with pytest.raises(BackendError) as exc_info:
            await make_client(backend).request("GET", "/stacks")

        assert exc_info.value.status_code == 500
        assert "returned 500" in str(exc_info.value)
        assert "Unable to retrieve stacks (disk full)" in str(exc_info.value)

    async def test_error_status_with_plain_body(self, make_client):
        backend = RecordingBackend(
            {("GET", "/api/stacks"): httpx.Response(403, text="Access denied")}
        )

        with pytest.raises(BackendError, match="Access denied"):
            await make_client(backend).request("GET", "/stacks")

    async def test_transport_failure(self, make_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend = RecordingBackend({("GET", "/api/stacks"): refuse})

        with pytest.raises(BackendError, match="GET /stacks failed: connection refused") as exc_info:
            await make_client(backend).request("GET", "/stacks")

        assert exc_info.value.status_code is None

    async def test_invalid_json(self, make_client):
        backend = RecordingBackend(
            {("GET", "/api/stacks"): httpx.Response(200, content=b"<html>proxy</html>")}
        )

        with pytest.raises(BackendError, match="invalid JSON"):
            await make_client(backend).request("GET", "/stacks")

    async def test_json_body_sent(self, make_client):
        backend = RecordingBackend(
            {("POST", "/api/stacks/create/standalone/string"): httpx.Response(200, json={"Id": 1})}
        )

        await make_client(backend).request(
            "POST", "/stacks/create/standalone/string", json={"name": "web"}
        )

        assert RecordingBackend.body(backend.last_request) == {"name": "web"}

    async def test_connection_settings_used_per_request(self, connection):
        client = PortainerClient(connection.model_copy(update={"skip_tls_verify": True}))

        http_client = client._build_client()
        try:
            assert http_client.headers[API_KEY_HEADER] == TEST_TOKEN
            assert str(http_client.base_url) == "https://portainer.example.com:9443/api/"
            assert http_client.timeout.read == 30.0
        finally:
            await http_client.aclose()
