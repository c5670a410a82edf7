"""Integration tests for the HTTP server and client."""
import json

import pytest
from fastapi.testclient import TestClient

from rpc_dispatch.client import ServiceClient
from rpc_dispatch.server import DIVIDE, ECHO, REVERSE, DivideRequest, app, build_service
from rpc_dispatch.utils.errors import RemoteServiceError


@pytest.fixture(scope="module")
def client():
    """Create a test client for the demo server."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def service_client(client):
    """Create an RPC client sending requests through the test client."""
    with ServiceClient("http://testserver/rpc", http_client=client) as c:
        yield c


def test_health_endpoint(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["methods"] == 3


class TestHttpTransport:
    """Test the RPC endpoint over HTTP."""

    def test_get_list(self, client):
        response = client.get("/rpc")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        methods = response.json()["methods"]
        assert [m["method"] for m in methods] == ["echo", "reverse", "divide"]

    def test_get_studio(self, client):
        response = client.get("/rpc?studio")
        assert response.status_code == 200
        assert response.headers["content-type"] == "text/html; charset=utf-8"
        assert "skir-studio-app" in response.text

    def test_get_invoke(self, client):
        response = client.get('/rpc?reverse::readable:%22abc%22')
        assert response.status_code == 200
        assert response.json() == "cba"

    def test_post_json(self, client):
        response = client.post(
            "/rpc",
            content=json.dumps({"method": "echo", "request": "hello"}),
            headers={"x-user": "Alice"},
        )
        assert response.status_code == 200
        assert response.json() == "Alice: hello"

    def test_post_bad_request(self, client):
        response = client.post("/rpc", content="not:valid")
        assert response.status_code == 400
        assert response.headers["content-type"] == "text/plain; charset=utf-8"
        assert response.text == "bad request: invalid request format"

    def test_post_body_not_utf8(self, client):
        response = client.post("/rpc", content=b"echo:::\xff\xfe")
        assert response.status_code == 400
        assert response.text == "bad request: request body is not valid UTF-8"

    def test_post_service_error(self, client):
        response = client.post(
            "/rpc",
            content=json.dumps({"method": "divide", "request": {"dividend": 1, "divisor": 0}}),
        )
        assert response.status_code == 400
        assert response.text == "Division by zero"


class TestServiceClient:
    """Test the RPC client against the demo server."""

    def test_invoke_remote(self, service_client):
        assert service_client.invoke_remote(REVERSE, "abc") == "cba"

    def test_invoke_remote_with_headers(self, service_client):
        result = service_client.invoke_remote(ECHO, "hi", headers={"x-user": "Carol"})
        assert result == "Carol: hi"

    def test_invoke_remote_model(self, service_client):
        result = service_client.invoke_remote(DIVIDE, DivideRequest(dividend=7, divisor=2))
        assert result.quotient == 3.5
        assert result.remainder == 1.0

    def test_invoke_remote_error(self, service_client):
        with pytest.raises(RemoteServiceError) as exc_info:
            service_client.invoke_remote(DIVIDE, DivideRequest(dividend=7, divisor=0))
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Division by zero"

    def test_list_methods(self, service_client):
        methods = service_client.list_methods()
        assert [m["number"] for m in methods] == [1, 2, 3]
        assert methods[2]["request"]["title"] == "DivideRequest"


class TestEnvironmentConfig:
    """Test building the service from environment variables."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RPC_KEEP_UNRECOGNIZED_VALUES", raising=False)
        monkeypatch.delenv("RPC_EXPOSE_ERROR_MESSAGES", raising=False)
        monkeypatch.delenv("RPC_STUDIO_APP_JS_URL", raising=False)
        service = build_service()

        assert service.options.keep_unrecognized_values is False
        assert "cdn.jsdelivr.net" in service.options.studio_app_js_url

    @pytest.mark.asyncio
    async def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("RPC_KEEP_UNRECOGNIZED_VALUES", "true")
        monkeypatch.setenv("RPC_STUDIO_APP_JS_URL", "https://example.com/studio.js")
        service = build_service()

        assert service.options.keep_unrecognized_values is True
        response = await service.handle_request("studio", {})
        assert "https://example.com/studio.js" in response.data
