"""
Tests for the proxy relay server and the upstream forwarder.
"""

import pytest
import requests
from unittest.mock import MagicMock

from server import create_app
from services import CompletionForwarder

ORIGIN = {"Origin": "http://localhost:3000"}


class FakeForwarder:
    model = "test-model"

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def forward(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def forwarder():
    return FakeForwarder(result=({"choices": [{"message": {"content": "Use SPF daily."}}]}, 200))


@pytest.fixture
def client(forwarder):
    app = create_app(forwarder)
    app.config["TESTING"] = True
    return app.test_client()


class TestRelayValidation:
    def test_preflight(self, client):
        resp = client.options("/", headers={
            **ORIGIN,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        })
        assert resp.status_code == 200
        assert resp.data == b""
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]

    @pytest.mark.parametrize("method", ["get", "put", "delete", "patch"])
    def test_non_post_rejected(self, client, method, forwarder):
        resp = getattr(client, method)("/", headers=ORIGIN)
        assert resp.status_code == 405
        assert resp.get_json() == {"error": "Method not allowed"}
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert forwarder.calls == []

    def test_unparsable_body(self, client, forwarder):
        resp = client.post("/", data="{not json", content_type="application/json", headers=ORIGIN)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid JSON body"}
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert forwarder.calls == []

    @pytest.mark.parametrize("body", [{}, {"messages": "hi"}, {"messages": None}, {"messages": {"role": "user"}}, [1, 2]])
    def test_missing_or_non_array_messages(self, client, body, forwarder):
        resp = client.post("/", json=body, headers=ORIGIN)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Missing messages array"}
        assert forwarder.calls == []

    def test_body_without_json_content_type_is_still_parsed(self, client, forwarder):
        resp = client.post("/", data='{"messages": []}', content_type="text/plain", headers=ORIGIN)
        assert resp.status_code == 200
        assert forwarder.calls == [[]]


class TestRelayForwarding:
    def test_success_relays_upstream_json(self, client, forwarder):
        messages = [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]
        resp = client.post("/", json={"messages": messages}, headers=ORIGIN)

        assert resp.status_code == 200
        assert resp.get_json() == {"choices": [{"message": {"content": "Use SPF daily."}}]}
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        # relay injects nothing
        assert forwarder.calls == [messages]

    def test_upstream_error_relayed_with_500(self):
        upstream_error = {"error": {"message": "Incorrect API key provided", "type": "invalid_request_error"}}
        client = create_app(FakeForwarder(result=(upstream_error, 500))).test_client()

        resp = client.post("/", json={"messages": []}, headers=ORIGIN)

        assert resp.status_code == 500
        assert resp.get_json() == upstream_error

    def test_transport_failure(self):
        error = requests.exceptions.ConnectionError("connection refused")
        client = create_app(FakeForwarder(error=error)).test_client()

        resp = client.post("/", json={"messages": []}, headers=ORIGIN)

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "connection refused"}
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_transport_failure_without_message(self):
        client = create_app(FakeForwarder(error=requests.exceptions.Timeout())).test_client()
        resp = client.post("/", json={"messages": []})
        assert resp.get_json() == {"error": "Request failed"}

    def test_wildcard_origin_for_any_caller(self, client):
        resp = client.post("/", json={"messages": []}, headers={"Origin": "http://other.example"})
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "Origin" not in resp.headers.get("Vary", "")

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"
        assert resp.get_json()["model"] == "test-model"


class TestCompletionForwarder:
    def _forwarder(self, status_code, payload):
        session = MagicMock()
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.json.return_value = payload
        session.post.return_value = response
        return CompletionForwarder(
            api_key="sk-test-secret-123456",
            api_url="https://example.test/v1/chat/completions",
            model="gpt-4o",
            timeout=5,
            session=session,
        ), session

    def test_forwards_with_credential_and_model(self):
        forwarder, session = self._forwarder(200, {"choices": []})
        messages = [{"role": "user", "content": "hi"}]

        data, status = forwarder.forward(messages)

        assert (data, status) == ({"choices": []}, 200)
        _, kwargs = session.post.call_args
        assert session.post.call_args[0][0] == "https://example.test/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test-secret-123456"
        assert kwargs["json"] == {"model": "gpt-4o", "messages": messages}
        assert kwargs["timeout"] == 5

    def test_upstream_failure_maps_to_500(self):
        forwarder, _ = self._forwarder(401, {"error": {"message": "bad key"}})
        data, status = forwarder.forward([])
        assert status == 500
        assert data == {"error": {"message": "bad key"}}

    def test_null_usage_is_relayed_unchanged(self):
        upstream = {"choices": [{"message": {"content": "ok"}}], "usage": None}
        forwarder, _ = self._forwarder(200, upstream)
        assert forwarder.forward([]) == (upstream, 200)

        client = create_app(forwarder).test_client()
        resp = client.post("/", json={"messages": []})
        assert resp.status_code == 200
        assert resp.get_json() == upstream

    def test_non_json_upstream_raises_value_error(self):
        forwarder, session = self._forwarder(502, None)
        session.post.return_value.json.side_effect = ValueError("Expecting value")
        with pytest.raises(ValueError):
            forwarder.forward([])
