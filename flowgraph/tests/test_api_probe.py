"""Tests for live API call testing against a mocked transport."""

import httpx
import pytest

from flowgraph.models.schema import ObjectSchema
from flowgraph.services.api_probe import ApiCallProbe, is_blocked_host


def _json_handler(payload, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return handler


class TestPreflight:
    """Requests that must fail before anything is sent."""

    def _probe(self):
        def handler(request):
            raise AssertionError("no request expected")

        return ApiCallProbe(transport=httpx.MockTransport(handler))

    def test_empty_url(self):
        result = self._probe().run({"url": "  "})
        assert result.success is False
        assert "URL is required" in result.error

    def test_unresolved_variables(self):
        result = self._probe().run(
            {
                "url": "https://api.example.com/users/{{ start.user_id }}",
                "headers": [{"key": "Authorization", "value": "Bearer {{ auth.token }}"}],
            },
            mock_values={"start": {}},
        )
        assert result.success is False
        assert "start.user_id" in result.error
        assert "auth.token" in result.error

    def test_invalid_url(self):
        result = self._probe().run({"url": "not a url"})
        assert result.success is False
        assert result.error.startswith("Invalid URL")

    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:8000/admin",
            "http://127.0.0.1/",
            "http://10.0.0.5/internal",
            "http://192.168.1.1/",
            "http://169.254.169.254/latest/meta-data/",
            "http://metadata.google.internal/computeMetadata/v1/",
            "http://[::1]/",
        ],
    )
    def test_internal_hosts_blocked(self, url):
        result = self._probe().run({"url": url})
        assert result.success is False
        assert "not allowed" in result.error


class TestIsBlockedHost:
    def test_public_hosts_allowed(self):
        assert is_blocked_host("api.example.com") is False
        assert is_blocked_host("8.8.8.8") is False

    def test_private_ranges_blocked(self):
        assert is_blocked_host("172.16.0.1") is True
        assert is_blocked_host("app.localhost") is True

    @pytest.mark.parametrize("host", ["127.1", "2130706433", "0x7f000001", "0177.0.0.1", "10.1"])
    def test_numeric_shorthand_addresses_blocked(self, host):
        assert is_blocked_host(host) is True

    def test_hex_looking_hostname_allowed(self):
        assert is_blocked_host("cafe.be") is False


class TestExecution:
    def test_successful_json_call(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"id": 7, "name": "Ada"})

        probe = ApiCallProbe(transport=httpx.MockTransport(handler))
        result = probe.run(
            {
                "url": "https://api.example.com/users/{{ start.user_id }}",
                "headers": [{"key": "Authorization", "value": "Bearer {{ start.token }}"}],
            },
            mock_values={"start": {"user_id": 7, "token": "abc"}},
        )

        assert result.success is True
        assert seen == {"url": "https://api.example.com/users/7", "auth": "Bearer abc"}
        assert result.status == 200
        assert result.body == {"id": 7, "name": "Ada"}
        assert result.request_url == "https://api.example.com/users/7"
        assert result.warning is None
        assert isinstance(result.output_schema, ObjectSchema)
        body_schema = result.output_schema.properties["body"]
        assert set(body_schema.properties) == {"id", "name"}

    def test_non_json_body_kept_as_text(self):
        def handler(request):
            return httpx.Response(200, text="plain text", headers={"content-type": "text/plain"})

        result = ApiCallProbe(transport=httpx.MockTransport(handler)).run(
            {"url": "https://api.example.com"}
        )
        assert result.body == "plain text"
        assert result.output_schema.properties["body"].kind == "string"

    def test_mutating_method_warns(self):
        probe = ApiCallProbe(transport=httpx.MockTransport(_json_handler({"ok": True}, 201)))
        result = probe.run({"url": "https://api.example.com/items", "method": "post"})
        assert result.success is True
        assert result.status == 201
        assert "POST" in result.warning

    def test_error_status_is_still_a_completed_call(self):
        probe = ApiCallProbe(transport=httpx.MockTransport(_json_handler({"error": "nope"}, 404)))
        result = probe.run({"url": "https://api.example.com/missing"})
        assert result.success is True
        assert result.status == 404
        assert result.status_text == "Not Found"

    def test_timeout_is_structured_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        probe = ApiCallProbe(transport=httpx.MockTransport(handler))
        result = probe.run({"url": "https://api.example.com/slow", "timeout": 1500})
        assert result.success is False
        assert result.error == "Request timed out after 1500ms"

    def test_network_error_is_structured_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        probe = ApiCallProbe(transport=httpx.MockTransport(handler))
        result = probe.run({"url": "https://api.example.com"})
        assert result.success is False
        assert result.error.startswith("Network error")

    def test_string_timeout_is_coerced(self):
        probe = ApiCallProbe(transport=httpx.MockTransport(_json_handler({"ok": True})))
        result = probe.run({"url": "https://api.example.com/x", "timeout": "5000"})
        assert result.success is True

    def test_bad_timeout_is_structured_failure(self):
        probe = ApiCallProbe(transport=httpx.MockTransport(_json_handler({"ok": True})))
        result = probe.run({"url": "https://api.example.com/x", "timeout": "soon"})
        assert result.success is False
        assert result.error.startswith("Invalid timeout")

    def test_unencodable_header_is_structured_failure(self):
        probe = ApiCallProbe(transport=httpx.MockTransport(_json_handler({"ok": True})))
        result = probe.run(
            {
                "url": "https://api.example.com/x",
                "headers": [{"key": "X-Name", "value": "café"}],
            }
        )
        assert result.success is False
        assert result.error.startswith("Request failed")
