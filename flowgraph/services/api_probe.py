"""Live test of an API call node.

Resolves template variables from mock values, refuses to call hosts on
internal networks, issues one request with httpx and infers a schema
from the response. Failures of the remote endpoint come back as
``ApiTestResult(success=False, ...)`` rather than exceptions.
"""

import ipaddress
import json
import logging
import re
import socket
import time
from typing import Any
from urllib.parse import urlsplit

import httpx

from flowgraph.models.validation import ApiTestResult
from flowgraph.schema.inference import infer_schema
from flowgraph.utils.templates import resolve_template_variables

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

_BLOCKED_HOSTNAMES = frozenset(
    {
        "localhost",
        "metadata",
        "metadata.google.internal",
        "metadata.azure.com",
        "instance-data",
    }
)
_NUMERIC_HOST = re.compile(r"^[0-9a-fx.]+$")


def is_blocked_host(host: str) -> bool:
    """Whether host points at loopback, private, link-local or metadata targets.

    Only literal addresses and well-known names are checked; hostnames
    are not resolved.
    """
    host = host.strip("[]").lower().rstrip(".")
    if host in _BLOCKED_HOSTNAMES or host.endswith(".localhost") or host.endswith(".internal"):
        return True
    if _NUMERIC_HOST.match(host):
        # shorthand, integer, hex and octal IPv4 forms the resolver accepts
        try:
            host = socket.inet_ntoa(socket.inet_aton(host))
        except OSError:
            pass
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_unspecified
        or address.is_multicast
    )


def _resolve_headers(
    raw_headers: Any,
    mock_values: dict[str, Any] | None,
) -> tuple[dict[str, str], list[str]]:
    headers: dict[str, str] = {}
    unresolved: list[str] = []
    for entry in raw_headers or []:
        if not isinstance(entry, dict):
            continue
        key, value = entry.get("key"), entry.get("value")
        if not key or not value:
            continue
        resolved, missing = resolve_template_variables(str(value), mock_values)
        headers[key] = resolved
        unresolved.extend(missing)
    return headers, unresolved


def _parse_body(response: httpx.Response) -> Any:
    text = response.text
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type and text:
        try:
            return json.loads(text)
        except ValueError:
            return text
    return text


class ApiCallProbe:
    """Executes API call node parameters against the real endpoint.

    Args:
        transport: optional httpx transport, e.g. httpx.MockTransport in tests
        default_timeout_ms: used when the node has no ``timeout`` parameter
        allow_private_hosts: skip the internal network check
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        allow_private_hosts: bool = False,
    ) -> None:
        self.transport = transport
        self.default_timeout_ms = default_timeout_ms
        self.allow_private_hosts = allow_private_hosts

    def run(
        self,
        parameters: dict[str, Any],
        mock_values: dict[str, Any] | None = None,
    ) -> ApiTestResult:
        method = str(parameters.get("method") or "GET").upper()
        raw_url = str(parameters.get("url") or "")
        raw_timeout = parameters.get("timeout") or self.default_timeout_ms

        if not raw_url.strip():
            return ApiTestResult(
                success=False,
                error="URL is required. Configure the URL in the node settings.",
            )
        try:
            timeout_ms = int(raw_timeout)
        except (TypeError, ValueError):
            return ApiTestResult(success=False, error=f"Invalid timeout: {raw_timeout!r}")
        if timeout_ms <= 0:
            return ApiTestResult(success=False, error=f"Invalid timeout: {raw_timeout!r}")

        url, unresolved = resolve_template_variables(raw_url.strip(), mock_values)
        headers, header_unresolved = _resolve_headers(parameters.get("headers"), mock_values)
        unresolved.extend(header_unresolved)
        if unresolved:
            names = ", ".join(dict.fromkeys(unresolved))
            return ApiTestResult(
                success=False,
                error=(
                    f"Unresolved template variables: {names}. "
                    "Provide mock values or configure upstream nodes."
                ),
            )

        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            return ApiTestResult(success=False, error=f"Invalid URL: {url}", request_url=url)
        if not self.allow_private_hosts and is_blocked_host(parts.hostname):
            logger.warning("Refused API test request to internal host %s", parts.hostname)
            return ApiTestResult(
                success=False,
                error=f"Requests to internal or private hosts are not allowed: {parts.hostname}",
                request_url=url,
            )

        warning = None
        if method in MUTATING_METHODS:
            warning = f"This is a {method} request and may modify data on the external server."

        start = time.perf_counter()
        try:
            with httpx.Client(timeout=timeout_ms / 1000, transport=self.transport) as client:
                response = client.request(method, url, headers=headers)
        except httpx.TimeoutException:
            return ApiTestResult(
                success=False,
                error=f"Request timed out after {timeout_ms}ms",
                execution_time_ms=_elapsed_ms(start),
                warning=warning,
                request_url=url,
            )
        except httpx.RequestError as exc:
            logger.info("API test request to %s failed: %s", url, exc)
            return ApiTestResult(
                success=False,
                error=f"Network error: {exc}",
                execution_time_ms=_elapsed_ms(start),
                warning=warning,
                request_url=url,
            )
        except Exception as exc:
            # malformed request data, e.g. header values httpx cannot encode
            logger.warning("API test request to %s could not be sent: %r", url, exc)
            return ApiTestResult(
                success=False,
                error=f"Request failed: {exc}",
                execution_time_ms=_elapsed_ms(start),
                warning=warning,
                request_url=url,
            )

        response_headers = dict(response.headers.items())
        body = _parse_body(response)
        # status and status text are fixed fields of every API call output
        output_schema = infer_schema({"headers": response_headers, "body": body})

        return ApiTestResult(
            success=True,
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=response_headers,
            body=body,
            output_schema=output_schema,
            execution_time_ms=_elapsed_ms(start),
            warning=warning,
            request_url=url,
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
