"""HTTP client abstraction for provider REST APIs.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Canned responses plus a call log, for tests
"""

from __future__ import annotations

import http.client
import json
import ssl
import threading
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from shiplog.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    "RecordedCall",
    "request_json",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    url: str
    status: int
    body: bytes

    def json(self) -> Result[object, HttpError]:
        if not self.body:
            return Ok(None)
        try:
            return Ok(json.loads(self.body.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=self.url, status=0, message=f"JSON parse error: {e}"))


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Providers only talk to the network through this, so tests can assert
    exactly which calls a release run issued.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: object | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send a request; non-2xx statuses are returned as Err."""
        ...


def request_json(
    client: HttpClient,
    method: str,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    json_body: object | None = None,
) -> Result[object, HttpError]:
    """Send a request and decode the JSON response body."""
    result = client.request(method, url, headers=headers, json_body=json_body)
    if isinstance(result, Err):
        return result
    return result.value.json()


class RealHttpClient:
    """HTTP client using urllib.

    Handles HTTPS with system certificates, JSON request bodies and raw
    byte uploads. No retries: a failed call is returned to the caller.
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = "shiplog") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: object | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        payload = data
        if json_body is not None:
            payload = json.dumps(json_body).encode("utf-8")
            all_headers.setdefault("Content-Type", "application/json")

        try:
            req = urllib.request.Request(url, data=payload, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(HttpResponse(url=url, status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except http.client.HTTPException as e:
            return Err(HttpError(url=url, status=0, message=f"{type(e).__name__}: {e}"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


@dataclass(frozen=True, slots=True)
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    json_body: object | None
    data: bytes | None


def _empty_calls() -> list[RecordedCall]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_response("GET", "https://api.github.com/user", {"login": "octo"})
        result = request_json(client, "GET", "https://api.github.com/user")
        assert result == Ok({"login": "octo"})

    Unknown (method, url) pairs answer 404.
    """

    calls: list[RecordedCall] = field(default_factory=_empty_calls)
    _responses: dict[tuple[str, str], object] = field(
        default_factory=dict, init=False, repr=False
    )
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def set_response(self, method: str, url: str, response: object) -> None:
        """Register a response: JSON-able object, raw bytes, or HttpError."""
        self._responses[(method.upper(), url)] = response

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: object | None = None,
        data: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        with self._lock:
            self.calls.append(
                RecordedCall(
                    method=method.upper(),
                    url=url,
                    headers=dict(headers or {}),
                    json_body=json_body,
                    data=data,
                )
            )

        key = (method.upper(), url)
        if key not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        if isinstance(response, bytes):
            return Ok(HttpResponse(url=url, status=200, body=response))
        return Ok(HttpResponse(url=url, status=200, body=json.dumps(response).encode("utf-8")))

    def calls_for(self, method: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.method == method.upper()]
