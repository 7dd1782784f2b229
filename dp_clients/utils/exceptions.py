"""Exception hierarchy shared by every service client."""

from __future__ import annotations

import json
from typing import Any

import httpx

# Bodies echoed into error messages are cut to keep log lines readable.
MAX_BODY_IN_MESSAGE = 500


class DPClientError(Exception):
    """Base exception for all client errors.

    ``status_code`` is the HTTP status a calling service should surface and
    ``log_data`` holds the context needed to diagnose the failure.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        log_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.log_data = dict(log_data or {})


class EncodingFailed(DPClientError):
    """The request payload could not be serialized."""


class RequestFailed(DPClientError):
    """The request never produced a response (connection error, timeout)."""


class UpstreamError(DPClientError):
    """The upstream service answered with an unexpected status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str = "",
        log_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, log_data=log_data)
        self.body = body


class InvalidZebedeeResponse(UpstreamError):
    """Zebedee answered outside the 2xx/3xx range."""

    def __init__(self, status_code: int, path: str) -> None:
        super().__init__(
            f"invalid response from zebedee - should be 2.x.x or 3.x.x, got: {status_code}, path: {path}",
            status_code=status_code,
            log_data={"path": path},
        )
        self.path = path


class DecodeFailed(DPClientError):
    """The response body is not the JSON document that was expected."""

    def __init__(
        self,
        message: str,
        *,
        body: str = "",
        reason: str = "",
        log_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, log_data=log_data)
        self.body = body
        self.reason = reason


class GraphQLError(DPClientError):
    """A well-formed GraphQL response that reports an error."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[str] | None = None,
        log_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, log_data=log_data)
        self.errors = list(errors or [message])


def truncate_body(body: bytes | str, limit: int = MAX_BODY_IN_MESSAGE) -> str:
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def error_response(url: str, response: httpx.Response, service: str) -> UpstreamError:
    """Build an UpstreamError from a non-2xx response whose body has been read.

    A JSON ``{"message": ...}`` or ``{"errors": [...]}`` body is preferred over
    the raw text.
    """
    raw = response.text
    detail = raw
    try:
        payload = json.loads(raw) if raw else None
    except json.JSONDecodeError:
        payload = None
    if isinstance(payload, dict):
        if payload.get("message"):
            detail = str(payload["message"])
        elif payload.get("errors"):
            detail = ", ".join(str(e) for e in payload["errors"])

    return UpstreamError(
        f"error response from {service} ({response.status_code}): {truncate_body(detail)}",
        status_code=response.status_code,
        body=raw,
        log_data={"url": url},
    )
