# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from enum import Enum
from typing import Any


class FluentHttpError(Exception):
    """Base class for errors raised by fluenthttp itself."""


class ArgumentError(FluentHttpError, ValueError):
    """An argument failed validation; ``param_name`` names the offending parameter."""

    def __init__(self, message: str, param_name: str | None = None):
        self.message = message
        self.param_name = param_name
        text = message if param_name is None else f"{message} (Parameter '{param_name}')"
        super().__init__(text)


class ArgumentNullError(ArgumentError, TypeError):
    def __init__(self, param_name: str, message: str = "Value cannot be None."):
        super().__init__(message, param_name)


class ArgumentOutOfRangeError(ArgumentError):
    pass


class RequestBuildError(ArgumentError):
    """The builder state cannot be materialized into a request."""


class RequestCancelledError(FluentHttpError):
    """The in-flight request was cancelled by the caller-supplied signal."""

    reason = "cancelled"


class RequestTimeoutError(RequestCancelledError, TimeoutError):
    """The per-request timeout elapsed before the transport completed."""

    reason = "timeout"

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"The request was cancelled after the configured timeout of {timeout:g} seconds.")


def guard_not_none(value: Any, param_name: str) -> None:
    if value is None:
        raise ArgumentNullError(param_name)


def guard_not_blank(value: str | None, param_name: str, message: str) -> str:
    """Reject ``None``, empty and whitespace-only strings; return the value unchanged."""
    if value is None:
        raise ArgumentNullError(param_name, message)
    if not isinstance(value, str) or not value.strip():
        raise ArgumentError(message, param_name)
    return value


class ErrorCategory(str, Enum):
    CANCELLED = "CANCELLED"
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


def categorize_exception(exc: BaseException | None) -> ErrorCategory:
    """
    Map fluenthttp/httpx/socket exceptions to ErrorCategory.

    Classification is advisory; callers still receive the original exception.
    """
    import socket
    import ssl as ssl_module

    import httpx

    if exc is None:
        return ErrorCategory.NONE

    if isinstance(exc, RequestTimeoutError) or isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, RequestCancelledError):
        return ErrorCategory.CANCELLED

    if isinstance(exc, ArgumentError):
        return ErrorCategory.INVALID_REQUEST

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.LocalProtocolError)):
        return ErrorCategory.PROTOCOL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.CANCELLED: "Request cancelled by caller",
        ErrorCategory.TIMEOUT: "Request timed out",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.PROTOCOL_ERROR: "HTTP protocol violation",
        ErrorCategory.INVALID_REQUEST: "Invalid request configuration",
        ErrorCategory.UNKNOWN_ERROR: "Network error during request",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "ArgumentError",
    "ArgumentNullError",
    "ArgumentOutOfRangeError",
    "ErrorCategory",
    "FluentHttpError",
    "RequestBuildError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "categorize_exception",
    "error_category_to_reason",
    "guard_not_blank",
    "guard_not_none",
]
