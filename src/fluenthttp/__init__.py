# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fluenthttp package entrypoint.

This package provides a fluent, deferred-configuration request builder on top of
httpx. Builders accumulate route, query, header, cookie, content and option
configuration and materialize it into a request only when it is sent. The
transport is abstracted behind an injectable protocol and is never mutated by
per-request configuration.
"""

from . import responses
from .builder import DeferredConfigurator, RequestBuilder
from .client import FluentHttpClient, using_base, using_route
from .codecs import JsonCodec, XmlCodec
from .config import FluentSettings, get_default_settings, load_settings, set_default_settings
from .errors import (
    ArgumentError,
    ArgumentNullError,
    ArgumentOutOfRangeError,
    ErrorCategory,
    FluentHttpError,
    RequestBuildError,
    RequestCancelledError,
    RequestTimeoutError,
    categorize_exception,
)
from .http import (
    AuthenticationHeaderValue,
    CacheControl,
    CompletionOption,
    HttpRequestMessage,
    HttpTransport,
    HttpVersion,
    HttpxTransport,
    OptionKey,
    QueryParameterCollection,
    RequestHeaders,
    RequestOptions,
    StubTransport,
    VersionPolicy,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "ArgumentError",
    "ArgumentNullError",
    "ArgumentOutOfRangeError",
    "AuthenticationHeaderValue",
    "CacheControl",
    "CompletionOption",
    "DeferredConfigurator",
    "ErrorCategory",
    "FluentHttpClient",
    "FluentHttpError",
    "FluentSettings",
    "HttpRequestMessage",
    "HttpTransport",
    "HttpVersion",
    "HttpxTransport",
    "JsonCodec",
    "OptionKey",
    "QueryParameterCollection",
    "RequestBuildError",
    "RequestBuilder",
    "RequestCancelledError",
    "RequestHeaders",
    "RequestOptions",
    "RequestTimeoutError",
    "StubTransport",
    "VersionPolicy",
    "XmlCodec",
    "categorize_exception",
    "get_default_settings",
    "load_settings",
    "responses",
    "set_default_settings",
    "setup_logging",
    "using_base",
    "using_route",
    "__version__",
]
