# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .adapters import StubTransport
from .cancellation import run_with_cancellation
from .content import (
    ByteContent,
    FormUrlEncodedContent,
    HttpContent,
    MultipartContent,
    StreamContent,
    StringContent,
    as_content,
)
from .headers import (
    RESERVED_HEADERS,
    AddHeader,
    AuthenticationHeaderValue,
    CacheControl,
    ConfigureHeaders,
    RequestHeaders,
    SetHeader,
)
from .httpx_transport import HttpxTransport
from .models import (
    HTTP_1_0,
    HTTP_1_1,
    HTTP_2,
    HTTP_3,
    OPTIONS_EXTENSION,
    CompletionOption,
    ConfigureOptions,
    HttpRequestMessage,
    HttpVersion,
    OptionKey,
    RequestOptions,
    SetOption,
    VersionPolicy,
)
from .query import QueryParameterCollection
from .transport import HttpTransport, adopt_transport, create_default_transport
from .url import build_request_uri

__all__ = [
    "HTTP_1_0",
    "HTTP_1_1",
    "HTTP_2",
    "HTTP_3",
    "OPTIONS_EXTENSION",
    "RESERVED_HEADERS",
    "AddHeader",
    "AuthenticationHeaderValue",
    "ByteContent",
    "CacheControl",
    "CompletionOption",
    "ConfigureHeaders",
    "ConfigureOptions",
    "FormUrlEncodedContent",
    "HttpContent",
    "HttpRequestMessage",
    "HttpTransport",
    "HttpVersion",
    "HttpxTransport",
    "MultipartContent",
    "OptionKey",
    "QueryParameterCollection",
    "RequestHeaders",
    "RequestOptions",
    "SetHeader",
    "SetOption",
    "StreamContent",
    "StringContent",
    "StubTransport",
    "VersionPolicy",
    "adopt_transport",
    "as_content",
    "build_request_uri",
    "create_default_transport",
    "run_with_cancellation",
]
