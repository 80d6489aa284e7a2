# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fluent, deferred-configuration HTTP request builder.

A :class:`RequestBuilder` accumulates a route, query parameters, headers,
cookies, content, options, a protocol version and a per-request timeout. Nothing
touches the network until :meth:`RequestBuilder.send` (or one of the verb
shortcuts) materializes the state into an :class:`HttpRequestMessage` and hands
it to the transport.

Materialization runs on a working copy of the builder, so a builder can be sent
any number of times and each send observes the state as it is at that moment.
"""

from __future__ import annotations

import asyncio
import base64
import copy
import logging
import math
from collections.abc import AsyncIterable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import httpx

from .codecs import JsonCodec, XmlCodec
from .config import FluentSettings, get_default_settings
from .errors import (
    ArgumentError,
    ArgumentNullError,
    ArgumentOutOfRangeError,
    guard_not_blank,
    guard_not_none,
)
from .http.cancellation import run_with_cancellation
from .http.content import (
    FormUrlEncodedContent,
    HttpContent,
    MultipartContent,
    StreamContent,
    StringContent,
    as_content,
)
from .http.headers import (
    COOKIE_HEADER,
    AddHeader,
    AuthenticationHeaderValue,
    CacheControl,
    ConfigureHeaders,
    HeaderConfigurator,
    RequestHeaders,
    SetHeader,
    coerce_header_values,
    ensure_not_reserved,
    iter_header_pairs,
    validate_header,
)
from .http.models import (
    CompletionOption,
    ConfigureOptions,
    HttpRequestMessage,
    HttpVersion,
    OptionConfigurator,
    OptionKey,
    RequestOptions,
    SetOption,
    VersionPolicy,
)
from .http.query import QueryParameterCollection
from .http.transport import HttpTransport, adopt_transport
from .http.url import build_request_uri, ensure_valid_base_address, normalize_route

logger = logging.getLogger(__name__)

_TOKEN_CHARS = frozenset("!#$%&'*+-.^_`|~0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz")


@dataclass(frozen=True)
class DeferredConfigurator:
    """An action run against the working copy at send time, optionally gated by a predicate."""

    action: Callable[[RequestBuilder], Any] = field(compare=False)
    predicate: Callable[[], bool] | None = field(default=None, compare=False)

    def apply(self, builder: RequestBuilder) -> None:
        if self.predicate is None or self.predicate():
            self.action(builder)


def _normalize_method(method: str) -> str:
    if method is None:
        raise ArgumentNullError("method")
    if not isinstance(method, str) or not method.strip():
        raise ArgumentError("HTTP method cannot be empty.", "method")
    method = method.strip().upper()
    if any(ch not in _TOKEN_CHARS for ch in method):
        raise ArgumentError(f"'{method}' is not a valid HTTP method.", "method")
    return method


def _timeout_seconds(timeout: float | timedelta) -> float:
    if timeout is None:
        raise ArgumentNullError("timeout")
    if isinstance(timeout, bool):
        raise ArgumentError("Timeout must be a number of seconds or a timedelta.", "timeout")
    if isinstance(timeout, timedelta):
        seconds = timeout.total_seconds()
    elif isinstance(timeout, (int, float)):
        seconds = float(timeout)
    else:
        raise ArgumentError("Timeout must be a number of seconds or a timedelta.", "timeout")
    if not math.isfinite(seconds) or seconds <= 0:
        raise ArgumentOutOfRangeError("Timeout must be a positive value.", "timeout")
    return seconds


class RequestBuilder:
    """
    Accumulates request configuration and sends it through an :class:`HttpTransport`.

    Every ``with_*``/``using_*``/``configure_*`` method mutates the builder and
    returns it, so calls chain. Header helpers other than ``with_header`` and
    ``with_headers`` are recorded as configurators and only validated when the
    request is built.

    A builder is not safe for concurrent sends. Sequential sends are fine and
    never accumulate state from previous sends.
    """

    def __init__(
        self,
        transport: HttpTransport | httpx.AsyncClient,
        route: str | httpx.URL | None = None,
        *,
        settings: FluentSettings | None = None,
    ):
        self._transport = adopt_transport(transport)
        self._base_address = ensure_valid_base_address(self._transport.base_address, "transport")
        self.settings = settings or get_default_settings()
        self._route: str | None = None
        if route is not None:
            self.route = route

        self.query_parameters = QueryParameterCollection()
        self.content: HttpContent | None = None
        self.cookies: dict[str, str] = {}
        self._header_values: list[tuple[str, str]] = []
        self.header_configurators: list[HeaderConfigurator] = []
        self.option_configurators: list[OptionConfigurator] = []
        self.deferred_configurators: list[DeferredConfigurator] = []
        self.buffer_request_content = False
        self.version = HttpVersion.parse(self.settings.http_version)
        self.version_policy = VersionPolicy.REQUEST_VERSION_OR_LOWER
        self.timeout: float | None = None

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def base_address(self) -> httpx.URL | None:
        return self._base_address

    @property
    def route(self) -> str | None:
        return self._route

    @route.setter
    def route(self, value: str | httpx.URL | None) -> None:
        self._route = None if value is None else normalize_route(value, "route")

    @property
    def headers(self) -> httpx.Headers:
        """Read-only view of the string headers added with ``with_header``/``with_headers``."""
        return httpx.Headers(self._header_values)

    # Routing and query

    def with_route(self, route: str | httpx.URL) -> RequestBuilder:
        if route is None:
            raise ArgumentNullError("route")
        self.route = route
        return self

    def with_query_parameter(self, key: str, value: Any = None) -> RequestBuilder:
        """Append ``key=value``; ``None`` renders a bare flag such as ``?verbose``."""
        self.query_parameters.add(key, value)
        return self

    def with_query_parameter_values(self, key: str, values: Iterable[Any]) -> RequestBuilder:
        self.query_parameters.add_range(key, values)
        return self

    def with_query_parameter_if_not_none(self, key: str, value: Any) -> RequestBuilder:
        self.query_parameters.add_if_not_none(key, value)
        return self

    def with_query_parameters(
        self, parameters: Mapping[str, Any] | Iterable[tuple[str, Any]]
    ) -> RequestBuilder:
        """Append every pair; iterable values other than strings add one occurrence per element."""
        if parameters is None:
            raise ArgumentNullError("parameters")
        pairs = parameters.items() if isinstance(parameters, Mapping) else parameters
        for key, value in pairs:
            if isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray)):
                self.query_parameters.add_range(key, value)
            else:
                self.query_parameters.add(key, value)
        return self

    # Headers

    def with_header(self, key: str, value: str | Iterable[str]) -> RequestBuilder:
        """Add a string header, validated now. Host, Content-Length and Transfer-Encoding are refused."""
        if key is None:
            raise ArgumentNullError("key")
        if value is None:
            raise ArgumentNullError("value")
        ensure_not_reserved(key, "key")
        values = coerce_header_values(value, "value")
        validate_header(key, values, "key", "value")
        self._header_values.extend((key, item) for item in values)
        return self

    def with_headers(
        self,
        headers: Mapping[str, str | Iterable[str]] | Iterable[tuple[str, str | Iterable[str]]],
    ) -> RequestBuilder:
        """Add several string headers; nothing is stored unless every entry is valid."""
        if headers is None:
            raise ArgumentNullError("headers")
        staged: list[tuple[str, str]] = []
        for key, value in iter_header_pairs(headers):
            if key is None:
                raise ArgumentError("Header names cannot be None.", "headers")
            if value is None:
                raise ArgumentError(f"Header values for '{key}' cannot be None.", "headers")
            ensure_not_reserved(key, "headers")
            values = coerce_header_values(value, "headers")
            validate_header(key, values, "headers", "headers")
            staged.extend((key, item) for item in values)
        self._header_values.extend(staged)
        return self

    def configure_headers(self, action: Callable[[RequestHeaders], None]) -> RequestBuilder:
        """Run ``action`` against the outgoing headers at build time; reserved names are allowed here."""
        guard_not_none(action, "action")
        self.header_configurators.append(ConfigureHeaders(action))
        return self

    def with_authentication(self, scheme: str, parameter: str) -> RequestBuilder:
        guard_not_none(scheme, "scheme")
        guard_not_none(parameter, "parameter")
        value = AuthenticationHeaderValue(scheme, parameter)
        self.header_configurators.append(SetHeader("Authorization", str(value)))
        return self

    def with_basic_authentication(self, username_or_token: str, password: str | None = None) -> RequestBuilder:
        """``Basic`` credentials; with a password the pair is base64 encoded, otherwise the token is sent as-is."""
        guard_not_none(username_or_token, "username_or_token")
        if password is None:
            return self.with_authentication("Basic", username_or_token)
        raw = f"{username_or_token}:{password}".encode()
        return self.with_authentication("Basic", base64.b64encode(raw).decode("ascii"))

    def with_oauth_bearer_token(self, token: str) -> RequestBuilder:
        guard_not_none(token, "token")
        return self.with_authentication("Bearer", token)

    def with_accept(self, *media_types: str) -> RequestBuilder:
        if not media_types:
            raise ArgumentError("At least one media type is required.", "media_types")
        for media_type in media_types:
            guard_not_blank(media_type, "media_types", "Media types cannot be empty.")
        self.header_configurators.append(AddHeader("Accept", tuple(media_types)))
        return self

    def with_cache_control(self, cache_control: CacheControl | str) -> RequestBuilder:
        guard_not_none(cache_control, "cache_control")
        self.header_configurators.append(SetHeader("Cache-Control", str(cache_control)))
        return self

    # Cookies

    def with_cookie(self, name: str, value: Any) -> RequestBuilder:
        """Set a cookie; a later call with the same name replaces the value. ``None`` becomes ``""``."""
        guard_not_blank(name, "name", "Cookie name cannot be null or empty.")
        self.cookies[name] = "" if value is None else str(value)
        return self

    def with_cookies(self, cookies: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> RequestBuilder:
        if cookies is None:
            raise ArgumentNullError("cookies")
        pairs = list(cookies.items() if isinstance(cookies, Mapping) else cookies)
        for name, _ in pairs:
            guard_not_blank(name, "cookies", "Cookie name cannot be null or empty.")
        for name, value in pairs:
            self.cookies[name] = "" if value is None else str(value)
        return self

    # Content

    def with_content(
        self,
        content: HttpContent | bytes | str,
        media_type: str | None = None,
        encoding: str | None = None,
    ) -> RequestBuilder:
        guard_not_none(content, "content")
        self.content = as_content(content, media_type, encoding)
        return self

    def with_stream_content(
        self, stream: Iterable[bytes] | AsyncIterable[bytes], media_type: str | None = None
    ) -> RequestBuilder:
        self.content = StreamContent(stream, media_type)
        return self

    def with_form_content(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> RequestBuilder:
        self.content = FormUrlEncodedContent(data)
        return self

    def with_multipart_content(
        self,
        files: Mapping[str, Any] | Iterable[tuple[str, Any]],
        fields: Mapping[str, Any] | None = None,
    ) -> RequestBuilder:
        self.content = MultipartContent(files, fields)
        return self

    def with_json_content(
        self,
        value: Any,
        *,
        codec: JsonCodec | None = None,
        content_type: str | None = None,
        encoding: str = "utf-8",
    ) -> RequestBuilder:
        """JSON body; a ``str`` is treated as already-serialized JSON."""
        guard_not_none(value, "value")
        codec = codec or JsonCodec.from_settings(self.settings)
        text = value if isinstance(value, str) else codec.serialize(value)
        self.content = StringContent(text, encoding, content_type or codec.content_type)
        return self

    def with_xml_content(
        self,
        value: Any,
        *,
        codec: XmlCodec | None = None,
        root: str | None = None,
        content_type: str | None = None,
    ) -> RequestBuilder:
        """XML body; a ``str`` is treated as an already-serialized document."""
        guard_not_none(value, "value")
        codec = codec or XmlCodec.from_settings(self.settings)
        text = value if isinstance(value, str) else codec.serialize(value, root)
        self.content = StringContent(text, codec.encoding, content_type or codec.content_type)
        return self

    def with_buffered_content(self, enabled: bool = True) -> RequestBuilder:
        """Load streamed content into memory before sending."""
        self.buffer_request_content = enabled
        return self

    # Options, version and timeout

    def with_option(self, key: str | OptionKey[Any], value: Any) -> RequestBuilder:
        guard_not_none(key, "key")
        self.option_configurators.append(SetOption(key, value))
        return self

    def configure_options(self, action: Callable[[RequestOptions], None]) -> RequestBuilder:
        guard_not_none(action, "action")
        self.option_configurators.append(ConfigureOptions(action))
        return self

    def using_version(
        self,
        version: str | tuple[int, int] | HttpVersion,
        policy: VersionPolicy | str | None = None,
    ) -> RequestBuilder:
        self.version = HttpVersion.parse(version)
        if policy is not None:
            self.using_version_policy(policy)
        return self

    def using_version_policy(self, policy: VersionPolicy | str) -> RequestBuilder:
        if policy is None:
            raise ArgumentNullError("policy")
        try:
            self.version_policy = VersionPolicy(policy)
        except ValueError as exc:
            raise ArgumentError(f"Unknown version policy {policy!r}.", "policy") from exc
        return self

    def with_timeout(self, timeout: float | timedelta) -> RequestBuilder:
        """Per-request timeout in seconds (or a timedelta); the transport's own timeouts are untouched."""
        self.timeout = _timeout_seconds(timeout)
        return self

    # Conditional configuration

    def when(
        self,
        condition: bool | Callable[[], bool],
        configure: Callable[[RequestBuilder], Any],
    ) -> RequestBuilder:
        """
        Apply ``configure`` conditionally.

        A plain boolean is evaluated now. A callable is evaluated when the request
        is built, and ``configure`` then runs against the working copy.
        """
        if condition is None:
            raise ArgumentNullError("condition")
        guard_not_none(configure, "configure")
        if callable(condition):
            self.deferred_configurators.append(DeferredConfigurator(configure, condition))
        elif condition:
            configure(self)
        return self

    def configure_deferred(self, action: Callable[[RequestBuilder], Any]) -> RequestBuilder:
        """Run ``action`` against the working copy each time a request is built."""
        guard_not_none(action, "action")
        self.deferred_configurators.append(DeferredConfigurator(action))
        return self

    # Materialization

    def _working_copy(self) -> RequestBuilder:
        clone = copy.copy(self)
        clone.query_parameters = self.query_parameters.copy()
        clone.cookies = dict(self.cookies)
        clone._header_values = list(self._header_values)
        clone.header_configurators = list(self.header_configurators)
        clone.option_configurators = list(self.option_configurators)
        clone.deferred_configurators = list(self.deferred_configurators)
        return clone

    def _apply_configuration(self, request: HttpRequestMessage) -> None:
        if isinstance(self.content, MultipartContent):
            request.headers.expect_continue = False

        for name, value in self._header_values:
            request.headers.add(name, value)
        for configurator in self.header_configurators:
            configurator.apply(request.headers)

        if self.cookies:
            cookie = "; ".join(f"{name}={value}" for name, value in self.cookies.items())
            request.headers.add(COOKIE_HEADER, cookie)

        for configurator in self.option_configurators:
            configurator.apply(request.options)

    async def _materialize(self, method: str) -> tuple[HttpRequestMessage, RequestBuilder]:
        method = _normalize_method(method)
        state = self._working_copy()

        # Configurators registered while these run are not part of this build.
        for configurator in tuple(state.deferred_configurators):
            configurator.apply(state)

        if state.buffer_request_content and state.content is not None:
            await state.content.load_into_buffer()

        url = build_request_uri(state.base_address, state.route, state.query_parameters.serialize())
        request = HttpRequestMessage(
            method=method,
            url=url,
            content=state.content,
            version=state.version,
            version_policy=state.version_policy,
        )
        state._apply_configuration(request)
        logger.debug("Built %s %s (HTTP/%s)", request.method, request.url, request.version)
        return request, state

    async def build_request(self, method: str = "GET") -> HttpRequestMessage:
        """Materialize the current state into a request message without sending it."""
        request, _ = await self._materialize(method)
        return request

    async def send(
        self,
        method: str = "GET",
        *,
        completion: CompletionOption | str = CompletionOption.RESPONSE_CONTENT_READ,
        cancellation: asyncio.Event | None = None,
    ) -> httpx.Response:
        """
        Build the request and send it through the transport.

        Raises:
            RequestTimeoutError: the per-request timeout elapsed first.
            RequestCancelledError: ``cancellation`` was set first.
            httpx.HTTPError: transport failures propagate unchanged.
        """
        completion = CompletionOption(completion)
        request, state = await self._materialize(method)
        timeout = state.timeout
        logger.debug("Sending %s %s timeout=%s", request.method, request.url, timeout)
        return await run_with_cancellation(
            self._transport.send(request, completion),
            timeout=timeout,
            cancellation=cancellation,
        )

    async def get(self, **kwargs: Any) -> httpx.Response:
        return await self.send("GET", **kwargs)

    async def post(self, **kwargs: Any) -> httpx.Response:
        return await self.send("POST", **kwargs)

    async def put(self, **kwargs: Any) -> httpx.Response:
        return await self.send("PUT", **kwargs)

    async def patch(self, **kwargs: Any) -> httpx.Response:
        return await self.send("PATCH", **kwargs)

    async def delete(self, **kwargs: Any) -> httpx.Response:
        return await self.send("DELETE", **kwargs)

    async def head(self, **kwargs: Any) -> httpx.Response:
        return await self.send("HEAD", **kwargs)

    async def options(self, **kwargs: Any) -> httpx.Response:
        return await self.send("OPTIONS", **kwargs)

    def __repr__(self) -> str:
        return f"RequestBuilder(base_address={self._base_address!s}, route={self._route!r})"


__all__ = ["DeferredConfigurator", "RequestBuilder"]
