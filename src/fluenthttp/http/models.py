# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request message and protocol value types shared by builders and transports."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, MutableMapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

import httpx

from ..errors import ArgumentError, ArgumentNullError
from .content import HttpContent
from .headers import RequestHeaders

T = TypeVar("T")

_VERSION_RE = re.compile(r"^\s*(\d+)(?:\.(\d+))?\s*$")

# Single extension key under which request options reach the transport.
OPTIONS_EXTENSION = "fluenthttp.options"


@dataclass(frozen=True, order=True)
class HttpVersion:
    major: int
    minor: int = 0

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0:
            raise ArgumentError("Version components must not be negative.", "version")

    @classmethod
    def parse(cls, value: str | tuple[int, int] | HttpVersion) -> HttpVersion:
        """Parse ``"2"``, ``"1.1"``, ``(2, 0)`` or an existing HttpVersion."""
        if value is None:
            raise ArgumentNullError("version")
        if isinstance(value, HttpVersion):
            return value
        if isinstance(value, tuple):
            if len(value) != 2 or not all(isinstance(part, int) for part in value):
                raise ArgumentError("Version tuples must be (major, minor).", "version")
            return cls(value[0], value[1])
        if not isinstance(value, str) or not value.strip():
            raise ArgumentError("Version cannot be None or empty.", "version")
        match = _VERSION_RE.match(value)
        if match is None:
            raise ArgumentError('Version must be a valid version string such as "1.1" or "2.0".', "version")
        return cls(int(match.group(1)), int(match.group(2) or 0))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


HTTP_1_0 = HttpVersion(1, 0)
HTTP_1_1 = HttpVersion(1, 1)
HTTP_2 = HttpVersion(2, 0)
HTTP_3 = HttpVersion(3, 0)


class VersionPolicy(str, Enum):
    """How the requested version is negotiated with the server."""

    REQUEST_VERSION_OR_LOWER = "request_version_or_lower"
    REQUEST_VERSION_OR_HIGHER = "request_version_or_higher"
    REQUEST_VERSION_EXACT = "request_version_exact"


class CompletionOption(str, Enum):
    """When a send completes: after the full body is read, or once headers arrive."""

    RESPONSE_CONTENT_READ = "response_content_read"
    RESPONSE_HEADERS_READ = "response_headers_read"


@dataclass(frozen=True)
class OptionKey(Generic[T]):
    """Typed key for :class:`RequestOptions`."""

    name: str


class RequestOptions(MutableMapping[str, Any]):
    """In-process, per-request metadata. Never written to the wire by this package."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    @staticmethod
    def _name(key: str | OptionKey[Any]) -> str:
        if key is None:
            raise ArgumentNullError("key")
        return key.name if isinstance(key, OptionKey) else str(key)

    def set(self, key: str | OptionKey[T], value: T) -> None:
        self._values[self._name(key)] = value

    def try_get(self, key: str | OptionKey[T]) -> tuple[bool, T | None]:
        name = self._name(key)
        if name in self._values:
            return True, self._values[name]
        return False, None

    def __getitem__(self, key: str | OptionKey[Any]) -> Any:
        return self._values[self._name(key)]

    def __setitem__(self, key: str | OptionKey[Any], value: Any) -> None:
        self._values[self._name(key)] = value

    def __delitem__(self, key: str | OptionKey[Any]) -> None:
        del self._values[self._name(key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"RequestOptions({self._values!r})"


@dataclass(frozen=True)
class SetOption:
    key: str | OptionKey[Any]
    value: Any

    def apply(self, options: RequestOptions) -> None:
        options.set(self.key, self.value)


@dataclass(frozen=True)
class ConfigureOptions:
    action: Callable[[RequestOptions], None] = field(compare=False)

    def apply(self, options: RequestOptions) -> None:
        self.action(options)


OptionConfigurator = Union[SetOption, ConfigureOptions]


@dataclass
class HttpRequestMessage:
    """A fully materialized outgoing request, ready for a transport."""

    method: str
    url: httpx.URL
    headers: RequestHeaders = field(default_factory=RequestHeaders)
    content: HttpContent | None = None
    version: HttpVersion = HTTP_1_1
    version_policy: VersionPolicy = VersionPolicy.REQUEST_VERSION_OR_LOWER
    options: RequestOptions = field(default_factory=RequestOptions)

    def request_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``httpx.Request`` / ``httpx.AsyncClient.build_request``.

        Content headers only fill in names the request headers do not already
        carry, so a ``Content-Type`` set through ``configure_headers`` wins over
        the content's own. Options never become top-level httpx extensions, since
        httpx and httpcore read keys such as ``timeout`` and ``target`` from there;
        they travel nested under :data:`OPTIONS_EXTENSION`.
        """
        headers = self.headers.to_httpx()
        kwargs: dict[str, Any] = {"method": self.method, "url": self.url}
        if self.content is not None:
            for key, value in self.content.headers.items():
                if key not in headers:
                    headers[key] = value
            kwargs.update(self.content.request_kwargs())
        kwargs["headers"] = headers
        if self.options:
            kwargs["extensions"] = {OPTIONS_EXTENSION: dict(self.options)}
        return kwargs

    def to_httpx(self) -> httpx.Request:
        return httpx.Request(**self.request_kwargs())


__all__ = [
    "HTTP_1_0",
    "HTTP_1_1",
    "HTTP_2",
    "HTTP_3",
    "OPTIONS_EXTENSION",
    "CompletionOption",
    "ConfigureOptions",
    "HttpRequestMessage",
    "HttpVersion",
    "OptionConfigurator",
    "OptionKey",
    "RequestOptions",
    "SetOption",
    "VersionPolicy",
]
