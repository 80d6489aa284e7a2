# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header validation rules, the outgoing header collection and header configurators.

HTTP header field names are case-insensitive (RFC 9110). Two validation regimes
exist for request headers:

- string headers added through ``with_header``/``with_headers`` are validated as
  soon as they are added and may not name a reserved framing header;
- configurators (authentication helpers, typed slots, ``configure_headers``) are
  replayed against a fresh :class:`RequestHeaders` when the request is built and
  are only validated at that point. They are not subject to the reserved list.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Union

import httpx

from ..errors import ArgumentError, ArgumentNullError

# Computed by the transport from the URI, the content and the negotiated version.
RESERVED_HEADERS = frozenset({"host", "content-length", "transfer-encoding"})

COOKIE_HEADER = "Cookie"
EXPECT_HEADER = "Expect"
EXPECT_CONTINUE = "100-continue"

_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def is_reserved_header(name: str) -> bool:
    return str(name).strip().lower() in RESERVED_HEADERS


def ensure_not_reserved(name: str, param_name: str) -> None:
    if is_reserved_header(name):
        raise ArgumentError(
            f"Header '{name}' is computed by the transport and cannot be set with WithHeader; "
            "use configure_headers to override it explicitly.",
            param_name,
        )


def coerce_header_values(value: str | Iterable[str], param_name: str) -> tuple[str, ...]:
    """Normalize a single value or an iterable of values into a tuple of strings."""
    if value is None:
        raise ArgumentNullError(param_name)
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (bytes, bytearray)) or not isinstance(value, Iterable):
        raise ArgumentError("Header values must be strings.", param_name)
    values = tuple(value)
    for item in values:
        if item is None:
            raise ArgumentNullError(param_name, "Header values cannot contain None.")
        if not isinstance(item, str):
            raise ArgumentError("Header values must be strings.", param_name)
    return values


def validate_header(name: str, values: Iterable[str], name_param: str = "name", value_param: str = "value") -> None:
    """Reject names that are not RFC 9110 tokens and values that are not single-line ASCII."""
    if name is None:
        raise ArgumentNullError(name_param, "Header name cannot be None.")
    if not isinstance(name, str) or not _TOKEN_RE.match(name):
        raise ArgumentError(f"'{name}' is not a valid header name.", name_param)
    for value in values:
        if value is None:
            raise ArgumentNullError(value_param, f"Header values for '{name}' cannot be None.")
        if "\r" in value or "\n" in value:
            raise ArgumentError(f"Header value for '{name}' contains line break characters.", value_param)
        if not value.isascii():
            raise ArgumentError(f"Header value for '{name}' must contain ASCII characters only.", value_param)


@dataclass(frozen=True)
class AuthenticationHeaderValue:
    scheme: str
    parameter: str | None = None

    def __str__(self) -> str:
        return self.scheme if not self.parameter else f"{self.scheme} {self.parameter}"

    @classmethod
    def parse(cls, raw: str) -> AuthenticationHeaderValue:
        scheme, _, parameter = raw.strip().partition(" ")
        return cls(scheme, parameter.strip() or None)


@dataclass(frozen=True)
class CacheControl:
    no_cache: bool = False
    no_store: bool = False
    no_transform: bool = False
    only_if_cached: bool = False
    max_age: int | None = None
    max_stale: int | None = None
    min_fresh: int | None = None
    extensions: tuple[str, ...] = ()

    def __str__(self) -> str:
        directives: list[str] = []
        if self.no_cache:
            directives.append("no-cache")
        if self.no_store:
            directives.append("no-store")
        if self.no_transform:
            directives.append("no-transform")
        if self.only_if_cached:
            directives.append("only-if-cached")
        if self.max_age is not None:
            directives.append(f"max-age={self.max_age}")
        if self.max_stale is not None:
            directives.append(f"max-stale={self.max_stale}")
        if self.min_fresh is not None:
            directives.append(f"min-fresh={self.min_fresh}")
        directives.extend(self.extensions)
        return ", ".join(directives)


class RequestHeaders:
    """Mutable, case-insensitive, ordered header collection of an outgoing request."""

    def __init__(self) -> None:
        self._items: list[tuple[str, str]] = []
        self._expect_continue_disabled = False

    @property
    def _view(self) -> httpx.Headers:
        return httpx.Headers(self._items)

    def add(self, name: str, value: str | Iterable[str]) -> None:
        """Append one or more values for ``name`` without replacing existing ones."""
        values = coerce_header_values(value, "value")
        validate_header(name, values)
        self._items.extend((name, item) for item in values)

    def set(self, name: str, value: str | Iterable[str]) -> None:
        """Replace every value for ``name``."""
        values = coerce_header_values(value, "value")
        validate_header(name, values)
        self.remove(name)
        self._items.extend((name, item) for item in values)

    def remove(self, name: str) -> bool:
        lower = str(name).lower()
        kept = [(key, value) for key, value in self._items if key.lower() != lower]
        removed = len(kept) != len(self._items)
        self._items = kept
        return removed

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the comma-joined values for ``name``."""
        return self._view.get(name, default)

    def get_list(self, name: str) -> list[str]:
        lower = str(name).lower()
        return [value for key, value in self._items if key.lower() == lower]

    def __contains__(self, name: object) -> bool:
        lower = str(name).lower()
        return any(key.lower() == lower for key, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._view)

    def __len__(self) -> int:
        return len(self._items)

    def multi_items(self) -> list[tuple[str, str]]:
        return list(self._items)

    @property
    def authorization(self) -> AuthenticationHeaderValue | None:
        raw = self.get("Authorization")
        return None if raw is None else AuthenticationHeaderValue.parse(raw)

    @authorization.setter
    def authorization(self, value: AuthenticationHeaderValue | None) -> None:
        if value is None:
            self.remove("Authorization")
        else:
            self.set("Authorization", str(value))

    @property
    def accept(self) -> list[str]:
        return self.get_list("Accept")

    @property
    def cache_control(self) -> str | None:
        return self.get("Cache-Control")

    @cache_control.setter
    def cache_control(self, value: CacheControl | str | None) -> None:
        if value is None:
            self.remove("Cache-Control")
        else:
            self.set("Cache-Control", str(value))

    @property
    def expect_continue(self) -> bool | None:
        values = [v.strip().lower() for v in self.get_list(EXPECT_HEADER)]
        if EXPECT_CONTINUE in values:
            return True
        return False if self._expect_continue_disabled else None

    @expect_continue.setter
    def expect_continue(self, enabled: bool) -> None:
        lower = EXPECT_HEADER.lower()
        self._items = [
            (key, value)
            for key, value in self._items
            if not (key.lower() == lower and value.strip().lower() == EXPECT_CONTINUE)
        ]
        self._expect_continue_disabled = not enabled
        if enabled:
            self._items.append((EXPECT_HEADER, EXPECT_CONTINUE))

    def to_httpx(self) -> httpx.Headers:
        return httpx.Headers(self._items)

    def __repr__(self) -> str:
        return f"RequestHeaders({self._items!r})"


@dataclass(frozen=True)
class AddHeader:
    """Append values to a collection-style header slot."""

    name: str
    values: tuple[str, ...]

    def apply(self, headers: RequestHeaders) -> None:
        headers.add(self.name, self.values)


@dataclass(frozen=True)
class SetHeader:
    """Replace a single-value header slot; the last one applied wins."""

    name: str
    value: str

    def apply(self, headers: RequestHeaders) -> None:
        headers.set(self.name, self.value)


@dataclass(frozen=True)
class ConfigureHeaders:
    """Run a callable with full access to the outgoing headers."""

    action: Callable[[RequestHeaders], None] = field(compare=False)

    def apply(self, headers: RequestHeaders) -> None:
        self.action(headers)


HeaderConfigurator = Union[AddHeader, SetHeader, ConfigureHeaders]


def iter_header_pairs(
    headers: Mapping[str, str | Iterable[str]] | Iterable[tuple[str, str | Iterable[str]]],
) -> Iterator[tuple[str, str | Iterable[str]]]:
    """Yield ``(name, value)`` pairs from a mapping or an iterable of pairs."""
    if isinstance(headers, Mapping):
        yield from headers.items()
        return
    for pair in headers:
        name, value = pair
        yield name, value


__all__ = [
    "COOKIE_HEADER",
    "RESERVED_HEADERS",
    "AddHeader",
    "AuthenticationHeaderValue",
    "CacheControl",
    "ConfigureHeaders",
    "HeaderConfigurator",
    "RequestHeaders",
    "SetHeader",
    "coerce_header_values",
    "ensure_not_reserved",
    "is_reserved_header",
    "iter_header_pairs",
    "validate_header",
]
