# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Ordered query parameter collection.

The collection is the only place query data lives for a request. Keys keep their
insertion order and so do the values under each key, which matters for servers
that are sensitive to parameter order.

Serialization rules per value:

- ``None`` renders as a bare flag (``?key``)
- ``""`` renders as ``?key=``
- anything else renders as ``?key=<percent-encoded value>``

A key registered with no values at all also renders as a flag.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any
from urllib.parse import quote

from ..errors import ArgumentError, ArgumentNullError, guard_not_none


def to_query_value(value: Any) -> str | None:
    """Convert ``value`` to its locale-invariant string form (``None`` stays ``None``)."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, Enum):
        return to_query_value(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def escape_data_string(value: str) -> str:
    """Percent-encode everything outside the RFC 3986 unreserved set."""
    return quote(value, safe="")


def _validate_key(key: str) -> None:
    if key is None:
        raise ArgumentNullError("key")
    if not isinstance(key, str) or not key.strip():
        raise ArgumentError("Key cannot be empty or consist only of white space.", "key")


def _reject_scalar_values(values: Any) -> None:
    if isinstance(values, (str, bytes, bytearray)):
        raise ArgumentError("Values must be a collection of values, not a single string.", "values")


class QueryParameterCollection:
    """Ordered multi-map of query keys to optional string values."""

    def __init__(self) -> None:
        self._parameters: dict[str, list[str | None]] = {}

    @property
    def count(self) -> int:
        return len(self._parameters)

    @property
    def is_empty(self) -> bool:
        return not self._parameters

    def __len__(self) -> int:
        return len(self._parameters)

    def __bool__(self) -> bool:
        return bool(self._parameters)

    def __contains__(self, key: object) -> bool:
        return key in self._parameters

    def __getitem__(self, key: str) -> tuple[str | None, ...]:
        return tuple(self._parameters[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._parameters)

    def items(self) -> Iterator[tuple[str, tuple[str | None, ...]]]:
        for key, values in self._parameters.items():
            yield key, tuple(values)

    def get(self, key: str, default: tuple[str | None, ...] = ()) -> tuple[str | None, ...]:
        guard_not_none(key, "key")
        values = self._parameters.get(key)
        return default if values is None else tuple(values)

    def add(self, key: str, value: Any = None) -> None:
        """Append one value for ``key``; ``None`` registers a flag."""
        _validate_key(key)
        self._parameters.setdefault(key, []).append(to_query_value(value))

    def add_range(self, key: str, values: Iterable[Any]) -> None:
        """Append every element of ``values``; an empty iterable still registers the key."""
        if values is None:
            raise ArgumentNullError("values")
        _reject_scalar_values(values)
        _validate_key(key)
        converted = [to_query_value(value) for value in values]
        self._parameters.setdefault(key, []).extend(converted)

    def add_if_not_none(self, key: str, value: Any) -> None:
        _validate_key(key)
        if value is not None:
            self.add(key, value)

    def set(self, key: str, value: Any = None) -> None:
        """Replace all values for ``key`` with a single value."""
        _validate_key(key)
        self._parameters[key] = [to_query_value(value)]

    def set_range(self, key: str, values: Iterable[Any]) -> None:
        if values is None:
            raise ArgumentNullError("values")
        _reject_scalar_values(values)
        _validate_key(key)
        self._parameters[key] = [to_query_value(value) for value in values]

    def remove(self, key: str) -> bool:
        guard_not_none(key, "key")
        return self._parameters.pop(key, None) is not None

    def clear(self) -> None:
        self._parameters.clear()

    def copy(self) -> QueryParameterCollection:
        clone = QueryParameterCollection()
        clone._parameters = {key: list(values) for key, values in self._parameters.items()}
        return clone

    def serialize(self) -> str:
        """Render the collection as a query string, including the leading ``?``."""
        pairs: list[str] = []
        for key, values in self._parameters.items():
            name = escape_data_string(key)
            if not values:
                pairs.append(name)
                continue
            for value in values:
                if value is None:
                    pairs.append(name)
                else:
                    pairs.append(f"{name}={escape_data_string(value)}")
        if not pairs:
            return ""
        return "?" + "&".join(pairs)

    to_query_string = serialize

    def __repr__(self) -> str:
        return f"QueryParameterCollection({self.serialize()!r})"


__all__ = ["QueryParameterCollection", "escape_data_string", "to_query_value"]
