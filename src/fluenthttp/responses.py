# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response-side helpers.

Every helper accepts either an ``httpx.Response`` or an awaitable resolving to
one (typically ``builder.get()``), so calls compose without intermediate
``await`` statements. Streamed responses are read fully before decoding.

The ``default`` callbacks are the recovery hook for unsuccessful responses: when
given and the status is not 2xx, the callback's result is returned instead of
decoding the body.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar, Union
from xml.etree.ElementTree import Element

import httpx

from .codecs import JsonCodec, XmlCodec
from .errors import ArgumentNullError, guard_not_none

T = TypeVar("T")

ResponseSource = Union[httpx.Response, Awaitable[httpx.Response]]
Handler = Callable[[httpx.Response], Any]


async def _resolve(source: ResponseSource) -> httpx.Response:
    if source is None:
        raise ArgumentNullError("response")
    if isinstance(source, httpx.Response):
        return source
    return await source


async def _invoke(callback: Callable[..., Any], *args: Any) -> Any:
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _read_body(source: ResponseSource, default: Handler | None) -> tuple[httpx.Response, bytes | None]:
    response = await _resolve(source)
    if default is not None and not response.is_success:
        return response, None
    return response, await response.aread()


async def read_bytes(source: ResponseSource, *, default: Handler | None = None) -> Any:
    response, body = await _read_body(source, default)
    if body is None:
        return await _invoke(default, response)
    return body


async def read_text(source: ResponseSource, *, default: Handler | None = None) -> Any:
    response, body = await _read_body(source, default)
    if body is None:
        return await _invoke(default, response)
    return response.text


async def read_json(
    source: ResponseSource,
    into: type[T] | None = None,
    *,
    default: Handler | None = None,
    codec: JsonCodec | None = None,
) -> Any:
    """Decode a JSON body, optionally into a dataclass (lists of objects decode to lists). Empty bodies give ``None``."""
    response, body = await _read_body(source, default)
    if body is None:
        return await _invoke(default, response)
    if not body.strip():
        return None
    return (codec or JsonCodec.from_settings()).deserialize(body, into)


async def read_xml(
    source: ResponseSource,
    into: type[T] | None = None,
    *,
    default: Handler | None = None,
    codec: XmlCodec | None = None,
) -> Element | Any:
    response, body = await _read_body(source, default)
    if body is None:
        return await _invoke(default, response)
    if not body.strip():
        return None
    return (codec or XmlCodec.from_settings()).deserialize(body, into)


async def when(
    source: ResponseSource,
    predicate: Callable[[httpx.Response], bool],
    handler: Handler,
) -> httpx.Response:
    """Run ``handler`` (sync or async) when ``predicate`` holds; always return the response."""
    guard_not_none(predicate, "predicate")
    guard_not_none(handler, "handler")
    response = await _resolve(source)
    if predicate(response):
        await _invoke(handler, response)
    return response


async def on_success(source: ResponseSource, handler: Handler) -> httpx.Response:
    return await when(source, lambda response: response.is_success, handler)


async def on_failure(source: ResponseSource, handler: Handler) -> httpx.Response:
    return await when(source, lambda response: not response.is_success, handler)


__all__ = [
    "on_failure",
    "on_success",
    "read_bytes",
    "read_json",
    "read_text",
    "read_xml",
    "when",
]
