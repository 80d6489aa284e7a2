# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request body payloads.

Every payload carries its own content headers (``Content-Type`` and friends) and
knows how to hand itself to ``httpx.Request``. Streamed payloads can be buffered
into memory before sending so the transport can compute ``Content-Length`` and
replay the bytes.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from ..errors import ArgumentError, guard_not_none


def _media_type_with_charset(media_type: str, encoding: str) -> str:
    if "charset=" in media_type.lower():
        return media_type
    return f"{media_type}; charset={encoding}"


class HttpContent:
    """Base class for request payloads."""

    def __init__(self, headers: Mapping[str, str] | None = None):
        self.headers: dict[str, str] = dict(headers or {})

    @property
    def content_type(self) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return None

    @property
    def is_buffered(self) -> bool:
        return True

    async def load_into_buffer(self) -> None:
        """Realize the payload into memory; fixed payloads are already buffered."""
        return None

    def request_kwargs(self) -> dict[str, Any]:
        raise NotImplementedError


class ByteContent(HttpContent):
    def __init__(self, body: bytes, media_type: str | None = None):
        guard_not_none(body, "body")
        super().__init__({"Content-Type": media_type} if media_type else None)
        self.body = bytes(body)

    def request_kwargs(self) -> dict[str, Any]:
        return {"content": self.body}


class StringContent(ByteContent):
    def __init__(self, text: str, encoding: str | None = None, media_type: str | None = None):
        guard_not_none(text, "text")
        self.text = text
        self.encoding = encoding or "utf-8"
        super().__init__(
            text.encode(self.encoding),
            _media_type_with_charset(media_type or "text/plain", self.encoding),
        )


class StreamContent(HttpContent):
    """Payload produced lazily from a sync or async iterable of byte chunks."""

    def __init__(self, stream: Iterable[bytes] | AsyncIterable[bytes], media_type: str | None = None):
        guard_not_none(stream, "stream")
        if isinstance(stream, (bytes, bytearray, str)):
            raise ArgumentError("Use ByteContent or StringContent for in-memory payloads.", "stream")
        super().__init__({"Content-Type": media_type} if media_type else None)
        self.stream = stream
        self._buffer: bytes | None = None

    @property
    def is_buffered(self) -> bool:
        return self._buffer is not None

    async def load_into_buffer(self) -> None:
        if self._buffer is not None:
            return
        chunks = bytearray()
        if isinstance(self.stream, AsyncIterable):
            async for chunk in self.stream:
                chunks.extend(chunk)
        else:
            for chunk in self.stream:
                chunks.extend(chunk)
        self._buffer = bytes(chunks)

    def request_kwargs(self) -> dict[str, Any]:
        if self._buffer is not None:
            return {"content": self._buffer}
        return {"content": self.stream}


class FormUrlEncodedContent(ByteContent):
    def __init__(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]]):
        guard_not_none(data, "data")
        pairs = list(data.items()) if isinstance(data, Mapping) else list(data)
        self.fields: list[tuple[str, str]] = [
            (str(key), "" if value is None else str(value)) for key, value in pairs
        ]
        super().__init__(urlencode(self.fields).encode("ascii"), "application/x-www-form-urlencoded")


class MultipartContent(HttpContent):
    """multipart/form-data payload; encoding is delegated to httpx."""

    def __init__(
        self,
        files: Mapping[str, Any] | Iterable[tuple[str, Any]],
        fields: Mapping[str, Any] | None = None,
    ):
        guard_not_none(files, "files")
        if not isinstance(files, Mapping):
            files = list(files)
        if not files:
            raise ArgumentError("Multipart content requires at least one file.", "files")
        super().__init__()
        self.files = files
        self.fields = dict(fields or {})
        self._buffer: bytes | None = None

    @property
    def is_buffered(self) -> bool:
        return self._buffer is not None

    async def load_into_buffer(self) -> None:
        if self._buffer is not None:
            return
        # Only used to run httpx's multipart encoder; the URL is never contacted.
        encoded = httpx.Request("POST", "http://localhost/", data=self.fields or None, files=self.files)
        self._buffer = await encoded.aread()
        self.headers["Content-Type"] = encoded.headers["Content-Type"]

    def request_kwargs(self) -> dict[str, Any]:
        if self._buffer is not None:
            return {"content": self._buffer}
        return {"data": self.fields or None, "files": self.files}


def as_content(value: HttpContent | bytes | bytearray | str, media_type: str | None = None, encoding: str | None = None) -> HttpContent:
    """Wrap raw bytes or text in the matching :class:`HttpContent`."""
    if isinstance(value, HttpContent):
        return value
    if isinstance(value, (bytes, bytearray)):
        return ByteContent(bytes(value), media_type)
    if isinstance(value, str):
        return StringContent(value, encoding, media_type)
    raise ArgumentError(f"Unsupported content type {type(value).__name__}.", "content")


__all__ = [
    "ByteContent",
    "FormUrlEncodedContent",
    "HttpContent",
    "MultipartContent",
    "StreamContent",
    "StringContent",
    "as_content",
]
