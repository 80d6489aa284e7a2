# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Entry points for creating request builders, and a small owning client facade."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .builder import RequestBuilder
from .config import FluentSettings, get_default_settings
from .errors import ArgumentNullError
from .http.transport import HttpTransport, adopt_transport, create_default_transport

logger = logging.getLogger(__name__)


def using_base(
    transport: HttpTransport | httpx.AsyncClient,
    *,
    settings: FluentSettings | None = None,
) -> RequestBuilder:
    """Start a builder whose target is the transport's base address."""
    return RequestBuilder(transport, settings=settings)


def using_route(
    transport: HttpTransport | httpx.AsyncClient,
    route: str | httpx.URL,
    *,
    settings: FluentSettings | None = None,
) -> RequestBuilder:
    """Start a builder for ``route``; relative routes resolve against the transport's base address."""
    if route is None:
        raise ArgumentNullError("route")
    return RequestBuilder(transport, route, settings=settings)


class FluentHttpClient:
    """
    Convenience wrapper that owns one transport and hands out builders bound to it.

    The transport is shared by every builder created here; per-request
    configuration never mutates it. Without an explicit transport an owned
    ``httpx.AsyncClient`` is created from ``base_address`` and ``client_options``.
    Use as an async context manager to close an owned transport on exit.
    """

    def __init__(
        self,
        transport: HttpTransport | httpx.AsyncClient | None = None,
        *,
        base_address: str | httpx.URL | None = None,
        settings: FluentSettings | None = None,
        client_options: Mapping[str, Any] | None = None,
    ):
        self.settings = settings or get_default_settings()
        if transport is None:
            self.transport = create_default_transport(base_address, **dict(client_options or {}))
            self._owns_transport = True
        else:
            self.transport = adopt_transport(transport)
            self._owns_transport = False

    @property
    def base_address(self) -> httpx.URL | None:
        return self.transport.base_address

    def using_base(self) -> RequestBuilder:
        return using_base(self.transport, settings=self.settings)

    def using_route(self, route: str | httpx.URL) -> RequestBuilder:
        return using_route(self.transport, route, settings=self.settings)

    async def aclose(self) -> None:
        if self._owns_transport:
            logger.debug("Closing owned transport %r", self.transport)
            await self.transport.aclose()

    async def __aenter__(self) -> FluentHttpClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["FluentHttpClient", "using_base", "using_route"]
