# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from ..errors import ArgumentNullError
from .models import CompletionOption, HttpRequestMessage


class HttpTransport(Protocol):
    """Minimal protocol for sending materialized requests.

    Implementations are shared across many builders and must not be mutated by
    per-request configuration.
    """

    @property
    def base_address(self) -> httpx.URL | None: ...

    async def send(
        self,
        request: HttpRequestMessage,
        completion: CompletionOption = CompletionOption.RESPONSE_CONTENT_READ,
    ) -> httpx.Response: ...

    async def aclose(self) -> None:  # pragma: no cover - optional for adapters
        ...


def adopt_transport(transport: Any) -> HttpTransport:
    """Return an :class:`HttpTransport` for ``transport``, wrapping ``httpx.AsyncClient`` instances."""
    if transport is None:
        raise ArgumentNullError("transport")
    if isinstance(transport, httpx.AsyncClient):
        from .httpx_transport import HttpxTransport

        return HttpxTransport(transport)
    return transport


def create_default_transport(base_address: str | httpx.URL | None = None, **client_kwargs: Any) -> HttpTransport:
    """Factory for the default httpx-backed transport."""
    from .httpx_transport import HttpxTransport

    if base_address is not None:
        client_kwargs["base_url"] = base_address
    return HttpxTransport(httpx.AsyncClient(**client_kwargs), owns_client=True)
