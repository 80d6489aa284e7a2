# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpTransport implementation."""

from __future__ import annotations

import logging

import httpx

from ..errors import ArgumentError, ArgumentNullError, categorize_exception
from .headers import EXPECT_CONTINUE, EXPECT_HEADER
from .models import CompletionOption, HttpRequestMessage
from .transport import HttpTransport
from .url import ensure_valid_base_address

logger = logging.getLogger(__name__)


def _drop_expect_continue(headers: httpx.Headers) -> None:
    """Remove ``100-continue`` from ``Expect`` and keep any other expectations."""
    if EXPECT_HEADER not in headers:
        return
    remaining = [
        value.strip()
        for value in headers.get_list(EXPECT_HEADER, split_commas=True)
        if value.strip().lower() != EXPECT_CONTINUE
    ]
    del headers[EXPECT_HEADER]
    if remaining:
        headers[EXPECT_HEADER] = ", ".join(remaining)


class HttpxTransport(HttpTransport):
    """Asynchronous httpx client wrapper.

    The wrapped client's default headers and cookies are merged into each request
    by httpx without modifying the client. Default query parameters are refused,
    since query data belongs to the request's query parameter collection only.
    A request that disabled ``Expect: 100-continue`` has it removed again after
    the client defaults are merged.
    """

    def __init__(self, client: httpx.AsyncClient, *, owns_client: bool = False):
        if client is None:
            raise ArgumentNullError("client")
        if client.params:
            raise ArgumentError(
                "httpx.AsyncClient.params must be empty. Use query parameters on the request builder instead.",
                "client",
            )
        self._client = client
        self._owns_client = owns_client
        self._base_address = ensure_valid_base_address(client.base_url, "client")

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def base_address(self) -> httpx.URL | None:
        return self._base_address

    async def send(
        self,
        request: HttpRequestMessage,
        completion: CompletionOption = CompletionOption.RESPONSE_CONTENT_READ,
    ) -> httpx.Response:
        httpx_request = self._client.build_request(**request.request_kwargs())
        if request.headers.expect_continue is False:
            # Client default headers are merged by build_request.
            _drop_expect_continue(httpx_request.headers)
        stream = completion is CompletionOption.RESPONSE_HEADERS_READ
        try:
            return await self._client.send(httpx_request, stream=stream)
        except httpx.HTTPError as exc:
            logger.debug(
                "%s %s failed (%s): %s",
                request.method,
                request.url,
                categorize_exception(exc).value,
                exc,
            )
            raise

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
