# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport adapters for tests and embedding."""

from __future__ import annotations

from collections.abc import Callable

import httpx

from .models import CompletionOption, HttpRequestMessage
from .transport import HttpTransport
from .url import ensure_valid_base_address


class StubTransport(HttpTransport):
    """Deterministic, programmable HttpTransport for tests.

    Every materialized request is recorded in ``requests``. Responses are looked up
    by full URL, then produced by ``handler`` if one is given, and otherwise
    default to an empty ``200 OK``.
    """

    def __init__(
        self,
        base_address: str | httpx.URL | None = None,
        responses: dict[str, httpx.Response] | None = None,
        handler: Callable[[HttpRequestMessage], httpx.Response] | None = None,
    ):
        self._base_address = ensure_valid_base_address(base_address, "base_address")
        self._responses = responses or {}
        self._handler = handler
        self.requests: list[HttpRequestMessage] = []
        self.completions: list[CompletionOption] = []
        self.closed = False

    @property
    def base_address(self) -> httpx.URL | None:
        return self._base_address

    def add(self, url: str, response: httpx.Response) -> None:
        self._responses[url] = response

    async def send(
        self,
        request: HttpRequestMessage,
        completion: CompletionOption = CompletionOption.RESPONSE_CONTENT_READ,
    ) -> httpx.Response:
        self.requests.append(request)
        self.completions.append(completion)
        key = str(request.url)
        if key in self._responses:
            response = self._responses[key]
        elif self._handler is not None:
            response = self._handler(request)
        else:
            response = httpx.Response(200)
        response.request = request.to_httpx()
        return response

    async def aclose(self) -> None:
        self.closed = True
