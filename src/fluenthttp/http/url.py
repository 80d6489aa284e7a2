# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers: base address and route validation, final request URI composition.

Query data has exactly one home, the query parameter collection. Base addresses
and routes are therefore rejected when they carry a query string or fragment.
"""

from __future__ import annotations

import httpx

from ..errors import ArgumentError, ArgumentNullError, RequestBuildError

MESSAGE_INVALID_BASE_ADDRESS = "Base address must not contain a query string or fragment."
MESSAGE_INVALID_ROUTE = "Route must not contain a query string or fragment. Use query parameters to specify query values."
MESSAGE_EMPTY_ROUTE = "Missing or invalid route provided."
MESSAGE_MISSING_ROUTE = "Transport has no base address and no route information was provided."
MESSAGE_RELATIVE_ROUTE = "A relative route requires the transport to have a base address."


def ensure_valid_base_address(base_address: str | httpx.URL | None, param_name: str) -> httpx.URL | None:
    """Return the base address as an ``httpx.URL`` (``None`` when unset) or raise."""
    if base_address is None:
        return None
    url = httpx.URL(base_address) if isinstance(base_address, str) else base_address
    if not str(url):
        return None
    if url.query or url.fragment or "?" in str(url):
        raise ArgumentError(MESSAGE_INVALID_BASE_ADDRESS, param_name)
    if not url.is_absolute_url:
        raise ArgumentError("Base address must be an absolute URL.", param_name)
    return url


def normalize_route(route: str | httpx.URL, param_name: str = "route") -> str:
    """Validate a route and return its trimmed text form."""
    if route is None:
        raise ArgumentNullError(param_name)
    if isinstance(route, httpx.URL):
        if route.query or route.fragment:
            raise ArgumentError(MESSAGE_INVALID_ROUTE, param_name)
        text = str(route)
    elif isinstance(route, str):
        text = route
    else:
        raise ArgumentError(MESSAGE_EMPTY_ROUTE, param_name)

    text = text.strip()
    if not text:
        raise ArgumentError(MESSAGE_EMPTY_ROUTE, param_name)
    if "?" in text or "#" in text:
        raise ArgumentError(MESSAGE_INVALID_ROUTE, param_name)
    try:
        httpx.URL(text)
    except httpx.InvalidURL as exc:
        raise ArgumentError(MESSAGE_EMPTY_ROUTE, param_name) from exc
    return text


def is_absolute_route(route: str) -> bool:
    url = httpx.URL(route)
    return url.is_absolute_url


def build_request_uri(base_address: httpx.URL | None, route: str | None, query_string: str) -> httpx.URL:
    """
    Compose the final request URI.

    - absolute route: used as-is, the base address is ignored
    - relative route: resolved against the base address (RFC 3986)
    - no route: the base address itself
    The serialized query string is appended in every case.
    """
    if base_address is None and route is None:
        raise RequestBuildError(MESSAGE_MISSING_ROUTE, "route")

    if route is None:
        target = base_address
    elif is_absolute_route(route):
        target = httpx.URL(route)
    elif base_address is None:
        raise RequestBuildError(MESSAGE_RELATIVE_ROUTE, "route")
    else:
        target = base_address.join(route)

    return httpx.URL(f"{target}{query_string}")


__all__ = [
    "MESSAGE_EMPTY_ROUTE",
    "MESSAGE_INVALID_BASE_ADDRESS",
    "MESSAGE_INVALID_ROUTE",
    "MESSAGE_MISSING_ROUTE",
    "build_request_uri",
    "ensure_valid_base_address",
    "is_absolute_route",
    "normalize_route",
]
