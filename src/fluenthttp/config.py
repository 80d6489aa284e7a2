# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fluenthttp.

Serializer defaults are carried on an explicit :class:`FluentSettings` object. A
process-wide default instance exists for convenience; builders resolve their
settings once at construction, so replacing the default never affects builders
that already exist.
"""

import os
from dataclasses import dataclass

from .errors import ArgumentError
from .http.models import HttpVersion

DEFAULT_JSON_CONTENT_TYPE = "application/json"
DEFAULT_XML_CONTENT_TYPE = "application/xml"


def _int_env(name: str, default: int | None) -> int | None:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _version_env(name: str, default: str) -> str:
    value = _str_env(name, default)
    try:
        HttpVersion.parse(value)
    except ArgumentError:
        return default
    return value


@dataclass
class FluentSettings:
    """Serializer and protocol defaults applied by request builders."""

    json_ignore_none: bool = True
    json_ensure_ascii: bool = False
    json_indent: int | None = None
    json_sort_keys: bool = False
    json_content_type: str = DEFAULT_JSON_CONTENT_TYPE
    xml_content_type: str = DEFAULT_XML_CONTENT_TYPE
    xml_encoding: str = "utf-8"
    xml_declaration: bool = False
    http_version: str = "1.1"

    @classmethod
    def from_env(cls) -> "FluentSettings":
        """Create settings from environment variables (evaluated at call time)."""
        indent = _int_env("FLUENTHTTP_JSON_INDENT", cls.json_indent)
        if indent is not None and indent < 0:
            indent = cls.json_indent
        return cls(
            json_ignore_none=_bool_env("FLUENTHTTP_JSON_IGNORE_NONE", cls.json_ignore_none),
            json_ensure_ascii=_bool_env("FLUENTHTTP_JSON_ENSURE_ASCII", cls.json_ensure_ascii),
            json_indent=indent,
            json_sort_keys=_bool_env("FLUENTHTTP_JSON_SORT_KEYS", cls.json_sort_keys),
            json_content_type=_str_env("FLUENTHTTP_JSON_CONTENT_TYPE", cls.json_content_type),
            xml_content_type=_str_env("FLUENTHTTP_XML_CONTENT_TYPE", cls.xml_content_type),
            xml_encoding=_str_env("FLUENTHTTP_XML_ENCODING", cls.xml_encoding),
            xml_declaration=_bool_env("FLUENTHTTP_XML_DECLARATION", cls.xml_declaration),
            http_version=_version_env("FLUENTHTTP_HTTP_VERSION", cls.http_version),
        )


_default_settings: FluentSettings | None = None


def load_settings() -> FluentSettings:
    """Load settings from environment with sensible defaults."""
    return FluentSettings.from_env()


def get_default_settings() -> FluentSettings:
    """Return the process-wide default settings, loading them on first use."""
    global _default_settings
    if _default_settings is None:
        _default_settings = load_settings()
    return _default_settings


def set_default_settings(settings: FluentSettings | None) -> None:
    """Replace the process-wide default settings; ``None`` reloads from the environment on next use."""
    global _default_settings
    _default_settings = settings


__all__ = [
    "DEFAULT_JSON_CONTENT_TYPE",
    "DEFAULT_XML_CONTENT_TYPE",
    "FluentSettings",
    "get_default_settings",
    "load_settings",
    "set_default_settings",
]
