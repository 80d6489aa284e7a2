# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON and XML codecs used by content helpers and response readers.

XML parsing goes through defusedxml to refuse entity expansion and external
references in untrusted response bodies.
"""

from __future__ import annotations

import dataclasses
import datetime
import json
import types
import typing
import uuid
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar
from xml.etree.ElementTree import Element, SubElement, tostring

from defusedxml import ElementTree as SafeElementTree

from .config import FluentSettings, get_default_settings
from .errors import ArgumentError, ArgumentNullError

T = TypeVar("T")


def _to_plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_plain(v) for v in value]
    return value


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value]
    return value


def _scalar(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _coerce(raw: Any, annotation: Any) -> Any:
    if raw is None:
        return None
    if annotation is bool and isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    if annotation in (int, float, Decimal) and isinstance(raw, str):
        return annotation(raw.strip())
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        for arg in typing.get_args(annotation):
            if arg is not type(None):
                return _coerce(raw, arg)
    if dataclasses.is_dataclass(annotation) and isinstance(raw, Mapping):
        return _build_dataclass(annotation, raw)
    return raw


def _build_dataclass(cls: type[T], data: Mapping[str, Any]) -> T:
    """Instantiate ``cls`` from ``data`` matching field names case-insensitively."""
    hints = typing.get_type_hints(cls)
    lookup = {str(key).lower(): value for key, value in data.items()}
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        key = f.name.lower()
        if key in lookup:
            kwargs[f.name] = _coerce(lookup[key], hints.get(f.name, Any))
    return cls(**kwargs)


class JsonCodec:
    """Standard-library JSON with dataclass support."""

    def __init__(
        self,
        *,
        ignore_none: bool = True,
        ensure_ascii: bool = False,
        indent: int | None = None,
        sort_keys: bool = False,
        content_type: str = "application/json",
    ):
        self.ignore_none = ignore_none
        self.ensure_ascii = ensure_ascii
        self.indent = indent
        self.sort_keys = sort_keys
        self.content_type = content_type

    @classmethod
    def from_settings(cls, settings: FluentSettings | None = None) -> JsonCodec:
        settings = settings or get_default_settings()
        return cls(
            ignore_none=settings.json_ignore_none,
            ensure_ascii=settings.json_ensure_ascii,
            indent=settings.json_indent,
            sort_keys=settings.json_sort_keys,
            content_type=settings.json_content_type,
        )

    def serialize(self, value: Any) -> str:
        plain = _to_plain(value)
        if self.ignore_none:
            plain = _drop_none(plain)
        return json.dumps(
            plain,
            ensure_ascii=self.ensure_ascii,
            indent=self.indent,
            sort_keys=self.sort_keys,
            default=_scalar,
        )

    def deserialize(self, payload: str | bytes, into: type[T] | None = None) -> Any:
        if payload is None:
            raise ArgumentNullError("payload")
        data = json.loads(payload)
        if into is None or data is None:
            return data
        if dataclasses.is_dataclass(into):
            if isinstance(data, list):
                return [_build_dataclass(into, item) for item in data]
            return _build_dataclass(into, data)
        return _coerce(data, into)


def _type_tag(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "double"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _fill_element(element: Element, value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        items = [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]
    elif isinstance(value, Mapping):
        items = [(str(k), v) for k, v in value.items()]
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            if item is not None:
                _fill_element(SubElement(element, _type_tag(item)), item)
        return
    else:
        element.text = _xml_text(value)
        return
    for name, member in items:
        if member is not None:
            _fill_element(SubElement(element, name), member)


class XmlCodec:
    """ElementTree writer; defusedxml reader."""

    def __init__(
        self,
        *,
        encoding: str = "utf-8",
        xml_declaration: bool = False,
        content_type: str = "application/xml",
    ):
        self.encoding = encoding
        self.xml_declaration = xml_declaration
        self.content_type = content_type

    @classmethod
    def from_settings(cls, settings: FluentSettings | None = None) -> XmlCodec:
        settings = settings or get_default_settings()
        return cls(
            encoding=settings.xml_encoding,
            xml_declaration=settings.xml_declaration,
            content_type=settings.xml_content_type,
        )

    def serialize(self, value: Any, root: str | None = None) -> str:
        if value is None:
            raise ArgumentNullError("value")
        if isinstance(value, Element):
            element = value
        else:
            if isinstance(value, Mapping) and root is None:
                raise ArgumentError("A root element name is required to serialize a mapping.", "root")
            element = Element(root or type(value).__name__)
            _fill_element(element, value)
        text = tostring(element, encoding="unicode")
        if self.xml_declaration:
            text = f'<?xml version="1.0" encoding="{self.encoding}"?>{text}'
        return text

    def deserialize(self, payload: str | bytes, into: type[T] | None = None) -> Any:
        if payload is None:
            raise ArgumentNullError("payload")
        element = SafeElementTree.fromstring(payload)
        if into is None:
            return element
        if not dataclasses.is_dataclass(into):
            raise ArgumentError("XML can only be deserialized into dataclasses.", "into")
        return _build_dataclass(into, element_to_mapping(element))


def element_to_mapping(element: Element) -> dict[str, Any]:
    """Flatten an element's children into ``{tag: text-or-mapping}``."""
    data: dict[str, Any] = {}
    for child in element:
        data[child.tag] = element_to_mapping(child) if len(child) else (child.text or "")
    return data


__all__ = ["JsonCodec", "XmlCodec", "element_to_mapping"]
