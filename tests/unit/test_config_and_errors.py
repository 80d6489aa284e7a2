# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import logging
import socket

import httpx
import pytest

from fluenthttp import config, log, using_base
from fluenthttp.config import FluentSettings
from fluenthttp.errors import (
    ArgumentError,
    ArgumentNullError,
    ArgumentOutOfRangeError,
    ErrorCategory,
    RequestBuildError,
    RequestCancelledError,
    RequestTimeoutError,
    categorize_exception,
    error_category_to_reason,
)
from fluenthttp.http.adapters import StubTransport
from fluenthttp.http.models import HTTP_2


@pytest.fixture(autouse=True)
def reset_default_settings():
    config.set_default_settings(None)
    yield
    config.set_default_settings(None)


def test_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("FLUENTHTTP_JSON_IGNORE_NONE", "false")
    monkeypatch.setenv("FLUENTHTTP_JSON_ENSURE_ASCII", "1")
    monkeypatch.setenv("FLUENTHTTP_JSON_INDENT", "4")
    monkeypatch.setenv("FLUENTHTTP_JSON_SORT_KEYS", "yes")
    monkeypatch.setenv("FLUENTHTTP_JSON_CONTENT_TYPE", "application/problem+json")
    monkeypatch.setenv("FLUENTHTTP_XML_CONTENT_TYPE", "text/xml")
    monkeypatch.setenv("FLUENTHTTP_XML_ENCODING", "utf-16")
    monkeypatch.setenv("FLUENTHTTP_XML_DECLARATION", "on")
    monkeypatch.setenv("FLUENTHTTP_HTTP_VERSION", "2.0")

    settings = config.load_settings()

    assert settings.json_ignore_none is False
    assert settings.json_ensure_ascii is True
    assert settings.json_indent == 4
    assert settings.json_sort_keys is True
    assert settings.json_content_type == "application/problem+json"
    assert settings.xml_content_type == "text/xml"
    assert settings.xml_encoding == "utf-16"
    assert settings.xml_declaration is True
    assert settings.http_version == "2.0"


def test_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("FLUENTHTTP_JSON_INDENT", "wide")
    monkeypatch.setenv("FLUENTHTTP_JSON_CONTENT_TYPE", "   ")
    settings = config.load_settings()
    assert settings.json_indent == FluentSettings.json_indent
    assert settings.json_content_type == config.DEFAULT_JSON_CONTENT_TYPE

    monkeypatch.setenv("FLUENTHTTP_JSON_INDENT", "-2")
    assert config.load_settings().json_indent is None


def test_unparseable_env_http_version_falls_back(monkeypatch):
    monkeypatch.setenv("FLUENTHTTP_HTTP_VERSION", "banana")
    assert config.load_settings().http_version == "1.1"

    builder = using_base(StubTransport("https://api.example.com/"))
    assert str(builder.version) == "1.1"


def test_default_settings_are_replaced_by_reference():
    custom = FluentSettings(http_version="2.0")
    config.set_default_settings(custom)
    assert config.get_default_settings() is custom

    builder = using_base(StubTransport("https://api.example.com/"))
    assert builder.settings is custom
    assert builder.version == HTTP_2

    config.set_default_settings(FluentSettings())
    assert builder.settings is custom
    assert builder.version == HTTP_2


def test_explicit_settings_win_over_default():
    config.set_default_settings(FluentSettings(http_version="2.0"))
    explicit = FluentSettings(http_version="1.0")
    builder = using_base(StubTransport("https://api.example.com/"), settings=explicit)
    assert str(builder.version) == "1.0"


@pytest.fixture
def package_logger():
    logger = logging.getLogger(log.LOGGER_NAME)
    saved_level, saved_handlers = logger.level, list(logger.handlers)
    yield logger
    logger.setLevel(saved_level)
    logger.handlers[:] = saved_handlers


def test_setup_logging_configures_the_package_logger(package_logger):
    root = logging.getLogger()
    root_level, root_handlers = root.level, list(root.handlers)
    before = len(package_logger.handlers)
    stream = io.StringIO()

    log.setup_logging("debug", stream=stream)
    log.setup_logging("debug", stream=stream)
    assert package_logger.level == logging.DEBUG
    assert len(package_logger.handlers) == before + 1

    logging.getLogger("fluenthttp.http.httpx_transport").debug("send failed")
    assert "DEBUG fluenthttp.http.httpx_transport: send failed" in stream.getvalue()

    log.setup_logging("not-a-level", stream=stream)
    assert package_logger.level == logging.WARNING
    assert root.level == root_level
    assert root.handlers == root_handlers


def test_argument_errors_name_the_parameter():
    err = ArgumentError("Missing or invalid route provided.", "route")
    assert err.param_name == "route"
    assert str(err) == "Missing or invalid route provided. (Parameter 'route')"
    assert isinstance(err, ValueError)

    null = ArgumentNullError("key")
    assert isinstance(null, TypeError)
    assert isinstance(null, ArgumentError)
    assert isinstance(ArgumentOutOfRangeError("x", "timeout"), ValueError)
    assert isinstance(RequestBuildError("x", "route"), ArgumentError)


def test_cancellation_errors_form_one_class():
    timeout = RequestTimeoutError(2.5)
    assert isinstance(timeout, RequestCancelledError)
    assert isinstance(timeout, TimeoutError)
    assert timeout.reason == "timeout"
    assert "2.5 seconds" in str(timeout)
    assert RequestCancelledError().reason == "cancelled"


@pytest.mark.parametrize(
    ("exc", "category"),
    [
        (None, ErrorCategory.NONE),
        (RequestTimeoutError(1), ErrorCategory.TIMEOUT),
        (httpx.ReadTimeout("slow"), ErrorCategory.TIMEOUT),
        (RequestCancelledError(), ErrorCategory.CANCELLED),
        (ArgumentError("bad", "key"), ErrorCategory.INVALID_REQUEST),
        (socket.gaierror("no host"), ErrorCategory.DNS_ERROR),
        (httpx.RemoteProtocolError("bad frame"), ErrorCategory.PROTOCOL_ERROR),
        (httpx.ConnectError("refused"), ErrorCategory.CONNECTION_ERROR),
        (ConnectionResetError(), ErrorCategory.CONNECTION_ERROR),
        (RuntimeError("?"), ErrorCategory.UNKNOWN_ERROR),
    ],
)
def test_categorize_exception(exc, category):
    assert categorize_exception(exc) is category


def test_error_category_reason_strings():
    assert error_category_to_reason(ErrorCategory.TIMEOUT) == "Request timed out"
    assert error_category_to_reason(ErrorCategory.NONE) == ""
    assert error_category_to_reason(None) == ""
