# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from fluenthttp import using_base, using_route
from fluenthttp.errors import ArgumentError, RequestBuildError
from fluenthttp.http.adapters import StubTransport
from fluenthttp.http.headers import CacheControl
from fluenthttp.http.models import HTTP_2, OptionKey, VersionPolicy

BASE = "https://api.example.com/"


@pytest.mark.asyncio
async def test_relative_route_and_query_compose_the_uri():
    builder = using_route(StubTransport(BASE), "posts").with_query_parameters({"userId": 1})
    request = await builder.build_request("GET")
    assert str(request.url) == "https://api.example.com/posts?userId=1"


@pytest.mark.asyncio
async def test_route_round_trips_without_query_parameters():
    request = await using_route(StubTransport(BASE), " foo/bar ").build_request()
    assert str(request.url) == "https://api.example.com/foo/bar"


@pytest.mark.asyncio
async def test_relative_route_follows_rfc3986_resolution():
    request = await using_route(StubTransport("https://api.example.com/v1"), "posts").build_request()
    assert str(request.url) == "https://api.example.com/posts"
    request = await using_route(StubTransport("https://api.example.com/v1/"), "posts").build_request()
    assert str(request.url) == "https://api.example.com/v1/posts"


@pytest.mark.asyncio
async def test_absolute_route_ignores_base_address():
    builder = using_route(StubTransport(BASE), "https://other.example.org/v2/items").with_query_parameter("a", "b")
    request = await builder.build_request()
    assert str(request.url) == "https://other.example.org/v2/items?a=b"


@pytest.mark.asyncio
async def test_base_address_alone_gets_the_query_appended():
    builder = using_base(StubTransport(BASE)).with_query_parameter("verbose").with_query_parameter("q", "a b")
    request = await builder.build_request()
    assert str(request.url) == "https://api.example.com/?verbose&q=a%20b"


@pytest.mark.asyncio
async def test_missing_uri_source_fails_at_build_time():
    builder = using_base(StubTransport())
    with pytest.raises(RequestBuildError) as excinfo:
        await builder.build_request()
    assert excinfo.value.param_name == "route"


@pytest.mark.asyncio
async def test_relative_route_without_base_address_fails_at_build_time():
    builder = using_route(StubTransport(), "posts")
    with pytest.raises(RequestBuildError):
        await builder.build_request()


@pytest.mark.asyncio
async def test_absolute_route_without_base_address_is_fine():
    request = await using_route(StubTransport(), "https://api.example.com/ping").build_request()
    assert str(request.url) == "https://api.example.com/ping"


@pytest.mark.asyncio
async def test_method_is_normalized_and_validated():
    builder = using_base(StubTransport(BASE))
    request = await builder.build_request("post")
    assert request.method == "POST"
    with pytest.raises(ArgumentError) as excinfo:
        await builder.build_request("  ")
    assert excinfo.value.param_name == "method"
    with pytest.raises(ArgumentError):
        await builder.build_request("GE T")


@pytest.mark.asyncio
async def test_deferred_configurator_runs_only_at_materialization():
    calls = []
    builder = using_base(StubTransport(BASE)).configure_deferred(lambda b: calls.append("ran"))
    assert calls == []
    await builder.build_request()
    assert calls == ["ran"]
    await builder.build_request()
    assert calls == ["ran", "ran"]


@pytest.mark.asyncio
async def test_reused_builder_does_not_accumulate_deferred_state():
    builder = using_base(StubTransport(BASE)).configure_deferred(
        lambda b: b.with_header("X-Late", "1").with_query_parameter("late")
    )
    first = await builder.build_request()
    second = await builder.build_request()
    assert first.headers.get_list("X-Late") == ["1"]
    assert second.headers.get_list("X-Late") == ["1"]
    assert str(second.url) == "https://api.example.com/?late"
    assert "X-Late" not in builder.headers
    assert builder.query_parameters.is_empty


@pytest.mark.asyncio
async def test_predicate_is_evaluated_on_every_build():
    state = {"debug": False}
    builder = using_base(StubTransport(BASE)).when(
        lambda: state["debug"], lambda b: b.with_query_parameter("debug")
    )
    assert str((await builder.build_request()).url) == "https://api.example.com/"
    state["debug"] = True
    assert str((await builder.build_request()).url) == "https://api.example.com/?debug"


@pytest.mark.asyncio
async def test_deferred_configurators_run_in_registration_order():
    order = []
    builder = using_base(StubTransport(BASE))
    builder.configure_deferred(lambda b: order.append(1))
    builder.when(lambda: True, lambda b: order.append(2))
    builder.configure_deferred(lambda b: order.append(3))
    await builder.build_request()
    assert order == [1, 2, 3]


@pytest.mark.asyncio
async def test_configurators_registered_during_build_are_not_run_in_that_build():
    calls = []

    def register_more(b):
        calls.append("outer")
        b.configure_deferred(lambda inner: calls.append("inner"))

    builder = using_base(StubTransport(BASE)).configure_deferred(register_more)
    await builder.build_request()
    assert calls == ["outer"]
    assert len(builder.deferred_configurators) == 1


@pytest.mark.asyncio
async def test_materialization_phases_run_in_order():
    seen = []
    builder = using_base(StubTransport(BASE))
    builder.with_header("X-Eager", "1")
    builder.with_cookie("session", "abc")

    def inspect_headers(headers):
        seen.append(("headers", headers.get("X-Eager"), headers.get("X-Deferred"), "Cookie" in headers))

    def inspect_options(options):
        seen.append(("options", options.get("first")))

    builder.configure_headers(inspect_headers)
    builder.with_option("first", 1)
    builder.configure_options(inspect_options)
    builder.configure_deferred(lambda b: b.with_header("X-Deferred", "d"))

    request = await builder.build_request()
    assert seen == [("headers", "1", "d", False), ("options", 1)]
    assert request.headers.get("Cookie") == "session=abc"


@pytest.mark.asyncio
async def test_deferred_header_overrides_eager_single_value():
    builder = using_base(StubTransport(BASE)).with_header("X", "1")
    builder.configure_headers(lambda h: h.set("X", "2"))
    request = await builder.build_request()
    assert request.headers.get_list("X") == ["2"]


@pytest.mark.asyncio
async def test_deferred_header_appends_to_multi_value_slot():
    builder = using_base(StubTransport(BASE)).with_header("X", "1")
    builder.configure_headers(lambda h: h.add("X", "2"))
    request = await builder.build_request()
    assert request.headers.get_list("X") == ["1", "2"]


@pytest.mark.asyncio
async def test_trace_headers_aggregate_without_loss():
    builder = using_base(StubTransport(BASE))
    builder.with_header("X-Trace-Id", "t1").with_header("X-Request-Id", "r1")
    builder.with_headers([("X-Trace-Id", "t2"), ("X-Other", "o")])
    request = await builder.build_request()
    assert request.headers.get_list("X-Trace-Id") == ["t1", "t2"]
    assert request.headers.get("X-Request-Id") == "r1"
    assert request.headers.get("X-Other") == "o"


@pytest.mark.asyncio
async def test_configure_headers_may_set_reserved_headers():
    builder = using_base(StubTransport(BASE)).configure_headers(lambda h: h.set("Host", "internal.example"))
    request = await builder.build_request()
    assert request.headers.get("Host") == "internal.example"


@pytest.mark.asyncio
async def test_typed_headers_are_validated_only_at_build_time():
    builder = using_base(StubTransport(BASE)).with_oauth_bearer_token("bad\r\ntoken")
    with pytest.raises(ArgumentError):
        await builder.build_request()

    builder = using_base(StubTransport(BASE)).configure_headers(lambda h: h.add("Bad Name", "x"))
    with pytest.raises(ArgumentError):
        await builder.build_request()


@pytest.mark.asyncio
async def test_authentication_helpers():
    builder = using_base(StubTransport(BASE)).with_basic_authentication("user", "pass")
    assert (await builder.build_request()).headers.get("Authorization") == "Basic dXNlcjpwYXNz"

    builder = using_base(StubTransport(BASE)).with_basic_authentication("prebuilt")
    assert (await builder.build_request()).headers.get("Authorization") == "Basic prebuilt"

    builder = using_base(StubTransport(BASE)).with_oauth_bearer_token("a").with_oauth_bearer_token("b")
    request = await builder.build_request()
    assert request.headers.get_list("Authorization") == ["Bearer b"]

    builder = using_base(StubTransport(BASE)).with_authentication("ApiKey", "k")
    assert (await builder.build_request()).headers.get("Authorization") == "ApiKey k"


@pytest.mark.asyncio
async def test_accept_accumulates_and_cache_control_replaces():
    builder = using_base(StubTransport(BASE))
    builder.with_accept("application/json").with_accept("text/plain", "*/*")
    builder.with_cache_control("no-store").with_cache_control(CacheControl(no_cache=True, max_age=60))
    request = await builder.build_request()
    assert request.headers.accept == ["application/json", "text/plain", "*/*"]
    assert request.headers.get_list("Cache-Control") == ["no-cache, max-age=60"]


@pytest.mark.asyncio
async def test_cookies_serialize_into_one_header():
    builder = using_base(StubTransport(BASE))
    builder.with_cookie("session", "a").with_cookie("session", "b").with_cookie("theme", "dark")
    request = await builder.build_request()
    assert request.headers.get_list("Cookie") == ["session=b; theme=dark"]


@pytest.mark.asyncio
async def test_no_cookie_header_without_cookies():
    request = await using_base(StubTransport(BASE)).build_request()
    assert "Cookie" not in request.headers


@pytest.mark.asyncio
async def test_options_apply_in_registration_order():
    trace = OptionKey("trace")
    builder = using_base(StubTransport(BASE))
    builder.with_option(trace, "first")
    builder.configure_options(lambda o: o.set("trace", o["trace"] + "-then-action"))
    builder.with_option("tenant", "acme")
    request = await builder.build_request()
    assert request.options[trace] == "first-then-action"
    assert request.options.try_get("tenant") == (True, "acme")
    assert request.options.try_get("missing") == (False, None)


@pytest.mark.asyncio
async def test_version_and_policy_are_carried_on_the_request():
    builder = using_base(StubTransport(BASE)).using_version("2.0", VersionPolicy.REQUEST_VERSION_EXACT)
    request = await builder.build_request()
    assert request.version == HTTP_2
    assert request.version_policy is VersionPolicy.REQUEST_VERSION_EXACT


@pytest.mark.asyncio
async def test_multipart_content_disables_expect_continue():
    builder = using_base(StubTransport(BASE)).with_multipart_content({"file": ("a.txt", b"hello", "text/plain")})
    request = await builder.build_request("POST")
    assert request.headers.expect_continue is False

    plain = await using_base(StubTransport(BASE)).with_content("x").build_request("POST")
    assert plain.headers.expect_continue is None


@pytest.mark.asyncio
async def test_buffering_happens_before_header_configurators():
    async def chunks():
        yield b"hello "
        yield b"world"

    seen = []
    builder = using_base(StubTransport(BASE)).with_stream_content(chunks(), "text/plain").with_buffered_content()
    builder.configure_headers(lambda h: seen.append(builder.content.is_buffered))
    request = await builder.build_request("POST")
    assert seen == [True]
    assert request.content.is_buffered
    assert request.request_kwargs()["content"] == b"hello world"


@pytest.mark.asyncio
async def test_unbuffered_stream_stays_lazy():
    def chunks():
        yield b"data"

    request = await using_base(StubTransport(BASE)).with_stream_content(chunks()).build_request("POST")
    assert not request.content.is_buffered
