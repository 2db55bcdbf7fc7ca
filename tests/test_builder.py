import json

import pytest

from conftest import RecordingTransport
from echo import echo
from echo.builder import EchoBuilder
from echo.exceptions import EchoError, InvalidArgumentError
from echo.models import EchoOptions, HttpMethod
from echo.promise import EchoPromiseStatus


class TestChain:
    def test_singular_fields_last_write_wins(self):
        builder = (
            EchoBuilder()
            .base_url("https://a.example.com")
            .url("/first")
            .post("/second")
            .base_url("https://b.example.com")
            .method("PUT")
            .body({"v": 1})
            .body({"v": 2})
        )
        options = builder.request_options
        assert options.base_url == "https://b.example.com"
        assert options.url == "/second"
        assert options.method is HttpMethod.PUT
        assert options.body == {"v": 2}

    def test_headers_union_later_wins(self):
        builder = (
            EchoBuilder()
            .header("Accept", "text/plain")
            .headers({"X-One": "1", "X-Two": "2"})
            .header("Accept", "application/json")
            .headers({"X-Two": "two"})
        )
        assert builder.request_options.headers == {
            "Accept": "application/json",
            "X-One": "1",
            "X-Two": "two",
        }

    def test_query_aliases(self):
        builder = EchoBuilder().parameter("a", "1").query("b", "2").queries({"a": "3"}).parameters({"c": 4})
        assert builder.request_options.parameters == {"a": "3", "b": "2", "c": 4}

    @pytest.mark.parametrize(
        "verb, method",
        [
            ("get", HttpMethod.GET),
            ("post", HttpMethod.POST),
            ("patch", HttpMethod.PATCH),
            ("put", HttpMethod.PUT),
            ("delete", HttpMethod.DELETE),
            ("head", HttpMethod.HEAD),
            ("options", HttpMethod.OPTIONS),
        ],
    )
    def test_verb_sets_url_and_method(self, verb, method):
        options = getattr(EchoBuilder(), verb)("/things").request_options
        assert options.url == "/things"
        assert options.method is method

    def test_method_rejects_unknown_verb(self):
        with pytest.raises(InvalidArgumentError):
            EchoBuilder().method("FETCH")

    def test_path_rewrites_stored_url(self):
        assert EchoBuilder().url("/users/:id").path("id", "42").request_options.url == "/users/42"
        assert EchoBuilder().url("/users/{id}").path("id", "42").request_options.url == "/users/42"

    def test_path_before_url_is_noop(self):
        assert EchoBuilder().path("id", "42").url("/users/:id").request_options.url == "/users/:id"

    def test_chain_returns_new_builder(self):
        base = EchoBuilder().base_url("https://api.example.com").header("Accept", "application/json")
        users = base.get("/users")
        posts = base.post("/posts").header("X-Trace", "1")
        assert users is not base
        assert base.request_options.url is None
        assert base.request_options.headers == {"Accept": "application/json"}
        assert users.request_options.url == "/users"
        assert posts.request_options.headers == {"Accept": "application/json", "X-Trace": "1"}

    def test_constructor_copies_options(self):
        headers = {"A": "1"}
        builder = EchoBuilder(EchoOptions(headers=headers))
        headers["B"] = "2"
        assert builder.request_options.headers == {"A": "1"}


class TestBuild:
    def test_defaults_to_get(self):
        request = EchoBuilder().url("/x").build()
        assert request.method == "GET"
        assert request.url == "/x"
        assert request.headers == {}
        assert request.params == {}
        assert request.body == b""

    def test_url_concatenation(self):
        request = EchoBuilder().base_url("https://api.example.com/v1").get("/users").build()
        assert request.url == "https://api.example.com/v1/users"

    def test_empty_url(self):
        assert EchoBuilder().build().url == ""

    def test_parameters_handed_to_transport(self):
        request = EchoBuilder().get("/search").query("q", "echo").build()
        assert request.url == "/search"
        assert request.params == {"q": "echo"}

    def test_body_serialized_as_json(self):
        request = EchoBuilder().post("/users").body({"name": "test"}).build()
        assert json.loads(request.body) == {"name": "test"}
        assert request.headers["Content-Type"] == "application/json"

    def test_explicit_content_type_kept(self):
        request = (
            EchoBuilder()
            .post("/users")
            .header("content-type", "application/vnd.api+json")
            .body({"name": "test"})
            .build()
        )
        assert request.headers == {"content-type": "application/vnd.api+json"}

    def test_unserializable_body(self):
        with pytest.raises(EchoError):
            EchoBuilder().post("/users").body({"when": object()}).build()


class TestExecute:
    @pytest.mark.asyncio
    async def test_dispatches_once(self, transport):
        builder = EchoBuilder(client=transport).url("/x")
        promise = builder.execute()
        await promise
        assert len(transport.requests) == 1
        assert transport.last_request.method == "GET"
        assert transport.last_request.url == "/x"

    @pytest.mark.asyncio
    async def test_dispatched_request_reflects_chain(self, transport):
        promise = (
            EchoBuilder(client=transport)
            .base_url("https://api.example.com")
            .patch("/users/{id}")
            .path("id", 5)
            .headers({"Authorization": "Bearer a"})
            .header("Authorization", "Bearer b")
            .query("fields", "name")
            .body({"name": "new"})
            .execute()
        )
        await promise
        sent = transport.last_request
        assert sent.method == "PATCH"
        assert sent.url == "https://api.example.com/users/5"
        assert sent.headers["Authorization"] == "Bearer b"
        assert sent.params == {"fields": "name"}
        assert json.loads(sent.body) == {"name": "new"}
        assert promise.request == sent

    @pytest.mark.asyncio
    async def test_returns_loading_promise(self, transport):
        promise = EchoBuilder(client=transport).url("/x").execute()
        assert promise.status is EchoPromiseStatus.LOADING
        assert promise.is_loading()
        await promise
        assert promise.is_success()

    @pytest.mark.asyncio
    async def test_non_2xx_is_error(self):
        transport = RecordingTransport(status_code=404, data={"message": "missing"})
        promise = EchoBuilder(client=transport).get("/users/1").execute()
        with pytest.raises(EchoError) as exc_info:
            await promise
        assert promise.is_error()
        assert exc_info.value.status_code == 404
        assert exc_info.value.response.data == {"message": "missing"}

    @pytest.mark.asyncio
    async def test_transport_exception_wrapped(self):
        cause = ConnectionError("connection refused")
        transport = RecordingTransport(error=cause)
        promise = EchoBuilder(client=transport).get("/users").execute()
        with pytest.raises(EchoError) as exc_info:
            await promise
        assert exc_info.value.__cause__ is cause
        assert promise.require_error() is exc_info.value

    @pytest.mark.asyncio
    async def test_serialization_failure_settles_as_error(self, transport):
        promise = EchoBuilder(client=transport).post("/users").body({"when": object()}).execute()
        with pytest.raises(EchoError):
            await promise
        assert promise.is_error()
        assert isinstance(promise.require_error().__cause__, TypeError)
        assert transport.requests == []

    def test_execute_requires_running_loop(self, transport):
        with pytest.raises(RuntimeError):
            EchoBuilder(client=transport).url("/x").execute()


class TestEchoFactory:
    def test_seeded_from_config(self, monkeypatch):
        monkeypatch.setattr("echo.echo_config.BASE_URL", "https://api.example.com")
        monkeypatch.setattr("echo.echo_config.DEFAULT_HEADERS", {"X-Api-Key": "secret"})
        options = echo().get("/users").request_options
        assert options.base_url == "https://api.example.com"
        assert options.headers == {"X-Api-Key": "secret"}

    def test_unconfigured(self, monkeypatch):
        monkeypatch.setattr("echo.echo_config.BASE_URL", None)
        monkeypatch.setattr("echo.echo_config.DEFAULT_HEADERS", {})
        assert echo().request_options == EchoOptions()
