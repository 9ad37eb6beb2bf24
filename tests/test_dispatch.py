"""Tests for Router.handle_request against minimal request/response objects.

These stand in for whatever transport embeds the router: anything with a
method, a path (or positional params), and a writable ``params``.
"""

from dataclasses import dataclass, field
from typing import Any

import pytest

from waypost.routing.router import Router


@dataclass
class FakeRequest:
    method: str
    path: str | None = None
    params: Any = field(default_factory=dict)


class FakeResponse:
    def __init__(self) -> None:
        self.status: int | None = None
        self.ended = False

    def set_status(self, status: int) -> "FakeResponse":
        self.status = status
        return self

    def end(self) -> None:
        self.ended = True


class AsyncFakeResponse(FakeResponse):
    async def end(self) -> None:  # type: ignore[override]
        self.ended = True


class Recorder:
    """A final handler that remembers what it was called with."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def __call__(self, request, response) -> None:
        self.calls.append(dict(request.params))


class TestDispatch:
    async def test_example_get(self) -> None:
        h = Recorder()
        router = Router()
        router.route("/users/:id").get(h)

        response = FakeResponse()
        await router.handle_request(FakeRequest("GET", "/users/42"), response)
        assert h.calls == [{"id": "42"}]
        assert response.status is None

    async def test_example_post_is_404(self) -> None:
        h = Recorder()
        router = Router()
        router.route("/users/:id").get(h)

        response = FakeResponse()
        await router.handle_request(FakeRequest("POST", "/users/42"), response)
        assert h.calls == []
        assert response.status == 404
        assert response.ended is True

    async def test_default_404_awaits_async_end(self) -> None:
        response = AsyncFakeResponse()
        await Router().handle_request(FakeRequest("GET", "/nowhere"), response)
        assert response.status == 404
        assert response.ended is True

    async def test_not_found_chain_replaces_404(self) -> None:
        calls: list[str] = []

        def log(request, response, proceed):
            calls.append("log")
            return proceed()

        def page(request, response) -> None:
            calls.append("page")

        router = Router()
        router.route("/").get(Recorder())
        router.not_found(log, page)

        response = FakeResponse()
        await router.handle_request(FakeRequest("GET", "/missing"), response)
        assert calls == ["log", "page"]
        assert response.status is None
        assert response.ended is False

    async def test_first_registered_route_wins(self) -> None:
        general, specific = Recorder(), Recorder()
        router = Router()
        router.route("/users/:name").get(general)
        router.route("/users/admin").get(specific)

        await router.handle_request(FakeRequest("GET", "/users/admin"), FakeResponse())
        assert general.calls == [{"name": "admin"}]
        assert specific.calls == []

    async def test_params_replace_previous_data(self) -> None:
        h = Recorder()
        router = Router().route("/items/:sku").get(h)
        request = FakeRequest("GET", "/items/abc", params={"stale": "value"})

        await router.handle_request(request, FakeResponse())
        assert request.params == {"sku": "abc"}

    async def test_each_dispatch_gets_a_fresh_mapping(self) -> None:
        router = Router().route("/items/:sku").get(Recorder())
        one, two = FakeRequest("GET", "/items/a"), FakeRequest("GET", "/items/b")
        await router.handle_request(one, FakeResponse())
        await router.handle_request(two, FakeResponse())
        assert one.params == {"sku": "a"}
        assert two.params == {"sku": "b"}
        assert one.params is not two.params

    async def test_bad_encoding_yields_none(self) -> None:
        h = Recorder()
        router = Router().route("/users/:id").get(h)
        await router.handle_request(FakeRequest("GET", "/users/%E0%A4%A"), FakeResponse())
        assert h.calls == [{"id": None}]

    async def test_positional_param_fallback(self) -> None:
        h = Recorder()
        router = Router().route("/users/:id").get(h)
        await router.handle_request(FakeRequest("GET", None, params={0: "users/7"}), FakeResponse())
        assert h.calls == [{"id": "7"}]

    async def test_empty_positional_param_is_root(self) -> None:
        h = Recorder()
        router = Router().route("/").get(h)
        await router.handle_request(FakeRequest("GET", None, params={0: ""}), FakeResponse())
        assert h.calls == [{}]

    async def test_only_first_handler_invoked_directly(self) -> None:
        calls: list[str] = []

        def auth(request, response, proceed) -> None:
            calls.append("auth")
            response.set_status(401)

        def handler(request, response) -> None:
            calls.append("handler")

        router = Router().route("/admin").get(auth, handler)
        response = FakeResponse()
        await router.handle_request(FakeRequest("GET", "/admin"), response)
        assert calls == ["auth"]
        assert response.status == 401

    async def test_unsupported_method_falls_to_not_found(self) -> None:
        router = Router().route("/").get(Recorder())
        response = FakeResponse()
        await router.handle_request(FakeRequest("TRACE", "/"), response)
        assert response.status == 404

    async def test_handler_exception_propagates(self) -> None:
        def broken(request, response) -> None:
            raise RuntimeError("handler failed")

        router = Router().route("/").get(broken)
        with pytest.raises(RuntimeError, match="handler failed"):
            await router.handle_request(FakeRequest("GET", "/"), FakeResponse())
