"""
Unit tests for HTTP router.
"""

import pytest

from minihttp.http.request import HTTPRequest
from minihttp.http.response import HTTPResponse, TEXT_PLAIN, content_response, ok
from minihttp.http.router import Router, RouteNotFound
from minihttp.http.status_codes import HTTPStatus


def make_request(method: str, path: str) -> HTTPRequest:
    return HTTPRequest(method=method, path=path)


class TestRouter:
    """Tests for Router class."""

    def test_exact_root_match(self):
        """Test that "/" only matches "/"."""
        router = Router()
        router.add_route("/", lambda r: ok(), "GET")

        assert router.match("GET", "/") is not None
        assert router.match("GET", "/x") is None
        assert router.match("GET", "") is None

    def test_static_route(self):
        """Test static route matching."""
        router = Router()

        @router.get("/user-agent")
        def handler(request):
            return ok()

        match = router.match("GET", "/user-agent")

        assert match is not None
        assert match.route.handler is handler
        assert match.params == {}
        assert router.match("GET", "/user-agent/extra") is None

    @pytest.mark.parametrize("path,rest", [
        ("/echo/abc", "abc"),
        ("/echo/a/b/c", "a/b/c"),
        ("/echo/", ""),
        ("/echo/%20?x=1", "%20?x=1"),
        ("/echo/../..", "../.."),
    ])
    def test_wildcard_captures_everything(self, path, rest):
        """Test that *rest is a plain prefix cut."""
        router = Router()
        router.get("/echo/*rest")(lambda r: ok())

        match = router.match("GET", path)

        assert match is not None
        assert match.params == {"rest": rest}

    def test_wildcard_needs_prefix_slash(self):
        """Test that "/echo" does not match "/echo/*rest"."""
        router = Router()
        router.get("/echo/*rest")(lambda r: ok())

        assert router.match("GET", "/echo") is None
        assert router.match("GET", "/echoes/x") is None

    def test_anonymous_wildcard(self):
        """Test that a bare "*" is captured as "wildcard"."""
        router = Router()
        router.get("/static/*")(lambda r: ok())

        assert router.match("GET", "/static/css/a.css").params == {"wildcard": "css/a.css"}

    def test_method_compared_exactly(self):
        """Test that method mismatch is no match."""
        router = Router()
        router.get("/")(lambda r: ok())

        assert router.match("POST", "/") is None
        assert router.match("get", "/") is None

    def test_first_match_wins(self):
        """Test that earlier routes shadow later ones."""
        router = Router()
        router.get("/echo/*rest")(lambda r: content_response("wildcard", TEXT_PLAIN))
        router.get("/echo/special")(lambda r: content_response("special", TEXT_PLAIN))

        response = router.handle(make_request("GET", "/echo/special"))

        assert response.content == b"wildcard"

    def test_same_path_different_methods(self):
        """Test GET and POST on one pattern."""
        router = Router()
        router.get("/files/*rest")(lambda r: content_response("read", TEXT_PLAIN))
        router.post("/files/*rest")(lambda r: content_response("write", TEXT_PLAIN))

        assert router.handle(make_request("GET", "/files/a")).content == b"read"
        assert router.handle(make_request("POST", "/files/a")).content == b"write"

    def test_routes_in_registration_order(self):
        """Test routes() listing."""
        router = Router()
        router.get("/")(lambda r: ok())
        router.post("/files/*rest")(lambda r: ok())

        assert [(r.method, r.path) for r in router.routes()] == [
            ("GET", "/"),
            ("POST", "/files/*rest"),
        ]


class TestRouterHandle:
    """Tests for Router.handle dispatching."""

    def test_no_match_is_404(self):
        """Test unmatched requests."""
        router = Router()
        router.get("/")(lambda r: ok())

        response = router.handle(make_request("GET", "/missing"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_wrong_method_is_404(self):
        """Test that there is no 405."""
        router = Router()
        router.get("/")(lambda r: ok())

        response = router.handle(make_request("DELETE", "/"))

        assert response.status == HTTPStatus.NOT_FOUND

    def test_path_params_passed_to_handler(self):
        """Test that the handler receives the captured parameters."""
        router = Router()
        seen = []

        @router.get("/echo/*rest")
        def handler(request: HTTPRequest) -> HTTPResponse:
            seen.append(request.path_params)
            return ok()

        original = make_request("GET", "/echo/hi")
        router.handle(original)

        assert seen == [{"rest": "hi"}]
        assert original.path_params == {}

    def test_route_not_found_becomes_404(self):
        """Test that handlers can signal a missing resource."""
        router = Router()

        @router.get("/files/*rest")
        def handler(request):
            raise RouteNotFound("gone")

        response = router.handle(make_request("GET", "/files/x"))

        assert response.status == HTTPStatus.NOT_FOUND

    def test_other_errors_propagate(self):
        """Test that unexpected exceptions are not swallowed by the router."""
        router = Router()

        @router.get("/")
        def handler(request):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            router.handle(make_request("GET", "/"))
