"""Tests for waymark.matcher: resolution order and 404 / 405 disambiguation."""

import pytest

from waymark.collection import RouteCollection
from waymark.exceptions import MethodNotAllowed, RouteNotFound
from waymark.matcher import UrlMatcher
from waymark.route import Route


@pytest.fixture
def routes() -> RouteCollection:
    collection = RouteCollection()
    collection.add("home", Route("/", {"_controller": "HomeController::index"}))
    collection.add("about", Route("/about"))
    collection.add(
        "blog_list",
        Route("/blog/{page}", {"page": 1}, {"page": r"\d+"}),
    )
    collection.add(
        "blog_post",
        Route(
            "/blog/{year}/{month}/{slug}",
            requirements={"year": r"\d{4}", "month": r"\d{2}", "slug": "[a-z0-9-]+"},
        ),
    )
    collection.add("api_create", Route("/api/users", methods=["POST", "PUT"]))
    collection.add("article_show", Route("/article/{id}", requirements={"id": r"\d+"}, methods=["GET"]))
    collection.add("article_delete", Route("/article/{id}", requirements={"id": r"\d+"}, methods=["DELETE"]))
    return collection


class TestMatch:
    def test_static_route(self, routes: RouteCollection) -> None:
        params = UrlMatcher(routes).match("/")
        assert params["_controller"] == "HomeController::index"
        assert params["_route"] == "home"

    def test_dynamic_route(self, routes: RouteCollection) -> None:
        params = UrlMatcher(routes).match("/article/42")
        assert params == {"id": "42", "_route": "article_show"}

    def test_multiple_parameters(self, routes: RouteCollection) -> None:
        params = UrlMatcher(routes).match("/blog/2024/05/my-article")
        assert params["year"] == "2024"
        assert params["month"] == "05"
        assert params["slug"] == "my-article"
        assert params["_route"] == "blog_post"

    def test_default_values(self, routes: RouteCollection) -> None:
        matcher = UrlMatcher(routes)
        assert matcher.match("/blog")["page"] == 1
        assert matcher.match("/blog/2")["page"] == "2"

    def test_method_is_case_insensitive(self, routes: RouteCollection) -> None:
        assert UrlMatcher(routes).match("/api/users", "post")["_route"] == "api_create"

    def test_second_route_with_same_path_other_method(self, routes: RouteCollection) -> None:
        assert UrlMatcher(routes).match("/article/42", "DELETE")["_route"] == "article_delete"

    def test_optional_placeholder_at_root(self) -> None:
        collection = RouteCollection()
        collection.add("index", Route("/{page}", {"page": "1"}, {"page": r"\d+"}))
        matcher = UrlMatcher(collection)
        assert matcher.match("/") == {"page": "1", "_route": "index"}
        assert matcher.match("/2") == {"page": "2", "_route": "index"}
        assert not matcher.has_match("")


class TestPrecedence:
    def test_first_registered_wins(self) -> None:
        collection = RouteCollection()
        collection.add("route1", Route("/same", {"_controller": "Controller1"}))
        collection.add("route2", Route("/same", {"_controller": "Controller2"}))
        params = UrlMatcher(collection).match("/same")
        assert params["_route"] == "route1"
        assert params["_controller"] == "Controller1"

    def test_registration_order_beats_specificity(self) -> None:
        collection = RouteCollection()
        collection.add("dynamic", Route("/{page}"))
        collection.add("about", Route("/about"))
        assert UrlMatcher(collection).match("/about")["_route"] == "dynamic"

        reordered = RouteCollection()
        reordered.add("about", Route("/about"))
        reordered.add("dynamic", Route("/{page}"))
        assert UrlMatcher(reordered).match("/about")["_route"] == "about"

    def test_method_restricted_route_falls_through(self) -> None:
        collection = RouteCollection()
        collection.add("create", Route("/items", methods=["POST"]))
        collection.add("list", Route("/items"))
        assert UrlMatcher(collection).match("/items", "GET")["_route"] == "list"


class TestFailures:
    def test_route_not_found(self, routes: RouteCollection) -> None:
        with pytest.raises(RouteNotFound, match='No route found for "/nonexistent"') as info:
            UrlMatcher(routes).match("/nonexistent")
        assert info.value.path == "/nonexistent"
        assert info.value.status_code == 404

    def test_requirement_mismatch_is_not_found(self, routes: RouteCollection) -> None:
        with pytest.raises(RouteNotFound):
            UrlMatcher(routes).match("/article/abc")

    def test_method_not_allowed(self, routes: RouteCollection) -> None:
        with pytest.raises(MethodNotAllowed) as info:
            UrlMatcher(routes).match("/api/users", "GET")
        assert info.value.allowed_methods == ("POST", "PUT")
        assert info.value.status_code == 405
        assert info.value.headers == {"Allow": "POST, PUT"}

    def test_allowed_methods_union(self, routes: RouteCollection) -> None:
        with pytest.raises(MethodNotAllowed) as info:
            UrlMatcher(routes).match("/article/42", "PATCH")
        assert info.value.allowed_methods == ("DELETE", "GET")

    def test_allowed_methods_deduplicated(self) -> None:
        collection = RouteCollection()
        collection.add("a", Route("/x", methods=["GET", "POST"]))
        collection.add("b", Route("/x", methods=["POST"]))
        with pytest.raises(MethodNotAllowed) as info:
            UrlMatcher(collection).match("/x", "DELETE")
        assert info.value.allowed_methods == ("GET", "POST")

    def test_probe_leaves_methods_untouched(self, routes: RouteCollection) -> None:
        with pytest.raises(MethodNotAllowed):
            UrlMatcher(routes).match("/api/users", "GET")
        assert routes.get("api_create").methods == ("POST", "PUT")

    def test_probe_works_on_frozen_routes(self, routes: RouteCollection) -> None:
        routes.freeze()
        with pytest.raises(MethodNotAllowed):
            UrlMatcher(routes).match("/api/users", "GET")


class TestConvenience:
    def test_match_route_name(self, routes: RouteCollection) -> None:
        assert UrlMatcher(routes).match_route_name("/about") == "about"

    def test_match_route_name_raises(self, routes: RouteCollection) -> None:
        with pytest.raises(RouteNotFound):
            UrlMatcher(routes).match_route_name("/nonexistent")

    def test_has_match(self, routes: RouteCollection) -> None:
        matcher = UrlMatcher(routes)
        assert matcher.has_match("/")
        assert matcher.has_match("/api/users", "POST")
        assert not matcher.has_match("/nonexistent")
        assert not matcher.has_match("/api/users", "GET")

    def test_routes_property(self, routes: RouteCollection) -> None:
        assert UrlMatcher(routes).routes is routes
