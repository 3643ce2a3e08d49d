"""Tests for request building: URLs, query strings, headers and bodies."""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import pytest

from sparkmail import __version__
from sparkmail.client import SparkPost


def _make_sparkpost(**options) -> SparkPost:
    return SparkPost({"key": "test-key", **options})


# ---------------------------------------------------------------------------
# get_url
# ---------------------------------------------------------------------------


class TestGetUrl:
    def test_default_base(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_url("transmissions") == "https://api.sparkpost.com:443/api/v1/transmissions"

    @pytest.mark.parametrize("path", ["foo", "/foo", "foo/", "/foo/"])
    def test_slashes_are_normalised(self, path: str) -> None:
        sp = _make_sparkpost()
        assert sp.get_url(path) == "https://api.sparkpost.com:443/api/v1/foo"

    def test_nested_path_kept(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_url("/templates/abc/preview").endswith("/api/v1/templates/abc/preview")

    def test_empty_path(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_url("") == "https://api.sparkpost.com:443/api/v1/"

    @pytest.mark.parametrize("port", [None, 0])
    def test_falsy_port_omitted(self, port) -> None:
        sp = _make_sparkpost(port=port)
        assert sp.get_url("foo") == "https://api.sparkpost.com/api/v1/foo"

    def test_custom_host_protocol_version(self) -> None:
        sp = _make_sparkpost(host="api.eu.sparkpost.com", protocol="http", port=8080, version="v2")
        assert sp.get_url("foo") == "http://api.eu.sparkpost.com:8080/api/v2/foo"

    def test_query_params_joined(self) -> None:
        sp = _make_sparkpost(port=None)
        url = sp.get_url("metrics", {"from": "2024-01-01T00:00", "limit": 5})
        assert url == "https://api.sparkpost.com/api/v1/metrics?from=2024-01-01T00:00&limit=5"

    def test_list_values_comma_joined(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_url("events", {"ids": ["a", "b", "c"]}).endswith("?ids=a,b,c")

    def test_tuple_values_comma_joined(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_url("events", {"ids": ("a", "b")}).endswith("?ids=a,b")

    def test_bool_values_lowercased(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_url("templates", {"draft": False}).endswith("?draft=false")

    def test_no_question_mark_without_params(self) -> None:
        sp = _make_sparkpost()
        assert "?" not in sp.get_url("templates", {})

    def test_values_not_percent_encoded(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_url("x", {"q": "a b"}).endswith("?q=a b")


# ---------------------------------------------------------------------------
# get_http_headers
# ---------------------------------------------------------------------------


class TestGetHttpHeaders:
    def test_defaults(self) -> None:
        sp = _make_sparkpost()
        assert sp.get_http_headers() == {
            "Authorization": "test-key",
            "Content-Type": "application/json",
            "User-Agent": f"python-sparkmail/{__version__}",
        }

    def test_caller_headers_kept(self) -> None:
        sp = _make_sparkpost()
        headers = sp.get_http_headers({"X-MSYS-SUBACCOUNT": "123"})
        assert headers["X-MSYS-SUBACCOUNT"] == "123"

    def test_defaults_win_on_collision(self) -> None:
        sp = _make_sparkpost()
        headers = sp.get_http_headers({"Content-Type": "text/plain", "Authorization": "other"})
        assert headers["Content-Type"] == "application/json"
        assert headers["Authorization"] == "test-key"


# ---------------------------------------------------------------------------
# build_request
# ---------------------------------------------------------------------------


class TestBuildRequest:
    def test_get_payload_goes_to_query(self) -> None:
        sp = _make_sparkpost()
        request = sp.build_request("GET", "templates", {"draft": "true"})
        assert request.url.query == b"draft=true"
        assert request.content == b""

    def test_post_payload_goes_to_body(self) -> None:
        sp = _make_sparkpost()
        payload = {"recipients": [{"address": "a@example.com"}], "options": {"sandbox": True}}
        request = sp.build_request("POST", "transmissions", payload)
        assert json.loads(request.content) == payload
        assert request.url.query == b""

    def test_post_without_payload_sends_empty_object(self) -> None:
        sp = _make_sparkpost()
        request = sp.build_request("DELETE", "templates/abc")
        assert request.content == b"{}"

    def test_list_payload_serialised(self) -> None:
        sp = _make_sparkpost()
        request = sp.build_request("PUT", "suppression-list", [{"recipient": "a@example.com"}])
        assert json.loads(request.content) == [{"recipient": "a@example.com"}]

    def test_method_trimmed_and_uppercased(self) -> None:
        sp = _make_sparkpost()
        request = sp.build_request("  get ", "templates", {"a": "1"})
        assert request.method == "GET"
        assert request.content == b""
        assert request.url.query == b"a=1"

    def test_url_path(self) -> None:
        sp = _make_sparkpost()
        assert sp.build_request("GET", "/foo/").url.path == "/api/v1/foo"

    def test_default_headers_override_case_insensitively(self) -> None:
        sp = _make_sparkpost()
        request = sp.build_request("POST", "x", {}, {"content-type": "text/plain"})
        assert request.headers.get_list("Content-Type") == ["application/json"]

    def test_headers_present(self) -> None:
        sp = _make_sparkpost()
        request = sp.build_request("GET", "x", None, {"X-Custom": "1"})
        assert request.headers["Authorization"] == "test-key"
        assert request.headers["User-Agent"] == f"python-sparkmail/{__version__}"
        assert request.headers["X-Custom"] == "1"

    def test_construction_errors_propagate(self) -> None:
        sp = _make_sparkpost(**{"async": False})
        with patch("sparkmail.client.httpx.Request", side_effect=httpx.InvalidURL("bad url")):
            with pytest.raises(httpx.InvalidURL):
                sp.sync_request("GET", "templates")
