"""Tests for endpoint helpers and transmission payload formatting."""

from __future__ import annotations

import json

from sparkmail.client import SparkPost
from sparkmail.resources import ResourceBase, Transmission


def _make_sparkpost(client) -> SparkPost:
    return SparkPost({"key": "test-key", "async": False}, client)


class TestResourceBase:
    def test_verbs_prefix_endpoint(self, scripted, sync_client) -> None:
        handler = scripted(200)
        templates = ResourceBase(_make_sparkpost(sync_client(handler)), "/templates/")
        templates.get("abc", {"draft": "true"})
        templates.put("/abc/", {"name": "n"})
        templates.delete("abc")
        templates.post({"name": "n"})

        methods_paths = [(r.method, r.url.path) for r in handler.requests]
        assert methods_paths == [
            ("GET", "/api/v1/templates/abc"),
            ("PUT", "/api/v1/templates/abc"),
            ("DELETE", "/api/v1/templates/abc"),
            ("POST", "/api/v1/templates"),
        ]
        assert handler.requests[0].url.query == b"draft=true"
        assert json.loads(handler.requests[1].content) == {"name": "n"}

    def test_returns_client_outcome(self, scripted, sync_client) -> None:
        handler = scripted(200)
        outcome = ResourceBase(_make_sparkpost(sync_client(handler)), "metrics").get()
        assert outcome.status_code == 200


class TestTransmissionFormatting:
    def test_shorthand_addresses_parsed(self) -> None:
        payload = Transmission.format_payload(
            {"recipients": ["Ann Smith <ann@example.com>", {"address": "bob@example.com"}]}
        )
        assert payload["recipients"] == [
            {"address": {"name": "Ann Smith", "email": "ann@example.com"}},
            {"address": {"email": "bob@example.com"}},
        ]

    def test_cc_and_bcc_expanded(self) -> None:
        payload = Transmission.format_payload(
            {
                "content": {"from": "me@example.com", "subject": "Hi", "text": "hello"},
                "recipients": [{"address": {"name": "Ann", "email": "ann@example.com"}}],
                "cc": [{"address": "Carl <carl@example.com>"}],
                "bcc": [{"address": "dee@example.com"}],
            }
        )
        assert "cc" not in payload and "bcc" not in payload
        assert payload["recipients"] == [
            {"address": {"name": "Ann", "email": "ann@example.com"}},
            {"address": {"name": "Carl", "email": "carl@example.com", "header_to": '"Ann" <ann@example.com>'}},
            {"address": {"email": "dee@example.com", "header_to": '"Ann" <ann@example.com>'}},
        ]
        assert payload["content"]["headers"] == {"CC": '"Carl" <carl@example.com>'}

    def test_bcc_only_leaves_headers_alone(self) -> None:
        payload = Transmission.format_payload(
            {
                "content": {"text": "x"},
                "recipients": [{"address": "ann@example.com"}],
                "bcc": [{"address": "dee@example.com"}],
            }
        )
        assert "headers" not in payload["content"]
        assert payload["recipients"][1]["address"]["header_to"] == "ann@example.com"

    def test_stored_list_untouched(self) -> None:
        original = {"recipients": {"list_id": "newsletter"}, "content": {"template_id": "t"}}
        assert Transmission.format_payload(original) == original

    def test_input_not_mutated(self) -> None:
        original = {"recipients": [{"address": "a@example.com"}], "cc": [{"address": "b@example.com"}]}
        Transmission.format_payload(original)
        assert original == {"recipients": [{"address": "a@example.com"}], "cc": [{"address": "b@example.com"}]}


class TestTransmissionEndpoint:
    def test_attached_to_client(self) -> None:
        sp = SparkPost("k")
        assert isinstance(sp.transmissions, Transmission)
        assert sp.transmissions.sparkpost is sp

    def test_post_sends_formatted_payload(self, scripted, sync_client) -> None:
        handler = scripted(200)
        sp = _make_sparkpost(sync_client(handler))
        sp.transmissions.post({"recipients": ["a@example.com"], "cc": ["b@example.com"]})

        sent = handler.requests[0]
        assert sent.url.path == "/api/v1/transmissions"
        body = json.loads(sent.content)
        assert body["recipients"][1] == {"address": {"email": "b@example.com", "header_to": "a@example.com"}}
        assert body["content"]["headers"]["CC"] == "b@example.com"

    def test_get_by_id(self, scripted, sync_client) -> None:
        handler = scripted(200)
        sp = _make_sparkpost(sync_client(handler))
        sp.transmissions.get("12345")
        assert handler.requests[0].url.path == "/api/v1/transmissions/12345"
