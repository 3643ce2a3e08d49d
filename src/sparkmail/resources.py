"""Thin endpoint helpers layered on :meth:`SparkPost.request <sparkmail.client.SparkPost.request>`.

A resource only prefixes its endpoint to the request path and, where the
API expects it, reshapes the payload. Dispatch mode, retries and outcome
normalisation stay with the client.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from sparkmail.client import SparkPost

_NAMED_ADDRESS = re.compile(r"^\s*(?P<name>.*?)\s*<(?P<email>[^<>]+)>\s*$")


class ResourceBase:
    """Send requests relative to one API endpoint.

    Args:
        sparkpost: The client that performs the dispatch.
        endpoint: Path segment under ``/api/<version>/`` (e.g. ``templates``).
    """

    def __init__(self, sparkpost: SparkPost, endpoint: str) -> None:
        self.sparkpost = sparkpost
        self.endpoint = endpoint.strip("/")

    def request(
        self,
        method: str = "GET",
        uri: str = "",
        payload: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return self.sparkpost.request(method, self._endpoint_uri(uri), payload, headers)

    def get(self, uri: str = "", payload: Optional[Any] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("GET", uri, payload, headers)

    def post(self, payload: Optional[Any] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("POST", "", payload, headers)

    def put(self, uri: str = "", payload: Optional[Any] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("PUT", uri, payload, headers)

    def delete(self, uri: str = "", payload: Optional[Any] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return self.request("DELETE", uri, payload, headers)

    def _endpoint_uri(self, uri: str) -> str:
        uri = uri.strip("/")
        return f"{self.endpoint}/{uri}" if uri else self.endpoint


class Transmission(ResourceBase):
    """The ``transmissions`` endpoint, with cc/bcc expansion on :meth:`post`.

    The API has no cc/bcc fields. Each cc or bcc address is sent as an extra
    recipient whose ``header_to`` names the primary recipients, and cc
    addresses are also listed in the ``CC`` content header so mail clients
    display them.

    Example::

        sparkpost.transmissions.post({
            "content": {"from": "me@example.com", "subject": "Hi", "text": "..."},
            "recipients": [{"address": "Ann <ann@example.com>"}],
            "cc": [{"address": "bob@example.com"}],
        })
    """

    def __init__(self, sparkpost: SparkPost) -> None:
        super().__init__(sparkpost, "transmissions")

    def post(self, payload: Optional[Any] = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return super().post(self.format_payload(payload or {}), headers)

    @classmethod
    def format_payload(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of *payload* with shorthand addresses and cc/bcc expanded."""
        payload = copy.deepcopy(dict(payload))
        recipients = payload.get("recipients")
        if not isinstance(recipients, list):
            # Stored recipient lists ({"list_id": ...}) are sent untouched.
            return payload

        cc = payload.pop("cc", None) or []
        bcc = payload.pop("bcc", None) or []
        recipients = [cls._format_recipient(r) for r in recipients]
        header_to = ", ".join(_address_string(r["address"]) for r in recipients if "address" in r)

        cc = [cls._format_recipient(r) for r in cc]
        bcc = [cls._format_recipient(r) for r in bcc]
        for extra in cc + bcc:
            extra["address"]["header_to"] = header_to
            recipients.append(extra)

        if cc:
            content = payload.setdefault("content", {})
            content.setdefault("headers", {})["CC"] = ", ".join(
                _address_string(r["address"]) for r in cc
            )

        payload["recipients"] = recipients
        return payload

    @staticmethod
    def _format_recipient(recipient: Any) -> dict[str, Any]:
        """Normalise ``"Name <email>"`` strings into ``{"name", "email"}`` objects."""
        if isinstance(recipient, str):
            recipient = {"address": recipient}
        recipient = dict(recipient)
        address = recipient.get("address")
        if isinstance(address, str):
            recipient["address"] = _parse_address(address)
        elif isinstance(address, Mapping):
            recipient["address"] = dict(address)
        return recipient


def _parse_address(value: str) -> dict[str, str]:
    match = _NAMED_ADDRESS.match(value)
    if match is None:
        return {"email": value.strip()}
    name = match.group("name").strip().strip('"')
    address = {"email": match.group("email").strip()}
    if name:
        address["name"] = name
    return address


def _address_string(address: Mapping[str, Any]) -> str:
    name = address.get("name")
    email = address.get("email", "")
    return f'"{name}" <{email}>' if name else email
