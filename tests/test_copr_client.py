import json
import unittest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from coprctl.domain.exceptions import DescriptorFetchException, DescriptorParseException
from coprctl.infrastructure.copr_client import CoprClient


def _response(status: int, json_side_effect=None, json_value=None) -> AsyncMock:
    response = AsyncMock()
    response.status = status
    if json_side_effect is not None:
        response.json = AsyncMock(side_effect=json_side_effect)
    else:
        response.json = AsyncMock(return_value=json_value)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=False)
    return response


class TestCoprClient(unittest.TestCase):
    def test_descriptor_url(self) -> None:
        client = CoprClient(hub_url="https://copr.fedorainfracloud.org/")

        self.assertEqual(
            client.descriptor_url("@copr", "copr-dev:pr:1", "fedora-39"),
            "https://copr.fedorainfracloud.org/api_3/rpmrepo/@copr/copr-dev:pr:1/fedora-39/",
        )

    def test_headers_include_user_agent(self) -> None:
        client = CoprClient(hub_url="https://copr.fedorainfracloud.org")
        self.assertIn("User-Agent", client.headers)
        self.assertEqual(client.headers["Accept"], "application/json")


class TestFetchDescriptor(unittest.IsolatedAsyncioTestCase):
    async def test_returns_decoded_json(self) -> None:
        client = CoprClient(hub_url="https://copr.example.com")
        payload = {"repos": {}, "results_url": "https://results"}
        session = AsyncMock()
        session.get = MagicMock(return_value=_response(200, json_value=payload))

        data = await client.fetch_descriptor(session, "owner", "project", "fedora-39")

        self.assertEqual(data, payload)
        url = session.get.call_args.args[0]
        self.assertEqual(url, "https://copr.example.com/api_3/rpmrepo/owner/project/fedora-39/")

    async def test_http_error_is_not_retried(self) -> None:
        client = CoprClient(hub_url="https://copr.example.com")
        session = AsyncMock()
        session.get = MagicMock(side_effect=[_response(404), _response(200, json_value={})])

        with self.assertRaises(DescriptorFetchException) as ctx:
            await client.fetch_descriptor(session, "owner", "missing", "fedora-39")

        self.assertIn("HTTP 404", str(ctx.exception))
        self.assertEqual(session.get.call_count, 1)

    async def test_connection_error_raises_fetch_exception(self) -> None:
        client = CoprClient(hub_url="https://copr.example.com")
        session = AsyncMock()
        session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("connection refused"))

        with self.assertRaises(DescriptorFetchException):
            await client.fetch_descriptor(session, "owner", "project", "fedora-39")

    async def test_malformed_json_raises_parse_exception(self) -> None:
        client = CoprClient(hub_url="https://copr.example.com")
        error = json.JSONDecodeError("Expecting value", "<html>", 0)
        session = AsyncMock()
        session.get = MagicMock(return_value=_response(200, json_side_effect=error))

        with self.assertRaises(DescriptorParseException):
            await client.fetch_descriptor(session, "owner", "project", "fedora-39")

    async def test_undecodable_body_raises_parse_exception(self) -> None:
        client = CoprClient(hub_url="https://copr.example.com")
        error = UnicodeDecodeError("utf-8", b'{"repos": "\xff\xfe"}', 11, 12, "invalid start byte")
        session = AsyncMock()
        session.get = MagicMock(return_value=_response(200, json_side_effect=error))

        with self.assertRaises(DescriptorParseException):
            await client.fetch_descriptor(session, "owner", "project", "fedora-39")

    async def test_non_object_json_raises_parse_exception(self) -> None:
        client = CoprClient(hub_url="https://copr.example.com")
        session = AsyncMock()
        session.get = MagicMock(return_value=_response(200, json_value=["not", "a", "dict"]))

        with self.assertRaises(DescriptorParseException):
            await client.fetch_descriptor(session, "owner", "project", "fedora-39")
