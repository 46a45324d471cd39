import unittest

import httpx

from helpers import mock_resolver, mock_transport, respond
from jsonfetch import (
    Err,
    HttpError,
    MultipartForm,
    Ok,
    RequestDescriptor,
    ResponseDecodeError,
    fetch_json,
)
from jsonfetch.resolver import generic_error_message

URL = "https://api.example.com/items"


class CountingStream(httpx.AsyncByteStream):
    """Response body that records how often it is read."""

    def __init__(self, content: bytes) -> None:
        self.content = content
        self.reads = 0

    async def __aiter__(self):
        self.reads += 1
        yield self.content


class TestErrorExtraction(unittest.IsolatedAsyncioTestCase):
    async def resolve(self, *args, **kwargs):
        resolver = mock_resolver(respond(*args, **kwargs))
        return await resolver.resolve(RequestDescriptor(URL))

    async def test_json_object_with_message(self):
        outcome = await self.resolve(400, json={"message": "X"})
        self.assertEqual(outcome, Err("X", 400))

    async def test_json_bare_string(self):
        outcome = await self.resolve(422, json="Y")
        self.assertEqual(outcome, Err("Y", 422))

    async def test_json_object_without_message(self):
        outcome = await self.resolve(404, json={})
        self.assertEqual(outcome, Err("Request failed with status 404", 404))

    async def test_json_message_not_a_string(self):
        outcome = await self.resolve(400, json={"message": {"detail": "nested"}})
        self.assertEqual(outcome, Err(generic_error_message(400), 400))

    async def test_json_array_falls_back(self):
        outcome = await self.resolve(409, json=["a", "b"])
        self.assertEqual(outcome, Err(generic_error_message(409), 409))

    async def test_invalid_json_falls_back(self):
        outcome = await self.resolve(
            500, content=b"{not json", headers={"Content-Type": "application/json"}
        )
        self.assertEqual(outcome, Err("Request failed with status 500", 500))

    async def test_plain_text_body(self):
        outcome = await self.resolve(503, text="oops")
        self.assertEqual(outcome, Err("oops", 503))

    async def test_empty_plain_body(self):
        outcome = await self.resolve(502)
        self.assertEqual(outcome, Err("Request failed with status 502", 502))

    async def test_html_error_page_is_returned_verbatim(self):
        outcome = await self.resolve(
            500, content=b"<h1>down</h1>", headers={"Content-Type": "text/html"}
        )
        self.assertEqual(outcome, Err("<h1>down</h1>", 500))

    async def test_redirect_status_is_a_failure(self):
        outcome = await self.resolve(304)
        self.assertIsInstance(outcome, Err)

    async def test_json_message_behind_utf8_bom(self):
        outcome = await self.resolve(
            400,
            content=b'\xef\xbb\xbf{"message": "X"}',
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(outcome, Err("X", 400))


class TestSuccess(unittest.IsolatedAsyncioTestCase):
    async def resolve(self, *args, **kwargs):
        resolver = mock_resolver(respond(*args, **kwargs))
        return await resolver.resolve(RequestDescriptor(URL))

    async def test_json_body_is_decoded(self):
        outcome = await self.resolve(200, json={"a": 1})
        self.assertEqual(outcome, Ok({"a": 1}))
        self.assertTrue(outcome.ok)

    async def test_content_type_match_ignores_case_and_parameters(self):
        outcome = await self.resolve(
            201,
            content=b"[1, 2]",
            headers={"Content-Type": "Application/JSON; charset=utf-8"},
        )
        self.assertEqual(outcome, Ok([1, 2]))

    async def test_vendor_json_type_is_not_matched(self):
        outcome = await self.resolve(
            200, content=b"{}", headers={"Content-Type": "application/problem+json"}
        )
        self.assertEqual(outcome, Ok(None))

    async def test_no_content_statuses_skip_the_body(self):
        for status in (204, 205):
            with self.subTest(status=status):
                stream = CountingStream(b'{"ignored": true}')
                outcome = await self.resolve(
                    status,
                    headers={"Content-Type": "application/json"},
                    stream=stream,
                )
                self.assertEqual(outcome, Ok(None))
                self.assertEqual(stream.reads, 0)

        stream = CountingStream(b'{"read": true}')
        outcome = await self.resolve(
            200, headers={"Content-Type": "application/json"}, stream=stream
        )
        self.assertEqual(outcome, Ok({"read": True}))
        self.assertEqual(stream.reads, 1)

    async def test_json_body_behind_utf8_bom(self):
        outcome = await self.resolve(
            200,
            content=b'\xef\xbb\xbf{"a": 1}',
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(outcome, Ok({"a": 1}))

    async def test_non_json_body_is_discarded(self):
        outcome = await self.resolve(200, text="hello")
        self.assertEqual(outcome, Ok(None))

    async def test_undecodable_json_success_raises(self):
        with self.assertRaises(ResponseDecodeError) as ctx:
            await self.resolve(
                200, content=b"", headers={"Content-Type": "application/json"}
            )
        self.assertIn(URL, str(ctx.exception))

    async def test_repeated_calls_yield_identical_outcomes(self):
        resolver = mock_resolver(respond(200, json={"a": 1}))
        descriptor = RequestDescriptor(URL)
        first = await resolver.resolve(descriptor)
        second = await resolver.resolve(descriptor)
        self.assertEqual(first, second)


class TestOutgoingRequest(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(204)

        self.resolver = mock_resolver(handler)

    async def test_json_body_gets_a_single_content_type(self):
        await self.resolver.resolve(
            RequestDescriptor(URL, method="POST", body={"name": "widget"})
        )
        request = self.requests[0]
        self.assertEqual(request.headers.get_list("content-type"), ["application/json"])
        self.assertEqual(request.content, b'{"name": "widget"}')

    async def test_raw_string_body_is_sent_verbatim(self):
        await self.resolver.resolve(
            RequestDescriptor(URL, method="PUT", body='{"raw":true}')
        )
        request = self.requests[0]
        self.assertEqual(request.content, b'{"raw":true}')
        self.assertEqual(request.headers["content-type"], "application/json")

    async def test_explicit_content_type_is_kept(self):
        await self.resolver.resolve(
            RequestDescriptor(
                URL,
                method="POST",
                headers={"content-type": "text/csv"},
                body=b"a,b\n1,2\n",
            )
        )
        request = self.requests[0]
        self.assertEqual(request.headers.get_list("content-type"), ["text/csv"])

    async def test_multipart_form_is_not_labelled_json(self):
        form = MultipartForm(
            fields={"title": "report"},
            files={"upload": ("report.txt", b"contents", "text/plain")},
        )
        await self.resolver.resolve(RequestDescriptor(URL, method="POST", body=form))
        request = self.requests[0]
        self.assertTrue(
            request.headers["content-type"].startswith("multipart/form-data")
        )
        self.assertIn(b'name="title"', request.content)
        self.assertIn(b'filename="report.txt"', request.content)

    async def test_fields_only_form_stays_multipart(self):
        form = MultipartForm(fields={"q": "1"})
        await self.resolver.resolve(RequestDescriptor(URL, method="POST", body=form))
        self.assertTrue(
            self.requests[0].headers["content-type"].startswith("multipart/form-data")
        )

    async def test_no_body_means_no_content_type(self):
        await self.resolver.resolve(RequestDescriptor(URL))
        self.assertNotIn("content-type", self.requests[0].headers)

    async def test_method_is_upper_cased(self):
        await self.resolver.resolve(RequestDescriptor(URL, method="delete"))
        self.assertEqual(self.requests[0].method, "DELETE")


class TestFailureChannel(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_json_raises_http_error(self):
        resolver = mock_resolver(respond(401, json={"message": "Unauthorized"}))
        with self.assertRaises(HttpError) as ctx:
            await resolver.fetch_json(RequestDescriptor(URL))
        self.assertEqual(ctx.exception.message, "Unauthorized")
        self.assertEqual(ctx.exception.status_code, 401)

    async def test_fetch_json_returns_value(self):
        resolver = mock_resolver(respond(200, json={"id": 7}))
        self.assertEqual(await resolver.fetch_json(RequestDescriptor(URL)), {"id": 7})

    async def test_err_unwrap_raises(self):
        with self.assertRaises(HttpError):
            Err("nope", 400).unwrap()

    async def test_transport_errors_propagate_unchanged(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        resolver = mock_resolver(handler)
        with self.assertRaises(httpx.ConnectError):
            await resolver.resolve(RequestDescriptor(URL))

    async def test_module_level_fetch_json(self):
        transport = mock_transport(respond(200, json={"ok": True}))
        result = await fetch_json(URL, method="POST", body={"x": 1}, transport=transport)
        self.assertEqual(result, {"ok": True})


if __name__ == "__main__":
    unittest.main()
