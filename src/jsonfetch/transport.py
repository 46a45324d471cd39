"""Transports: the layer that actually puts a request on the wire."""

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Any, Protocol, runtime_checkable

import httpx

from .response import RawResponse
from .schemas import Body, Headers, MultipartForm, RequestDescriptor

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def prepare_headers(descriptor: RequestDescriptor) -> Headers:
    """Build the outgoing header set for a request.

    Starts from the caller's headers and adds ``Content-Type:
    application/json`` when a body is present, it is not a multipart form, and
    no ``Content-Type`` key exists in any letter case.

    Args:
        descriptor: The request about to be sent.

    Returns:
        A new header dict; the descriptor is left untouched.
    """
    headers: Headers = dict(descriptor.headers or {})

    if descriptor.has_body and not descriptor.is_multipart:
        if not any(key.lower() == "content-type" for key in headers):
            headers["Content-Type"] = JSON_CONTENT_TYPE

    return headers


def encode_body(body: Body) -> bytes | None:
    """Serialize a non-multipart body to bytes.

    Raw ``bytes`` pass through, ``str`` is UTF-8 encoded and anything else is
    dumped as JSON.
    """
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, MultipartForm):
        raise TypeError("Multipart forms are encoded by the transport.")
    return json.dumps(body).encode("utf-8")


@runtime_checkable
class Transport(Protocol):
    """What the resolver needs from an HTTP backend."""

    def prepare_headers(self, descriptor: RequestDescriptor) -> Headers: ...

    async def send(
        self, descriptor: RequestDescriptor, headers: Headers
    ) -> RawResponse: ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """Transport backed by an ``httpx.AsyncClient``.

    Responses are opened in streaming mode so the body is only pulled off the
    connection when the resolver decides to read it.

    Attributes:
        client: The underlying async client.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the transport.

        Args:
            client: An existing client to reuse (for connection pooling or
                testing with ``httpx.MockTransport``). When omitted a client is
                created and owned by this transport.
        """
        self._owns_client = client is None
        self.client = client if client is not None else httpx.AsyncClient()

    def prepare_headers(self, descriptor: RequestDescriptor) -> Headers:
        return prepare_headers(descriptor)

    def _body_kwargs(self, body: Body) -> dict[str, Any]:
        if isinstance(body, MultipartForm):
            # (None, value) parts are plain fields; httpx would otherwise
            # url-encode a form without files.
            parts: list[tuple[str, Any]] = [
                (name, (None, value)) for name, value in body.fields.items()
            ]
            parts.extend(body.files.items())
            return {"files": parts} if parts else {}

        content = encode_body(body)
        return {"content": content} if content is not None else {}

    async def send(
        self, descriptor: RequestDescriptor, headers: Headers
    ) -> RawResponse:
        """Issue the request and return as soon as headers are received.

        Raises:
            httpx.TransportError: Propagated unchanged on network failures.
        """
        request = self.client.build_request(
            descriptor.method.upper(),
            descriptor.url,
            headers=headers,
            **self._body_kwargs(descriptor.body),
        )

        logger.debug("Sending %s %s", request.method, request.url)
        response = await self.client.send(request, stream=True)
        logger.debug("Received %s from %s", response.status_code, request.url)

        return RawResponse(
            response.status_code,
            response.headers,
            response.aread,
            url=str(response.url),
            close=response.aclose,
        )

    async def aclose(self) -> None:
        """Close the client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
