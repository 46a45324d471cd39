"""Main client module for jsonfetch."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any
from urllib.parse import urlencode, urljoin

from .exceptions import HttpError
from .outcome import Err, Outcome
from .resolver import ResponseResolver
from .schemas import (
    Body,
    Headers,
    JSONValue,
    MultipartForm,
    QueryParams,
    RequestDescriptor,
)
from .stores import AuthStore
from .transport import Transport

logger = logging.getLogger(__name__)


class Client:
    """A JSON API client built on :class:`ResponseResolver`.

    The client resolves endpoints against a base URL, adds query parameters
    and default headers, and attaches a bearer token taken from an
    :class:`AuthStore` when one is set.

    Attributes:
        base_url: The base URL for all requests.
        auth: The auth store consulted for a bearer token, if any.
        headers: Headers sent with every request.
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: Transport | None = None,
        auth: AuthStore | None = None,
        headers: Headers | None = None,
    ) -> None:
        """Initialize the Client.

        Args:
            base_url: The base URL to prefix to relative URLs.
            transport: Backend to send requests with. Defaults to an
                :class:`HttpxTransport` owned by this client.
            auth: Optional store holding the current auth token.
            headers: Default headers merged under per-request ones.
        """
        self.base_url = base_url.rstrip("/") if base_url else None
        self.auth = auth
        self.headers: Headers = dict(headers or {})
        self._resolver: ResponseResolver[Any] = ResponseResolver(transport)

    @property
    def transport(self) -> Transport:
        return self._resolver.transport

    def _resolve_url(self, endpoint: str) -> str:
        """Resolve a partial endpoint to a full URL.

        Args:
            endpoint: The path or full URL.

        Returns:
            Absolute URL string.
        """
        if endpoint.startswith(("http://", "https://")):
            return endpoint

        if self.base_url:
            return urljoin(self.base_url + "/", endpoint.lstrip("/"))

        return endpoint

    def _build_headers(self, headers: Headers | None) -> Headers:
        merged: Headers = dict(self.headers)
        # Per-request keys win regardless of letter case.
        for key, value in (headers or {}).items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value

        token = self.auth.get() if self.auth else None
        if token and not any(k.lower() == "authorization" for k in merged):
            merged["Authorization"] = f"Bearer {token}"

        return merged

    def build_request(
        self,
        method: str,
        endpoint: str,
        params: QueryParams | None = None,
        json: JSONValue = None,
        data: bytes | str | None = None,
        form: MultipartForm | None = None,
        headers: Headers | None = None,
    ) -> RequestDescriptor:
        """Assemble a request descriptor without sending it.

        At most one of ``json``, ``data`` and ``form`` should be given; they
        are checked in that order.
        """
        full_url = self._resolve_url(endpoint)

        if params:
            query_string = urlencode(params)
            joiner = "&" if "?" in full_url else "?"
            full_url = f"{full_url}{joiner}{query_string}"

        body: Body = None
        if json is not None:
            body = json
        elif data is not None:
            body = data
        elif form is not None:
            body = form

        return RequestDescriptor(
            url=full_url,
            method=method.upper(),
            headers=self._build_headers(headers),
            body=body,
        )

    async def request(self, method: str, endpoint: str, **kwargs: Any) -> Outcome[Any]:
        """Send a request and return its Outcome.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Target URL or path.
            **kwargs: Arguments accepted by :meth:`build_request`.

        Returns:
            ``Ok`` with the decoded payload, or ``Err`` with the server's message.
        """
        descriptor = self.build_request(method, endpoint, **kwargs)
        outcome = await self._resolver.resolve(descriptor)
        if isinstance(outcome, Err):
            logger.debug(
                "%s %s failed with %s", descriptor.method, descriptor.url, outcome.status_code
            )
        return outcome

    async def _call(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        outcome = await self.request(method, endpoint, **kwargs)
        if isinstance(outcome, Err):
            raise HttpError(outcome.message, outcome.status_code)
        return outcome.value

    async def get(
        self, endpoint: str, params: QueryParams | None = None, **kwargs: Any
    ) -> Any:
        """Send a GET request.

        Returns:
            The decoded JSON payload, or None for empty/non-JSON bodies.

        Raises:
            HttpError: On a non-2xx response.
        """
        return await self._call("GET", endpoint, params=params, **kwargs)

    async def post(
        self, endpoint: str, json: JSONValue = None, **kwargs: Any
    ) -> Any:
        """Send a POST request with an optional JSON payload.

        Raises:
            HttpError: On a non-2xx response.
        """
        return await self._call("POST", endpoint, json=json, **kwargs)

    async def put(self, endpoint: str, json: JSONValue = None, **kwargs: Any) -> Any:
        return await self._call("PUT", endpoint, json=json, **kwargs)

    async def patch(self, endpoint: str, json: JSONValue = None, **kwargs: Any) -> Any:
        return await self._call("PATCH", endpoint, json=json, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self._call("DELETE", endpoint, **kwargs)

    async def aclose(self) -> None:
        """Close the transport and any resources it holds."""
        await self._resolver.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
