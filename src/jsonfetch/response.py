"""Response class for jsonfetch."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .exceptions import BodyConsumedError
from .schemas import JSONValue

BodyReader = Callable[[], Awaitable[bytes]]
Closer = Callable[[], Awaitable[None]]


class RawResponse:
    """A received response whose body has not been read yet.

    Transports build one of these as soon as the status line and headers are
    in. The body is materialized lazily by :meth:`text` or :meth:`json`, and
    only once: a second read raises :class:`BodyConsumedError`.

    Attributes:
        status_code: Integer Code of responded HTTP Status, e.g. 404 or 200.
        url: Final URL location of Response.
        headers: Response headers with lower-cased keys.
    """

    def __init__(
        self,
        status_code: int,
        headers: Mapping[str, str],
        read: BodyReader,
        url: str = "",
        close: Closer | None = None,
    ) -> None:
        """Initialize the RawResponse.

        Args:
            status_code: HTTP status of the response.
            headers: Response headers, any key case.
            read: Coroutine function returning the raw body bytes.
            url: Final URL after redirects.
            close: Optional coroutine function releasing the underlying stream.
        """
        self.status_code = status_code
        self.url = url
        # Header names are case-insensitive; normalize them once here.
        self.headers: dict[str, str] = {k.lower(): v for k, v in headers.items()}
        self._read = read
        self._close = close
        self._consumed = False
        self._closed = False

    @classmethod
    def from_text(
        cls,
        status_code: int,
        headers: Mapping[str, str],
        text: str,
        url: str = "",
    ) -> RawResponse:
        """Build a response around an already materialized text body."""
        content = text.encode("utf-8")

        async def read() -> bytes:
            return content

        return cls(status_code, headers, read, url=url)

    @property
    def ok(self) -> bool:
        """Returns True if :attr:`status_code` is in the 200-299 range, False if not."""
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def is_json(self) -> bool:
        """Whether the declared content type mentions ``application/json``."""
        return "application/json" in self.content_type.lower()

    @property
    def consumed(self) -> bool:
        return self._consumed

    async def read(self) -> bytes:
        """Read the raw body bytes.

        Raises:
            BodyConsumedError: If the body was already read.
        """
        if self._consumed:
            raise BodyConsumedError("Response body has already been read.")
        self._consumed = True
        try:
            return await self._read()
        finally:
            await self.aclose()

    async def text(self) -> str:
        """Content of the response, in unicode."""
        content = await self.read()
        # A leading BOM is dropped, as browsers do.
        return content.decode("utf-8-sig", errors="replace")

    async def json(self, **kwargs: Any) -> JSONValue:
        """Returns the json-encoded content of a response.

        Args:
            **kwargs: Optional arguments that ``json.loads`` takes.

        Raises:
            json.JSONDecodeError: If the response body does not contain valid JSON.
            BodyConsumedError: If the body was already read.
        """
        return json.loads(await self.text(), **kwargs)

    async def aclose(self) -> None:
        """Release the underlying stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._close is not None:
            await self._close()
