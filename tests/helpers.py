from __future__ import annotations

from typing import Any, Callable

import httpx

from jsonfetch import HttpxTransport, ResponseResolver

Handler = Callable[[httpx.Request], httpx.Response]


def mock_transport(handler: Handler) -> HttpxTransport:
    """An HttpxTransport whose requests are answered by ``handler``."""
    return HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def mock_resolver(handler: Handler) -> ResponseResolver[Any]:
    return ResponseResolver(mock_transport(handler))


def respond(*args: Any, **kwargs: Any) -> Handler:
    """Handler that answers every request with the same response."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(*args, **kwargs)

    return handler
