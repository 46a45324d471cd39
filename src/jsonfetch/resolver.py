"""Turns raw HTTP responses into a single typed outcome."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from .exceptions import HttpError, ResponseDecodeError
from .outcome import Err, Ok, Outcome
from .response import RawResponse
from .schemas import Body, RequestDescriptor
from .transport import HttpxTransport, Transport

T = TypeVar("T")

# Statuses that carry no body by definition
EMPTY_STATUSES = frozenset((204, 205))


def generic_error_message(status_code: int) -> str:
    return f"Request failed with status {status_code}"


async def extract_error_message(response: RawResponse) -> str:
    """Pull a human-readable message out of a failed response.

    Never raises. The body is read at most once and any decode or read
    failure falls back to the generic ``Request failed with status <code>``.

    Args:
        response: A response with a non-2xx status.

    Returns:
        A non-empty message.
    """
    if response.is_json:
        try:
            data = await response.json()
        except Exception:
            # Undecodable error bodies get the generic message.
            data = None
        if isinstance(data, str):
            return data
        if isinstance(data, dict) and isinstance(data.get("message"), str):
            return data["message"]
    else:
        try:
            text = await response.text()
        except Exception:
            text = ""
        if text:
            return text

    return generic_error_message(response.status_code)


class ResponseResolver(Generic[T]):
    """Issues requests and normalizes every response into an Outcome.

    Successful JSON bodies decode to ``Ok(value)``. Empty (204/205) and
    non-JSON successes give ``Ok(None)``. Failure statuses give
    ``Err(message, status_code)`` with a message extracted from the body.
    Transport failures are not caught.

    The resolver keeps no state between calls, so one instance can serve any
    number of concurrent requests.

    Attributes:
        transport: The backend that sends requests.
    """

    def __init__(self, transport: Transport | None = None) -> None:
        self.transport: Transport = transport if transport is not None else HttpxTransport()

    async def resolve(self, descriptor: RequestDescriptor) -> Outcome[T]:
        """Send ``descriptor`` and classify the response.

        Raises:
            ResponseDecodeError: If a 2xx response declares JSON but does not decode.
        """
        headers = self.transport.prepare_headers(descriptor)
        response = await self.transport.send(descriptor, headers)

        try:
            if not response.ok:
                message = await extract_error_message(response)
                return Err(message, response.status_code)

            if response.status_code in EMPTY_STATUSES or not response.is_json:
                return Ok(cast(T, None))

            try:
                return Ok(cast(T, await response.json()))
            except json.JSONDecodeError as e:
                raise ResponseDecodeError(
                    f"Invalid JSON in response from {response.url or descriptor.url}: {e}"
                ) from e
        finally:
            await response.aclose()

    async def fetch_json(self, descriptor: RequestDescriptor) -> T:
        """Like :meth:`resolve`, but raise :class:`HttpError` on failure."""
        outcome = await self.resolve(descriptor)
        if isinstance(outcome, Err):
            raise HttpError(outcome.message, outcome.status_code)
        return outcome.value

    async def aclose(self) -> None:
        await self.transport.aclose()


async def fetch_json(
    url: str,
    method: str = "GET",
    headers: Mapping[str, str] | None = None,
    body: Body = None,
    transport: Transport | None = None,
) -> Any:
    """One-shot request returning the decoded JSON payload.

    A transport created here is closed before returning; a passed-in one is
    left open for the caller.

    Raises:
        HttpError: If the response carried a failure status.
    """
    resolver: ResponseResolver[Any] = ResponseResolver(transport)
    descriptor = RequestDescriptor(url=url, method=method, headers=headers, body=body)
    try:
        return await resolver.fetch_json(descriptor)
    finally:
        if transport is None:
            await resolver.aclose()
