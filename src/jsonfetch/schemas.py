"""Type definitions for jsonfetch."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TypedDict

# JSON Type Definition
JSONValue = str | int | float | bool | None | dict[str, "JSONValue"] | list["JSONValue"]
JSONDict = dict[str, JSONValue]
JSONList = list[JSONValue]

# Other common types
QueryParams = dict[str, str | int | float | bool]
Headers = dict[str, str]

# (filename, content, content type) as accepted by multipart encoders
FileField = tuple[str, bytes, str]


@dataclass
class MultipartForm:
    """An opaque multipart/form-data body.

    The transport encodes it and picks the ``Content-Type`` (with boundary)
    itself, so no JSON content type is ever injected for it.

    Attributes:
        fields: Plain text form fields.
        files: File parts keyed by field name.
    """

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, FileField] = field(default_factory=dict)


Body = bytes | str | MultipartForm | JSONValue


@dataclass
class RequestDescriptor:
    """Everything needed to issue one request.

    ``bytes`` and ``str`` bodies are sent verbatim. Any other non-None body
    is a structured payload and is serialized to JSON before sending.
    """

    url: str
    method: str = "GET"
    headers: Mapping[str, str] | None = None
    body: Body = None

    @property
    def has_body(self) -> bool:
        return self.body is not None

    @property
    def is_multipart(self) -> bool:
        return isinstance(self.body, MultipartForm)


class FetchOptions(TypedDict, total=False):
    """Options handed to the browser's fetch API.

    This maps to the RequestInit object in the Fetch API, plus ``bodyKind``
    which tells the page script how to rebuild the body.
    """

    method: str
    headers: Headers
    body: str | None
    bodyKind: str
    form: dict[str, object]
    credentials: str


class FetchResponseData(TypedDict):
    """Structure of the response data coming from the browser's fetch API."""

    status: int
    statusText: str
    url: str
    headers: dict[str, str]
    text: str
    redirected: bool
    type: str
