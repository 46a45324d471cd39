import logging

from .browser import BrowserTransport
from .client import Client
from .exceptions import (
    BodyConsumedError,
    BrowserInitError,
    FetchTimeoutError,
    HttpError,
    JsonFetchError,
    ResponseDecodeError,
    TransportError,
)
from .logger import setup_logging
from .outcome import Err, Ok, Outcome
from .resolver import ResponseResolver, extract_error_message, fetch_json
from .response import RawResponse
from .schemas import MultipartForm, RequestDescriptor
from .stores import AuthStore, Message, MessageStore
from .transport import HttpxTransport, Transport, prepare_headers

__version__ = "1.0.0"

# Add NullHandler to prevent logging warnings if no handler is configured by the user.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AuthStore",
    "BodyConsumedError",
    "BrowserInitError",
    "BrowserTransport",
    "Client",
    "Err",
    "FetchTimeoutError",
    "HttpError",
    "HttpxTransport",
    "JsonFetchError",
    "Message",
    "MessageStore",
    "MultipartForm",
    "Ok",
    "Outcome",
    "RawResponse",
    "RequestDescriptor",
    "ResponseDecodeError",
    "ResponseResolver",
    "Transport",
    "TransportError",
    "extract_error_message",
    "fetch_json",
    "prepare_headers",
    "setup_logging",
]
