"""Browser-backed transport running the page's own ``fetch()``."""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, cast
from urllib.parse import urlparse

from DrissionPage import ChromiumOptions, ChromiumPage

from .exceptions import BrowserInitError, FetchTimeoutError, TransportError
from .response import RawResponse
from .schemas import (
    FetchOptions,
    FetchResponseData,
    Headers,
    MultipartForm,
    RequestDescriptor,
)
from .transport import encode_body, prepare_headers

logger = logging.getLogger(__name__)

# Type alias for page factory
PageFactory = Callable[[ChromiumOptions], ChromiumPage]

_FETCH_SCRIPT = """
    (async () => {{
        const controller = new AbortController();
        const timeoutId = setTimeout(() => controller.abort(), {timeout_ms});
        try {{
            const opts = {options};
            opts.signal = controller.signal;

            if (opts.bodyKind === "base64") {{
                opts.body = Uint8Array.from(atob(opts.body), c => c.charCodeAt(0));
            }} else if (opts.bodyKind === "form") {{
                const form = new FormData();
                for (const [name, value] of Object.entries(opts.form.fields)) {{
                    form.append(name, value);
                }}
                for (const [name, part] of Object.entries(opts.form.files)) {{
                    const bytes = Uint8Array.from(atob(part[1]), c => c.charCodeAt(0));
                    form.append(name, new Blob([bytes], {{ type: part[2] }}), part[0]);
                }}
                opts.body = form;
            }}
            delete opts.bodyKind;
            delete opts.form;

            const res = await fetch({url}, opts);
            clearTimeout(timeoutId);

            const text = await res.text();
            const headers = {{}};
            res.headers.forEach((v, k) => headers[k] = v);

            return {{
                status: res.status,
                statusText: res.statusText,
                url: res.url,
                headers: headers,
                text: text,
                redirected: res.redirected,
                type: res.type
            }};
        }} catch (e) {{
            return {{ error: e.toString() }};
        }}
    }})()
"""


class BrowserTransport:
    """A transport that issues requests from inside a Chromium page.

    Requests go through the browser's Fetch API, so they carry the cookies and
    session state of the browser profile. The page-side script reads the whole
    body as text; the returned :class:`RawResponse` still enforces a single
    read.

    Attributes:
        profile_dir: Path to the browser profile directory.
        headless: Whether the browser runs in headless mode.
        auto_navigate_for_cors: Navigate to the target origin before fetching.
        timeout: Page-side abort timeout in seconds.
    """

    REQUIRED_KEYS = frozenset((
        "status",
        "statusText",
        "url",
        "headers",
        "text",
        "redirected",
        "type",
    ))

    def __init__(
        self,
        profile_dir: str | Path = "./browser_data",
        headless: bool = True,
        auto_navigate_for_cors: bool = False,
        timeout: float = 30.0,
        page_factory: PageFactory | None = None,
    ) -> None:
        """Initialize the transport and start the browser.

        Args:
            profile_dir: Directory path for the user data profile.
            headless: Run browser in headless mode.
            auto_navigate_for_cors: Auto navigate to target origin to fix CORS.
            timeout: Seconds before the page aborts a pending fetch.
            page_factory: Optional callable to create browser pages (for testing/DI).

        Raises:
            BrowserInitError: If browser fails to start.
        """
        self.profile_dir = Path(profile_dir)
        self.headless = headless
        self.auto_navigate_for_cors = auto_navigate_for_cors
        self.timeout = timeout
        self._page_factory = page_factory
        self._lock = threading.Lock()

        self._page: ChromiumPage | None = None
        self._init_browser()

    def _init_browser(self) -> None:
        """Initialize the DrissionPage browser instance.

        Raises:
            BrowserInitError: If initialization fails.
        """
        try:
            options = ChromiumOptions()
            options.set_user_data_path(str(self.profile_dir))
            options.headless(self.headless)

            if self._page_factory:
                self._page = self._page_factory(options)
            else:
                self._page = ChromiumPage(options)
        except Exception as e:
            # DrissionPage raises a variety of errors on startup
            raise BrowserInitError(f"Failed to initialize browser: {e}") from e
        logger.info("Browser started (headless=%s)", self.headless)

    @property
    def page(self) -> ChromiumPage:
        """Return the active DrissionPage instance.

        Raises:
            BrowserInitError: If page is not initialized.
        """
        if self._page is None:
            raise BrowserInitError("Browser has not been initialized.")
        return self._page

    @property
    def current_url(self) -> str:
        """Return the current URL of the browser."""
        return self.page.url if self._page else ""

    def prepare_headers(self, descriptor: RequestDescriptor) -> Headers:
        return prepare_headers(descriptor)

    def _ensure_cors_context(self, url: str) -> None:
        """Navigate browser if needed to satisfy CORS policies.

        Navigation problems are logged and otherwise ignored; the fetch itself
        reports whatever goes wrong next.
        """
        if not self.auto_navigate_for_cors:
            return

        try:
            target = urlparse(url)
            current_netloc = urlparse(self.current_url).netloc

            if not target.netloc or target.netloc == current_netloc:
                return

            target_origin = f"{target.scheme or 'https'}://{target.netloc}"
            logger.debug("Navigating to %s for CORS context", target_origin)
            self.page.get(target_origin)
        except Exception as e:
            logger.warning("Could not navigate to target origin: %s", e)

    @staticmethod
    def _build_options(descriptor: RequestDescriptor, headers: Headers) -> FetchOptions:
        options: FetchOptions = {
            "method": descriptor.method.upper(),
            "headers": headers,
        }
        body = descriptor.body

        if isinstance(body, MultipartForm):
            options["bodyKind"] = "form"
            options["form"] = {
                "fields": dict(body.fields),
                "files": {
                    name: [filename, base64.b64encode(content).decode("ascii"), ctype]
                    for name, (filename, content, ctype) in body.files.items()
                },
            }
        elif isinstance(body, bytes):
            options["bodyKind"] = "base64"
            options["body"] = base64.b64encode(body).decode("ascii")
        elif body is not None:
            encoded = encode_body(body)
            options["bodyKind"] = "text"
            options["body"] = encoded.decode("utf-8") if encoded is not None else None

        return options

    def _validate_fetch_response(self, data: Any) -> FetchResponseData | None:
        """Validate that the fetch response data matches the expected structure."""
        if not isinstance(data, dict):
            return None

        if not self.REQUIRED_KEYS.issubset(data.keys()):
            return None

        return cast(FetchResponseData, data)

    def _exec_fetch(self, url: str, options: FetchOptions) -> FetchResponseData:
        """Execute the fetch JavaScript in the browser.

        Raises:
            FetchTimeoutError: If the page-side timeout aborted the fetch.
            TransportError: If the script failed or returned garbage.
        """
        timeout_ms = int(self.timeout * 1000)
        js_script = _FETCH_SCRIPT.format(
            timeout_ms=timeout_ms,
            options=json.dumps(options),
            url=json.dumps(url),
        )

        # Full script logging is disabled, it may carry credentials.
        logger.debug("Executing fetch with timeout %s ms", timeout_ms)

        cdp_res = self.page.run_cdp(
            "Runtime.evaluate",
            expression=js_script,
            awaitPromise=True,
            returnByValue=True,
            includeCommandLineAPI=False,
        )

        if "exceptionDetails" in cdp_res:
            raise TransportError(f"JS Execution Error: {cdp_res['exceptionDetails']}")

        result_value = cdp_res.get("result", {}).get("value")

        if not isinstance(result_value, dict):
            raise TransportError(f"Unexpected JS result type: {type(result_value)}")

        if "error" in result_value:
            err_msg = result_value["error"]
            if "AbortError" in err_msg:
                raise FetchTimeoutError(
                    f"Request timed out after {self.timeout} seconds"
                )
            raise TransportError(f"Fetch failed: {err_msg}")

        response_data = self._validate_fetch_response(result_value)
        if response_data is None:
            raise TransportError(
                f"Invalid fetch response structure. Keys found: {list(result_value.keys())}"
            )

        return response_data

    def _fetch(self, descriptor: RequestDescriptor, headers: Headers) -> FetchResponseData:
        options = self._build_options(descriptor, headers)
        # One page serves one request: navigation would kill an in-flight fetch.
        with self._lock:
            self._ensure_cors_context(descriptor.url)
            return self._exec_fetch(descriptor.url, options)

    async def send(
        self, descriptor: RequestDescriptor, headers: Headers
    ) -> RawResponse:
        """Run the request in the page without blocking the event loop."""
        data = await asyncio.to_thread(self._fetch, descriptor, headers)
        logger.debug("Received %s from %s", data["status"], data["url"])
        return RawResponse.from_text(
            data["status"], data["headers"], data["text"], url=data["url"]
        )

    def close(self) -> None:
        """Close the browser instance."""
        if self._page:
            try:
                self._page.quit()
            except Exception as e:
                logger.warning("Error while closing browser: %s", e)
            self._page = None

    async def aclose(self) -> None:
        await asyncio.to_thread(self.close)
