"""Quick start example for jsonfetch.

This script demonstrates the Client against httpbin.org: a JSON GET, a JSON
POST, an error response turned into an Outcome, and the chat stores.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Ensure src is in python path for local testing
sys.path.append(str(Path(__file__).parent.parent / "src"))

from jsonfetch import (
    AuthStore,
    Client,
    Err,
    HttpError,
    JsonFetchError,
    Message,
    MessageStore,
    setup_logging,
)

logger = logging.getLogger("jsonfetch.quick_start")


async def main() -> None:
    """Run the demonstration."""
    setup_logging(level=logging.INFO)

    auth = AuthStore()
    messages = MessageStore()

    async with Client(base_url="https://httpbin.org", auth=auth) as client:
        try:
            logger.info("1. GET /get")
            data = await client.get("/get", params={"hello": "world"})
            logger.info(f"   args: {data.get('args') if isinstance(data, dict) else data}")

            logger.info("2. POST /anything with a bearer token")
            auth.set("demo-token")
            data = await client.post("/anything", json={"mission": "fetch"})
            if isinstance(data, dict):
                logger.info(f"   Authorization: {data['headers'].get('Authorization')}")

            logger.info("3. GET /status/418 as an Outcome")
            outcome = await client.request("GET", "/status/418")
            if isinstance(outcome, Err):
                logger.info(f"   {outcome.status_code}: {outcome.message!r}")

            logger.info("4. Raising helpers")
            try:
                await client.get("/status/404")
            except HttpError as e:
                logger.warning(f"   {e.status_code}: {e}")

        except JsonFetchError as e:
            logger.exception(f"Error: {e}")

    messages.append(Message("m1", "Hi!", "user"))
    messages.append(Message("m2", "...", "bot"))
    messages.append(Message("m2", "Hello, how can I help?", "bot", {"model": "demo"}))
    for message in messages:
        logger.info(f"   [{message.sender}] {message.text}")


if __name__ == "__main__":
    asyncio.run(main())
