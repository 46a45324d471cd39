"""State containers for the auth token and the chat transcript.

These are plain objects. The application constructs them once at start-up
and hands them to whatever needs them; nothing here is a module-level
singleton.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Literal

from .schemas import JSONValue

logger = logging.getLogger(__name__)

Sender = Literal["user", "bot"]


class AuthStore:
    """Holds a single optional authentication token."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str | None) -> None:
        """Replace the token. ``None`` logs the session out."""
        self._token = token
        logger.debug("Auth token %s", "set" if token else "cleared")

    def clear(self) -> None:
        self.set(None)


@dataclass
class Message:
    """One entry of a chat transcript.

    Attributes:
        id: Stable identifier; updates with the same id replace the entry.
        text: Message body.
        sender: Who wrote it, ``"user"`` or ``"bot"``.
        metadata: Optional free-form data attached by the backend.
    """

    id: str
    text: str
    sender: Sender
    metadata: dict[str, JSONValue] | None = None


class MessageStore:
    """An ordered chat transcript with upsert-by-id semantics.

    Appending a message whose id is already present replaces that entry in
    place, keeping its position. Unseen ids are added at the end. An
    id-to-position index keeps both cases constant time.

    Attributes:
        check_id: Identifier of the check the transcript belongs to, if any.
    """

    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self._messages: list[Message] = []
        self._positions: dict[str, int] = {}
        self.check_id: str | None = None
        self.replace_all(messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        """The current transcript, oldest first."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._positions

    def get(self, message_id: str) -> Message | None:
        position = self._positions.get(message_id)
        return self._messages[position] if position is not None else None

    def append(self, message: Message) -> None:
        """Insert ``message``, or replace the entry that has its id."""
        position = self._positions.get(message.id)
        if position is None:
            self._positions[message.id] = len(self._messages)
            self._messages.append(message)
        else:
            self._messages[position] = message
            logger.debug("Replaced message %s at position %d", message.id, position)

    def replace_all(self, messages: Iterable[Message]) -> None:
        """Swap the whole transcript. Repeated ids collapse onto the first slot."""
        self._messages = []
        self._positions = {}
        for message in messages:
            self.append(message)

    def set_check_id(self, check_id: str | None) -> None:
        self.check_id = check_id

    def clear(self) -> None:
        """Empty the transcript and forget the check id."""
        self.replace_all(())
        self.check_id = None
