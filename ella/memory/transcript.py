"""Append-only, observable conversation transcript."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterator

from .models import BookingSummary, Message, QuickReply, Role, ServiceCard
from .store import TranscriptStore

logger = logging.getLogger("ella.transcript")

Subscriber = Callable[[Message], None]


class TranscriptWriteError(RuntimeError):
    """The store refused a message; the transcript was left unchanged."""


class Transcript:
    """Ordered message log for one conversation.

    ``append`` is the only mutation. Readers get tuple snapshots, and
    subscribers are called with every message after it has been appended.
    """

    def __init__(self, conversation_id: str, store: TranscriptStore | None = None) -> None:
        self.conversation_id = conversation_id
        self._store = store
        self._messages: list[Message] = []
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        with self._lock:
            return tuple(self._messages)

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._messages[-1].id + 1 if self._messages else 1

    def append(self, message: Message, persist: bool = True) -> Message:
        """Store ``message``, then add it to the log.

        A store failure raises ``TranscriptWriteError`` and leaves the log as it
        was. ``persist=False`` keeps the message in memory only.
        """

        with self._lock:
            if self._messages:
                last = self._messages[-1]
                if message.id <= last.id:
                    raise ValueError(f"message id {message.id} does not follow {last.id}")
            if persist and self._store is not None:
                try:
                    self._store.append(self.conversation_id, message)
                except Exception as exc:  # noqa: BLE001
                    logger.exception(
                        "Could not store message %s of conversation %s",
                        message.id,
                        self.conversation_id,
                    )
                    raise TranscriptWriteError(str(exc)) from exc
            self._messages.append(message)
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(message)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "Transcript subscriber failed for conversation %s", self.conversation_id
                )
        return message

    def record(
        self,
        role: Role,
        text: str,
        quick_replies: tuple[QuickReply, ...] = (),
        service_card: ServiceCard | None = None,
        booking_summary: BookingSummary | None = None,
        persist: bool = True,
    ) -> Message:
        """Build the next message and append it."""

        message = Message(
            id=self.next_id,
            role=role,
            text=text,
            quick_replies=quick_replies,
            service_card=service_card,
            booking_summary=booking_summary,
        )
        return self.append(message, persist=persist)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register ``subscriber``; the returned callable unregisters it."""

        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe
