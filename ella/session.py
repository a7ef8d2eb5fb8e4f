"""Per-user chat sessions and the registry that keeps them apart.

A ``ChatSession`` owns one conversation state and one transcript. Turns are
queued and handled by a single worker task, one at a time, in submission
order::

    session = registry.create()
    reply = await session.submit_user_input("book")   # future resolves to the reply
    session.transcript.messages                        # greeting, user, reply

Inputs that arrive while a reply is still "typing" wait in the queue; they
are never dropped or interleaved.
"""

from __future__ import annotations

import asyncio
import logging
import random
import secrets
from typing import Callable, Iterator

from ella.booking.base import BookingCreator, FinalizedBooking
from ella.core.metrics import MetricsCollector
from ella.dialogue.catalog import PASSWORD_MASK
from ella.dialogue.machine import DialogueMachine
from ella.dialogue.types import ConversationState, Draft, Reply, Step
from ella.memory.models import Message, Role
from ella.memory.store import TranscriptStore
from ella.memory.transcript import Transcript, TranscriptWriteError

log = logging.getLogger("ella.session")

CompletionCallback = Callable[[FinalizedBooking], None]


class ChatSession:
    """One user's booking conversation."""

    def __init__(
        self,
        session_id: str,
        machine: DialogueMachine,
        booking_creator: BookingCreator | None = None,
        store: TranscriptStore | None = None,
        metrics: MetricsCollector | None = None,
        on_booking_complete: CompletionCallback | None = None,
        typing_delay: tuple[float, float] = (1.0, 2.0),
        rng: random.Random | None = None,
    ) -> None:
        self.session_id = session_id
        self._machine = machine
        self._booking_creator = booking_creator
        self._metrics = metrics
        self._on_booking_complete = on_booking_complete
        self._typing_delay = typing_delay
        self._rng = rng or random.Random()

        self._state = ConversationState()
        self.transcript = Transcript(session_id, store)

        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[tuple[str, asyncio.Future]] | None = None
        self._worker: asyncio.Task | None = None
        self._handoffs: set[asyncio.Task] = set()

        self._say(machine.greeting())
        log.info("Session %s started", session_id)

    # -- public API --------------------------------------------------------

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def current_step(self) -> Step:
        return self._state.step

    @property
    def draft(self) -> Draft:
        return self._state.draft

    @property
    def pending_turns(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    def submit_user_input(self, text: str) -> asyncio.Future:
        """Queue one user turn; the returned future resolves to the assistant reply."""

        self._ensure_worker()
        future = self._loop.create_future()
        self._queue.put_nowait((text, future))
        return future

    async def drain(self) -> None:
        """Wait until every queued turn and booking handoff has finished."""

        if self._loop is not asyncio.get_running_loop():
            return
        if self._queue is not None:
            await self._queue.join()
        if self._handoffs:
            await asyncio.gather(*self._handoffs, return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        current = self._loop is asyncio.get_running_loop()
        if current and self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        log.info("Session %s closed", self.session_id)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "step": self._state.step.value,
            "draft": self._state.draft.to_dict(),
            "message_count": len(self.transcript),
            "pending_turns": self.pending_turns,
        }

    # -- turn processing ---------------------------------------------------

    def _ensure_worker(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is not loop or self._worker is None or self._worker.done():
            # Queues are bound to the loop they are awaited in, so a session
            # used from a new loop starts a fresh queue and worker.
            if self._loop is not loop:
                self._queue = asyncio.Queue()
            self._loop = loop
            self._worker = loop.create_task(
                self._run(), name=f"ella-session-{self.session_id}"
            )

    async def _run(self) -> None:
        while True:
            text, future = await self._queue.get()
            try:
                reply = await self._process_turn(text)
            except Exception as exc:  # noqa: BLE001
                log.exception("Turn failed in session %s", self.session_id)
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(reply)
            finally:
                self._queue.task_done()

    async def _process_turn(self, text: str) -> Message:
        # A store failure here leaves the transcript untouched and fails the turn.
        shown = PASSWORD_MASK if self._machine.expects_secret(self._state) else text
        self.transcript.record(Role.USER, shown)

        low, high = self._typing_delay
        delay = self._rng.uniform(low, high) if high > 0 else 0.0
        if delay > 0:
            await asyncio.sleep(delay)

        previous = self._state.step
        try:
            transition = self._machine.advance(self._state, text)
        except Exception:  # noqa: BLE001
            log.exception("Dialogue failed at %s in session %s", previous.value, self.session_id)
            transition = self._machine.fallback(self._state)
        self._state = transition.state
        message = self._say(transition.reply)
        log.info(
            "Session %s: %s -> %s (intent=%s)",
            self.session_id,
            previous.value,
            self._state.step.value,
            transition.intent.value,
        )
        if self._metrics is not None:
            self._metrics.record_turn(previous.value, transition.intent.value)

        if transition.completed is not None:
            self._complete(transition.completed)
        return message

    def _say(self, reply: Reply) -> Message:
        """Record an assistant reply, in memory only if the store refuses it."""

        fields = dict(
            quick_replies=reply.quick_replies,
            service_card=reply.service_card,
            booking_summary=reply.booking_summary,
        )
        try:
            return self.transcript.record(Role.ASSISTANT, reply.text, **fields)
        except TranscriptWriteError:
            log.warning("Session %s reply kept in memory only", self.session_id)
            return self.transcript.record(Role.ASSISTANT, reply.text, persist=False, **fields)

    def _complete(self, booking: FinalizedBooking) -> None:
        if self._on_booking_complete is not None:
            try:
                self._on_booking_complete(booking)
            except Exception:  # noqa: BLE001
                log.exception(
                    "Booking completion callback failed in session %s", self.session_id
                )

        if self._booking_creator is not None:
            task = self._loop.create_task(self._hand_off(booking))
            self._handoffs.add(task)
            task.add_done_callback(self._handoffs.discard)

    async def _hand_off(self, booking: FinalizedBooking) -> None:
        """Pass a confirmed booking to the creator; its outcome never reaches the dialogue."""

        success = False
        try:
            result = await self._booking_creator.create(booking)
            success = result.success
            if success:
                log.info("Session %s booking created: %s", self.session_id, result.booking_id)
            else:
                log.warning("Session %s booking rejected: %s", self.session_id, result.detail)
        except Exception:  # noqa: BLE001
            log.exception("Booking creation failed in session %s", self.session_id)
        finally:
            if self._metrics is not None:
                self._metrics.record_booking(success)


class SessionRegistry:
    """Creates independent sessions and looks them up by id."""

    def __init__(
        self,
        machine: DialogueMachine,
        booking_creator: BookingCreator | None = None,
        store: TranscriptStore | None = None,
        metrics: MetricsCollector | None = None,
        typing_delay: tuple[float, float] = (1.0, 2.0),
    ) -> None:
        self._machine = machine
        self._booking_creator = booking_creator
        self._store = store
        self._metrics = metrics
        self._typing_delay = typing_delay
        self._sessions: dict[str, ChatSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[ChatSession]:
        return iter(list(self._sessions.values()))

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(12)

    def create(
        self,
        session_id: str | None = None,
        on_booking_complete: CompletionCallback | None = None,
    ) -> ChatSession:
        session_id = session_id or self.new_session_id()
        if session_id in self._sessions:
            raise ValueError(f"session {session_id} already exists")
        session = ChatSession(
            session_id,
            self._machine,
            booking_creator=self._booking_creator,
            store=self._store,
            metrics=self._metrics,
            on_booking_complete=on_booking_complete,
            typing_delay=self._typing_delay,
        )
        self._sessions[session_id] = session
        log.info("Session registered: %s", session_id)
        return session

    def get(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> ChatSession | None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            log.info("Session unregistered: %s", session_id)
        return session
