"""
Real-time Pub/Sub for Session Events.

Streams interview transitions (candidate started, question asked, answer
scored, paused, completed, ...) from the engine to any number of
observers, so one dashboard can monitor many candidate sessions.

The engine is synchronous, so it hands events to ``deliver()``, which
enqueues without awaiting. Subscribers consume from asyncio queues.

Example usage:
    publisher = get_publisher()
    engine = InterviewEngine(store, listeners=[publisher.deliver])
    queue = await publisher.subscribe()
    event = await queue.get()
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class SessionEventType(str, Enum):
    """
    Types of session events published to the stream.

    Attributes:
        CANDIDATE_STARTED: A new candidate record was created.
        MESSAGE: A chat message was appended to a transcript.
        PROFILE_COMPLETE: All contact fields are known; candidate is ready.
        QUESTION_ASKED: A question was asked and its deadline armed.
        ANSWER_SCORED: A candidate answer was recorded and scored.
        AUTO_SUBMITTED: A deadline elapsed and an empty answer was recorded.
        PAUSED: The running deadline was frozen.
        RESUMED: The frozen deadline was re-armed.
        COMPLETED: The interview was finalized.
        CANDIDATE_SELECTED: The active candidate changed.
        SESSION_RESET: The active pointer and timer were cleared.
    """

    CANDIDATE_STARTED = "candidate_started"
    MESSAGE = "message"
    PROFILE_COMPLETE = "profile_complete"
    QUESTION_ASKED = "question_asked"
    ANSWER_SCORED = "answer_scored"
    AUTO_SUBMITTED = "auto_submitted"
    PAUSED = "paused"
    RESUMED = "resumed"
    COMPLETED = "completed"
    CANDIDATE_SELECTED = "candidate_selected"
    SESSION_RESET = "session_reset"


def _get_utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class SessionEvent:
    """
    A single transition observed in the engine.

    Attributes:
        event_type: Category of the event.
        candidate_id: Candidate the event belongs to, if any.
        content: Human-readable description or chat text.
        timestamp: UTC timestamp when the event was created.
        question_index: Slot of the question involved, if any.
        score: Score attached to the event, if any.
        status: Candidate status after the transition.
    """

    event_type: SessionEventType
    candidate_id: str | None = None
    content: str = ""
    timestamp: str = field(default_factory=_get_utc_timestamp)
    question_index: int | None = None
    score: int | None = None
    status: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "event_type": self.event_type.value,
            "candidate_id": self.candidate_id,
            "content": self.content,
            "timestamp": self.timestamp,
            "question_index": self.question_index,
            "score": self.score,
            "status": self.status,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class _Subscription:
    queue: asyncio.Queue[SessionEvent]
    candidate_id: str | None = None

    def wants(self, event: SessionEvent) -> bool:
        return self.candidate_id is None or event.candidate_id == self.candidate_id


class SessionEventPublisher:
    """
    Fan-out of session events to observer queues.

    A subscriber either follows every candidate (dashboard overview) or a
    single ``candidate_id`` (detail view). A bounded history is replayed to
    each new subscriber through the same filter.

    Example:
        publisher = SessionEventPublisher()
        queue = await publisher.subscribe(candidate_id="cand_1")
        publisher.deliver(SessionEvent(SessionEventType.PAUSED, candidate_id="cand_1"))
        event = await queue.get()
    """

    def __init__(self, max_history: int = 200) -> None:
        """
        Args:
            max_history: Maximum number of events to retain for replay.
                Zero disables history.
        """
        if max_history < 0:
            raise ValueError(f"max_history must be >= 0. Got: {max_history}")
        self._subscriptions: list[_Subscription] = []
        self._history: list[SessionEvent] = []
        self._max_history = max_history
        self._lock = asyncio.Lock()
        logger.info("SessionEventPublisher initialized with max_history=%d", max_history)

    async def subscribe(self, candidate_id: str | None = None) -> asyncio.Queue[SessionEvent]:
        """
        Open a queue of session events, pre-filled from history.

        Args:
            candidate_id: Only receive this candidate's events; all when None.

        The caller must ``unsubscribe`` the queue when done.
        """
        subscription = _Subscription(queue=asyncio.Queue(), candidate_id=candidate_id)
        async with self._lock:
            for event in self._history:
                if subscription.wants(event):
                    subscription.queue.put_nowait(event)
            self._subscriptions.append(subscription)
        logger.debug(
            "Subscriber added (candidate=%s). Total: %d",
            candidate_id or "*",
            len(self._subscriptions),
        )
        return subscription.queue

    async def unsubscribe(self, queue: asyncio.Queue[SessionEvent]) -> None:
        async with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s.queue is not queue]
        logger.debug("Subscriber removed. Total: %d", len(self._subscriptions))

    def deliver(self, event: SessionEvent) -> None:
        """
        Record and fan out an event without awaiting.

        This is the engine listener. Queues are unbounded, so it never blocks.
        """
        self._history.append(event)
        overflow = len(self._history) - self._max_history
        if overflow > 0:
            del self._history[:overflow]

        for subscription in list(self._subscriptions):
            if subscription.wants(event):
                subscription.queue.put_nowait(event)

        logger.debug("Delivered %s for %s", event.event_type.value, event.candidate_id or "-")

    async def publish(self, event: SessionEvent) -> None:
        """Awaitable variant of ``deliver`` for async producers."""
        async with self._lock:
            self.deliver(event)

    async def get_history(self, candidate_id: str | None = None) -> list[SessionEvent]:
        """Retained events, optionally for one candidate only."""
        async with self._lock:
            return [e for e in self._history if candidate_id is None or e.candidate_id == candidate_id]

    async def clear_history(self) -> None:
        async with self._lock:
            self._history.clear()
        logger.debug("Event history cleared")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)


_publisher: SessionEventPublisher | None = None


def get_publisher() -> SessionEventPublisher:
    """Process-wide publisher, created on first use."""
    global _publisher
    if _publisher is None:
        _publisher = SessionEventPublisher()
    return _publisher


def reset_publisher() -> None:
    """Drop the process-wide publisher (tests use this for isolation)."""
    global _publisher
    _publisher = None
    logger.debug("Global publisher reset")
