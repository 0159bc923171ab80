"""
Deadline Manager.

Turns a question's fixed time limit into an absolute deadline on the
session store, freezes the remainder on pause, re-arms it on resume, and
answers the periodic "has it expired?" poll exactly once per deadline.

Thread Safety:
    Not thread-safe. The engine drives it from a single mutation pipeline.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from .models import InterviewQuestion, SessionStore, utc_now


__all__ = ["Clock", "DeadlineManager"]


logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]


class DeadlineManager:
    """
    Owns the single active timer held in a ``SessionStore``.

    Example:
        >>> deadlines = DeadlineManager(store)
        >>> deadlines.ask(question)          # deadline = now + time limit
        >>> deadlines.pause()                # freeze the remainder
        >>> deadlines.resume(question)       # deadline = now + remainder
        >>> if deadlines.poll():             # True once after expiry
        ...     engine.auto_submit_current_question()
    """

    def __init__(self, store: SessionStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock
        self._fired_for: Optional[tuple[Optional[str], int, datetime]] = None

    @property
    def store(self) -> SessionStore:
        return self._store

    def bind(self, store: SessionStore) -> None:
        """Point the manager at a different store (after a restore)."""
        self._store = store
        self._fired_for = None

    def now(self) -> datetime:
        return self._clock()

    @property
    def is_running(self) -> bool:
        return self._store.question_deadline is not None

    @property
    def is_paused(self) -> bool:
        return self._store.paused_remaining_seconds is not None

    def ask(self, question: InterviewQuestion, asked_at: Optional[datetime] = None) -> datetime:
        """Arm the deadline for a newly asked question."""
        start = asked_at or self.now()
        deadline = start + timedelta(seconds=question.time_limit_seconds)
        self._store.question_deadline = deadline
        self._store.paused_at = None
        self._store.paused_remaining_seconds = None
        logger.debug("Deadline armed at %s (%ds)", deadline.isoformat(), question.time_limit_seconds)
        return deadline

    def pause(self) -> Optional[int]:
        """
        Freeze the remaining seconds and clear the deadline.

        Returns:
            The frozen remainder, or None when no deadline was running.
        """
        deadline = self._store.question_deadline
        if deadline is None:
            logger.debug("pause ignored: no live deadline")
            return None

        now = self.now()
        remaining = max(0, int((deadline - now).total_seconds()))
        self._store.question_deadline = None
        self._store.paused_at = now
        self._store.paused_remaining_seconds = remaining
        logger.debug("Deadline paused with %ds remaining", remaining)
        return remaining

    def resume(self, question: InterviewQuestion) -> Optional[datetime]:
        """
        Re-arm the deadline from the frozen remainder.

        Falls back to the question's full time limit when the remainder is
        not positive, so a resume never expires instantly.

        Returns:
            The new deadline, or None when nothing was paused.
        """
        remaining = self._store.paused_remaining_seconds
        if remaining is None:
            logger.debug("resume ignored: no frozen remainder")
            return None

        budget = remaining if remaining > 0 else question.time_limit_seconds
        deadline = self.now() + timedelta(seconds=budget)
        self._store.question_deadline = deadline
        self._store.paused_at = None
        self._store.paused_remaining_seconds = None
        logger.debug("Deadline resumed with %ds budget", budget)
        return deadline

    def clear(self) -> None:
        """Drop any running or frozen timer."""
        self._store.clear_timer()

    def seconds_remaining(self) -> Optional[int]:
        """
        Polling read of the countdown.

        Returns:
            Whole seconds left while running (rounded up, may go negative
            after expiry), the frozen remainder while paused, else None.
        """
        deadline = self._store.question_deadline
        if deadline is None:
            return self._store.paused_remaining_seconds
        return math.ceil((deadline - self.now()).total_seconds())

    def poll(self) -> bool:
        """
        Report expiry of the running deadline, at most once per deadline.

        The latch is keyed by candidate, question index and deadline, so a
        deadline that is re-armed, cleared or belongs to another candidate
        never inherits an earlier trigger.
        """
        deadline = self._store.question_deadline
        if deadline is None:
            return False

        remaining = self.seconds_remaining()
        if remaining is None or remaining > 0:
            return False

        context = (
            self._store.active_candidate_id,
            self._store.current_question_index,
            deadline,
        )
        if self._fired_for == context:
            return False

        self._fired_for = context
        logger.debug("Deadline %s elapsed", deadline.isoformat())
        return True
