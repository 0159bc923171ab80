"""
Interview Session Engine.

The per-candidate state machine that sequences profile collection,
question asking, timed answer capture, scoring and finalization:

    collecting-profile -> ready -> in-progress <-> paused -> completed

Every command is routed through a per-status handler table. The tables
are checked for exhaustiveness at import time, so adding a status without
deciding how each command treats it fails fast.

The engine owns an explicit ``SessionStore`` context object. Mutating
commands run as one transaction: when the outermost command finishes the
``on_change`` persistence hook receives the store, then buffered
``SessionEvent``s are delivered to listeners.

Thread Safety:
    Not thread-safe. Drive one engine from a single task or thread; the
    ticker and the command surface must share that task's event loop.

Last Grunted: 10/18/2026
"""

from __future__ import annotations

import logging
import math
import random
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional

from interview_catalog import QuestionCatalog, default_catalog

from .deadline import Clock, DeadlineManager
from .ids import new_id
from .models import (
    CandidateProfile,
    CandidateRecord,
    CandidateStatus,
    ChatMessage,
    ChatRole,
    InterviewQuestion,
    QuestionStatus,
    SessionStore,
    utc_now,
)
from .profile import describe_missing_fields, enrich_from_message, missing_fields
from .pubsub import SessionEvent, SessionEventType
from .question_bank import generate_question_set
from .resume import ResumeParseError, parse_resume_file
from .scoring import build_summary, compute_final_score, score_answer


__all__ = ["InterviewEngine", "IntakeResult", "START_COMMANDS"]


logger = logging.getLogger(__name__)


START_COMMANDS: frozenset[str] = frozenset({"start", "start interview", "begin"})
WELCOME_BACK_IDLE = timedelta(minutes=1)

GREETING = "Hi! I'm your AI interviewer. Let's get your profile ready before we jump in."
PROFILE_COMPLETE = 'Great! I have everything I need. Type "start" whenever you are ready.'
READY_REPROMPT = 'Just let me know when you want to begin by typing "start".'
PAUSED_REMINDER = "We are currently paused. Resume when you are ready to continue."
COMPLETED_NOTICE = "Your interview is complete. Upload another resume to start a new session."
INTERVIEW_INTRO = (
    "We will go through six questions: 2 easy, 2 medium, and 2 hard. "
    "Timer starts when each question is asked."
)
PAUSE_NOTICE = "Sure thing, the interview is paused. Resume when you are ready."
RESUME_NOTICE = "Welcome back! Picking up right where we left off."
TIME_UP = "Time's up! Let's move to the next question."


ChangeHook = Callable[[SessionStore], None]
EventListener = Callable[[SessionEvent], None]


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of starting a candidate from a resume file."""

    candidate_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _feedback_for(score: int) -> str:
    if score >= 75:
        return "Strong response!"
    if score >= 40:
        return "Good effort; consider adding more specifics next time."
    return "Thanks for the answer. We can build on this in future interviews."


class InterviewEngine:
    """
    Routes chat input and control commands for every candidate session.

    Example:
        >>> engine = InterviewEngine(SessionStore(), on_change=store_file.save)
        >>> engine.start_candidate(CandidateProfile(name="Ana"))
        >>> engine.submit_message("ana@x.com 555-123-4567")
        >>> engine.submit_message("start")
        >>> engine.seconds_remaining
        20
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        *,
        clock: Clock = utc_now,
        catalog: Optional[QuestionCatalog] = None,
        rng: Optional[random.Random] = None,
        on_change: Optional[ChangeHook] = None,
        listeners: Iterable[EventListener] = (),
    ) -> None:
        self._store = store if store is not None else SessionStore()
        self._clock = clock
        self._catalog = catalog or default_catalog()
        self._rng = rng or random.Random()
        self._on_change = on_change
        self._listeners: list[EventListener] = list(listeners)
        self._deadlines = DeadlineManager(self._store, clock)

        self._depth = 0
        self._dirty = False
        self._pending_events: list[SessionEvent] = []

        self._repair_store()
        logger.debug("InterviewEngine initialized with %d candidates", len(self._store.candidates))

    # -------------------------------------------------------------------------
    # Snapshot / restore
    # -------------------------------------------------------------------------

    @classmethod
    def from_snapshot(cls, data: dict[str, Any], **kwargs: Any) -> "InterviewEngine":
        """Rehydrate an engine from a ``snapshot()`` dict."""
        return cls(SessionStore.model_validate(data), **kwargs)

    def snapshot(self) -> dict[str, Any]:
        """JSON-serializable copy of the whole session store."""
        return self._store.model_dump(mode="json")

    def restore(self, data: dict[str, Any]) -> None:
        """Replace the session store with a snapshot (no hook is fired)."""
        self._store = SessionStore.model_validate(data)
        self._deadlines.bind(self._store)
        self._repair_store()
        logger.info("Restored session store with %d candidates", len(self._store.candidates))

    def _repair_store(self) -> None:
        store = self._store
        known = [cid for cid in store.candidate_order if cid in store.candidates]
        orphans = [cid for cid in store.candidates if cid not in known]
        if orphans or len(known) != len(store.candidate_order):
            logger.warning("Repairing candidate order (%d orphaned records)", len(orphans))
            store.candidate_order = orphans + known

        if store.active_candidate_id and store.active_candidate_id not in store.candidates:
            logger.warning("Active candidate %s not found; clearing", store.active_candidate_id)
            store.active_candidate_id = None
            store.current_question_index = 0
            store.clear_timer()

        if store.question_deadline is not None and store.paused_remaining_seconds is not None:
            candidate = store.active_candidate
            if candidate is not None and candidate.status == CandidateStatus.PAUSED:
                store.question_deadline = None
            else:
                store.paused_at = None
                store.paused_remaining_seconds = None
            logger.warning("Snapshot had both a deadline and a frozen remainder; kept one")

        active = store.active_candidate
        timer_set = store.question_deadline is not None or store.paused_remaining_seconds is not None
        if timer_set and (active is None or active.status not in (CandidateStatus.IN_PROGRESS, CandidateStatus.PAUSED)):
            logger.warning("Timer state without an interview in progress; clearing")
            store.clear_timer()
        elif active is not None and active.status == CandidateStatus.PAUSED and store.question_deadline is not None:
            logger.warning("Paused candidate %s had a live deadline; clearing", active.id)
            store.question_deadline = None

        has_timer = store.question_deadline is not None
        for candidate in store.candidates.values():
            if candidate.status != CandidateStatus.IN_PROGRESS:
                continue
            if candidate.id != store.active_candidate_id or not has_timer:
                # No live timer to answer against; resume re-asks the open question.
                logger.warning("Candidate %s had no live timer; marking paused", candidate.id)
                candidate.status = CandidateStatus.PAUSED

    # -------------------------------------------------------------------------
    # Read-only queries
    # -------------------------------------------------------------------------

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def catalog(self) -> QuestionCatalog:
        return self._catalog

    @property
    def active_candidate(self) -> Optional[CandidateRecord]:
        return self._store.active_candidate

    @property
    def active_candidate_id(self) -> Optional[str]:
        return self._store.active_candidate_id

    @property
    def candidates_ordered(self) -> list[CandidateRecord]:
        """All candidates, most recently started first."""
        return [
            self._store.candidates[cid]
            for cid in self._store.candidate_order
            if cid in self._store.candidates
        ]

    @property
    def current_question_index(self) -> int:
        return self._store.current_question_index

    @property
    def current_question(self) -> Optional[InterviewQuestion]:
        candidate = self.active_candidate
        if candidate is None:
            return None
        index = self._store.current_question_index
        if 0 <= index < len(candidate.questions):
            return candidate.questions[index]
        return None

    @property
    def seconds_remaining(self) -> Optional[int]:
        return self._deadlines.seconds_remaining()

    @property
    def question_deadline(self) -> Optional[datetime]:
        return self._store.question_deadline

    @property
    def is_paused(self) -> bool:
        return self._deadlines.is_paused

    @property
    def is_timer_running(self) -> bool:
        return self._deadlines.is_running

    def get_candidate(self, candidate_id: str) -> Optional[CandidateRecord]:
        return self._store.candidates.get(candidate_id)

    def search_candidates(self, term: str) -> list[CandidateRecord]:
        """Dashboard filter over name, email, phone and resume file name."""
        needle = (term or "").strip().lower()
        if not needle:
            return self.candidates_ordered

        def matches(candidate: CandidateRecord) -> bool:
            profile = candidate.profile
            haystack = (profile.name, profile.email, profile.phone, profile.resume_file_name)
            return any(value and needle in value.lower() for value in haystack)

        return [c for c in self.candidates_ordered if matches(c)]

    def find_unfinished_candidate(self) -> Optional[CandidateRecord]:
        """
        Candidate to offer a "welcome back" prompt for, if any.

        Looks at the most recent unfinished candidate (in progress, paused,
        or ready with questions generated). It qualifies when it has been
        idle for at least a minute and the prompt has not been acknowledged
        since its last activity.
        """
        now = self._clock()
        for candidate in self.candidates_ordered:
            unfinished = candidate.status in (
                CandidateStatus.IN_PROGRESS,
                CandidateStatus.PAUSED,
            ) or (candidate.status == CandidateStatus.READY and bool(candidate.questions))
            if not unfinished:
                continue
            if now - candidate.updated_at < WELCOME_BACK_IDLE:
                return None
            seen_at = self._store.welcome_back_seen_at
            if seen_at is not None and seen_at > candidate.updated_at:
                return None
            return candidate
        return None

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
        if self._depth == 0:
            self._flush()

    def _flush(self) -> None:
        dirty, self._dirty = self._dirty, False
        events, self._pending_events = self._pending_events, []
        if dirty and self._on_change is not None:
            self._on_change(self._store)
        for event in events:
            for listener in list(self._listeners):
                listener(event)

    def _emit(
        self,
        event_type: SessionEventType,
        candidate: Optional[CandidateRecord],
        content: str = "",
        *,
        question_index: Optional[int] = None,
        score: Optional[int] = None,
    ) -> None:
        self._dirty = True
        self._pending_events.append(
            SessionEvent(
                event_type=event_type,
                candidate_id=candidate.id if candidate else None,
                content=content,
                question_index=question_index,
                score=score,
                status=candidate.status.value if candidate else None,
            )
        )

    def _say(self, candidate: CandidateRecord, role: ChatRole, content: str) -> ChatMessage:
        message = ChatMessage(
            id=new_id("msg"),
            role=role,
            content=content,
            created_at=self._clock(),
        )
        candidate.chat.append(message)
        candidate.touch(message.created_at)
        self._emit(SessionEventType.MESSAGE, candidate, content)
        return message

    def _set_status(self, candidate: CandidateRecord, status: CandidateStatus) -> None:
        if candidate.status != status:
            logger.info(
                "Candidate %s: %s -> %s", candidate.id, candidate.status.value, status.value
            )
        candidate.status = status
        candidate.touch(self._clock())
        self._dirty = True

    # -------------------------------------------------------------------------
    # Commands: candidates
    # -------------------------------------------------------------------------

    def start_candidate(
        self,
        profile: Optional[CandidateProfile] = None,
        pending_fields: Optional[Iterable[str]] = None,
    ) -> CandidateRecord:
        """
        Create a new candidate in ``collecting-profile`` and make it active.

        Never merges into an existing candidate. Any running timer is dropped
        and a previously active candidate that was mid-question is paused.

        Args:
            profile: Initial profile guess (e.g. from a resume).
            pending_fields: Fields still unknown; computed from ``profile``
                when omitted.
        """
        with self._transaction():
            self._suspend_active("Suspended by new candidate")
            profile = profile or CandidateProfile()
            if pending_fields is None:
                pending = missing_fields(profile)
            else:
                wanted = set(pending_fields)
                pending = [f for f in ("name", "email", "phone") if f in wanted]

            now = self._clock()
            candidate = CandidateRecord(
                id=new_id("cand"),
                profile=profile,
                pending_profile_fields=pending,
                created_at=now,
                updated_at=now,
            )
            candidate.chat.append(
                ChatMessage(id=new_id("msg"), role=ChatRole.SYSTEM, content=GREETING, created_at=now)
            )

            store = self._store
            store.candidates[candidate.id] = candidate
            store.candidate_order.insert(0, candidate.id)
            store.active_candidate_id = candidate.id
            store.current_question_index = 0
            self._deadlines.clear()

            logger.info("Started candidate %s (pending fields: %s)", candidate.id, pending or "none")
            self._emit(SessionEventType.CANDIDATE_STARTED, candidate, GREETING)
        return candidate

    def start_candidate_from_resume(
        self,
        path: Path,
        parser: Callable[[Path], CandidateProfile] = parse_resume_file,
    ) -> IntakeResult:
        """
        Parse a resume and start a candidate from it.

        Extraction failures are returned as user-facing text and leave the
        session store untouched.
        """
        try:
            parsed = parser(Path(path))
        except ResumeParseError as e:
            logger.warning("Resume rejected (%s): %s", Path(path).name, e)
            return IntakeResult(error=str(e))

        profile = parsed.model_copy(
            update={"resume_file_name": parsed.resume_file_name or Path(path).name}
        )
        with self._transaction():
            candidate = self.start_candidate(profile)
            intro = (
                f"Thanks, {profile.name}! Let me skim your resume and get the interview ready."
                if profile.name
                else "Thanks! I have your resume now. I will extract the essentials so we can get started."
            )
            self._say(candidate, ChatRole.AI, intro)

            if candidate.pending_profile_fields:
                self._say(
                    candidate,
                    ChatRole.AI,
                    f"I still need your {describe_missing_fields(candidate.pending_profile_fields)} "
                    "before we begin. Could you share it now?",
                )
            else:
                self._set_status(candidate, CandidateStatus.READY)
                self._emit(SessionEventType.PROFILE_COMPLETE, candidate)
                self._say(candidate, ChatRole.AI, PROFILE_COMPLETE)
        return IntakeResult(candidate_id=candidate.id)

    def select_candidate(self, candidate_id: str) -> bool:
        """
        Make another candidate active.

        Always suspends whatever timer was running: the question index is
        reset to 0 and deadline/pause state is cleared. A candidate that was
        mid-question is left ``paused`` so it can be resumed later.

        Returns:
            False when the id is unknown (nothing changes).
        """
        target = self._store.candidates.get(candidate_id)
        if target is None:
            logger.debug("select_candidate ignored: unknown id %s", candidate_id)
            return False

        with self._transaction():
            self._suspend_active("Suspended by candidate switch")
            self._store.active_candidate_id = candidate_id
            self._store.current_question_index = 0
            self._deadlines.clear()
            self._emit(SessionEventType.CANDIDATE_SELECTED, target)
            logger.info("Selected candidate %s", candidate_id)
        return True

    def reset_session(self) -> None:
        """Clear the active pointer and timer; candidate records are kept."""
        with self._transaction():
            self._suspend_active("Suspended by session reset")
            self._store.active_candidate_id = None
            self._store.current_question_index = 0
            self._deadlines.clear()
            self._emit(SessionEventType.SESSION_RESET, None)
            logger.info("Session reset")

    def _suspend_active(self, reason: str) -> None:
        # The caller drops the timer; a mid-question candidate must not stay in-progress.
        previous = self.active_candidate
        if previous is not None and previous.status == CandidateStatus.IN_PROGRESS:
            self._set_status(previous, CandidateStatus.PAUSED)
            self._emit(SessionEventType.PAUSED, previous, reason)

    def mark_welcome_back_seen(self) -> None:
        with self._transaction():
            self._store.welcome_back_seen_at = self._clock()
            self._dirty = True

    # -------------------------------------------------------------------------
    # Commands: conversation
    # -------------------------------------------------------------------------

    def submit_message(self, text: str) -> None:
        """
        Route a chat message from the active candidate.

        Blank text and messages with no active candidate are dropped.
        """
        trimmed = (text or "").strip()
        if not trimmed:
            return
        candidate = self.active_candidate
        if candidate is None:
            logger.debug("Message dropped: no active candidate")
            return

        with self._transaction():
            self._say(candidate, ChatRole.CANDIDATE, trimmed)
            handler = getattr(self, _MESSAGE_HANDLERS[candidate.status])
            handler(candidate, trimmed)

    def _message_collecting_profile(self, candidate: CandidateRecord, text: str) -> None:
        enriched = enrich_from_message(text, candidate.profile)
        missing = missing_fields(enriched)
        candidate.profile = enriched
        candidate.pending_profile_fields = missing
        candidate.touch(self._clock())
        self._dirty = True

        if not missing:
            self._set_status(candidate, CandidateStatus.READY)
            self._emit(SessionEventType.PROFILE_COMPLETE, candidate)
            self._say(candidate, ChatRole.AI, PROFILE_COMPLETE)
        else:
            self._say(
                candidate,
                ChatRole.AI,
                f"Thanks! I'm still missing your {describe_missing_fields(missing)}. "
                "Could you share that?",
            )

    def _message_ready(self, candidate: CandidateRecord, text: str) -> None:
        if text.lower() in START_COMMANDS:
            self._begin_ready(candidate)
        else:
            self._say(candidate, ChatRole.AI, READY_REPROMPT)

    def _message_in_progress(self, candidate: CandidateRecord, text: str) -> None:
        index = self._store.current_question_index
        question = candidate.questions[index] if 0 <= index < len(candidate.questions) else None
        if question is None or question.status != QuestionStatus.PENDING:
            logger.debug("Answer dropped: question %d is not pending", index)
            return

        score = score_answer(text, question.difficulty, self._catalog)
        self._record_answer(candidate, index, text, QuestionStatus.ANSWERED, score)
        self._emit(SessionEventType.ANSWER_SCORED, candidate, question_index=index, score=score)
        self._say(candidate, ChatRole.AI, f"{_feedback_for(score)} I scored that answer {score}/100.")
        self._advance(candidate)

    def _message_paused(self, candidate: CandidateRecord, text: str) -> None:
        self._say(candidate, ChatRole.AI, PAUSED_REMINDER)

    def _message_completed(self, candidate: CandidateRecord, text: str) -> None:
        self._say(candidate, ChatRole.AI, COMPLETED_NOTICE)

    # -------------------------------------------------------------------------
    # Commands: interview flow
    # -------------------------------------------------------------------------

    def begin_interview(self) -> None:
        """Start asking questions for the active candidate, if allowed."""
        candidate = self.active_candidate
        if candidate is None:
            return
        with self._transaction():
            getattr(self, _BEGIN_HANDLERS[candidate.status])(candidate)

    def _begin_collecting_profile(self, candidate: CandidateRecord) -> None:
        missing = missing_fields(candidate.profile)
        candidate.pending_profile_fields = missing
        if missing:
            self._say(
                candidate,
                ChatRole.AI,
                f"I'm still missing your {describe_missing_fields(missing)}.",
            )
            return
        self._set_status(candidate, CandidateStatus.READY)
        self._begin_ready(candidate)

    def _begin_ready(self, candidate: CandidateRecord) -> None:
        if candidate.pending_profile_fields:
            self._say(
                candidate,
                ChatRole.AI,
                f"I'm still missing your {describe_missing_fields(candidate.pending_profile_fields)}.",
            )
            return

        if not candidate.questions:
            candidate.questions = generate_question_set(self._catalog, self._rng)
            self._dirty = True
            logger.info("Generated %d questions for %s", len(candidate.questions), candidate.id)

        next_index = self._next_question_index(candidate)
        if next_index is None:
            self.finalize(candidate.id)
            return

        self._say(candidate, ChatRole.AI, INTERVIEW_INTRO)
        self._ask(candidate, next_index)

    def _ignore(self, candidate: CandidateRecord, *args: Any) -> None:
        logger.debug("Command ignored for %s in status %s", candidate.id, candidate.status.value)

    def pause_interview(self) -> None:
        """Freeze the running question timer."""
        candidate = self.active_candidate
        if candidate is None:
            return
        with self._transaction():
            getattr(self, _PAUSE_HANDLERS[candidate.status])(candidate)

    def _pause_in_progress(self, candidate: CandidateRecord) -> None:
        remaining = self._deadlines.pause()
        if remaining is None:
            return
        self._set_status(candidate, CandidateStatus.PAUSED)
        self._emit(
            SessionEventType.PAUSED,
            candidate,
            f"{remaining}s remaining",
            question_index=self._store.current_question_index,
        )
        self._say(candidate, ChatRole.AI, PAUSE_NOTICE)

    def resume_interview(self) -> None:
        """Re-arm the frozen question timer."""
        candidate = self.active_candidate
        if candidate is None:
            return
        with self._transaction():
            getattr(self, _RESUME_HANDLERS[candidate.status])(candidate)

    def _resume_paused(self, candidate: CandidateRecord) -> None:
        question = self.current_question
        if self._deadlines.is_paused and question is not None and question.status == QuestionStatus.PENDING:
            self._deadlines.resume(question)
            self._set_status(candidate, CandidateStatus.IN_PROGRESS)
            self._emit(
                SessionEventType.RESUMED,
                candidate,
                question_index=self._store.current_question_index,
            )
            self._say(candidate, ChatRole.AI, RESUME_NOTICE)
            return

        # Timer context was dropped by a candidate switch, reset or restart:
        # re-ask the next open question with its full time limit.
        next_index = self._next_question_index(candidate)
        self._deadlines.clear()
        if next_index is None:
            self.finalize(candidate.id)
            return
        self._emit(SessionEventType.RESUMED, candidate, question_index=next_index)
        self._say(candidate, ChatRole.AI, RESUME_NOTICE)
        self._ask(candidate, next_index)

    def auto_submit_current_question(self, question_index: Optional[int] = None) -> None:
        """
        Record an empty, zero-scored answer for the current question.

        Only acts while the question is still pending, so a second call for
        the same question is a no-op.

        Args:
            question_index: Slot the caller saw expire. When given and the
                engine has already moved past it, nothing happens.
        """
        candidate = self.active_candidate
        if candidate is None or candidate.status != CandidateStatus.IN_PROGRESS:
            return
        index = self._store.current_question_index
        if question_index is not None and question_index != index:
            logger.debug("auto-submit ignored: question %d is no longer current", question_index)
            return
        if not 0 <= index < len(candidate.questions):
            logger.warning("auto-submit ignored: question index %d out of range", index)
            return
        if candidate.questions[index].status != QuestionStatus.PENDING:
            logger.debug("auto-submit ignored: question %d already settled", index)
            return

        with self._transaction():
            self._record_answer(candidate, index, "", QuestionStatus.AUTO_SUBMITTED, 0)
            self._emit(SessionEventType.AUTO_SUBMITTED, candidate, question_index=index, score=0)
            self._say(candidate, ChatRole.AI, TIME_UP)
            self._advance(candidate)

    def tick(self) -> bool:
        """
        Periodic deadline check; call about once per second.

        Returns:
            True when this tick triggered an auto-submit.
        """
        if not self._deadlines.poll():
            return False
        index = self._store.current_question_index
        logger.info("Deadline elapsed for %s question %d", self._store.active_candidate_id, index)
        self.auto_submit_current_question(index)
        return True

    def finalize(self, candidate_id: str) -> None:
        """
        Close the interview: final score, summary, closing message.

        The candidate stays active and all timer state is cleared.
        """
        candidate = self._store.candidates.get(candidate_id)
        if candidate is None:
            logger.debug("finalize ignored: unknown id %s", candidate_id)
            return
        if candidate.status == CandidateStatus.COMPLETED:
            return

        with self._transaction():
            final_score = compute_final_score(candidate.questions)
            summary = build_summary(candidate)
            self._say(
                candidate,
                ChatRole.AI,
                f"That's a wrap! Your final score is {final_score}/100. Here's the summary: {summary}",
            )
            candidate.summary = summary
            candidate.final_score = final_score
            self._set_status(candidate, CandidateStatus.COMPLETED)
            self._deadlines.clear()
            self._store.active_candidate_id = candidate_id
            self._emit(SessionEventType.COMPLETED, candidate, summary, score=final_score)
            logger.info("Finalized candidate %s with score %d", candidate_id, final_score)

    # -------------------------------------------------------------------------
    # Sequencing
    # -------------------------------------------------------------------------

    @staticmethod
    def _next_question_index(candidate: CandidateRecord) -> Optional[int]:
        # Array position is authoritative, not difficulty.
        for index, question in enumerate(candidate.questions):
            if question.status == QuestionStatus.PENDING and not question.answer:
                return index
        return None

    def _advance(self, candidate: CandidateRecord) -> None:
        next_index = self._next_question_index(candidate)
        if next_index is None:
            self.finalize(candidate.id)
            return
        self._ask(candidate, next_index)

    def _ask(self, candidate: CandidateRecord, index: int) -> None:
        question = candidate.questions[index]
        self._say(
            candidate,
            ChatRole.AI,
            f"Question {index + 1}: {question.prompt}\n"
            f"({question.difficulty.value.upper()} • {question.time_limit_seconds}s)",
        )
        now = self._clock()
        question.asked_at = now
        question.status = QuestionStatus.PENDING
        self._store.current_question_index = index
        self._set_status(candidate, CandidateStatus.IN_PROGRESS)
        self._deadlines.ask(question, now)
        self._emit(SessionEventType.QUESTION_ASKED, candidate, question.prompt, question_index=index)
        logger.info(
            "Asked %s question %d (%s, %ds)",
            candidate.id,
            index + 1,
            question.difficulty.value,
            question.time_limit_seconds,
        )

    def _record_answer(
        self,
        candidate: CandidateRecord,
        index: int,
        answer: str,
        status: QuestionStatus,
        score: int,
    ) -> None:
        question = candidate.questions[index]
        submitted_at = self._clock()
        question.answer = answer
        question.status = status
        question.score = score
        question.answered_at = submitted_at

        asked_at = question.asked_at or submitted_at
        elapsed = math.floor((submitted_at - asked_at).total_seconds())
        candidate.total_time_seconds += max(0, elapsed)
        candidate.touch(submitted_at)
        self._store.question_deadline = None
        self._dirty = True


def _require_exhaustive(table: dict[CandidateStatus, str], command: str) -> dict[CandidateStatus, str]:
    missing = [status.value for status in CandidateStatus if status not in table]
    if missing:
        raise RuntimeError(f"{command} has no handler for statuses: {', '.join(missing)}")
    for name in table.values():
        if not callable(getattr(InterviewEngine, name, None)):
            raise RuntimeError(f"{command} handler '{name}' is not defined")
    return table


_MESSAGE_HANDLERS = _require_exhaustive(
    {
        CandidateStatus.COLLECTING_PROFILE: "_message_collecting_profile",
        CandidateStatus.READY: "_message_ready",
        CandidateStatus.IN_PROGRESS: "_message_in_progress",
        CandidateStatus.PAUSED: "_message_paused",
        CandidateStatus.COMPLETED: "_message_completed",
    },
    "submit_message",
)

_BEGIN_HANDLERS = _require_exhaustive(
    {
        CandidateStatus.COLLECTING_PROFILE: "_begin_collecting_profile",
        CandidateStatus.READY: "_begin_ready",
        CandidateStatus.IN_PROGRESS: "_ignore",
        CandidateStatus.PAUSED: "_ignore",
        CandidateStatus.COMPLETED: "_ignore",
    },
    "begin_interview",
)

_PAUSE_HANDLERS = _require_exhaustive(
    {
        CandidateStatus.COLLECTING_PROFILE: "_ignore",
        CandidateStatus.READY: "_ignore",
        CandidateStatus.IN_PROGRESS: "_pause_in_progress",
        CandidateStatus.PAUSED: "_ignore",
        CandidateStatus.COMPLETED: "_ignore",
    },
    "pause_interview",
)

_RESUME_HANDLERS = _require_exhaustive(
    {
        CandidateStatus.COLLECTING_PROFILE: "_ignore",
        CandidateStatus.READY: "_ignore",
        CandidateStatus.IN_PROGRESS: "_ignore",
        CandidateStatus.PAUSED: "_resume_paused",
        CandidateStatus.COMPLETED: "_ignore",
    },
    "resume_interview",
)
