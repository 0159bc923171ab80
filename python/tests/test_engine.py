"""
Tests for the InterviewEngine state machine.

Covers profile collection, question sequencing, deadlines and auto-submit,
pause/resume, candidate switching, finalization, snapshots, the welcome
back prompt, resume intake and change/event delivery.

Last Grunted: 10/18/2026
"""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

import pytest

from interview_engine.engine import (
    COMPLETED_NOTICE,
    INTERVIEW_INTRO,
    PAUSED_REMINDER,
    PROFILE_COMPLETE,
    READY_REPROMPT,
    RESUME_NOTICE,
    TIME_UP,
    InterviewEngine,
    _require_exhaustive,
)
from interview_engine.models import (
    CandidateProfile,
    CandidateStatus,
    ChatRole,
    QuestionStatus,
    SessionStore,
)
from interview_engine.pubsub import SessionEventType
from interview_engine.resume import ResumeParseError
from interview_engine.scoring import NO_ANSWERS_SUMMARY

from tests.mock_data import (
    FakeClock,
    generate_answer,
    generate_profile,
    make_engine,
    start_in_progress_candidate,
)


def _last_ai(engine: InterviewEngine) -> str:
    candidate = engine.active_candidate
    assert candidate is not None
    return [m for m in candidate.chat if m.role == ChatRole.AI][-1].content


# =============================================================================
# Starting candidates
# =============================================================================


class TestStartCandidate:
    """Tests for start_candidate."""

    def test_new_candidate_collects_profile(self) -> None:
        """A new record starts in collecting-profile with one system message."""
        engine = make_engine()
        candidate = engine.start_candidate(CandidateProfile(name="Ana"))

        assert candidate.status == CandidateStatus.COLLECTING_PROFILE
        assert candidate.pending_profile_fields == ["email", "phone"]
        assert len(candidate.chat) == 1
        assert candidate.chat[0].role == ChatRole.SYSTEM
        assert candidate.questions == []
        assert engine.active_candidate_id == candidate.id

    def test_explicit_pending_fields(self) -> None:
        """Pending fields can be supplied and are kept in fixed order."""
        engine = make_engine()
        candidate = engine.start_candidate(CandidateProfile(), pending_fields=["phone", "name"])
        assert candidate.pending_profile_fields == ["name", "phone"]

    def test_new_candidates_are_prepended(self) -> None:
        """The ordered list is most recent first."""
        engine = make_engine()
        first = engine.start_candidate()
        second = engine.start_candidate()

        assert [c.id for c in engine.candidates_ordered] == [second.id, first.id]
        assert engine.active_candidate_id == second.id

    def test_start_never_merges(self) -> None:
        """The same profile twice creates two records."""
        engine = make_engine()
        profile = generate_profile(name="Ana Souza")
        engine.start_candidate(profile)
        engine.start_candidate(profile)
        assert len(engine.store.candidates) == 2

    def test_start_clears_running_timer(self) -> None:
        """Starting another candidate drops the active deadline."""
        engine = make_engine()
        start_in_progress_candidate(engine)
        assert engine.question_deadline is not None

        engine.start_candidate()

        assert engine.question_deadline is None
        assert engine.store.paused_remaining_seconds is None
        assert engine.current_question_index == 0


# =============================================================================
# Profile collection and readiness
# =============================================================================


class TestProfileCollection:
    """Tests for chat input while collecting-profile and ready."""

    def test_contact_details_complete_profile(self) -> None:
        """Email and phone in one message make the candidate ready."""
        engine = make_engine()
        candidate = engine.start_candidate(CandidateProfile(name="Ana"))

        engine.submit_message("ana@x.com 555-123-4567")

        assert candidate.status == CandidateStatus.READY
        assert candidate.pending_profile_fields == []
        assert candidate.profile.email == "ana@x.com"
        assert candidate.profile.phone == "555-123-4567"
        assert _last_ai(engine) == PROFILE_COMPLETE

    def test_reprompts_for_missing_fields(self) -> None:
        """An unhelpful reply asks again for what is missing."""
        engine = make_engine()
        engine.start_candidate()

        engine.submit_message("hello")

        assert engine.active_candidate.status == CandidateStatus.COLLECTING_PROFILE
        assert _last_ai(engine) == (
            "Thanks! I'm still missing your name, email address and phone number. "
            "Could you share that?"
        )

    def test_fields_collected_over_several_messages(self) -> None:
        """Fields accumulate across messages, first value wins."""
        engine = make_engine()
        candidate = engine.start_candidate()

        engine.submit_message("Priya Raman")
        engine.submit_message("priya@example.com")
        assert candidate.pending_profile_fields == ["phone"]
        engine.submit_message("other@example.com 555 987 6543")

        assert candidate.status == CandidateStatus.READY
        assert candidate.profile.name == "Priya Raman"
        assert candidate.profile.email == "priya@example.com"

    def test_candidate_message_recorded_trimmed(self) -> None:
        """The candidate's text is appended to the transcript, trimmed."""
        engine = make_engine()
        candidate = engine.start_candidate()
        engine.submit_message("   Ana Souza  ")

        messages = [m for m in candidate.chat if m.role == ChatRole.CANDIDATE]
        assert messages[-1].content == "Ana Souza"

    def test_blank_message_dropped(self) -> None:
        """Whitespace-only input changes nothing."""
        engine = make_engine()
        candidate = engine.start_candidate()
        engine.submit_message("   ")
        assert len(candidate.chat) == 1

    def test_message_without_active_candidate_dropped(self) -> None:
        """No active candidate means the message is ignored."""
        changes: list[SessionStore] = []
        engine = make_engine(on_change=changes.append)
        engine.submit_message("hello")
        assert changes == []
        assert engine.store.candidates == {}

    def test_ready_reprompts_on_other_text(self) -> None:
        """Anything but a start command re-prompts in ready."""
        engine = make_engine()
        engine.start_candidate(CandidateProfile(name="Ana"))
        engine.submit_message("ana@x.com 555-123-4567")

        engine.submit_message("what happens next?")

        assert engine.active_candidate.status == CandidateStatus.READY
        assert _last_ai(engine) == READY_REPROMPT

    @pytest.mark.parametrize("command", ["start", "Start Interview", "BEGIN"])
    def test_start_command_begins(self, command: str) -> None:
        """Start commands are case-insensitive."""
        engine = make_engine()
        engine.start_candidate(CandidateProfile(name="Ana"))
        engine.submit_message("ana@x.com 555-123-4567")

        engine.submit_message(command)

        assert engine.active_candidate.status == CandidateStatus.IN_PROGRESS
        assert len(engine.active_candidate.questions) == 6


# =============================================================================
# Beginning the interview
# =============================================================================


class TestBeginInterview:
    """Tests for begin_interview."""

    def test_begin_with_missing_fields_reprompts(self) -> None:
        """Begin is refused while fields are missing."""
        engine = make_engine()
        candidate = engine.start_candidate(CandidateProfile(name="Ana"))

        engine.begin_interview()

        assert candidate.status == CandidateStatus.COLLECTING_PROFILE
        assert candidate.questions == []
        assert _last_ai(engine) == "I'm still missing your email address and phone number."

    def test_begin_asks_first_question(self) -> None:
        """Begin generates six questions and arms a 20s deadline."""
        clock = FakeClock()
        engine = make_engine(clock)
        candidate = engine.start_candidate(generate_profile())

        engine.begin_interview()

        assert candidate.status == CandidateStatus.IN_PROGRESS
        assert len(candidate.questions) == 6
        assert engine.current_question_index == 0
        assert engine.question_deadline == clock.now + timedelta(seconds=20)
        assert engine.seconds_remaining == 20
        assert candidate.questions[0].asked_at == clock.now
        assert INTERVIEW_INTRO in [m.content for m in candidate.chat]
        assert _last_ai(engine).startswith(f"Question 1: {candidate.questions[0].prompt}")
        assert _last_ai(engine).endswith("(EASY • 20s)")

    @pytest.mark.parametrize("setup", ["in_progress", "paused", "completed"])
    def test_begin_ignored_after_start(self, setup: str) -> None:
        """Begin is a no-op once the interview has started."""
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        if setup == "paused":
            engine.pause_interview()
        elif setup == "completed":
            engine.finalize(cid)
        candidate = engine.get_candidate(cid)
        chat_len = len(candidate.chat)
        questions = list(candidate.questions)

        engine.begin_interview()

        assert len(candidate.chat) == chat_len
        assert candidate.questions == questions


# =============================================================================
# Answers and sequencing
# =============================================================================


class TestAnswering:
    """Tests for answers while in-progress."""

    def test_answer_is_scored_and_next_question_asked(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        clock.advance(5)

        engine.submit_message(generate_answer(10))

        candidate = engine.get_candidate(cid)
        first = candidate.questions[0]
        assert first.status == QuestionStatus.ANSWERED
        assert first.score == 20
        assert first.answered_at == clock.now
        assert candidate.total_time_seconds == 5
        assert engine.current_question_index == 1
        assert engine.question_deadline == clock.now + timedelta(seconds=20)
        feedback = [m.content for m in candidate.chat if "I scored that answer" in m.content]
        assert feedback == ["Thanks for the answer. We can build on this in future interviews. I scored that answer 20/100."]

    def test_advance_follows_array_position(self) -> None:
        """The next question is the first pending slot by position."""
        engine = make_engine()
        cid = start_in_progress_candidate(engine)
        candidate = engine.get_candidate(cid)
        candidate.questions[1].status = QuestionStatus.ANSWERED
        candidate.questions[1].answer = "already covered"

        engine.submit_message(generate_answer(5))

        assert engine.current_question_index == 2

    def test_end_to_end_interview(self) -> None:
        """Profile, six answers, and finalization."""
        clock = FakeClock()
        engine = make_engine(clock)
        candidate = engine.start_candidate(CandidateProfile(name="Ana"))
        assert candidate.pending_profile_fields == ["email", "phone"]

        engine.submit_message("ana@x.com 555-123-4567")
        assert candidate.pending_profile_fields == []
        assert candidate.status == CandidateStatus.READY

        engine.begin_interview()
        assert len(candidate.questions) == 6
        assert engine.question_deadline == clock.now + timedelta(seconds=20)

        clock.advance(10)
        engine.submit_message(generate_answer(40, ("component", "example")))
        assert 80 <= candidate.questions[0].score <= 100

        for _ in range(5):
            clock.advance(10)
            engine.submit_message(generate_answer(30, ("example",)))

        assert candidate.status == CandidateStatus.COMPLETED
        assert candidate.summary
        assert 0 <= candidate.final_score <= 100
        assert all(q.status == QuestionStatus.ANSWERED for q in candidate.questions)
        assert candidate.total_time_seconds == 60
        assert engine.active_candidate_id == candidate.id
        assert engine.question_deadline is None
        assert engine.store.paused_remaining_seconds is None
        assert _last_ai(engine).startswith(f"That's a wrap! Your final score is {candidate.final_score}/100.")

    def test_messages_after_completion(self) -> None:
        engine = make_engine()
        cid = start_in_progress_candidate(engine)
        engine.finalize(cid)

        engine.submit_message("anything else?")

        assert _last_ai(engine) == COMPLETED_NOTICE


# =============================================================================
# Deadlines and auto-submit
# =============================================================================


class TestAutoSubmit:
    """Tests for deadline expiry."""

    def test_tick_before_deadline(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        start_in_progress_candidate(engine)
        clock.advance(19)

        assert engine.tick() is False
        assert engine.seconds_remaining == 1

    def test_tick_auto_submits_expired_question(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        clock.advance(20)

        assert engine.tick() is True

        first = engine.get_candidate(cid).questions[0]
        assert first.status == QuestionStatus.AUTO_SUBMITTED
        assert first.answer == ""
        assert first.score == 0
        assert TIME_UP in [m.content for m in engine.get_candidate(cid).chat]
        assert engine.current_question_index == 1

    def test_repeated_ticks_fire_once(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        clock.advance(20)

        assert engine.tick() is True
        assert engine.tick() is False
        assert engine.get_candidate(cid).questions[1].status == QuestionStatus.PENDING

    def test_auto_submit_is_idempotent(self) -> None:
        """A second call for the same expired question is a no-op."""
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        clock.advance(25)

        engine.auto_submit_current_question(0)
        snapshot = engine.snapshot()
        engine.auto_submit_current_question(0)

        assert engine.snapshot() == snapshot
        questions = engine.get_candidate(cid).questions
        assert [q.status for q in questions[:2]] == [QuestionStatus.AUTO_SUBMITTED, QuestionStatus.PENDING]

    def test_auto_submit_after_completion_is_noop(self) -> None:
        engine = make_engine()
        cid = start_in_progress_candidate(engine)
        engine.finalize(cid)
        snapshot = engine.snapshot()

        engine.auto_submit_current_question()

        assert engine.snapshot() == snapshot

    def test_all_questions_time_out(self) -> None:
        """Six expiries complete the interview with score 0."""
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)

        for _ in range(6):
            clock.advance(120)
            assert engine.tick() is True

        candidate = engine.get_candidate(cid)
        assert candidate.status == CandidateStatus.COMPLETED
        assert candidate.final_score == 0
        assert "Needs deeper coverage on" in candidate.summary
        assert engine.tick() is False


# =============================================================================
# Pause / resume
# =============================================================================


class TestPauseResume:
    """Tests for pausing and resuming the question timer."""

    def test_pause_freezes_remaining_time(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        clock.advance(5)

        engine.pause_interview()

        assert engine.get_candidate(cid).status == CandidateStatus.PAUSED
        assert engine.is_paused
        assert not engine.is_timer_running
        assert engine.seconds_remaining == 15
        assert engine.question_deadline is None

    def test_paused_interview_ignores_expiry_and_answers(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        engine.pause_interview()
        clock.advance(300)

        assert engine.tick() is False
        engine.submit_message(generate_answer(20))

        assert _last_ai(engine) == PAUSED_REMINDER
        assert engine.get_candidate(cid).questions[0].status == QuestionStatus.PENDING

    def test_resume_restores_remainder(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        clock.advance(5)
        engine.pause_interview()
        clock.advance(100)

        engine.resume_interview()

        assert engine.get_candidate(cid).status == CandidateStatus.IN_PROGRESS
        assert engine.seconds_remaining == 15
        assert not engine.is_paused
        assert _last_ai(engine) == RESUME_NOTICE

    def test_pause_when_not_in_progress_is_noop(self) -> None:
        engine = make_engine()
        candidate = engine.start_candidate()
        engine.pause_interview()
        assert candidate.status == CandidateStatus.COLLECTING_PROFILE
        assert not engine.is_paused

    def test_resume_when_not_paused_is_noop(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        start_in_progress_candidate(engine)
        deadline = engine.question_deadline
        clock.advance(3)

        engine.resume_interview()

        assert engine.question_deadline == deadline


# =============================================================================
# Candidate switching and reset
# =============================================================================


class TestSelectCandidate:
    """Tests for select_candidate and reset_session."""

    def test_select_clears_timer_state(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        first = start_in_progress_candidate(engine, "Ana Souza")
        clock.advance(5)
        engine.pause_interview()
        engine.resume_interview()
        second = engine.start_candidate().id
        engine.select_candidate(first)
        engine.resume_interview()
        assert engine.question_deadline is not None

        assert engine.select_candidate(second) is True

        assert engine.active_candidate_id == second
        assert engine.current_question_index == 0
        assert engine.question_deadline is None
        assert engine.store.paused_remaining_seconds is None
        assert engine.get_candidate(first).status == CandidateStatus.PAUSED

    def test_late_tick_after_switch_does_nothing(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        first = start_in_progress_candidate(engine, "Ana Souza")
        second = engine.start_candidate().id
        engine.select_candidate(second)
        clock.advance(500)

        assert engine.tick() is False
        assert engine.get_candidate(first).questions[0].status == QuestionStatus.PENDING

    def test_select_unknown_is_noop(self) -> None:
        engine = make_engine()
        cid = engine.start_candidate().id
        assert engine.select_candidate("cand_missing") is False
        assert engine.active_candidate_id == cid

    def test_resume_after_switch_reasks_open_question(self) -> None:
        """Switching back and resuming re-asks the next open slot at full time."""
        clock = FakeClock()
        engine = make_engine(clock)
        first = start_in_progress_candidate(engine, "Ana Souza")
        engine.submit_message(generate_answer(10))
        other = engine.start_candidate().id
        engine.select_candidate(other)
        engine.select_candidate(first)
        assert engine.current_question_index == 0

        engine.resume_interview()

        assert engine.get_candidate(first).status == CandidateStatus.IN_PROGRESS
        assert engine.current_question_index == 1
        assert engine.seconds_remaining == 20
        assert _last_ai(engine).startswith("Question 2:")

    def test_reset_session_keeps_records(self) -> None:
        engine = make_engine()
        cid = start_in_progress_candidate(engine)

        engine.reset_session()

        assert engine.active_candidate_id is None
        assert engine.question_deadline is None
        assert engine.get_candidate(cid).status == CandidateStatus.PAUSED
        assert len(engine.candidates_ordered) == 1


# =============================================================================
# Finalize
# =============================================================================


class TestFinalize:
    """Tests for finalize."""

    def test_finalize_without_answers(self) -> None:
        engine = make_engine()
        cid = start_in_progress_candidate(engine)

        engine.finalize(cid)

        candidate = engine.get_candidate(cid)
        assert candidate.status == CandidateStatus.COMPLETED
        assert candidate.summary == NO_ANSWERS_SUMMARY
        assert candidate.final_score == 0
        assert engine.question_deadline is None

    def test_finalize_twice_is_noop(self) -> None:
        engine = make_engine()
        cid = start_in_progress_candidate(engine)
        engine.finalize(cid)
        chat_len = len(engine.get_candidate(cid).chat)

        engine.finalize(cid)

        assert len(engine.get_candidate(cid).chat) == chat_len

    def test_finalize_unknown_is_noop(self) -> None:
        changes: list[SessionStore] = []
        engine = make_engine(on_change=changes.append)
        engine.finalize("cand_missing")
        assert changes == []


# =============================================================================
# Snapshot / restore
# =============================================================================


class TestSnapshot:
    """Tests for snapshot, from_snapshot and store repair."""

    def test_snapshot_is_json_serializable(self) -> None:
        engine = make_engine()
        start_in_progress_candidate(engine)
        json.dumps(engine.snapshot())

    def test_round_trip_preserves_state(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        clock.advance(4)

        restored = InterviewEngine.from_snapshot(engine.snapshot(), clock=clock)

        assert restored.active_candidate_id == cid
        assert restored.question_deadline == engine.question_deadline
        assert restored.seconds_remaining == 16
        assert restored.get_candidate(cid).status == CandidateStatus.IN_PROGRESS
        assert restored.snapshot() == engine.snapshot()

    def test_restored_paused_interview_resumes(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        start_in_progress_candidate(engine)
        clock.advance(8)
        engine.pause_interview()

        restored = InterviewEngine.from_snapshot(engine.snapshot(), clock=clock)
        restored.resume_interview()

        assert restored.seconds_remaining == 12

    def test_in_progress_without_deadline_is_paused_on_load(self) -> None:
        engine = make_engine()
        cid = start_in_progress_candidate(engine)
        data = engine.snapshot()
        data["question_deadline"] = None

        restored = InterviewEngine.from_snapshot(data)

        assert restored.get_candidate(cid).status == CandidateStatus.PAUSED

    def test_paused_candidate_with_live_deadline_is_idle_on_load(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        data = engine.snapshot()
        data["candidates"][cid]["status"] = CandidateStatus.PAUSED.value

        restored = InterviewEngine.from_snapshot(data, clock=clock)

        assert restored.question_deadline is None
        assert restored.is_timer_running is False
        assert restored.seconds_remaining is None
        restored.resume_interview()
        assert restored.seconds_remaining == 20

    @pytest.mark.parametrize("status", [CandidateStatus.COMPLETED, CandidateStatus.READY])
    def test_idle_candidate_timer_is_cleared_on_load(self, status: CandidateStatus) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        data = engine.snapshot()
        data["candidates"][cid]["status"] = status.value
        data["paused_remaining_seconds"] = 9

        restored = InterviewEngine.from_snapshot(data, clock=clock)

        assert restored.question_deadline is None
        assert restored.store.paused_remaining_seconds is None
        assert restored.seconds_remaining is None

    def test_dangling_active_candidate_is_cleared(self) -> None:
        engine = make_engine()
        start_in_progress_candidate(engine)
        data = engine.snapshot()
        data["active_candidate_id"] = "cand_gone"

        restored = InterviewEngine.from_snapshot(data)

        assert restored.active_candidate_id is None
        assert restored.question_deadline is None

    def test_orphaned_candidates_are_listed(self) -> None:
        engine = make_engine()
        cid = engine.start_candidate().id
        data = engine.snapshot()
        data["candidate_order"] = []

        restored = InterviewEngine.from_snapshot(data)

        assert [c.id for c in restored.candidates_ordered] == [cid]

    def test_restore_replaces_store(self) -> None:
        engine = make_engine()
        start_in_progress_candidate(engine)
        engine.restore(SessionStore().model_dump(mode="json"))

        assert engine.candidates_ordered == []
        assert engine.tick() is False


# =============================================================================
# Dashboard queries
# =============================================================================


class TestQueries:
    """Tests for search and the welcome back prompt."""

    def test_search_candidates(self) -> None:
        engine = make_engine()
        ana = engine.start_candidate(generate_profile(name="Ana Souza"))
        marcus = engine.start_candidate(
            CandidateProfile(name="Marcus Johnson", resume_file_name="marcus_cv.docx")
        )

        assert [c.id for c in engine.search_candidates("souza")] == [ana.id]
        assert [c.id for c in engine.search_candidates("CV.DOCX")] == [marcus.id]
        assert [c.id for c in engine.search_candidates("  ")] == [marcus.id, ana.id]
        assert engine.search_candidates("nobody") == []

    def test_welcome_back_requires_idle_minute(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        engine.pause_interview()

        assert engine.find_unfinished_candidate() is None
        clock.advance(61)
        assert engine.find_unfinished_candidate().id == cid

    def test_welcome_back_seen_until_new_activity(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        start_in_progress_candidate(engine)
        engine.pause_interview()
        clock.advance(61)

        engine.mark_welcome_back_seen()
        assert engine.find_unfinished_candidate() is None

        clock.advance(1)
        engine.resume_interview()
        engine.pause_interview()
        clock.advance(61)
        assert engine.find_unfinished_candidate() is not None

    def test_finished_and_new_candidates_are_not_offered(self) -> None:
        clock = FakeClock()
        engine = make_engine(clock)
        cid = start_in_progress_candidate(engine)
        engine.finalize(cid)
        engine.start_candidate()
        clock.advance(600)

        assert engine.find_unfinished_candidate() is None


# =============================================================================
# Resume intake
# =============================================================================


class TestResumeIntake:
    """Tests for start_candidate_from_resume with injected parsers."""

    def test_complete_resume_makes_candidate_ready(self) -> None:
        engine = make_engine()

        def parser(path: Path) -> CandidateProfile:
            return generate_profile(name="Ana Souza").model_copy(update={"resume_file_name": path.name})

        result = engine.start_candidate_from_resume(Path("/tmp/ana.pdf"), parser=parser)

        assert result.ok
        candidate = engine.get_candidate(result.candidate_id)
        assert candidate.status == CandidateStatus.READY
        assert candidate.profile.resume_file_name == "ana.pdf"
        contents = [m.content for m in candidate.chat]
        assert contents[1].startswith("Thanks, Ana Souza!")
        assert contents[-1] == PROFILE_COMPLETE

    def test_partial_resume_asks_for_missing_fields(self) -> None:
        engine = make_engine()
        result = engine.start_candidate_from_resume(
            Path("cv.docx"), parser=lambda path: CandidateProfile(name="Ana Souza")
        )

        candidate = engine.get_candidate(result.candidate_id)
        assert candidate.status == CandidateStatus.COLLECTING_PROFILE
        assert candidate.pending_profile_fields == ["email", "phone"]
        assert candidate.profile.resume_file_name == "cv.docx"
        assert _last_ai(engine) == (
            "I still need your email address and phone number before we begin. Could you share it now?"
        )

    def test_parse_failure_leaves_store_untouched(self) -> None:
        changes: list[SessionStore] = []
        engine = make_engine(on_change=changes.append)

        def parser(path: Path) -> CandidateProfile:
            raise ResumeParseError(path, "File too large. Please upload a resume smaller than 10MB.")

        result = engine.start_candidate_from_resume(Path("big.pdf"), parser=parser)

        assert not result.ok
        assert result.error == "File too large. Please upload a resume smaller than 10MB."
        assert engine.store.candidates == {}
        assert changes == []


# =============================================================================
# Persistence hook and events
# =============================================================================


class TestChangeDelivery:
    """Tests for on_change and listener delivery."""

    def test_one_change_per_command(self) -> None:
        changes: list[SessionStore] = []
        engine = make_engine(on_change=changes.append)

        engine.start_candidate_from_resume(Path("a.pdf"), parser=lambda path: generate_profile())
        assert len(changes) == 1
        engine.begin_interview()
        assert len(changes) == 2
        assert changes[-1] is engine.store

    def test_persistence_runs_before_listeners(self) -> None:
        log: list[str] = []
        engine = make_engine(on_change=lambda store: log.append("save"))
        engine.add_listener(lambda event: log.append(event.event_type.value))

        engine.start_candidate()

        assert log == ["save", "candidate_started"]

    def test_event_sequence_for_first_question(self) -> None:
        engine = make_engine()
        events: list[SessionEventType] = []
        engine.add_listener(lambda event: events.append(event.event_type))

        start_in_progress_candidate(engine)

        assert events[0] == SessionEventType.CANDIDATE_STARTED
        assert SessionEventType.QUESTION_ASKED in events
        assert events.index(SessionEventType.QUESTION_ASKED) > events.index(SessionEventType.CANDIDATE_STARTED)

    def test_removed_listener_receives_nothing(self) -> None:
        engine = make_engine()
        events: list[object] = []
        engine.add_listener(events.append)
        engine.remove_listener(events.append)

        engine.start_candidate()

        assert events == []

    def test_answer_scored_event_carries_score(self) -> None:
        engine = make_engine()
        start_in_progress_candidate(engine)
        scored = []
        engine.add_listener(lambda e: scored.append(e) if e.event_type == SessionEventType.ANSWER_SCORED else None)

        engine.submit_message(generate_answer(10))

        assert len(scored) == 1
        assert scored[0].score == 20
        assert scored[0].question_index == 0


class TestHandlerTables:
    """Tests for the per-status handler tables."""

    def test_missing_status_fails_fast(self) -> None:
        with pytest.raises(RuntimeError, match="no handler for statuses"):
            _require_exhaustive({CandidateStatus.READY: "_ignore"}, "begin_interview")

    def test_unknown_handler_fails_fast(self) -> None:
        table = {status: "_does_not_exist" for status in CandidateStatus}
        with pytest.raises(RuntimeError, match="is not defined"):
            _require_exhaustive(table, "pause_interview")
