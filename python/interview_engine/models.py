"""
Pydantic models for the Interview Session Engine.

Defines chat transcript entries, interview questions, candidate records
and the process-wide session store that is snapshotted for persistence.

Last Grunted: 10/18/2026
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class ChatRole(str, Enum):
    """Author of a transcript entry."""

    SYSTEM = "system"
    AI = "ai"
    CANDIDATE = "candidate"


class Difficulty(str, Enum):
    """Question difficulty tier."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionStatus(str, Enum):
    """Lifecycle of a single interview question."""

    PENDING = "pending"
    ANSWERED = "answered"
    AUTO_SUBMITTED = "auto-submitted"


class CandidateStatus(str, Enum):
    """
    Per-candidate interview status.

    Transitions only move forward, except IN_PROGRESS <-> PAUSED:
        collecting-profile -> ready -> in-progress <-> paused -> completed
    """

    COLLECTING_PROFILE = "collecting-profile"
    READY = "ready"
    IN_PROGRESS = "in-progress"
    PAUSED = "paused"
    COMPLETED = "completed"


PROFILE_FIELDS: tuple[str, ...] = ("name", "email", "phone")


class ChatMessage(BaseModel):
    """
    One transcript entry. Immutable once created.

    Example:
        >>> msg = ChatMessage(id="msg_1a2b", role=ChatRole.AI, content="Question 1: ...")
    """

    id: str = Field(..., description="Unique message identifier")
    role: ChatRole = Field(..., description="Who wrote the message")
    content: str = Field(..., description="Message text")
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class InterviewQuestion(BaseModel):
    """
    A question in a candidate's fixed six-slot question set.

    Mutated in place as it is asked, answered, or expires. Never deleted.
    """

    id: str = Field(..., description="Unique question identifier")
    prompt: str = Field(..., min_length=1)
    difficulty: Difficulty
    time_limit_seconds: int = Field(..., gt=0)
    status: QuestionStatus = QuestionStatus.PENDING
    asked_at: Optional[datetime] = None
    answered_at: Optional[datetime] = None
    answer: Optional[str] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)


class CandidateProfile(BaseModel):
    """Contact details gathered progressively from the resume and chat."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    resume_file_name: Optional[str] = None
    resume_text: Optional[str] = None


class CandidateRecord(BaseModel):
    """
    Everything known about one interviewee session.

    ``questions`` stays empty until the candidate becomes ready, then holds
    exactly six entries (2 easy, 2 medium, 2 hard) for the rest of its life.
    """

    id: str
    profile: CandidateProfile = Field(default_factory=CandidateProfile)
    pending_profile_fields: list[str] = Field(default_factory=list)
    chat: list[ChatMessage] = Field(default_factory=list)
    questions: list[InterviewQuestion] = Field(default_factory=list)
    status: CandidateStatus = CandidateStatus.COLLECTING_PROFILE
    summary: Optional[str] = None
    final_score: Optional[int] = Field(default=None, ge=0, le=100)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    total_time_seconds: int = Field(default=0, ge=0)

    def touch(self, when: datetime) -> None:
        self.updated_at = when


class SessionStore(BaseModel):
    """
    Process-wide interview state.

    Holds every candidate plus the single active timer. While a question is
    outstanding exactly one of ``question_deadline`` and
    ``paused_remaining_seconds`` is set; neither is set while idle.
    ``current_question_index`` is only meaningful for ``active_candidate_id``.
    """

    candidates: dict[str, CandidateRecord] = Field(default_factory=dict)
    candidate_order: list[str] = Field(
        default_factory=list,
        description="Candidate ids, most recently started first",
    )
    active_candidate_id: Optional[str] = None
    current_question_index: int = Field(default=0, ge=0)
    question_deadline: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    paused_remaining_seconds: Optional[int] = Field(default=None, ge=0)
    welcome_back_seen_at: Optional[datetime] = None

    @property
    def active_candidate(self) -> Optional[CandidateRecord]:
        if self.active_candidate_id is None:
            return None
        return self.candidates.get(self.active_candidate_id)

    def clear_timer(self) -> None:
        """Drop any running or frozen deadline."""
        self.question_deadline = None
        self.paused_at = None
        self.paused_remaining_seconds = None
