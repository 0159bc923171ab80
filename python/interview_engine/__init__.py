"""
Interview Session Engine.

Runs automated, timed technical interviews: collects a candidate's contact
profile, asks six difficulty-tiered questions under per-question deadlines,
scores answers heuristically, and finalizes each session with a weighted
score and summary. Many candidates can be tracked; one is active at a time.

Components:
    - models: Pydantic models for candidates, questions, chat and the store
    - engine: InterviewEngine state machine and command surface
    - deadline: DeadlineManager for the single active question timer
    - question_bank / scoring / profile: pure helpers
    - resume: PDF/DOCX resume intake
    - store: JSON snapshot persistence
    - ticker: asyncio deadline polling
    - pubsub: session event stream for observers
"""

from .deadline import DeadlineManager
from .engine import InterviewEngine, IntakeResult
from .models import (
    CandidateProfile,
    CandidateRecord,
    CandidateStatus,
    ChatMessage,
    ChatRole,
    Difficulty,
    InterviewQuestion,
    QuestionStatus,
    SessionStore,
)
from .pubsub import SessionEvent, SessionEventPublisher, SessionEventType, get_publisher
from .resume import ResumeParseError, parse_resume_file
from .store import SessionStoreFile, StoreReadError, StoreWriteError
from .ticker import QuestionTicker

__version__ = "0.1.0"

__all__ = [
    "CandidateProfile",
    "CandidateRecord",
    "CandidateStatus",
    "ChatMessage",
    "ChatRole",
    "DeadlineManager",
    "Difficulty",
    "IntakeResult",
    "InterviewEngine",
    "InterviewQuestion",
    "QuestionStatus",
    "QuestionTicker",
    "ResumeParseError",
    "SessionEvent",
    "SessionEventPublisher",
    "SessionEventType",
    "SessionStore",
    "SessionStoreFile",
    "StoreReadError",
    "StoreWriteError",
    "get_publisher",
    "parse_resume_file",
]
