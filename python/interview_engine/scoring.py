"""
Heuristic answer scoring.

Pure functions that score one answer, combine per-question scores into a
weighted final score, and write a short textual summary for the observer.
The heuristics are deliberately simple placeholders; they are not calibrated.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from interview_catalog import QuestionCatalog, default_catalog

from .models import CandidateRecord, Difficulty, InterviewQuestion, QuestionStatus


__all__ = [
    "DIFFICULTY_WEIGHTS",
    "NO_ANSWERS_SUMMARY",
    "build_summary",
    "compute_final_score",
    "score_answer",
]


DIFFICULTY_WEIGHTS: dict[Difficulty, float] = {
    Difficulty.EASY: 0.2,
    Difficulty.MEDIUM: 0.3,
    Difficulty.HARD: 0.5,
}

STRUCTURE_MARKERS: tuple[str, ...] = ("example", "for instance")

NO_ANSWERS_SUMMARY = "Candidate did not provide answers for evaluation."
NO_STRENGTHS_SENTENCE = "Strengths were not clearly demonstrated during the interview."
NO_IMPROVEMENTS_SENTENCE = (
    "No major red flags detected; consider digging deeper in a follow-up conversation."
)

STRENGTH_THRESHOLD = 70
IMPROVEMENT_THRESHOLD = 30
MAX_SUMMARY_ITEMS = 2


def score_answer(
    text: str,
    difficulty: Difficulty,
    catalog: Optional[QuestionCatalog] = None,
) -> int:
    """
    Score a single answer on a 0-100 scale.

    Components:
        - length: 2 points per word, capped at 60
        - keywords: 10 points per distinct catalog keyword found, capped at 30
        - structure: 10 points when the answer offers an example

    Args:
        text: The candidate's answer.
        difficulty: Difficulty of the question being answered.
        catalog: Keyword source; defaults to the packaged catalog.

    Returns:
        Integer score in [0, 100]. Blank answers score 0.

    Example:
        >>> score_answer("", Difficulty.EASY)
        0
    """
    cleaned = (text or "").strip().lower()
    if not cleaned:
        return 0

    catalog = catalog or default_catalog()

    word_count = len(cleaned.split())
    length_score = min(60, word_count * 2)

    keywords = catalog.keywords_for(Difficulty(difficulty).value)
    matched = sum(1 for keyword in set(keywords) if keyword in cleaned)
    keyword_score = min(30, matched * 10)

    structure_score = 10 if any(marker in cleaned for marker in STRUCTURE_MARKERS) else 0

    total = length_score + keyword_score + structure_score
    return int(max(0, min(100, round(total))))


def compute_final_score(questions: Sequence[InterviewQuestion]) -> int:
    """
    Weighted average of per-question scores using the fixed difficulty weights.

    The weighted sum is divided by the total weight, so a full six-question
    set of perfect answers scores exactly 100. Questions without a score
    count as 0. An empty question set scores 0.
    """
    if not questions:
        return 0

    weights = [DIFFICULTY_WEIGHTS[Difficulty(question.difficulty)] for question in questions]
    weighted = sum((question.score or 0) * weight for question, weight in zip(questions, weights))
    average = weighted / sum(weights)
    return int(max(0, min(100, round(average))))


def _topic(prompt: str) -> str:
    return prompt.strip().rstrip(".?!").lower()


def _sentence(prefix: str, items: Iterable[str], fallback: str) -> str:
    picked = list(items)[:MAX_SUMMARY_ITEMS]
    if not picked:
        return fallback
    return f"{prefix}: {'; '.join(picked)}."


def build_summary(candidate: CandidateRecord) -> str:
    """
    Summarize strengths and focus areas from the candidate's scored answers.

    Only answered or auto-submitted questions are considered. Each bucket
    references at most two question prompts.
    """
    settled = [q for q in candidate.questions if q.status != QuestionStatus.PENDING]
    if not settled:
        return NO_ANSWERS_SUMMARY

    strengths: list[str] = []
    improvements: list[str] = []
    for question in settled:
        score = question.score or 0
        if score >= STRENGTH_THRESHOLD:
            strengths.append(f"Strong on {_topic(question.prompt)}")
        elif score <= IMPROVEMENT_THRESHOLD:
            improvements.append(f"Needs deeper coverage on {_topic(question.prompt)}")

    strength_sentence = _sentence("Notable strengths", strengths, NO_STRENGTHS_SENTENCE)
    improvement_sentence = _sentence("Focus areas", improvements, NO_IMPROVEMENTS_SENTENCE)
    return f"{strength_sentence} {improvement_sentence}"
