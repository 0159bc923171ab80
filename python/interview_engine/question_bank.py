"""Six-question interview sets drawn from the catalog pools."""

from __future__ import annotations

import logging
import random
from typing import Optional

from interview_catalog import QuestionCatalog, default_catalog

from .ids import new_id
from .models import Difficulty, InterviewQuestion


__all__ = ["QUESTIONS_PER_DIFFICULTY", "generate_question_set", "time_limit_for"]


logger = logging.getLogger(__name__)


QUESTIONS_PER_DIFFICULTY = 2
DIFFICULTY_ORDER: tuple[Difficulty, ...] = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)


def time_limit_for(difficulty: Difficulty, catalog: Optional[QuestionCatalog] = None) -> int:
    """Seconds allowed for a question of this difficulty (20 / 60 / 120 by default)."""
    catalog = catalog or default_catalog()
    return catalog.time_limit(Difficulty(difficulty).value)


def _pull_questions(
    difficulty: Difficulty,
    count: int,
    catalog: QuestionCatalog,
    rng: random.Random,
) -> list[InterviewQuestion]:
    pool = list(catalog.pool(difficulty.value))
    remaining = list(pool)
    limit = catalog.time_limit(difficulty.value)

    questions: list[InterviewQuestion] = []
    for i in range(count):
        if remaining:
            prompt = remaining.pop(rng.randrange(len(remaining)))
        else:
            # Short pool: reuse prompts instead of failing.
            prompt = pool[i % len(pool)]
        questions.append(
            InterviewQuestion(
                id=new_id("q"),
                prompt=prompt,
                difficulty=difficulty,
                time_limit_seconds=limit,
            )
        )
    return questions


def generate_question_set(
    catalog: Optional[QuestionCatalog] = None,
    rng: Optional[random.Random] = None,
) -> list[InterviewQuestion]:
    """
    Build the fixed six-slot question set: 2 easy, 2 medium, 2 hard.

    Prompts are drawn without replacement and in random order within a
    difficulty; the easy -> medium -> hard order across difficulties is fixed.

    Args:
        catalog: Prompt pools and time limits; defaults to the packaged catalog.
        rng: Random source, injectable for deterministic tests.

    Returns:
        Six pending questions.
    """
    catalog = catalog or default_catalog()
    rng = rng or random.Random()

    questions: list[InterviewQuestion] = []
    for difficulty in DIFFICULTY_ORDER:
        questions.extend(_pull_questions(difficulty, QUESTIONS_PER_DIFFICULTY, catalog, rng))

    logger.debug(
        "Generated question set from catalog %s: %s",
        catalog.catalog_id,
        [q.difficulty.value for q in questions],
    )
    return questions
