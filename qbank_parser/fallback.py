"""
Fallback Segmenter
==================
Used only when no structured questions were detected. Splits the raw text
into sentence-like fragments and turns each into a short-answer question.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .models import (
    ANSWER_VARIES,
    DEFAULT_CATEGORY,
    DEFAULT_DIFFICULTY,
    Question,
    QuestionType,
)

logger = logging.getLogger(__name__)

SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")

MIN_FRAGMENT_LENGTH = 20
MIN_EMIT_LENGTH = 10
MAX_FALLBACK_QUESTIONS = 10


class FallbackSegmenter:
    """Low-confidence sentence segmentation into short-answer questions."""

    def __init__(self, max_questions: int = MAX_FALLBACK_QUESTIONS):
        self.max_questions = max_questions

    def segment(self, text: Optional[str]) -> list[str]:
        """Return the surviving fragments, in original order."""
        if not text:
            return []
        fragments = [
            s for s in SENTENCE_SPLIT_PATTERN.split(text)
            if len(s.strip()) > MIN_FRAGMENT_LENGTH
        ]
        return fragments[:self.max_questions]

    def build(self, text: Optional[str]) -> list[Question]:
        questions: list[Question] = []

        for i, fragment in enumerate(self.segment(text)):
            sentence = fragment.strip()
            if len(sentence) <= MIN_EMIT_LENGTH:
                continue
            questions.append(Question(
                id=f"q{i + 1}",
                text=sentence + "?",
                type=QuestionType.SHORT_ANSWER,
                options=[],
                correct_answer=ANSWER_VARIES,
                category=DEFAULT_CATEGORY,
                difficulty=DEFAULT_DIFFICULTY,
            ))

        if questions:
            logger.warning(
                f"No structured questions found; fallback produced "
                f"{len(questions)} short-answer questions"
            )
        return questions
