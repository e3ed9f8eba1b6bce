"""
State Machine Parser
====================
Sequential accumulator that turns classified lines into quiz questions.

A question-start line opens a partial question; option and answer-marker
lines are folded into it; the next question-start line (or the end of the
input) seals it into an immutable Question.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Optional

from .classifier import (
    classify_line,
    detect_category,
    find_answer_letter,
    strip_option_label,
)
from .models import (
    ANSWER_NOT_FOUND,
    DEFAULT_CATEGORY,
    DEFAULT_DIFFICULTY,
    PLACEHOLDER_OPTIONS,
    LineRole,
    PartialQuestion,
    Question,
    QuestionType,
)

logger = logging.getLogger(__name__)


class ParserState(Enum):
    """Internal accumulator states."""
    SEEKING_QUESTION = "SEEKING_QUESTION"
    ACCUMULATING_QUESTION = "ACCUMULATING_QUESTION"


def split_lines(text: Optional[str]) -> list[str]:
    """Split raw text into trimmed, non-blank lines."""
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip()]


def resolve_correct_answer(line: str, options: list[str]) -> str:
    """
    Pick the correct answer named by a marker line.

    A standalone letter A–D selects the option at that index. When no
    letter is present, or it points past the collected options, the first
    option is used; with no options the sentinel is returned.
    """
    letter = find_answer_letter(line)
    if letter:
        index = ord(letter) - ord("A")
        if index < len(options):
            return strip_option_label(options[index])

    if options:
        return strip_option_label(options[0])
    return ANSWER_NOT_FOUND


def seal_question(
    partial: PartialQuestion,
    number: int,
    category: Optional[str] = None,
) -> Question:
    """Apply field defaults and freeze a partial question."""
    return Question(
        id=f"q{number}",
        text=partial.text or f"Question {number}",
        type=partial.type or QuestionType.MULTIPLE_CHOICE,
        options=list(partial.options) or list(PLACEHOLDER_OPTIONS),
        correct_answer=partial.correct_answer or ANSWER_NOT_FOUND,
        category=partial.category or category or DEFAULT_CATEGORY,
        difficulty=partial.difficulty or DEFAULT_DIFFICULTY,
    )


class StateMachineParser:
    """
    Two-state machine (SEEKING_QUESTION, ACCUMULATING_QUESTION) that folds
    trimmed lines into sealed Question records.

    Instances hold per-call state; use one instance per concurrent parse.
    """

    def __init__(self):
        self.state = ParserState.SEEKING_QUESTION
        self.current_question: Optional[PartialQuestion] = None
        self.current_category: Optional[str] = None
        self.question_number = 1
        self.questions: list[Question] = []

    def reset(self):
        """Reset the state machine for a fresh parsing run."""
        self.state = ParserState.SEEKING_QUESTION
        self.current_question = None
        self.current_category = None
        self.question_number = 1
        self.questions = []

    def parse(self, lines: Iterable[str]) -> list[Question]:
        """Parse trimmed, non-blank lines into questions."""
        self.reset()

        for line in lines:
            self._process_line(line)

        self.finalize()
        return self.questions

    def parse_text(self, text: Optional[str]) -> list[Question]:
        return self.parse(split_lines(text))

    def finalize(self):
        """Seal any in-progress question at end of input."""
        if self.current_question and self.current_question.text:
            self._seal_current()
        self.current_question = None
        self.state = ParserState.SEEKING_QUESTION

    def _process_line(self, line: str):
        in_question = self.state == ParserState.ACCUMULATING_QUESTION
        role = classify_line(line, in_question=in_question)

        if role == LineRole.CATEGORY_HEADER:
            self.current_category = detect_category(line)
            logger.debug(f"Category switched to {self.current_category}")
            return

        if role == LineRole.QUESTION_START:
            self._start_new_question(line)
            return

        if not in_question:
            return

        if role == LineRole.ANSWER_OPTION:
            self.current_question.options.append(line)

        elif role == LineRole.CORRECT_ANSWER_MARKER:
            self.current_question.correct_answer = resolve_correct_answer(
                line, self.current_question.options
            )

    def _start_new_question(self, line: str):
        """Seal the previous question and open a new one."""
        if self.current_question and self.current_question.text:
            self._seal_current()
            self.question_number += 1

        self.current_question = PartialQuestion(
            text=line,
            category=self.current_category,
        )
        self.state = ParserState.ACCUMULATING_QUESTION

    def _seal_current(self):
        question = seal_question(self.current_question, self.question_number)
        logger.debug(
            f"Sealed {question.id} ({len(self.current_question.options)} "
            f"options, category={question.category})"
        )
        self.questions.append(question)
