"""
Data Models
===========
Pydantic models for structured question bank parsing output.
All models are serializable to JSON for the quiz front end.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

# ─── Defaults ─────────────────────────────────────────────────────────────────

ANSWER_NOT_FOUND = "Answer not found"
ANSWER_VARIES = "Answer varies"
DEFAULT_CATEGORY = "Medical"
DEFAULT_DIFFICULTY = "medium"
PLACEHOLDER_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]


# ─── Enums ────────────────────────────────────────────────────────────────────


class QuestionType(str, Enum):
    """Supported question formats."""
    MULTIPLE_CHOICE = "multiple-choice"
    SHORT_ANSWER = "short-answer"


class LineRole(str, Enum):
    """Role assigned to a single line by the line classifier."""
    CATEGORY_HEADER = "category_header"
    QUESTION_START = "question_start"
    ANSWER_OPTION = "answer_option"
    CORRECT_ANSWER_MARKER = "correct_answer_marker"
    NONE = "none"


# ─── Question Models ──────────────────────────────────────────────────────────


class Question(BaseModel):
    """
    A sealed quiz question.

    Immutable once built. Serialized with ``by_alias=True`` the answer
    field is emitted as ``correctAnswer``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    text: str = Field(min_length=1)
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: list[str] = Field(default_factory=list)
    correct_answer: str = Field(
        default=ANSWER_NOT_FOUND,
        alias="correctAnswer",
    )
    category: str = DEFAULT_CATEGORY
    difficulty: str = DEFAULT_DIFFICULTY

    def is_correct(self, answer: Optional[str]) -> bool:
        """Compare a submitted answer, ignoring case and outer whitespace."""
        if answer is None:
            return False
        return answer.strip().lower() == self.correct_answer.strip().lower()


class PartialQuestion(BaseModel):
    """
    A question still being accumulated.
    Mutated in place while option and answer lines are read.
    """
    text: str = ""
    type: Optional[QuestionType] = None
    options: list[str] = Field(default_factory=list)
    correct_answer: str = ""
    category: Optional[str] = None
    difficulty: Optional[str] = None


# ─── Report / Result Models ───────────────────────────────────────────────────


class ValidationReport(BaseModel):
    """Post-parse quality report."""
    total_questions: int = 0
    multiple_choice_count: int = 0
    short_answer_count: int = 0
    questions_missing_answer: list[str] = Field(default_factory=list)
    questions_with_placeholder_options: list[str] = Field(
        default_factory=list
    )
    fallback_questions: list[str] = Field(default_factory=list)
    category_breakdown: dict[str, int] = Field(default_factory=dict)

    @computed_field
    @property
    def low_confidence(self) -> bool:
        """True when every record came from fallback segmentation."""
        return (
            self.total_questions > 0
            and len(self.fallback_questions) == self.total_questions
        )

    @computed_field
    @property
    def structured_rate(self) -> float:
        if self.total_questions == 0:
            return 0.0
        unresolved = len(self.questions_missing_answer) + len(
            self.fallback_questions
        )
        resolved = max(0, self.total_questions - unresolved)
        return round(resolved / self.total_questions * 100, 2)


class ParseResult(BaseModel):
    """
    Complete output of a parse run.
    This is the top-level JSON structure returned to callers.
    """
    model_config = ConfigDict(populate_by_name=True)

    source_name: str = ""
    parser_version: str = "1.0.0"
    confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    processing_time_ms: int = Field(default=0, alias="processingTime")
    questions: list[Question] = Field(default_factory=list)
    validation: ValidationReport = Field(default_factory=ValidationReport)
