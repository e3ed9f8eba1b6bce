"""
Validation Engine
=================
Post-parse quality reporting.

After parsing, generates a report:
    - Total Questions
    - Multiple-choice / short-answer split
    - Questions Missing Answer
    - Questions With Placeholder Options
    - Fallback Questions (low-confidence output)
    - Category breakdown

The parser itself never rejects input, so this report is the caller's
only quality signal.
"""

from __future__ import annotations

import logging
from collections import Counter

from .models import (
    ANSWER_NOT_FOUND,
    ANSWER_VARIES,
    PLACEHOLDER_OPTIONS,
    Question,
    QuestionType,
    ValidationReport,
)

logger = logging.getLogger(__name__)


def is_fallback_question(question: Question) -> bool:
    return (
        question.type == QuestionType.SHORT_ANSWER
        and question.correct_answer == ANSWER_VARIES
    )


class ValidationEngine:
    """
    Inspects parsed questions and produces a quality report.
    """

    def validate(self, questions: list[Question]) -> ValidationReport:
        """
        Run quality checks on parsed questions.

        Args:
            questions: Questions returned by the parser.

        Returns:
            ValidationReport summarising the parse.
        """
        report = ValidationReport()

        if not questions:
            logger.warning("No questions to validate")
            return report

        report.total_questions = len(questions)

        for q in questions:
            if q.type == QuestionType.MULTIPLE_CHOICE:
                report.multiple_choice_count += 1
            else:
                report.short_answer_count += 1

            if q.correct_answer == ANSWER_NOT_FOUND:
                report.questions_missing_answer.append(q.id)

            if q.options == PLACEHOLDER_OPTIONS:
                report.questions_with_placeholder_options.append(q.id)

            if is_fallback_question(q):
                report.fallback_questions.append(q.id)

        report.category_breakdown = dict(
            Counter(q.category for q in questions)
        )

        logger.info("=" * 60)
        logger.info("VALIDATION REPORT")
        logger.info("=" * 60)
        logger.info(f"Total Questions: {report.total_questions}")
        logger.info(
            f"Multiple Choice: {report.multiple_choice_count} | "
            f"Short Answer: {report.short_answer_count}"
        )
        logger.info(
            f"Questions Missing Answer: "
            f"{len(report.questions_missing_answer)}"
        )
        logger.info(
            f"Placeholder Options: "
            f"{len(report.questions_with_placeholder_options)}"
        )
        logger.info(f"Structured Rate: {report.structured_rate}%")

        if report.low_confidence:
            logger.warning(
                "All questions came from fallback segmentation; "
                "review required"
            )

        if report.category_breakdown:
            logger.info("Category Breakdown:")
            for category, count in sorted(report.category_breakdown.items()):
                logger.info(f"  • {category}: {count}")

        logger.info("=" * 60)

        return report
