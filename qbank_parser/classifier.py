"""
Line Classifier
===============
Heuristic labelling of a single trimmed line of question bank text.

Each role is detected by an ordered list of patterns; a line is given the
first role that matches, in this order:

    category header → question start → answer option → correct-answer marker

Question-start detection is deliberately permissive. A spuriously split
question can be repaired by a reviewer, a merged one cannot.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import LineRole

# ─── Category Headers ─────────────────────────────────────────────────────────

# (label, pattern) pairs, first match wins
CATEGORY_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("Anatomy", re.compile(r"anatomy", re.IGNORECASE)),
    ("Physiology", re.compile(r"physiology", re.IGNORECASE)),
    ("Pathology", re.compile(r"pathology", re.IGNORECASE)),
    ("Pharmacology", re.compile(r"pharmacology", re.IGNORECASE)),
    ("Microbiology", re.compile(r"microbiology", re.IGNORECASE)),
    ("Short Answer", re.compile(r"short\s+answer", re.IGNORECASE)),
]

# ─── Question Starts ──────────────────────────────────────────────────────────

# "12. ...", "12) ..."
NUMBERED_QUESTION_PATTERN = re.compile(r"^\d+[.)]")

# "A. ...", "Q. ..." (capital letters only)
LETTERED_QUESTION_PATTERN = re.compile(r"^[A-Z]\.")

QUESTION_PATTERNS: list[re.Pattern] = [
    NUMBERED_QUESTION_PATTERN,
    LETTERED_QUESTION_PATTERN,
    re.compile(r"\?$"),
    re.compile(r"^(what|which|when|where|why|how)", re.IGNORECASE),
    re.compile(r"^Question\s*\d+:", re.IGNORECASE),
    re.compile(r"^MCQ\s*\d+:", re.IGNORECASE),
]

# ─── Answer Options ───────────────────────────────────────────────────────────

# "A. ...", "b) ..."; only four options are recognized
OPTION_PATTERNS: list[re.Pattern] = [
    re.compile(r"^[A-D][.)]"),
    re.compile(r"^[a-d][.)]"),
]

# Label stripped from an option when it is used as the correct answer
OPTION_LABEL_PATTERN = re.compile(r"^[A-Da-d][.)]\s*")

# ─── Correct-Answer Markers ───────────────────────────────────────────────────

MARKER_PATTERNS: list[re.Pattern] = [
    re.compile(r"correct.*answer", re.IGNORECASE),
    re.compile(r"answer.*correct", re.IGNORECASE),
    re.compile(r"key.*answer", re.IGNORECASE),
    re.compile(r"answer.*key", re.IGNORECASE),
    re.compile(r"^answer\s*:", re.IGNORECASE),
    re.compile(r"^correct\s*:", re.IGNORECASE),
]

# A standalone option letter inside a marker line ("Correct answer: B")
ANSWER_LETTER_PATTERN = re.compile(r"\b([A-D])\b", re.IGNORECASE)


def detect_category(line: str) -> Optional[str]:
    """Return the category named by a header line, or None."""
    for label, pattern in CATEGORY_PATTERNS:
        if pattern.search(line):
            return label
    return None


def is_question_start(line: str) -> bool:
    return any(p.search(line) for p in QUESTION_PATTERNS)


def is_answer_option(line: str) -> bool:
    return any(p.match(line) for p in OPTION_PATTERNS)


def is_correct_answer_marker(line: str) -> bool:
    return any(p.search(line) for p in MARKER_PATTERNS)


def _is_lettered_option_only(line: str) -> bool:
    """
    True for lines like "B. Heart": they start a question only through the
    capital-letter prefix, and are also option lines.
    """
    if not (LETTERED_QUESTION_PATTERN.match(line) and is_answer_option(line)):
        return False
    return not any(
        p.search(line)
        for p in QUESTION_PATTERNS
        if p is not LETTERED_QUESTION_PATTERN
    )


def classify_line(line: str, in_question: bool = False) -> LineRole:
    """
    Classify one trimmed, non-empty line.

    Args:
        line: The line to classify.
        in_question: Whether a question is currently being accumulated.
            Inside a question, "A."–"D." lines are read as options rather
            than as new lettered questions.

    Returns:
        The first matching LineRole, or LineRole.NONE.
    """
    if detect_category(line):
        return LineRole.CATEGORY_HEADER

    if is_question_start(line):
        if not (in_question and _is_lettered_option_only(line)):
            return LineRole.QUESTION_START

    if is_answer_option(line):
        return LineRole.ANSWER_OPTION

    if is_correct_answer_marker(line):
        return LineRole.CORRECT_ANSWER_MARKER

    return LineRole.NONE


def strip_option_label(option: str) -> str:
    """Remove a leading "A. " / "a) " label from an option line."""
    return OPTION_LABEL_PATTERN.sub("", option, count=1)


def find_answer_letter(line: str) -> Optional[str]:
    """Return the first standalone A–D letter in a marker line, uppercased."""
    match = ANSWER_LETTER_PATTERN.search(line)
    if match:
        return match.group(1).upper()
    return None
