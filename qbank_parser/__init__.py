"""
Question Bank Parser
====================
Heuristic parser that turns text extracted from medical question bank PDFs
into structured quiz questions.

Architecture:
    - Text Extractor: Reads the PDF text layer, with OCR as a fallback
    - Line Classifier: Labels each line (category, question, option, answer)
    - State Machine: Accumulates labelled lines into questions
    - Fallback Segmenter: Sentence-level questions when no structure is found
    - Validation Engine: Quality report for reviewers

Version: 1.0.0
"""

__version__ = "1.0.0"

from .engine import ParserConfig, ParserEngine, parse_questions  # noqa: E402
from .models import Question, QuestionType  # noqa: E402

__all__ = [
    "ParserConfig",
    "ParserEngine",
    "Question",
    "QuestionType",
    "parse_questions",
]
