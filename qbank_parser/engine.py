"""
Question Bank Parser Engine
===========================
Main orchestrator that combines text extraction, line classification,
question accumulation, fallback segmentation and validation.

Usage:
    engine = ParserEngine(config)
    result = engine.parse_file("path/to/question_bank.pdf")
    # result is a ParseResult with structured JSON output

Architecture:
    PDF → TextExtractor → text → StateMachineParser →
    [no questions] FallbackSegmenter → Questions → ValidationEngine →
    ParseResult (JSON)
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import __version__
from .extractor import TEXT_LAYER_CONFIDENCE, TextExtractor
from .fallback import MAX_FALLBACK_QUESTIONS, FallbackSegmenter
from .models import ParseResult, Question
from .state_machine import StateMachineParser
from .validator import ValidationEngine

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".text", ".md"}


def parse_questions(
    text: Optional[str],
    max_fallback_questions: int = MAX_FALLBACK_QUESTIONS,
) -> list[Question]:
    """
    Parse question bank text into an ordered list of questions.

    Never raises: text with no detectable structure yields fallback
    short-answer questions, and empty text yields an empty list.
    """
    questions = StateMachineParser().parse_text(text)
    if questions:
        return questions
    return FallbackSegmenter(max_fallback_questions).build(text)


@dataclass
class ParserConfig:
    """Configuration for the parser engine."""

    # Output settings
    output_dir: str = "output"
    save_output: bool = True

    # Extraction
    ocr_fallback: bool = True
    ocr_language: str = "eng"
    ocr_dpi: int = 300

    # Parsing
    default_confidence: float = TEXT_LAYER_CONFIDENCE
    max_fallback_questions: int = MAX_FALLBACK_QUESTIONS

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class ParserEngine:
    """
    Main question bank parsing engine.

    Orchestrates the full pipeline:
        1. Text extraction (PDF text layer or OCR)
        2. Structured parsing (line classification + accumulation)
        3. Fallback segmentation when nothing was structured
        4. Validation
        5. Output formatting

    Each parse uses fresh parser state, so one engine can serve
    concurrent callers.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        package_logger = logging.getLogger("qbank_parser")
        package_logger.setLevel(log_level)

        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # Console handler
        if not package_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(formatter)
            package_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                self.config.log_file, encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)

    def parse_text(
        self,
        text: Optional[str],
        confidence: Optional[float] = None,
        source_name: str = "",
    ) -> ParseResult:
        """
        Parse already-extracted text.

        Args:
            text: Plain text of the question bank.
            confidence: Extraction-confidence hint; defaults to the config.
            source_name: Name recorded on the result.

        Returns:
            ParseResult containing questions and validation.
        """
        start_time = time.time()

        questions = parse_questions(
            text, max_fallback_questions=self.config.max_fallback_questions
        )
        validation = ValidationEngine().validate(questions)

        if confidence is None:
            confidence = self.config.default_confidence

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Parse complete in {elapsed_ms}ms — "
            f"{len(questions)} questions extracted"
        )

        return ParseResult(
            source_name=source_name,
            parser_version=__version__,
            confidence=confidence,
            processing_time_ms=elapsed_ms,
            questions=questions,
            validation=validation,
        )

    def parse_file(self, path: str) -> ParseResult:
        """
        Parse a PDF or plain-text file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            RuntimeError: If no text can be extracted from a PDF.
        """
        path = os.path.abspath(path)
        if not os.path.exists(path):
            raise FileNotFoundError(f"File not found: {path}")

        logger.info(f"Starting parse of: {path}")
        start_time = time.time()

        if Path(path).suffix.lower() in TEXT_SUFFIXES:
            text = Path(path).read_text(encoding="utf-8", errors="replace")
            confidence = 1.0
        else:
            extractor = TextExtractor(
                ocr_fallback=self.config.ocr_fallback,
                ocr_language=self.config.ocr_language,
                ocr_dpi=self.config.ocr_dpi,
            )
            extracted = extractor.extract(path)
            text = extracted.text
            confidence = extracted.confidence

        result = self.parse_text(
            text,
            confidence=confidence,
            source_name=os.path.basename(path),
        )
        result.processing_time_ms = int((time.time() - start_time) * 1000)

        if self.config.save_output:
            output_dir = Path(self.config.output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            self._save_json(result, output_dir / f"{Path(path).stem}_questions.json")

        return result

    def _save_json(self, result: ParseResult, filepath: Path):
        """Save ParseResult to JSON file."""
        try:
            data = result.model_dump(mode="json", by_alias=True)
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            logger.info(f"Saved JSON output: {filepath}")
        except OSError as e:
            logger.error(f"Failed to save JSON: {e}")
