"""
Text Extractor
==============
Extracts plain text from PDF files using PyMuPDF (fitz).

The text layer is read first. When it is empty or unreadable, PyMuPDF's
Tesseract OCR is tried page by page. How the text was obtained is kept on
the ExtractedText result and never reaches the parsed questions.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

TEXT_LAYER_CONFIDENCE = 0.85
OCR_CONFIDENCE = 0.6


@dataclass
class ExtractedText:
    """Plain text handed to the parser, plus an extraction-confidence hint."""
    text: str
    method: str = "text_layer"
    confidence: float = TEXT_LAYER_CONFIDENCE
    page_count: int = 0


class TextExtractor:
    """
    Handles PDF ingestion and plain-text extraction.
    """

    def __init__(
        self,
        ocr_fallback: bool = True,
        ocr_language: str = "eng",
        ocr_dpi: int = 300,
    ):
        self.ocr_fallback = ocr_fallback
        self.ocr_language = ocr_language
        self.ocr_dpi = ocr_dpi

    def extract(self, pdf_path: str) -> ExtractedText:
        """
        Extract text from a PDF.

        Args:
            pdf_path: Path to the PDF file.

        Returns:
            ExtractedText with the text, method and confidence hint.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            RuntimeError: If no text could be read and OCR is unavailable.
        """
        if not os.path.exists(pdf_path):
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        try:
            doc = fitz.open(pdf_path)
        except Exception as e:
            raise RuntimeError(f"Cannot open PDF {pdf_path}: {e}") from e

        with doc:
            page_count = doc.page_count
            text = self._extract_text_layer(doc)

            if text.strip():
                logger.info(
                    f"Extracted {len(text)} chars from text layer "
                    f"({page_count} pages)"
                )
                return ExtractedText(
                    text=text,
                    method="text_layer",
                    confidence=TEXT_LAYER_CONFIDENCE,
                    page_count=page_count,
                )

            if not self.ocr_fallback:
                logger.warning(f"No text layer in {pdf_path}; OCR disabled")
                return ExtractedText(
                    text="", method="none", confidence=0.0,
                    page_count=page_count,
                )

            logger.info("Text layer empty, attempting OCR...")
            try:
                text = self._extract_ocr(doc)
            except RuntimeError as e:
                logger.error(f"OCR failed: {e}")
                raise RuntimeError(
                    f"Failed to extract text from {pdf_path}"
                ) from e

        return ExtractedText(
            text=text,
            method="ocr",
            confidence=OCR_CONFIDENCE if text.strip() else 0.0,
            page_count=page_count,
        )

    def _extract_text_layer(self, doc: fitz.Document) -> str:
        return "\n".join(page.get_text("text") for page in doc)

    def _extract_ocr(self, doc: fitz.Document) -> str:
        """OCR every page through PyMuPDF's Tesseract bridge."""
        pages = []
        for page in doc:
            textpage = page.get_textpage_ocr(
                language=self.ocr_language,
                dpi=self.ocr_dpi,
                full=True,
            )
            pages.append(page.get_text("text", textpage=textpage))
        return "\n".join(pages)
