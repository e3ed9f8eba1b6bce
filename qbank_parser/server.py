"""
HTTP Microservice
=================
Flask-based HTTP API for the question bank parser.

Endpoints:
    POST   /api/process-pdf   → Extract and parse an uploaded PDF (or text)
    GET    /api/health        → Health check
    GET    /api/info          → Parser version info
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from flask import Flask, jsonify, request
from flask_cors import CORS

from . import __version__
from .engine import TEXT_SUFFIXES, ParserConfig, ParserEngine
from .extractor import TextExtractor

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

_pkg_dir = Path(__file__).parent


def create_app(config: dict = None) -> Flask:
    """Create and configure the Flask app."""
    if config:
        app.config.update(config)

    project_root = _pkg_dir.parent.absolute()

    app.config.setdefault("UPLOAD_DIR", str(project_root / "uploads"))
    app.config.setdefault("MAX_CONTENT_LENGTH", 50 * 1024 * 1024)  # 50MB
    app.config.setdefault("OCR_FALLBACK", True)

    Path(app.config["UPLOAD_DIR"]).mkdir(parents=True, exist_ok=True)

    return app


def _engine() -> ParserEngine:
    return ParserEngine(ParserConfig(
        save_output=False,
        ocr_fallback=app.config.get("OCR_FALLBACK", True),
    ))


def _response(result):
    data = result.model_dump(mode="json", by_alias=True)
    return jsonify({
        "questions": data["questions"],
        "processingTime": data["processingTime"],
        "confidence": data["confidence"],
        "validation": data["validation"],
    })


# ─── Health Check ─────────────────────────────────────────────────────────────


@app.route("/api/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({
        "status": "healthy",
        "service": "qbank-parser",
        "version": __version__,
    })


@app.route("/api/info", methods=["GET"])
def info():
    """Parser version and capability info."""
    return jsonify({
        "version": __version__,
        "engine": "PyMuPDF",
        "fallback": "tesseract-ocr",
        "capabilities": [
            "text_extraction",
            "ocr_extraction",
            "question_detection",
            "category_detection",
            "answer_resolution",
            "fallback_segmentation",
        ],
        "supported_formats": ["pdf", "txt"],
    })


# ─── Process Endpoint ────────────────────────────────────────────────────────


@app.route("/api/process-pdf", methods=["POST"])
def process_pdf():
    """
    Extract text from an upload and parse it into questions.

    Accepts either:
        - A file upload (multipart/form-data, field "pdf")
        - A JSON body with already-extracted "text"
    """
    upload_path = None
    source_name = "request"

    try:
        if request.is_json:
            body = request.get_json(silent=True)
            text = body.get("text") if isinstance(body, dict) else None
            if not isinstance(text, str):
                return jsonify({"error": "No PDF file provided"}), 400
            result = _engine().parse_text(text, source_name=source_name)
            return _response(result)

        file = request.files.get("pdf")
        if file is None or not file.filename:
            return jsonify({"error": "No PDF file provided"}), 400
        source_name = file.filename

        upload_dir = Path(app.config.get("UPLOAD_DIR", "uploads"))
        upload_dir.mkdir(parents=True, exist_ok=True)
        upload_path = upload_dir / f"{uuid.uuid4()}_{Path(file.filename).name}"
        file.save(str(upload_path))

        if upload_path.suffix.lower() in TEXT_SUFFIXES:
            text = upload_path.read_text(encoding="utf-8", errors="replace")
            confidence = 1.0
        else:
            extractor = TextExtractor(
                ocr_fallback=app.config.get("OCR_FALLBACK", True)
            )
            try:
                extracted = extractor.extract(str(upload_path))
            except RuntimeError as e:
                logger.error(f"Extraction failed for {source_name}: {e}")
                return jsonify(
                    {"error": "Failed to extract text from PDF"}
                ), 400
            text = extracted.text
            confidence = extracted.confidence

        result = _engine().parse_text(
            text, confidence=confidence, source_name=source_name
        )
        return _response(result)

    except Exception as e:
        logger.exception(f"Error processing {source_name}: {e}")
        return jsonify({"error": "Failed to process PDF"}), 500

    finally:
        if upload_path is not None:
            upload_path.unlink(missing_ok=True)


def run_server(
    host: str = "0.0.0.0",
    port: int = 5000,
    debug: bool = False,
):
    """Start the microservice server."""
    create_app()
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_server(debug=True)
